"""
Runtime settings for the partition engine.

The engine has no user facing configuration beyond a handful of fixed
constants.  They are grouped in :class:`PartitionSettings`, an
immutable record, so that a settings value can take part in memo cache
keys.  Deployments may override the defaults through environment
variables:

- ``PARTITION_SCALE`` – lattice units per canvas unit (default 100).
- ``PARTITION_BLADE_HALF_WIDTH`` – half width of every cut (default 0.5).
- ``PARTITION_FILL_RULE`` – ``nonzero`` (default), ``evenodd``,
  ``positive`` or ``negative``.
- ``PARTITION_HOLE_POLICY`` – ``split`` (default) or ``rings``.
- ``PARTITION_CACHE_ENTRIES`` – memo cache capacity (default 32).
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import List, Optional

from .blades import DEFAULT_BLADE_HALF_WIDTH
from .clipping import FILL_RULES, HOLE_POLICIES
from .lattice import DEFAULT_SCALE


@dataclass(frozen=True)
class PartitionSettings:
    """Immutable configuration for one partition computation.

    Attributes:
        scale: Lattice units per canvas unit.  Half a blade width must
            map to at least one lattice unit.
        blade_half_width: Distance from a cut to each side of its blade.
        fill_rule: Winding rule applied to subject and blades.
        hole_policy: How regions enclosing uncovered area are reported.
        cache_entries: Capacity of the partition memo cache.
    """

    scale: float = DEFAULT_SCALE
    blade_half_width: float = DEFAULT_BLADE_HALF_WIDTH
    fill_rule: str = "nonzero"
    hole_policy: str = "split"
    cache_entries: int = 32

    def validate(self) -> List[str]:
        """
        Validate settings values.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        if not math.isfinite(self.scale) or self.scale <= 0:
            errors.append(f"scale must be positive, got {self.scale}")
        if not math.isfinite(self.blade_half_width) or self.blade_half_width <= 0:
            errors.append(f"blade_half_width must be positive, got {self.blade_half_width}")
        elif math.isfinite(self.scale) and self.blade_half_width * self.scale < 1.0:
            errors.append(
                f"scale {self.scale} maps blade_half_width {self.blade_half_width} below one lattice unit"
            )
        if self.fill_rule not in FILL_RULES:
            errors.append(f"fill_rule must be one of {FILL_RULES}, got {self.fill_rule!r}")
        if self.hole_policy not in HOLE_POLICIES:
            errors.append(f"hole_policy must be one of {HOLE_POLICIES}, got {self.hole_policy!r}")
        if self.cache_entries < 1:
            errors.append(f"cache_entries must be >= 1, got {self.cache_entries}")
        return errors

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "scale": self.scale,
            "bladeHalfWidth": self.blade_half_width,
            "fillRule": self.fill_rule,
            "holePolicy": self.hole_policy,
        }

    @classmethod
    def from_env(cls) -> "PartitionSettings":
        """Build settings from ``PARTITION_*`` environment variables.

        Raises:
            ValueError: If a variable cannot be parsed or the resulting
                settings are invalid.
        """
        defaults = cls()
        settings = cls(
            scale=float(os.getenv("PARTITION_SCALE", defaults.scale)),
            blade_half_width=float(os.getenv("PARTITION_BLADE_HALF_WIDTH", defaults.blade_half_width)),
            fill_rule=os.getenv("PARTITION_FILL_RULE", defaults.fill_rule).strip().lower(),
            hole_policy=os.getenv("PARTITION_HOLE_POLICY", defaults.hole_policy).strip().lower(),
            cache_entries=int(os.getenv("PARTITION_CACHE_ENTRIES", defaults.cache_entries)),
        )
        errors = settings.validate()
        if errors:
            raise ValueError("Invalid partition settings: " + "; ".join(errors))
        return settings


_settings: Optional[PartitionSettings] = None


def get_settings() -> PartitionSettings:
    """Return the process wide settings, read from the environment once."""
    global _settings
    if _settings is None:
        _settings = PartitionSettings.from_env()
    return _settings
