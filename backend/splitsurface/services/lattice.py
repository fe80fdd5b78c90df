"""
Fixed‑point coordinate mapping for the partition engine.

The clipping sweep never works with raw floating point coordinates.
Every input ring is first scaled onto an integer lattice so that
vertex comparisons, winding counts and edge crossings are computed
exactly.  This module owns that mapping and its inverse.

Rounding uses numpy's ``rint`` (round half to even), which is
deterministic: identical inputs always land on identical lattice
points.  Coordinates that cannot be represented (non‑finite values or
magnitudes beyond ``MAX_LATTICE_COORD`` after scaling) raise
:class:`LatticeRangeError` so callers can report the failure instead
of producing corrupted topology.

Functions defined here:

- ``effective_scale(scale, extent)`` – cap a requested scale so the
  largest coordinate of interest stays inside the lattice range.
- ``to_lattice(point, scale)`` / ``from_lattice(point, scale)`` – map a
  single point onto the lattice and back.
- ``to_lattice_ring(ring, scale)`` / ``from_lattice_ring(ring, scale)`` –
  the same for a whole ring using vectorised numpy operations.
"""

from __future__ import annotations

from fractions import Fraction
from typing import List, Sequence, Tuple, Union

import numpy as np

Point = Tuple[float, float]
LatticePoint = Tuple[int, int]
# Sweep vertices are exact rationals over the integer lattice.
ExactPoint = Tuple[Union[int, Fraction], Union[int, Fraction]]

DEFAULT_SCALE: int = 100

# Largest absolute lattice coordinate accepted.  Keeping coordinates
# below 2**30 means every cross product of two edge vectors stays well
# inside a signed 64‑bit range, matching the "low range" used by
# Clipper style integer clippers.
MAX_LATTICE_COORD: int = 2 ** 30 - 1


class LatticeRangeError(ValueError):
    """Raised when a coordinate cannot be represented on the lattice."""


def effective_scale(scale: float, extent: float) -> float:
    """Return ``scale`` capped so that ``extent * scale`` fits the lattice.

    Args:
        scale: Requested number of lattice units per canvas unit.
        extent: Largest absolute coordinate that will be converted.

    Returns:
        The requested scale, or a smaller one when the requested value
        would push ``extent`` past ``MAX_LATTICE_COORD``.

    Raises:
        ValueError: If ``scale`` is not a positive finite number.
    """
    if not np.isfinite(scale) or scale <= 0:
        raise ValueError(f"scale must be a positive finite number, got {scale!r}")
    extent = abs(float(extent))
    if extent == 0.0 or extent * scale <= MAX_LATTICE_COORD:
        return scale
    return MAX_LATTICE_COORD / extent


def to_lattice_ring(ring: Sequence[Sequence[float]], scale: float) -> List[LatticePoint]:
    """Scale a ring of real points onto the integer lattice.

    Args:
        ring: Sequence of ``(x, y)`` pairs.
        scale: Lattice units per canvas unit.

    Returns:
        A list of ``(X, Y)`` Python integer tuples, one per input point.

    Raises:
        LatticeRangeError: If any coordinate is non‑finite or lands
            outside ``[-MAX_LATTICE_COORD, MAX_LATTICE_COORD]``.
    """
    if len(ring) == 0:
        return []
    arr = np.asarray(ring, dtype=np.float64).reshape(-1, 2)
    if not np.all(np.isfinite(arr)):
        raise LatticeRangeError("ring contains non-finite coordinates")
    scaled = np.rint(arr * scale)
    if np.any(np.abs(scaled) > MAX_LATTICE_COORD):
        raise LatticeRangeError(
            f"ring exceeds lattice range at scale {scale}: max |coord| = {float(np.max(np.abs(arr)))}"
        )
    return [(int(x), int(y)) for x, y in scaled.astype(np.int64).tolist()]


def to_lattice(point: Sequence[float], scale: float) -> LatticePoint:
    """Scale a single point onto the integer lattice."""
    return to_lattice_ring([point], scale)[0]


def from_lattice_ring(ring: Sequence[ExactPoint], scale: float) -> List[Point]:
    """Map lattice (or exact rational) points back to real coordinates.

    Args:
        ring: Sequence of lattice points.  Coordinates may be ``int`` or
            :class:`fractions.Fraction`.
        scale: The scale used for the forward mapping.

    Returns:
        A list of ``(x, y)`` float tuples.
    """
    if len(ring) == 0:
        return []
    arr = np.array([[float(x), float(y)] for x, y in ring], dtype=np.float64)
    arr /= scale
    return [(float(x), float(y)) for x, y in arr.tolist()]


def from_lattice(point: ExactPoint, scale: float) -> Point:
    """Map a single lattice point back to real coordinates."""
    return from_lattice_ring([point], scale)[0]
