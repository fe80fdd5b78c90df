"""
Partition orchestration: canvas plus cuts in, pieces out.

``compute_partition(width, height, cuts)`` is the single entry point the
rest of the application uses.  It

1. validates the canvas size (``InvalidCanvas`` on failure),
2. short‑circuits an empty cut list to the whole canvas,
3. trims every cut to the neighbourhood of the canvas and widens it
   into a blade, skipping degenerate cuts,
4. runs one clipping sweep with the canvas as subject and all blades as
   clips, and
5. falls back to the whole canvas when the sweep reports
   ``ClippingFailed``.

The computation is pure: the same ``(width, height, cuts, settings)``
always yields the same :class:`PartitionResult`, which is what makes
the memo cache in :mod:`partition_cache` safe.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .blades import (
    Cut,
    DegenerateSegment,
    Segment,
    build_blade,
    clip_segment_to_box,
    grow_box,
    make_segment,
)
from .clipping import ClippingFailed, clip_difference
from .lattice import effective_scale
from .settings import PartitionSettings, get_settings

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Polygon = List[Point]
CutLike = Union[Cut, Segment, Sequence[Sequence[float]]]

# Largest canvas side accepted.  Together with MAX_LATTICE_COORD this
# leaves room for the default scale with plenty of headroom.
MAX_CANVAS_DIMENSION: float = 1_000_000.0


class InvalidCanvas(ValueError):
    """Raised when the canvas width or height is unusable."""


@dataclass(frozen=True)
class PartitionResult:
    """Outcome of one partition computation.

    Attributes:
        polygons: The pieces, each a counter‑clockwise ring of points.
        failed: True when the clipping sweep failed and the whole canvas
            was returned as the only piece.
        skipped_cuts: Number of cuts dropped as degenerate.
        blade_count: Number of blades handed to the clipping sweep.
        scale: Lattice scale the sweep ran at.
    """

    polygons: Tuple[Tuple[Point, ...], ...]
    failed: bool = False
    skipped_cuts: int = 0
    blade_count: int = 0
    scale: float = 0.0

    def __len__(self) -> int:
        return len(self.polygons)

    def __iter__(self) -> Iterator[Tuple[Point, ...]]:
        return iter(self.polygons)

    @property
    def piece_count(self) -> int:
        return len(self.polygons)

    @property
    def total_area(self) -> float:
        return sum(polygon_area(p) for p in self.polygons)


def canvas_polygon(width: float, height: float) -> Polygon:
    """Counter‑clockwise rectangle ``[0, width] x [0, height]``."""
    return [(0.0, 0.0), (float(width), 0.0), (float(width), float(height)), (0.0, float(height))]


def polygon_area(polygon: Sequence[Point]) -> float:
    """Signed area of a ring using the shoelace formula.

    Positive for counter‑clockwise rings, negative for clockwise ones.
    """
    n = len(polygon)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        x1, y1 = polygon[i]
        x2, y2 = polygon[(i + 1) % n]
        area += x1 * y2 - x2 * y1
    return area / 2.0


def validate_canvas(width: float, height: float) -> None:
    """Raise :class:`InvalidCanvas` unless both sides are usable."""
    for name, value in (("width", width), ("height", height)):
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise InvalidCanvas(f"{name} must be a number, got {value!r}") from None
        if not math.isfinite(number) or number <= 0:
            raise InvalidCanvas(f"{name} must be a positive finite number, got {value!r}")
        if number > MAX_CANVAS_DIMENSION:
            raise InvalidCanvas(f"{name} {number} exceeds the maximum of {MAX_CANVAS_DIMENSION}")


def as_segment(cut: CutLike) -> Segment:
    """Normalise the accepted cut shapes to a :class:`Segment`.

    Raises:
        ValueError: If ``cut`` is not a pair of ``(x, y)`` points.
    """
    if isinstance(cut, Cut):
        return cut.segment
    if isinstance(cut, Segment):
        return cut
    try:
        p1, p2 = cut
        return make_segment(p1, p2)
    except (TypeError, ValueError, IndexError) as exc:
        raise ValueError(f"a cut must be a pair of (x, y) points, got {cut!r}") from exc


def _single_piece(width: float, height: float, **kwargs) -> PartitionResult:
    return PartitionResult(polygons=(tuple(canvas_polygon(width, height)),), **kwargs)


def _build_blades(
    segments: Iterable[Segment],
    box: Tuple[float, float, float, float],
    half_width: float,
) -> Tuple[List[Polygon], int]:
    blades: List[Polygon] = []
    skipped = 0
    for index, segment in enumerate(segments):
        if segment.is_degenerate:
            skipped += 1
            logger.debug("Skipping degenerate cut %d: %s -> %s", index, segment.p1, segment.p2)
            continue
        trimmed = clip_segment_to_box(segment, box)
        if trimmed is None:
            if os.getenv("PARTITION_DEBUG"):
                logger.debug("Cut %d lies outside the canvas; ignored", index)
            continue
        try:
            blades.append(build_blade(trimmed, half_width))
        except DegenerateSegment:
            # Trimming can collapse a cut that only grazes the box corner.
            continue
    return blades, skipped


def compute_partition(
    width: float,
    height: float,
    cuts: Sequence[CutLike],
    settings: Optional[PartitionSettings] = None,
) -> PartitionResult:
    """Split the ``width`` x ``height`` canvas along every cut.

    Args:
        width: Canvas width, positive.
        height: Canvas height, positive.
        cuts: Cuts as :class:`Cut`, :class:`Segment` or point pairs.
        settings: Engine settings; process defaults when omitted.

    Returns:
        A :class:`PartitionResult`.  On clipping failure the result
        holds the whole canvas and ``failed`` is True.

    Raises:
        InvalidCanvas: If ``width`` or ``height`` is unusable.
        ValueError: If a cut is not a pair of points.
    """
    validate_canvas(width, height)
    width = float(width)
    height = float(height)
    settings = settings or get_settings()

    if not cuts:
        return _single_piece(width, height, scale=settings.scale)

    half_width = settings.blade_half_width
    margin = 2.0 * half_width + 1.0
    box = grow_box((0.0, 0.0, width, height), margin)
    scale = effective_scale(settings.scale, max(width, height) + 2.0 * margin)

    blades, skipped = _build_blades((as_segment(c) for c in cuts), box, half_width)
    if not blades:
        return _single_piece(width, height, skipped_cuts=skipped, scale=scale)

    try:
        pieces = clip_difference(
            canvas_polygon(width, height),
            blades,
            scale=scale,
            fill_rule=settings.fill_rule,
            hole_policy=settings.hole_policy,
        )
    except ClippingFailed as exc:
        logger.warning(
            "Partition of %sx%s canvas with %d blades failed; returning whole canvas. Reason: %s",
            width,
            height,
            len(blades),
            exc,
        )
        return _single_piece(
            width, height, failed=True, skipped_cuts=skipped, blade_count=len(blades), scale=scale
        )

    if os.getenv("PARTITION_DEBUG"):
        logger.debug(
            "Partition %sx%s: cuts=%d blades=%d skipped=%d pieces=%d scale=%s",
            width,
            height,
            len(cuts),
            len(blades),
            skipped,
            len(pieces),
            scale,
        )
    return PartitionResult(
        polygons=tuple(tuple(p) for p in pieces),
        skipped_cuts=skipped,
        blade_count=len(blades),
        scale=scale,
    )
