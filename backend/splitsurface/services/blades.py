"""
Cut records and blade construction.

A cut is a straight segment drawn across the canvas.  Before the
clipping sweep runs, each cut is widened into a thin rectangle (a
"blade") whose area is the material removed from the canvas.  The
blade is centred on the segment, extends ``half_width`` on either side
and is always emitted counter‑clockwise so that fill rule evaluation
in the sweep is well defined.

Cuts that reach far outside the canvas are first trimmed to the canvas
box grown by a small margin (see :func:`clip_segment_to_box`).  The
part of a blade that overlaps the canvas is unaffected by this, and it
keeps every coordinate handed to the lattice mapper bounded by the
canvas size.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

Point = Tuple[float, float]
Polygon = List[Point]
Box = Tuple[float, float, float, float]  # (xmin, ymin, xmax, ymax)

DEFAULT_BLADE_HALF_WIDTH: float = 0.5


class DegenerateSegment(ValueError):
    """Raised when a cut has zero length or non‑finite endpoints."""


@dataclass(frozen=True)
class Segment:
    """A straight cut between two points.

    Attributes:
        p1: Start point ``(x, y)``.
        p2: End point ``(x, y)``.
    """

    p1: Point
    p2: Point

    @property
    def length(self) -> float:
        return math.hypot(self.p2[0] - self.p1[0], self.p2[1] - self.p1[1])

    @property
    def is_degenerate(self) -> bool:
        coords = (*self.p1, *self.p2)
        if not all(math.isfinite(c) for c in coords):
            return True
        return self.p1[0] == self.p2[0] and self.p1[1] == self.p2[1]


@dataclass(frozen=True)
class Cut:
    """A cut supplied by a drawing or pattern collaborator.

    The colour is carried for display purposes only and never
    influences the partition.
    """

    segment: Segment
    color: Optional[str] = None


def make_segment(p1, p2) -> Segment:
    """Build a :class:`Segment` from any two ``(x, y)`` pairs."""
    return Segment(p1=(float(p1[0]), float(p1[1])), p2=(float(p2[0]), float(p2[1])))


def build_blade(segment: Segment, half_width: float = DEFAULT_BLADE_HALF_WIDTH) -> Polygon:
    """Widen a segment into a counter‑clockwise quadrilateral.

    With ``d`` the segment direction and ``n = (d.y, -d.x) / |d|`` its
    clockwise unit normal, the blade is::

        p1 + w*n,  p2 + w*n,  p2 - w*n,  p1 - w*n

    which has positive signed area for any non‑degenerate segment.

    Args:
        segment: The cut to widen.
        half_width: Distance from the segment to each long side.

    Returns:
        Four ``(x, y)`` points.

    Raises:
        DegenerateSegment: If the segment has zero length or non‑finite
            endpoints.
        ValueError: If ``half_width`` is not positive.
    """
    if not half_width > 0:
        raise ValueError(f"half_width must be positive, got {half_width!r}")
    if segment.is_degenerate:
        raise DegenerateSegment(f"cannot build a blade from {segment.p1} -> {segment.p2}")
    (x1, y1), (x2, y2) = segment.p1, segment.p2
    dx = x2 - x1
    dy = y2 - y1
    length = math.hypot(dx, dy)
    if length == 0.0:
        # Endpoints may differ yet be too close for hypot to resolve.
        raise DegenerateSegment(f"cannot build a blade from {segment.p1} -> {segment.p2}")
    nx = dy / length * half_width
    ny = -dx / length * half_width
    return [
        (x1 + nx, y1 + ny),
        (x2 + nx, y2 + ny),
        (x2 - nx, y2 - ny),
        (x1 - nx, y1 - ny),
    ]


def grow_box(box: Box, margin: float) -> Box:
    xmin, ymin, xmax, ymax = box
    return (xmin - margin, ymin - margin, xmax + margin, ymax + margin)


def clip_segment_to_box(segment: Segment, box: Box) -> Optional[Segment]:
    """Trim a segment to an axis‑aligned box (Liang–Barsky).

    Args:
        segment: Segment to trim.  Must have finite endpoints.
        box: ``(xmin, ymin, xmax, ymax)``.

    Returns:
        The portion of ``segment`` inside ``box``, or ``None`` when the
        segment misses the box or only touches it at a single point.
    """
    xmin, ymin, xmax, ymax = box
    (x1, y1), (x2, y2) = segment.p1, segment.p2
    dx = x2 - x1
    dy = y2 - y1
    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x1 - xmin), (dx, xmax - x1), (-dy, y1 - ymin), (dy, ymax - y1)):
        if p == 0.0:
            if q < 0.0:
                return None
            continue
        r = q / p
        if p < 0.0:
            if r > t1:
                return None
            t0 = max(t0, r)
        else:
            if r < t0:
                return None
            t1 = min(t1, r)
    if t0 >= t1:
        return None
    if t0 == 0.0 and t1 == 1.0:
        return segment
    return Segment(
        p1=(x1 + t0 * dx, y1 + t0 * dy) if t0 > 0.0 else segment.p1,
        p2=(x1 + t1 * dx, y1 + t1 * dy) if t1 < 1.0 else segment.p2,
    )
