"""
Sweep‑line polygon difference on an exact integer lattice.

This module computes ``subject \\ union(clips)`` for one subject polygon
and any number of clip polygons.  It is an event driven formulation of
Vatti's algorithm:

1. Every ring is scaled onto the integer lattice (see :mod:`lattice`).
2. Each non‑horizontal ring edge becomes a :class:`SweepEdge` tagged
   with its role (subject or clip) and the change in winding number it
   causes when crossed left to right.
3. Events are the scanlines where an edge starts, ends or crosses
   another edge.  Crossings are found between neighbours of the active
   edge list, Bentley–Ottmann style, as exact rationals.
4. At an event only the stretch of the active edge list around the
   event points is reordered and reclassified.  Every edge remembers the
   winding count per role to its right, so a stretch is classified by
   walking it from its left neighbour.  A region is kept when the
   subject count is filled and the clip count is not, under the
   requested fill rule.
5. A kept region between two edges is an open trapezoid.  It closes
   only at an event that touches one of its edges, so each trapezoid
   contributes a handful of vertices however many events happen
   elsewhere.
6. Trapezoids are grouped into pieces across the scanlines where one
   closes and the next opens, and each piece's boundary is stitched
   into closed rings.

Horizontal edges never enter the active edge list; they only mark the
stretch of their scanline that must be reclassified.  All arithmetic is
over integers and :class:`fractions.Fraction`; x coordinates stay
integral wherever the scanline is.

Hole handling is governed by ``hole_policy``:

- ``"split"`` – when joining trapezoids across a scanline would close a
  loop around uncovered area, the pieces below that scanline are
  finished and the trapezoids above it start new pieces.  Two
  trapezoids of one piece that meet only at a corner are cut a little
  below that corner, so the tip becomes part of the piece above.  Every
  result is a simple ring with no holes, and results never overlap.
- ``"rings"`` – trapezoids are not grouped; every ring of the result's
  boundary (outer boundaries and holes alike) is returned as its own
  counter‑clockwise polygon.

Any internal inconsistency (unrepresentable coordinates, an active edge
list found out of order, an open boundary) raises
:class:`ClippingFailed`.

Set the ``PARTITION_DEBUG`` environment variable to log sweep
statistics at DEBUG level.
"""

from __future__ import annotations

import heapq
import logging
import os
from bisect import bisect_right
from collections import Counter
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Dict, Hashable, List, Literal, Optional, Sequence, Set, Tuple, Union

from .lattice import (
    DEFAULT_SCALE,
    ExactPoint,
    LatticePoint,
    LatticeRangeError,
    Point,
    from_lattice_ring,
    to_lattice_ring,
)

logger = logging.getLogger(__name__)

Polygon = List[Point]
Number = Union[int, Fraction]
FillRule = Literal["nonzero", "evenodd", "positive", "negative"]
HolePolicy = Literal["split", "rings"]

FILL_RULES = ("nonzero", "evenodd", "positive", "negative")
HOLE_POLICIES = ("split", "rings")

# Edge roles
SUBJECT = 0
CLIP = 1


class ClippingFailed(RuntimeError):
    """Raised when the sweep cannot produce a consistent result."""


def is_filled(count: int, fill_rule: str) -> bool:
    """Return whether a winding ``count`` is inside under ``fill_rule``."""
    if fill_rule == "nonzero":
        return count != 0
    if fill_rule == "evenodd":
        return count % 2 != 0
    if fill_rule == "positive":
        return count > 0
    if fill_rule == "negative":
        return count < 0
    raise ValueError(f"Unknown fill rule {fill_rule!r}; expected one of {FILL_RULES}")


def _exact(value: Number) -> Number:
    if type(value) is Fraction and value.denominator == 1:
        return value.numerator
    return value


@dataclass(eq=False)
class SweepEdge:
    """A non‑horizontal ring edge stored bottom to top.

    Attributes:
        x_bot, y_bot: Lower endpoint on the lattice.
        x_top, y_top: Upper endpoint on the lattice.
        role: ``SUBJECT`` or ``CLIP``.
        wind_delta: Change of the winding number when the edge is
            crossed from left to right: ``+1`` for edges that run
            downward in ring order, ``-1`` for edges that run upward.
            With this convention a counter‑clockwise ring has winding
            number ``+1`` inside.
        index: Stable insertion index used to break ties.
        counts: Winding count per role just right of the edge.
        kept: Whether the region just right of the edge is kept.
        trap: The open trapezoid whose left side is this edge, if any.
    """

    x_bot: int
    y_bot: int
    x_top: int
    y_top: int
    role: int
    wind_delta: int
    index: int
    dx: int = field(init=False, repr=False)
    dy: int = field(init=False, repr=False)
    slope: Fraction = field(init=False, repr=False)
    counts: Tuple[int, int] = field(default=(0, 0), init=False, repr=False)
    kept: bool = field(default=False, init=False, repr=False)
    trap: Optional["_Trapezoid"] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.dx = self.x_top - self.x_bot
        self.dy = self.y_top - self.y_bot
        self.slope = Fraction(self.dx, self.dy)

    def x_at(self, y: Number) -> Number:
        """Exact x coordinate of the edge at scanline ``y``."""
        if y == self.y_bot:
            return self.x_bot
        if y == self.y_top:
            return self.x_top
        if type(y) is int:
            num = self.x_bot * self.dy + self.dx * (y - self.y_bot)
            q, r = divmod(num, self.dy)
            return q if r == 0 else Fraction(num, self.dy)
        return _exact(self.x_bot + self.dx * (y - self.y_bot) / self.dy)

    def order_key(self, y: Number) -> Tuple[Number, Fraction, int, int, int]:
        """Left‑to‑right order just above scanline ``y``."""
        return (self.x_at(y), self.slope, self.role, self.wind_delta, self.index)


@dataclass(eq=False)
class _Trapezoid:
    """A kept region between two active edges, from ``y0`` up to ``y1``."""

    uid: int
    left: SweepEdge
    right: SweepEdge
    y0: Number
    xl0: Number
    xr0: Number
    y1: Number = 0
    xl1: Number = 0
    xr1: Number = 0

    def close(self, y: Number) -> None:
        self.y1 = y
        self.xl1 = self.left.x_at(y)
        self.xr1 = self.right.x_at(y)

    @property
    def has_area(self) -> bool:
        return self.xr0 > self.xl0 or self.xr1 > self.xl1

    def split(self, y: Number, uid: int) -> "_Trapezoid":
        """Shorten this trapezoid to end at ``y`` and return the part above."""
        upper = _Trapezoid(
            uid=uid,
            left=self.left,
            right=self.right,
            y0=y,
            xl0=self.left.x_at(y),
            xr0=self.right.x_at(y),
            y1=self.y1,
            xl1=self.xl1,
            xr1=self.xr1,
        )
        self.y1, self.xl1, self.xr1 = y, upper.xl0, upper.xr0
        return upper


# (scanline, trapezoids closing there, trapezoids opening there)
SweepLine = Tuple[Number, List[_Trapezoid], List[_Trapezoid]]


@dataclass
class _Window:
    """A stretch ``[lo, hi)`` of the active edge list touched by an event."""

    lo: int
    hi: int
    starts: List[SweepEdge] = field(default_factory=list)
    size: int = 0


class _DisjointSet:
    """Minimal union‑find with path halving."""

    def __init__(self) -> None:
        self._parent: Dict[Hashable, Hashable] = {}

    def find(self, item: Hashable) -> Hashable:
        parent = self._parent
        parent.setdefault(item, item)
        while parent[item] != item:
            parent[item] = parent[parent[item]]
            item = parent[item]
        return item

    def union(self, a: Hashable, b: Hashable) -> bool:
        """Join the sets of ``a`` and ``b``.  Returns False if already joined."""
        ra = self.find(a)
        rb = self.find(b)
        if ra == rb:
            return False
        self._parent[rb] = ra
        return True


def _ring_edges(ring: Sequence[LatticePoint], role: int, start_index: int) -> List[SweepEdge]:
    edges: List[SweepEdge] = []
    n = len(ring)
    for i in range(n):
        xa, ya = ring[i]
        xb, yb = ring[(i + 1) % n]
        if ya == yb:
            continue
        if ya < yb:
            edges.append(SweepEdge(xa, ya, xb, yb, role, -1, start_index + len(edges)))
        else:
            edges.append(SweepEdge(xb, yb, xa, ya, role, 1, start_index + len(edges)))
    return edges


def _ring_flats(ring: Sequence[LatticePoint]) -> List[Tuple[int, int, int]]:
    """Horizontal edges of a ring as ``(y, x_min, x_max)``."""
    flats: List[Tuple[int, int, int]] = []
    n = len(ring)
    for i in range(n):
        xa, ya = ring[i]
        xb, yb = ring[(i + 1) % n]
        if ya == yb and xa != xb:
            flats.append((ya, min(xa, xb), max(xa, xb)))
    return flats


def _bounds(ring: Sequence[LatticePoint]) -> Tuple[int, int, int, int]:
    xs = [p[0] for p in ring]
    ys = [p[1] for p in ring]
    return min(xs), min(ys), max(xs), max(ys)


def _merge_intervals(intervals: List[Tuple[Number, Number]]) -> List[Tuple[Number, Number]]:
    merged: List[Tuple[Number, Number]] = []
    for a, b in sorted(intervals):
        if merged and a <= merged[-1][1]:
            if b > merged[-1][1]:
                merged[-1] = (merged[-1][0], b)
        else:
            merged.append((a, b))
    return merged


class _Sweep:
    """Active edge list sweep that reports kept trapezoids per scanline."""

    def __init__(
        self,
        edges: Sequence[SweepEdge],
        flats: Sequence[Tuple[int, int, int]],
        fill_rule: str,
    ) -> None:
        self.fill_rule = fill_rule
        self.active: List[SweepEdge] = []
        self.starts: Dict[Number, List[SweepEdge]] = {}
        self.ends: Dict[Number, List[SweepEdge]] = {}
        self.flats: Dict[Number, List[Tuple[Number, Number]]] = {}
        self.crossings: Dict[Number, List[Number]] = {}
        self.crossed: Set[Tuple[int, int]] = set()
        self.queue: List[Number] = []
        self.queued: Set[Number] = set()
        self.next_uid = 0
        for e in sorted(edges, key=lambda e: e.index):
            self.starts.setdefault(e.y_bot, []).append(e)
            self.ends.setdefault(e.y_top, []).append(e)
            self._schedule(e.y_bot)
            self._schedule(e.y_top)
        for y, x0, x1 in flats:
            self.flats.setdefault(y, []).append((x0, x1))
            self._schedule(y)

    def _schedule(self, y: Number) -> None:
        if y not in self.queued:
            self.queued.add(y)
            heapq.heappush(self.queue, y)

    def run(self) -> List[SweepLine]:
        lines: List[SweepLine] = []
        events = 0
        while self.queue:
            y = heapq.heappop(self.queue)
            events += 1
            closing, opening = self._advance(y)
            if closing or opening:
                lines.append((y, closing, opening))
        if self.active:
            raise ClippingFailed(f"{len(self.active)} edges still active after the last event")
        if os.getenv("PARTITION_DEBUG"):
            logger.debug(
                "sweep: events=%d crossings=%d trapezoids=%d",
                events,
                len(self.crossed),
                self.next_uid,
            )
        return lines

    def _position(self, y: Number, x: Number, after: bool) -> int:
        """Index of the first active edge at or (``after``) past ``x``."""
        lo, hi = 0, len(self.active)
        while lo < hi:
            mid = (lo + hi) // 2
            xm = self.active[mid].x_at(y)
            if xm < x or (after and xm == x):
                lo = mid + 1
            else:
                hi = mid
        return lo

    def _windows(self, y: Number) -> List[_Window]:
        points = [e.x_bot for e in self.starts.get(y, ())]
        points += [e.x_top for e in self.ends.get(y, ())]
        points += self.crossings.pop(y, [])
        intervals = _merge_intervals([(x, x) for x in points] + self.flats.pop(y, []))

        active = self.active
        windows: List[_Window] = []
        owner: List[int] = []
        for a, b in intervals:
            lo = self._position(y, a, after=False)
            hi = self._position(y, b, after=True)
            # Grow to whole kept regions so their trapezoids close cleanly.
            while lo > 0 and active[lo - 1].kept:
                lo -= 1
            while 0 < hi < len(active) and active[hi - 1].kept:
                hi += 1
            if windows and lo <= windows[-1].hi:
                windows[-1].hi = max(windows[-1].hi, hi)
            else:
                windows.append(_Window(lo, hi))
            owner.append(len(windows) - 1)

        lefts = [a for a, _ in intervals]
        for e in self.starts.pop(y, ()):
            windows[owner[bisect_right(lefts, e.x_bot) - 1]].starts.append(e)
        self.ends.pop(y, None)
        return windows

    def _advance(self, y: Number) -> Tuple[List[_Trapezoid], List[_Trapezoid]]:
        closing: List[_Trapezoid] = []
        opening: List[_Trapezoid] = []
        windows = self._windows(y)
        # Right to left so earlier window indices stay valid.
        for w in reversed(windows):
            self._reclassify(y, w, closing, opening)

        shift = 0
        for w in windows:
            start = w.lo + shift
            end = start + w.size
            shift += w.size - (w.hi - w.lo)
            self._check_order(y, start, end)
            for i in range(max(start - 1, 0), min(end, len(self.active) - 1)):
                self._find_crossing(self.active[i], self.active[i + 1], y)
        return closing, opening

    def _reclassify(
        self,
        y: Number,
        w: _Window,
        closing: List[_Trapezoid],
        opening: List[_Trapezoid],
    ) -> None:
        active = self.active
        old = active[w.lo:w.hi]
        base = active[w.lo - 1].counts if w.lo > 0 else (0, 0)
        expected = old[-1].counts if old else base

        for e in old:
            if e.trap is not None:
                e.trap.close(y)
                if e.trap.has_area:
                    closing.append(e.trap)
                e.trap = None

        fresh = [e for e in old if e.y_top != y] + w.starts
        fresh.sort(key=lambda e: e.order_key(y))

        counts = list(base)
        inside = False
        left: Optional[SweepEdge] = None
        for e in fresh:
            counts[e.role] += e.wind_delta
            e.counts = (counts[SUBJECT], counts[CLIP])
            now = is_filled(counts[SUBJECT], self.fill_rule) and not is_filled(
                counts[CLIP], self.fill_rule
            )
            e.kept = now
            if now and not inside:
                left = e
            elif inside and not now:
                self._open(left, e, y, opening)
            inside = now
        if inside or tuple(counts) != tuple(expected):
            raise ClippingFailed(f"winding counts {counts} do not close at y={y}")

        active[w.lo:w.hi] = fresh
        w.size = len(fresh)

    def _open(self, left: SweepEdge, right: SweepEdge, y: Number, opening: List[_Trapezoid]) -> None:
        xl = left.x_at(y)
        xr = right.x_at(y)
        # Coincident edges bound no area until the next event.
        if xl == xr and left.slope == right.slope:
            return
        trap = _Trapezoid(uid=self.next_uid, left=left, right=right, y0=y, xl0=xl, xr0=xr)
        self.next_uid += 1
        left.trap = trap
        opening.append(trap)

    def _check_order(self, y: Number, start: int, end: int) -> None:
        active = self.active
        for i in (start - 1, end - 1):
            if 0 <= i < len(active) - 1 and active[i].x_at(y) > active[i + 1].x_at(y):
                raise ClippingFailed(
                    f"active edge list out of order at y={y} "
                    f"(edges {active[i].index} and {active[i + 1].index})"
                )

    def _find_crossing(self, a: SweepEdge, b: SweepEdge, y: Number) -> None:
        """Schedule the scanline where ``b`` passes to the left of ``a``."""
        key = (a.index, b.index)
        if key in self.crossed:
            return
        y_end = min(a.y_top, b.y_top)
        d_end = a.x_at(y_end) - b.x_at(y_end)
        if d_end <= 0:
            return
        d_now = a.x_at(y) - b.x_at(y)
        if d_now >= 0:
            raise ClippingFailed(f"edges {a.index} and {b.index} overlap at y={y}")
        self.crossed.add(key)
        yc = _exact(y + Fraction(-d_now * (y_end - y)) / (d_end - d_now))
        self.crossings.setdefault(yc, []).append(a.x_at(yc))
        self._schedule(yc)


def _sweep(
    edges: Sequence[SweepEdge],
    flats: Sequence[Tuple[int, int, int]],
    fill_rule: str,
) -> List[SweepLine]:
    """Run the sweep and return the trapezoids closing and opening per scanline."""
    return _Sweep(edges, flats, fill_rule).run()


def _overlapping_pairs(
    lower: Sequence[_Trapezoid], upper: Sequence[_Trapezoid]
) -> List[Tuple[_Trapezoid, _Trapezoid]]:
    """Pairs of trapezoids that share a stretch of positive length on a scanline."""
    pairs: List[Tuple[_Trapezoid, _Trapezoid]] = []
    i = j = 0
    while i < len(lower) and j < len(upper):
        s = lower[i]
        t = upper[j]
        if min(s.xr1, t.xr0) > max(s.xl1, t.xl0):
            pairs.append((s, t))
        if s.xr1 < t.xr0:
            i += 1
        else:
            j += 1
    return pairs


def _group_trapezoids(lines: Sequence[SweepLine], hole_policy: str) -> List[List[_Trapezoid]]:
    """Group trapezoids into output pieces."""
    traps = [t for _, lower, _ in lines for t in lower]
    if not traps:
        return []
    if hole_policy == "rings":
        return [traps]

    pieces = _DisjointSet()
    next_uid = max(t.uid for t in traps) + 1
    cuts = 0
    tips = 0
    for y, lower, upper in lines:
        lower = sorted(lower, key=lambda t: (t.xl1, t.xr1))
        upper = sorted((t for t in upper if t.has_area), key=lambda t: (t.xl0, t.xr0))

        # Two trapezoids of one piece meeting at a single top corner would
        # pinch the piece there; hand both tips to the pieces above.
        for i in range(len(lower) - 1):
            a, b = lower[i], lower[i + 1]
            if a.xr1 != b.xl1 or pieces.find(a.uid) != pieces.find(b.uid):
                continue
            y_cut = _exact((max(a.y0, b.y0) + Fraction(y)) / 2)
            lower[i] = a.split(y_cut, next_uid)
            lower[i + 1] = b.split(y_cut, next_uid + 1)
            traps.extend(lower[i:i + 2])
            next_uid += 2
            tips += 1

        pairs = _overlapping_pairs(lower, upper)
        if not pairs:
            continue
        roots = [pieces.find(s.uid) for s, _ in pairs]
        trial = _DisjointSet()
        looped: Set[Hashable] = set()
        for root, (_, t) in zip(roots, pairs):
            if not trial.union(("piece", root), ("trap", t.uid)):
                looped.add(("piece", root))
        closed = {trial.find(node) for node in looped}
        for root, (s, t) in zip(roots, pairs):
            if trial.find(("piece", root)) in closed:
                cuts += 1
                continue
            pieces.union(s.uid, t.uid)

    grouped: Dict[Hashable, List[_Trapezoid]] = {}
    for t in sorted(traps, key=lambda t: (t.y0, t.xl0, t.xr0, t.uid)):
        grouped.setdefault(pieces.find(t.uid), []).append(t)
    if os.getenv("PARTITION_DEBUG"):
        logger.debug(
            "group_trapezoids: trapezoids=%d pieces=%d scanline_cuts=%d split_tips=%d",
            len(traps),
            len(grouped),
            cuts,
            tips,
        )
    return list(grouped.values())


def _monotone_chains(traps: Sequence[_Trapezoid]) -> List[List[_Trapezoid]]:
    """Break a piece into chains of trapezoids stacked one on one."""
    tops: Dict[Number, List[_Trapezoid]] = {}
    bottoms: Dict[Number, List[_Trapezoid]] = {}
    for t in traps:
        tops.setdefault(t.y1, []).append(t)
        bottoms.setdefault(t.y0, []).append(t)

    chains = _DisjointSet()
    for y, lower in tops.items():
        upper = bottoms.get(y)
        if not upper:
            continue
        pairs = _overlapping_pairs(
            sorted(lower, key=lambda t: (t.xl1, t.xr1)),
            sorted(upper, key=lambda t: (t.xl0, t.xr0)),
        )
        above = Counter(s.uid for s, _ in pairs)
        below = Counter(t.uid for _, t in pairs)
        for s, t in pairs:
            if above[s.uid] == 1 and below[t.uid] == 1:
                chains.union(s.uid, t.uid)

    grouped: Dict[Hashable, List[_Trapezoid]] = {}
    for t in traps:
        grouped.setdefault(chains.find(t.uid), []).append(t)
    return list(grouped.values())


def _piece_boundary(traps: Sequence[_Trapezoid]) -> List[Tuple[ExactPoint, ExactPoint]]:
    """Directed boundary segments of a piece, interior on the left."""
    segments: List[Tuple[ExactPoint, ExactPoint]] = []
    lines: Dict[Number, Tuple[List[Tuple[Number, Number]], List[Tuple[Number, Number]]]] = {}
    for t in traps:
        segments.append(((t.xl1, t.y1), (t.xl0, t.y0)))
        segments.append(((t.xr0, t.y0), (t.xr1, t.y1)))
        lines.setdefault(t.y1, ([], []))[0].append((t.xl1, t.xr1))
        lines.setdefault(t.y0, ([], []))[1].append((t.xl0, t.xr0))

    for y, (below, above) in lines.items():
        xs = sorted({x for interval in below + above for x in interval})
        for xa, xb in zip(xs, xs[1:]):
            under = any(lo <= xa and xb <= hi for lo, hi in below)
            over = any(lo <= xa and xb <= hi for lo, hi in above)
            if under and not over:
                segments.append(((xb, y), (xa, y)))
            elif over and not under:
                segments.append(((xa, y), (xb, y)))
    return segments


def _diamond_angle(a: Number, b: Number) -> Fraction:
    """Exact monotone stand‑in for ``atan2(b, a)`` on ``[0, 4)``."""
    if b >= 0:
        if a >= 0:
            return Fraction(b) / (a + b)
        return 1 + Fraction(-a) / (b - a)
    if a < 0:
        return 2 + Fraction(-b) / (-a - b)
    return 3 + Fraction(a) / (a - b)


def _clockwise_turn(ref: Tuple[Number, Number], d: Tuple[Number, Number]) -> Fraction:
    """Clockwise angle from ``ref`` to ``d`` in diamond units, ``(0, 4]``."""
    dot = ref[0] * d[0] + ref[1] * d[1]
    cross = ref[0] * d[1] - ref[1] * d[0]
    angle = _diamond_angle(dot, -cross)
    return angle if angle != 0 else Fraction(4)


def _trace_rings(segments: Sequence[Tuple[ExactPoint, ExactPoint]]) -> List[List[ExactPoint]]:
    """Stitch directed boundary segments into closed rings.

    At a vertex shared by several rings the successor of an incoming
    segment is the outgoing segment reached first when turning
    clockwise from the incoming direction reversed.  That keeps every
    ring on one side of a pinch point.
    """
    outgoing: Dict[ExactPoint, List[int]] = {}
    for i, (a, _) in enumerate(segments):
        outgoing.setdefault(a, []).append(i)

    successor: List[int] = [0] * len(segments)
    claimed: Set[int] = set()
    for i, (a, b) in enumerate(segments):
        candidates = outgoing.get(b)
        if not candidates:
            raise ClippingFailed(f"open boundary at lattice point {b}")
        if len(candidates) == 1:
            j = candidates[0]
        else:
            back = (a[0] - b[0], a[1] - b[1])
            j = min(
                candidates,
                key=lambda c: (
                    _clockwise_turn(back, (segments[c][1][0] - b[0], segments[c][1][1] - b[1])),
                    c,
                ),
            )
        if j in claimed:
            raise ClippingFailed(f"boundary segments collide at lattice point {b}")
        claimed.add(j)
        successor[i] = j

    rings: List[List[ExactPoint]] = []
    seen = [False] * len(segments)
    for i in range(len(segments)):
        if seen[i]:
            continue
        ring: List[ExactPoint] = []
        j = i
        while not seen[j]:
            seen[j] = True
            ring.append(segments[j][0])
            j = successor[j]
        rings.append(ring)
    return rings


def _is_simple_outline(rings: Sequence[Sequence[ExactPoint]]) -> bool:
    """One ring that visits no vertex twice."""
    return len(rings) == 1 and len(set(rings[0])) == len(rings[0])


def _turn(a: ExactPoint, b: ExactPoint, c: ExactPoint) -> Number:
    return (b[0] - a[0]) * (c[1] - b[1]) - (b[1] - a[1]) * (c[0] - b[0])


def _simplify_ring(ring: Sequence[ExactPoint]) -> List[ExactPoint]:
    """Drop collinear and spike vertices."""
    out: List[ExactPoint] = []
    for p in ring:
        out.append(p)
        while len(out) >= 3 and _turn(out[-3], out[-2], out[-1]) == 0:
            del out[-2]
    changed = True
    while changed and len(out) >= 3:
        changed = False
        if _turn(out[-2], out[-1], out[0]) == 0:
            out.pop()
            changed = True
        elif _turn(out[-1], out[0], out[1]) == 0:
            out.pop(0)
            changed = True
    return out


def _doubled_area(ring: Sequence[ExactPoint]) -> Number:
    total: Number = 0
    n = len(ring)
    for i in range(n):
        x1, y1 = ring[i]
        x2, y2 = ring[(i + 1) % n]
        total += x1 * y2 - x2 * y1
    return total


def _rotate_to_lowest(ring: List[ExactPoint]) -> List[ExactPoint]:
    start = min(range(len(ring)), key=lambda i: (ring[i][1], ring[i][0]))
    return ring[start:] + ring[:start]


def _piece_rings(traps: Sequence[_Trapezoid], hole_policy: str) -> List[List[ExactPoint]]:
    segments = _piece_boundary(traps)
    if hole_policy == "rings":
        return _trace_rings(segments)
    try:
        rings = _trace_rings(segments)
    except ClippingFailed as exc:
        logger.debug("clip_difference: piece outline does not trace (%s)", exc)
    else:
        if _is_simple_outline(rings):
            return rings
    # Trapezoids meeting side by side or at a lone corner; fall back to
    # chains, each of which is monotone and therefore simple.
    chains = _monotone_chains(traps)
    if os.getenv("PARTITION_DEBUG"):
        logger.debug("clip_difference: re-tracing a piece as %d monotone chains", len(chains))
    return [ring for chain in chains for ring in _trace_rings(_piece_boundary(chain))]


def clip_difference(
    subject: Sequence[Point],
    clips: Sequence[Sequence[Point]],
    scale: float = DEFAULT_SCALE,
    fill_rule: FillRule = "nonzero",
    hole_policy: HolePolicy = "split",
) -> List[Polygon]:
    """Compute ``subject`` minus the union of ``clips``.

    Args:
        subject: The polygon to cut, as a ring of ``(x, y)`` points.  Any
            simple polygon is accepted, convex or not, in either
            orientation.
        clips: Polygons whose area is removed from ``subject``.
        scale: Lattice units per coordinate unit.
        fill_rule: Rule deciding which winding counts are inside, applied
            to the subject and the clip set independently.
        hole_policy: ``"split"`` or ``"rings"`` (see module docstring).

    Returns:
        Counter‑clockwise polygons with positive area, each starting at
        its lowest (then leftmost) vertex, in sweep order.

    Raises:
        ValueError: For an unknown ``fill_rule`` or ``hole_policy``.
        ClippingFailed: If coordinates cannot be represented at ``scale``
            or the sweep detects an inconsistency.
    """
    if fill_rule not in FILL_RULES:
        raise ValueError(f"Unknown fill rule {fill_rule!r}; expected one of {FILL_RULES}")
    if hole_policy not in HOLE_POLICIES:
        raise ValueError(f"Unknown hole policy {hole_policy!r}; expected one of {HOLE_POLICIES}")

    try:
        subject_ring = to_lattice_ring(subject, scale)
        clip_rings = [to_lattice_ring(clip, scale) for clip in clips]
    except LatticeRangeError as exc:
        raise ClippingFailed(f"unrepresentable coordinates: {exc}") from exc

    if len(subject_ring) < 3:
        return []
    edges = _ring_edges(subject_ring, SUBJECT, 0)
    if not edges:
        return []
    flats = _ring_flats(subject_ring)

    sx0, sy0, sx1, sy1 = _bounds(subject_ring)
    for ring in clip_rings:
        if len(ring) < 3:
            continue
        cx0, cy0, cx1, cy1 = _bounds(ring)
        # Clips that cannot touch the subject change nothing.
        if cx1 < sx0 or cx0 > sx1 or cy1 < sy0 or cy0 > sy1:
            continue
        edges.extend(_ring_edges(ring, CLIP, len(edges)))
        flats.extend(_ring_flats(ring))

    lines = _sweep(edges, flats, fill_rule)
    polygons: List[Polygon] = []
    for traps in _group_trapezoids(lines, hole_policy):
        for ring in _piece_rings(traps, hole_policy):
            ring = _simplify_ring(ring)
            if len(ring) < 3:
                continue
            area2 = _doubled_area(ring)
            if area2 < 0 and hole_policy == "rings":
                ring.reverse()
                area2 = -area2
            if area2 <= 0:
                if os.getenv("PARTITION_DEBUG"):
                    logger.debug("clip_difference: dropping ring with doubled area %s", area2)
                continue
            polygons.append(from_lattice_ring(_rotate_to_lowest(ring), scale))
    return polygons
