"""
Tests for the partition orchestrator in partition.py.

Besides the worked scenarios these tests use shapely as an independent
geometry oracle: pieces must be valid polygons, must not overlap, and
together with the blades must account for the whole canvas.
"""

from __future__ import annotations

import math
import random
import sys
import time
from pathlib import Path
from typing import List, Sequence, Tuple

import pytest
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.ops import unary_union

sys.path.append(str(Path(__file__).resolve().parents[1]))

from splitsurface.services import partition as partition_module
from splitsurface.services.blades import Cut, build_blade, make_segment
from splitsurface.services.clipping import ClippingFailed
from splitsurface.services.partition import (
    InvalidCanvas,
    PartitionResult,
    as_segment,
    canvas_polygon,
    compute_partition,
    polygon_area,
)
from splitsurface.services.settings import PartitionSettings

SETTINGS = PartitionSettings()
WHOLE_CANVAS = ((0.0, 0.0), (100.0, 0.0), (100.0, 100.0), (0.0, 100.0))


def _perimeter(polygon: Sequence[Tuple[float, float]]) -> float:
    return ShapelyPolygon(polygon).exterior.length


def _assert_valid_partition(
    width: float,
    height: float,
    cuts: List[Tuple[Tuple[float, float], Tuple[float, float]]],
    result: PartitionResult,
) -> None:
    """Check simplicity, disjointness and area conservation with shapely."""
    shapes = [ShapelyPolygon(p) for p in result.polygons]
    for poly, shape in zip(result.polygons, shapes):
        assert polygon_area(poly) > 0
        assert shape.is_valid
    covered = sum(shape.area for shape in shapes)
    assert unary_union(shapes).area == pytest.approx(covered, rel=1e-9, abs=1e-6)
    if len(shapes) <= 60:
        for i in range(len(shapes)):
            for j in range(i + 1, len(shapes)):
                assert shapes[i].intersection(shapes[j]).area < 1e-6

    canvas = ShapelyPolygon(canvas_polygon(width, height))
    blades = [
        ShapelyPolygon(build_blade(make_segment(p1, p2), SETTINGS.blade_half_width))
        for p1, p2 in cuts
        if p1 != p2
    ]
    removed = unary_union(blades).intersection(canvas).area if blades else 0.0
    # Lattice rounding moves each boundary by at most half a lattice
    # diagonal, so the error is bounded by the boundary length.
    tolerance = sum(_perimeter(p) for p in result.polygons) / SETTINGS.scale + 1e-6
    assert result.total_area + removed == pytest.approx(width * height, abs=tolerance)


def test_no_cuts_returns_canvas() -> None:
    result = compute_partition(100, 100, [], SETTINGS)
    assert result.polygons == (WHOLE_CANVAS,)
    assert result.piece_count == 1
    assert not result.failed


def test_single_horizontal_cut() -> None:
    """One cut across the middle gives two strips 49.5 units tall."""
    result = compute_partition(100, 100, [((0, 50), (100, 50))], SETTINGS)
    assert len(result) == 2
    assert [polygon_area(p) for p in result] == pytest.approx([4950.0, 4950.0])
    assert result.polygons[0] == ((0.0, 0.0), (100.0, 0.0), (100.0, 49.5), (0.0, 49.5))
    assert result.blade_count == 1


def test_crossing_diagonals_give_four_triangles() -> None:
    cuts = [((0, 0), (100, 100)), ((0, 100), (100, 0))]
    result = compute_partition(100, 100, cuts, SETTINGS)
    assert result.piece_count == 4
    for polygon in result:
        assert len(polygon) == 3
    _assert_valid_partition(100, 100, cuts, result)


def test_cut_outside_canvas_changes_nothing() -> None:
    result = compute_partition(100, 100, [((200, 200), (300, 300))], SETTINGS)
    assert result.polygons == (WHOLE_CANVAS,)
    assert not result.failed


def test_grid_of_cuts() -> None:
    """Nine vertical and nine horizontal cuts give a ten by ten grid."""
    cuts = [((x, 0), (x, 100)) for x in range(10, 100, 10)]
    cuts += [((0, y), (100, y)) for y in range(10, 100, 10)]
    result = compute_partition(100, 100, cuts, SETTINGS)
    assert result.piece_count == 100
    assert result.total_area == pytest.approx(91.0 * 91.0)
    for polygon in result:
        assert len(polygon) == 4


def test_degenerate_cuts_are_skipped() -> None:
    base = compute_partition(100, 100, [((0, 50), (100, 50))], SETTINGS)
    with_point = compute_partition(100, 100, [((0, 50), (100, 50)), ((30, 30), (30, 30))], SETTINGS)
    assert with_point.polygons == base.polygons
    assert with_point.skipped_cuts == 1

    only_point = compute_partition(100, 100, [((30, 30), (30, 30))], SETTINGS)
    assert only_point.polygons == (WHOLE_CANVAS,)
    assert only_point.skipped_cuts == 1


def test_cut_objects_and_point_pairs_agree() -> None:
    pair = ((10, 0), (90, 100))
    as_cut = Cut(segment=make_segment(*pair), color="#123456")
    assert compute_partition(100, 100, [as_cut], SETTINGS) == compute_partition(100, 100, [pair], SETTINGS)


def test_result_is_deterministic() -> None:
    cuts = [((5, 7), (93, 61)), ((20, 100), (80, 0)), ((0, 33.3), (100, 33.3))]
    first = compute_partition(100, 100, cuts, SETTINGS)
    second = compute_partition(100, 100, cuts, SETTINGS)
    assert first == second


def test_random_cuts_form_a_valid_partition() -> None:
    rng = random.Random(7)
    width, height = 120.0, 80.0
    cuts = []
    for _ in range(12):
        p1 = (rng.uniform(-20, width + 20), rng.uniform(-20, height + 20))
        p2 = (rng.uniform(-20, width + 20), rng.uniform(-20, height + 20))
        cuts.append((p1, p2))
    result = compute_partition(width, height, cuts, SETTINGS)
    assert not result.failed
    assert result.piece_count >= 2
    _assert_valid_partition(width, height, cuts, result)


def test_cuts_running_far_outside_are_trimmed() -> None:
    """Endpoints far beyond the canvas behave like edge-to-edge cuts."""
    near = compute_partition(100, 100, [((0, 50), (100, 50))], SETTINGS)
    far = compute_partition(100, 100, [((-1e12, 50), (1e12, 50))], SETTINGS)
    assert not far.failed
    assert [polygon_area(p) for p in far] == pytest.approx([polygon_area(p) for p in near])


@pytest.mark.parametrize(
    "width,height",
    [(0, 100), (100, -1), (float("nan"), 10), (float("inf"), 10), ("wide", 10), (1e7, 10)],
)
def test_invalid_canvas_raises(width, height) -> None:
    with pytest.raises(InvalidCanvas):
        compute_partition(width, height, [], SETTINGS)


def test_clipping_failure_falls_back_to_canvas(monkeypatch) -> None:
    def explode(*args, **kwargs):
        raise ClippingFailed("boom")

    monkeypatch.setattr(partition_module, "clip_difference", explode)
    result = compute_partition(100, 100, [((0, 50), (100, 50))], SETTINGS)
    assert result.failed
    assert result.polygons == (WHOLE_CANVAS,)
    assert result.blade_count == 1


def test_rings_policy_reports_hole_ring() -> None:
    settings = PartitionSettings(hole_policy="rings")
    result = compute_partition(100, 100, [((40, 50), (60, 50))], settings)
    assert sorted(polygon_area(p) for p in result) == pytest.approx([20.0, 10000.0])


def test_slanted_cut_inside_canvas_gives_simple_pieces() -> None:
    """The pointed top of an enclosed blade must not pinch the piece below it."""
    cuts = [((70, 10), (60, 20))]
    result = compute_partition(100, 100, cuts, SETTINGS)
    assert not result.failed
    assert result.piece_count == 2
    for polygon in result:
        assert len(set(polygon)) == len(polygon)
    _assert_valid_partition(100, 100, cuts, result)


@pytest.mark.parametrize("seed", range(8))
def test_cuts_inside_canvas_form_a_valid_partition(seed: int) -> None:
    rng = random.Random(seed)
    width, height = 100.0, 80.0
    cuts = []
    for _ in range(rng.randint(1, 6)):
        p1 = (rng.uniform(5, width - 5), rng.uniform(5, height - 5))
        p2 = (rng.uniform(5, width - 5), rng.uniform(5, height - 5))
        cuts.append((p1, p2))
    result = compute_partition(width, height, cuts, SETTINGS)
    assert not result.failed
    _assert_valid_partition(width, height, cuts, result)


def _rotated_grid(width: float, height: float, lines: int, angle: float):
    cx, cy = width / 2, height / 2
    reach = width + height
    cuts = []
    for theta in (angle, angle + math.pi / 2):
        ux, uy = math.cos(theta), math.sin(theta)
        spacing = reach / lines
        for i in range(lines):
            d = (i - lines / 2 + 0.5) * spacing
            px, py = cx - uy * d, cy + ux * d
            cuts.append(((px - ux * reach, py - uy * reach), (px + ux * reach, py + uy * reach)))
    return cuts


def test_rotated_grid_finishes_quickly() -> None:
    """Many slanted cuts with hundreds of crossings stay well within interactive time."""
    width, height = 800.0, 600.0
    cuts = _rotated_grid(width, height, 18, math.radians(20))
    start = time.perf_counter()
    result = compute_partition(width, height, cuts, SETTINGS)
    elapsed = time.perf_counter() - start
    assert not result.failed
    assert result.piece_count > 50
    assert elapsed < 20.0
    _assert_valid_partition(width, height, cuts, result)


@pytest.mark.parametrize(
    "cut",
    [((0, 0), (1, 1), (2, 2)), ((1, 2),), ((1,), (2, 3)), 5],
)
def test_malformed_cut_is_rejected_with_a_clear_message(cut) -> None:
    with pytest.raises(ValueError, match="pair of"):
        as_segment(cut)
    with pytest.raises(ValueError, match="pair of"):
        compute_partition(100, 100, [cut], SETTINGS)
