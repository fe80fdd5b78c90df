"""
Tests for the partition memo cache.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from splitsurface.services import partition_cache
from splitsurface.services.blades import Cut, make_segment
from splitsurface.services.partition import InvalidCanvas
from splitsurface.services.partition_cache import (
    cache_size,
    clear_partition_cache,
    compute_partition_cached,
    make_cache_key,
)
from splitsurface.services.settings import PartitionSettings


@pytest.fixture(autouse=True)
def _empty_cache():
    clear_partition_cache()
    yield
    clear_partition_cache()


def test_repeated_request_is_served_from_cache() -> None:
    settings = PartitionSettings()
    cuts = [((0, 50), (100, 50))]
    first = compute_partition_cached(100, 100, cuts, settings)
    second = compute_partition_cached(100, 100, [((0, 50), (100, 50))], settings)
    assert second is first
    assert cache_size() == 1


def test_colour_does_not_affect_key() -> None:
    settings = PartitionSettings()
    red = Cut(segment=make_segment((0, 0), (10, 10)), color="red")
    blue = Cut(segment=make_segment((0, 0), (10, 10)), color="blue")
    assert make_cache_key(10, 10, [red], settings) == make_cache_key(10, 10, [blue], settings)


def test_settings_are_part_of_key() -> None:
    cuts = [((40, 50), (60, 50))]
    split = compute_partition_cached(100, 100, cuts, PartitionSettings())
    rings = compute_partition_cached(100, 100, cuts, PartitionSettings(hole_policy="rings"))
    assert split is not rings
    assert cache_size() == 2


def test_least_recently_used_entry_is_evicted() -> None:
    settings = PartitionSettings(cache_entries=2)
    a = compute_partition_cached(100, 100, [((0, 10), (100, 10))], settings)
    compute_partition_cached(100, 100, [((0, 20), (100, 20))], settings)
    # Touch ``a`` so the second entry becomes the oldest
    assert compute_partition_cached(100, 100, [((0, 10), (100, 10))], settings) is a
    compute_partition_cached(100, 100, [((0, 30), (100, 30))], settings)
    assert cache_size() == 2
    key_b = make_cache_key(100, 100, [((0, 20), (100, 20))], settings)
    assert partition_cache.get_partition_from_cache(key_b) is None
    key_a = make_cache_key(100, 100, [((0, 10), (100, 10))], settings)
    assert partition_cache.get_partition_from_cache(key_a) is a


def test_invalid_canvas_is_not_cached() -> None:
    with pytest.raises(InvalidCanvas):
        compute_partition_cached(-5, 10, [], PartitionSettings())
    assert cache_size() == 0
