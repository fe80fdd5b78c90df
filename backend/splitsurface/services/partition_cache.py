"""
Simple in‑memory caching layer for partition results.

Partitioning is pure: the same canvas size, cut list and settings
always produce the same pieces.  Interactive clients recompute on every
change, so repeated requests for an unchanged drawing should reuse the
previous result.  A ``PartitionCacheKey`` uniquely identifies a
computation by ``width``, ``height``, the cut segments and the
settings.

The cache is implemented as an ``OrderedDict`` to provide
least‑recently‑used (LRU) eviction.  When the number of cached
entries exceeds the configured capacity the oldest entry is dropped.

Usage::

    from .partition_cache import compute_partition_cached
    result = compute_partition_cached(800, 600, cuts)

"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from threading import RLock
from typing import Optional, Sequence, Tuple

from .blades import Segment
from .partition import CutLike, PartitionResult, as_segment, compute_partition, validate_canvas
from .settings import PartitionSettings, get_settings


@dataclass(frozen=True)
class PartitionCacheKey:
    """Unique identifier for a cached partition result.

    Attributes:
        width: Canvas width.
        height: Canvas height.
        segments: The cut segments in input order.  Display colours are
            not part of the key because they never affect the pieces.
        settings: Engine settings the result was computed with.
    """

    width: float
    height: float
    segments: Tuple[Segment, ...]
    settings: PartitionSettings


# Underlying storage for the partition cache.  A reentrant lock
# protects the dictionary to allow safe concurrent access from request
# handlers.
_cache: "OrderedDict[PartitionCacheKey, PartitionResult]" = OrderedDict()
_lock = RLock()
# Default capacity; PartitionSettings.cache_entries overrides it per call.
MAX_CACHE_ENTRIES: int = 32


def make_cache_key(
    width: float,
    height: float,
    cuts: Sequence[CutLike],
    settings: PartitionSettings,
) -> PartitionCacheKey:
    return PartitionCacheKey(
        width=float(width),
        height=float(height),
        segments=tuple(as_segment(c) for c in cuts),
        settings=settings,
    )


def get_partition_from_cache(key: PartitionCacheKey) -> Optional[PartitionResult]:
    """Retrieve a cached partition result if available.

    Args:
        key: Cache key identifying the computation.

    Returns:
        The cached ``PartitionResult`` or ``None``.
    """
    with _lock:
        result = _cache.get(key)
        if result is not None:
            # Move the key to the end to mark it as recently used
            _cache.move_to_end(key)
        return result


def put_partition_in_cache(
    key: PartitionCacheKey,
    result: PartitionResult,
    max_entries: int = MAX_CACHE_ENTRIES,
) -> None:
    """Store a partition result in the cache.

    If the cache exceeds ``max_entries`` after insertion the least
    recently used entries are removed.
    """
    with _lock:
        _cache[key] = result
        _cache.move_to_end(key)
        while len(_cache) > max_entries:
            _cache.popitem(last=False)


def clear_partition_cache() -> None:
    with _lock:
        _cache.clear()


def cache_size() -> int:
    with _lock:
        return len(_cache)


def compute_partition_cached(
    width: float,
    height: float,
    cuts: Sequence[CutLike],
    settings: Optional[PartitionSettings] = None,
) -> PartitionResult:
    """Memoised :func:`compute_partition`.

    ``InvalidCanvas`` propagates exactly as from the uncached call and
    nothing is stored for it.
    """
    validate_canvas(width, height)
    settings = settings or get_settings()
    key = make_cache_key(width, height, cuts, settings)
    cached = get_partition_from_cache(key)
    if cached is not None:
        return cached
    result = compute_partition(width, height, cuts, settings)
    put_partition_in_cache(key, result, settings.cache_entries)
    return result
