"""
API routes for canvas partitioning.

This module defines the endpoint that splits a rectangular canvas along
a list of straight cuts.  The heavy lifting happens in
:mod:`..services.partition`; the route only translates between the
pydantic schemas and the plain tuples used by the geometry services,
and serves repeated requests from the partition memo cache.

The endpoint returns the pieces with their areas, the piece count, a
``failed`` flag set when the engine fell back to the whole canvas, and
a metadata section with summary information.
"""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, HTTPException

from .models import PartitionRequest, PartitionResponse, PieceModel, PointModel
from ..services.blades import Cut, make_segment
from ..services.partition import InvalidCanvas, polygon_area
from ..services.partition_cache import compute_partition_cached
from ..services.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/partition", response_model=PartitionResponse)
async def create_partition(body: PartitionRequest) -> PartitionResponse:
    """Split the canvas described by ``body`` along its cuts.

    Args:
        body: Canvas size and cut list.

    Returns:
        The partition pieces and summary information.

    Raises:
        HTTPException: 400 for an invalid canvas size, 500 if the engine
            raises unexpectedly.
    """
    cuts = [
        Cut(
            segment=make_segment((c.points[0].x, c.points[0].y), (c.points[1].x, c.points[1].y)),
            color=c.color,
        )
        for c in body.cuts
    ]
    settings = get_settings()
    started = time.perf_counter()
    try:
        result = compute_partition_cached(body.width, body.height, cuts, settings)
    except InvalidCanvas as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        logger.exception(
            "partition endpoint error for %sx%s canvas with %d cuts: %s",
            body.width,
            body.height,
            len(cuts),
            exc,
        )
        raise HTTPException(status_code=500, detail=f"Failed to compute partition: {exc}")
    elapsed_ms = (time.perf_counter() - started) * 1000.0

    pieces = [
        PieceModel(
            index=idx,
            points=[PointModel(x=x, y=y) for x, y in polygon],
            area=polygon_area(polygon),
        )
        for idx, polygon in enumerate(result.polygons)
    ]
    meta = {
        "canvasArea": body.width * body.height,
        "totalArea": result.total_area,
        "bladeCount": result.blade_count,
        "scale": result.scale,
        "elapsedMs": elapsed_ms,
        "settings": settings.to_dict(),
    }
    return PartitionResponse(
        polygons=pieces,
        pieceCount=result.piece_count,
        failed=result.failed,
        skippedCuts=result.skipped_cuts,
        meta=meta,
    )
