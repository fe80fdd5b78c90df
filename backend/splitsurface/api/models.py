"""
Pydantic data models for the partition API.

These models define the shapes of requests and responses used by the
backend.  Maintaining these schemas separately keeps the HTTP contract
independent of the geometry services, which work on plain tuples.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PointModel(BaseModel):
    """Single 2D point on the canvas."""

    x: float
    y: float


class CutModel(BaseModel):
    """A straight cut drawn across the canvas."""

    points: List[PointModel] = Field(
        ...,
        min_length=2,
        max_length=2,
        description="Start and end point of the cut",
    )
    # Colour is passed through to the client untouched; it never affects
    # the partition itself.
    color: Optional[str] = Field(default=None, description="Display colour of the cut line")


class PartitionRequest(BaseModel):
    """Request body for splitting a canvas along a set of cuts."""

    width: float = Field(..., description="Canvas width in canvas units")
    height: float = Field(..., description="Canvas height in canvas units")
    cuts: List[CutModel] = Field(default_factory=list, description="Cuts in drawing order")


class PieceModel(BaseModel):
    """One polygonal piece of the partition."""

    index: int = Field(..., description="Position of the piece in the result")
    points: List[PointModel] = Field(..., description="Counter-clockwise ring of the piece")
    area: float = Field(..., description="Area of the piece in square canvas units")


class PartitionResponse(BaseModel):
    """Response returned for a partition request."""

    polygons: List[PieceModel] = Field(..., description="Pieces of the partitioned canvas")
    pieceCount: int = Field(..., description="Number of pieces")
    failed: bool = Field(
        ...,
        description="True when clipping failed and the whole canvas is returned as one piece",
    )
    skippedCuts: int = Field(..., description="Number of zero-length cuts that were ignored")
    meta: Dict[str, Any] = Field(
        default_factory=dict,
        description="Summary information such as total area and engine settings",
    )
