"""Kerf compensation data model — what a cut path stores after offsetting."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from chainoffset.models.offset import GapFillingResult, OffsetDirection
from chainoffset.models.shapes import Shape

# Bumped whenever offset geometry changes so cached offsets are recomputed
OFFSET_ALGORITHM_VERSION = "1.0.0"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CalculatedOffset(BaseModel):
    offset_shapes: list[Shape] = Field(default_factory=list)
    original_shapes: list[Shape] = Field(default_factory=list)
    direction: OffsetDirection
    kerf_width: float
    generated_at: datetime = Field(default_factory=_utcnow)
    version: str = OFFSET_ALGORITHM_VERSION
    gap_fills: list[GapFillingResult] = Field(default_factory=list)
    continuous: bool = False
    warnings: list[str] = Field(default_factory=list)


class OffsetWarning(BaseModel):
    operation_id: str
    chain_id: str
    type: str = "offset"  # offset | trim | gap
    message: str
