"""Offset engine data model — intersections, trims, gap fills and offset chains."""

from __future__ import annotations

import enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from chainoffset.models.shapes import Point, Shape, new_id

IntersectionType = Literal["exact", "tangent", "approximate", "coincident"]


class OffsetDirection(str, enum.Enum):
    INSET = "inset"
    OUTSET = "outset"
    NONE = "none"


class OffsetSide(str, enum.Enum):
    INNER = "inner"
    OUTER = "outer"
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> OffsetSide:
        return _OPPOSITE[self]


_OPPOSITE = {
    OffsetSide.INNER: OffsetSide.OUTER,
    OffsetSide.OUTER: OffsetSide.INNER,
    OffsetSide.LEFT: OffsetSide.RIGHT,
    OffsetSide.RIGHT: OffsetSide.LEFT,
}


class IntersectionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    point: Point
    param1: float
    param2: float
    distance: float = 0.0
    type: IntersectionType = "exact"
    confidence: float = 1.0
    # True when the point lies outside either shape's un-extended span
    on_extension: bool = False

    def swapped(self) -> IntersectionResult:
        return self.model_copy(update={"param1": self.param2, "param2": self.param1})


class TrimPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    point: Point
    shape_index1: int
    shape_index2: int
    trim_amount1: float = 0.0
    trim_amount2: float = 0.0
    corner_type: Literal["sharp", "tangent"] = "sharp"


class GapLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    shape_index1: int
    shape_index2: int
    point: Point


class GapFillingResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: Literal["extend", "snap"] = "extend"
    original_shape1: Shape
    original_shape2: Shape
    modified_shape1: Shape
    modified_shape2: Shape
    gap_size: float
    gap_location: GapLocation


class OffsetChain(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    original_chain_id: str
    side: OffsetSide
    shapes: tuple[Shape, ...] = ()
    closed: bool = False
    continuous: bool = False
    gap_fills: tuple[GapFillingResult, ...] = ()
    trim_points: tuple[TrimPoint, ...] = ()
    intersection_points: tuple[IntersectionResult, ...] = ()


class ChainOffsetMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_shapes: int = 0
    intersections_found: int = 0
    gaps_filled: int = 0
    processing_time_ms: float = 0.0


class ChainOffsetResult(BaseModel):
    """Top-level engine output. For open chains ``inner_chain`` holds the left
    side and ``outer_chain`` the right side."""

    model_config = ConfigDict(frozen=True)

    success: bool
    inner_chain: OffsetChain | None = None
    outer_chain: OffsetChain | None = None
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    metrics: ChainOffsetMetrics = Field(default_factory=ChainOffsetMetrics)
