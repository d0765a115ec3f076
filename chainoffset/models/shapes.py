"""Shape data model — immutable 2D primitives and the chains built from them.

Every shape carries an ``id`` and a ``type`` tag. Shapes are frozen: offsetting,
trimming and extension derive new values via ``model_copy(update=...)``.
"""

from __future__ import annotations

import enum
import uuid
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

Point = tuple[float, float]


def new_id() -> str:
    return uuid.uuid4().hex


class GeometryType(str, enum.Enum):
    ARC = "arc"
    CIRCLE = "circle"
    ELLIPSE = "ellipse"
    LINE = "line"
    POLYLINE = "polyline"
    SPLINE = "spline"


class ShapeBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)

    def derive(self, **update):
        """Copy with updated geometry and a fresh id."""
        return self.model_copy(update={**update, "id": new_id()})


class Line(ShapeBase):
    type: Literal["line"] = "line"
    start: Point
    end: Point


class Arc(ShapeBase):
    type: Literal["arc"] = "arc"
    center: Point
    radius: float
    start_angle: float  # radians
    end_angle: float  # radians
    clockwise: bool = False


class Circle(ShapeBase):
    type: Literal["circle"] = "circle"
    center: Point
    radius: float


class Polyline(ShapeBase):
    """Connected run of line/arc segments."""

    type: Literal["polyline"] = "polyline"
    shapes: tuple[Annotated[Union[Line, Arc], Field(discriminator="type")], ...] = ()
    closed: bool = False


class Spline(ShapeBase):
    """NURBS curve. Empty ``knots``/``weights`` mean clamped-uniform / unit."""

    type: Literal["spline"] = "spline"
    control_points: tuple[Point, ...]
    degree: int = 3
    knots: tuple[float, ...] = ()
    weights: tuple[float, ...] = ()
    fit_points: tuple[Point, ...] = ()
    closed: bool = False


class Ellipse(ShapeBase):
    """Ellipse or elliptical arc.

    ``major_axis_endpoint`` is a vector relative to ``center``. Parameters are
    eccentric angles in radians; ``None`` bounds mean a full ellipse.
    """

    type: Literal["ellipse"] = "ellipse"
    center: Point
    major_axis_endpoint: Point
    minor_to_major_ratio: float
    start_param: float | None = None
    end_param: float | None = None


Shape = Annotated[
    Union[Line, Arc, Circle, Polyline, Spline, Ellipse],
    Field(discriminator="type"),
]


def geometry_type(shape: ShapeBase) -> GeometryType:
    return GeometryType(shape.type)


class Chain(BaseModel):
    """Ordered, connected sequence of shapes.

    ``closed`` is only set when the chain came from a polyline and carries an
    explicit closure flag; otherwise closure is determined geometrically.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    shapes: tuple[Shape, ...] = ()
    closed: bool | None = None
