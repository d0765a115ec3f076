"""Per-shape geometric operations.

Each operation is a ``functools.singledispatch`` function with exactly one
registered implementation per geometry kind. Parameters are normalized to
[0, 1] along the drawn direction of the shape.
"""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from shapely.geometry import LineString
from shapely.geometry import Point as ShapelyPoint

from chainoffset.geometry.arc import (
    arc_end_point,
    arc_length,
    arc_parameter,
    arc_point_at,
    arc_start_point,
    arc_sweep,
    angle_from_start,
)
from chainoffset.geometry.ellipse import (
    ellipse_param_of_point,
    ellipse_perimeter,
    ellipse_points,
    ellipse_span,
    ellipse_start_param,
    is_full_ellipse,
)
from chainoffset.geometry.spline import (
    integrated_spline_length,
    spline_derivatives,
    spline_points,
    spline_sample_count,
)
from chainoffset.models.shapes import Arc, Circle, Ellipse, Line, Point, Polyline, ShapeBase, Spline
from chainoffset.utils.geometry import dedupe_consecutive, polyline_length
from chainoffset.utils.math_helpers import EPSILON, TWO_PI, unit

logger = logging.getLogger(__name__)

# Returned when every spline length estimate fails
SPLINE_LENGTH_SENTINEL = 100.0


@dataclass(frozen=True)
class LengthResult:
    value: float
    method: str  # exact | integrated | sampled | control_polygon | fallback


def _pt(arr) -> Point:
    return (float(arr[0]), float(arr[1]))


# ---------------------------------------------------------------------------
# point_at
# ---------------------------------------------------------------------------


@functools.singledispatch
def point_at(shape: ShapeBase, t: float) -> Point:
    raise TypeError(f"Unsupported shape type: {type(shape).__name__}")


@point_at.register
def _(shape: Line, t: float) -> Point:
    (x0, y0), (x1, y1) = shape.start, shape.end
    return (x0 + (x1 - x0) * t, y0 + (y1 - y0) * t)


@point_at.register
def _(shape: Arc, t: float) -> Point:
    return arc_point_at(shape, t)


@point_at.register
def _(shape: Circle, t: float) -> Point:
    angle = t * TWO_PI
    return (shape.center[0] + shape.radius * math.cos(angle), shape.center[1] + shape.radius * math.sin(angle))


@point_at.register
def _(shape: Polyline, t: float) -> Point:
    if not shape.shapes:
        raise ValueError("Polyline has no segments")
    index, local = _polyline_locate(shape, t)
    return point_at(shape.shapes[index], local)


@point_at.register
def _(shape: Spline, t: float) -> Point:
    return _pt(spline_points(shape, np.array([t]))[0])


@point_at.register
def _(shape: Ellipse, t: float) -> Point:
    return _pt(ellipse_points(shape, np.array([t]))[0])


def _segment_lengths(polyline: Polyline) -> NDArray[np.float64]:
    return np.array([shape_length(s).value for s in polyline.shapes], dtype=float)


def _polyline_locate(polyline: Polyline, t: float) -> tuple[int, float]:
    """Map a polyline parameter to (segment index, local parameter) by arc length."""
    lengths = _segment_lengths(polyline)
    total = float(lengths.sum())
    n = len(polyline.shapes)
    if total < EPSILON:
        return 0, 0.0
    target = t * total
    if target <= 0:
        return 0, target / lengths[0] if lengths[0] > EPSILON else 0.0
    cumulative = np.concatenate([[0.0], np.cumsum(lengths)])
    for i in range(n):
        if target <= cumulative[i + 1] or i == n - 1:
            seg = lengths[i]
            return i, (target - cumulative[i]) / seg if seg > EPSILON else 0.0
    return n - 1, 1.0


# ---------------------------------------------------------------------------
# endpoints
# ---------------------------------------------------------------------------


@functools.singledispatch
def start_point(shape: ShapeBase) -> Point:
    return point_at(shape, 0.0)


@start_point.register
def _(shape: Line) -> Point:
    return shape.start


@start_point.register
def _(shape: Arc) -> Point:
    return arc_start_point(shape)


@start_point.register
def _(shape: Polyline) -> Point:
    return start_point(shape.shapes[0])


@functools.singledispatch
def end_point(shape: ShapeBase) -> Point:
    return point_at(shape, 1.0)


@end_point.register
def _(shape: Line) -> Point:
    return shape.end


@end_point.register
def _(shape: Arc) -> Point:
    return arc_end_point(shape)


@end_point.register
def _(shape: Polyline) -> Point:
    return end_point(shape.shapes[-1])


# ---------------------------------------------------------------------------
# tangent_at
# ---------------------------------------------------------------------------


@functools.singledispatch
def tangent_at(shape: ShapeBase, t: float) -> tuple[float, float]:
    """Unit tangent in the drawn direction (central difference fallback)."""
    delta = 1e-3
    t0, t1 = max(0.0, t - delta), min(1.0, t + delta)
    a, b = point_at(shape, t0), point_at(shape, t1)
    return unit(b[0] - a[0], b[1] - a[1])


@tangent_at.register
def _(shape: Line, t: float) -> tuple[float, float]:
    return unit(shape.end[0] - shape.start[0], shape.end[1] - shape.start[1])


@tangent_at.register
def _(shape: Arc, t: float) -> tuple[float, float]:
    x, y = arc_point_at(shape, t)
    rx, ry = x - shape.center[0], y - shape.center[1]
    return unit(ry, -rx) if shape.clockwise else unit(-ry, rx)


@tangent_at.register
def _(shape: Circle, t: float) -> tuple[float, float]:
    angle = t * TWO_PI
    return (-math.sin(angle), math.cos(angle))


@tangent_at.register
def _(shape: Polyline, t: float) -> tuple[float, float]:
    index, local = _polyline_locate(shape, t)
    return tangent_at(shape.shapes[index], min(max(local, 0.0), 1.0))


@tangent_at.register
def _(shape: Spline, t: float) -> tuple[float, float]:
    d = spline_derivatives(shape, np.array([t]))[0]
    return unit(float(d[0]), float(d[1]))


# ---------------------------------------------------------------------------
# tessellate
# ---------------------------------------------------------------------------


@functools.singledispatch
def tessellate(shape: ShapeBase, n: int | None = None) -> NDArray[np.float64]:
    raise TypeError(f"Unsupported shape type: {type(shape).__name__}")


@tessellate.register
def _(shape: Line, n: int | None = None) -> NDArray[np.float64]:
    if n is None:
        return np.array([shape.start, shape.end], dtype=float)
    ts = np.linspace(0.0, 1.0, max(n, 2))
    start = np.asarray(shape.start, dtype=float)
    end = np.asarray(shape.end, dtype=float)
    return start + ts[:, None] * (end - start)


@tessellate.register
def _(shape: Arc, n: int | None = None) -> NDArray[np.float64]:
    sweep = arc_sweep(shape)
    count = n or max(8, int(math.ceil(math.degrees(sweep) / 2.0)) + 1)
    ts = np.linspace(0.0, 1.0, count)
    sign = -1.0 if shape.clockwise else 1.0
    angles = shape.start_angle + sign * ts * sweep
    return np.column_stack([
        shape.center[0] + shape.radius * np.cos(angles),
        shape.center[1] + shape.radius * np.sin(angles),
    ])


@tessellate.register
def _(shape: Circle, n: int | None = None) -> NDArray[np.float64]:
    angles = np.linspace(0.0, TWO_PI, n or 181)
    return np.column_stack([
        shape.center[0] + shape.radius * np.cos(angles),
        shape.center[1] + shape.radius * np.sin(angles),
    ])


@tessellate.register
def _(shape: Polyline, n: int | None = None) -> NDArray[np.float64]:
    parts = [tessellate(s) for s in shape.shapes]
    if not parts:
        return np.empty((0, 2))
    return dedupe_consecutive(np.vstack(parts))


@tessellate.register
def _(shape: Spline, n: int | None = None) -> NDArray[np.float64]:
    ts = np.linspace(0.0, 1.0, n or spline_sample_count(shape))
    return spline_points(shape, ts)


@tessellate.register
def _(shape: Ellipse, n: int | None = None) -> NDArray[np.float64]:
    count = n or max(16, int(math.ceil(180 * ellipse_span(shape) / TWO_PI)) + 1)
    return ellipse_points(shape, np.linspace(0.0, 1.0, count))


# ---------------------------------------------------------------------------
# shape_length
# ---------------------------------------------------------------------------


@functools.singledispatch
def shape_length(shape: ShapeBase) -> LengthResult:
    return LengthResult(polyline_length(tessellate(shape)), "sampled")


@shape_length.register
def _(shape: Line) -> LengthResult:
    return LengthResult(math.dist(shape.start, shape.end), "exact")


@shape_length.register
def _(shape: Arc) -> LengthResult:
    return LengthResult(arc_length(shape), "exact")


@shape_length.register
def _(shape: Circle) -> LengthResult:
    return LengthResult(TWO_PI * shape.radius, "exact")


@shape_length.register
def _(shape: Polyline) -> LengthResult:
    return LengthResult(float(_segment_lengths(shape).sum()), "exact")


@shape_length.register
def _(shape: Ellipse) -> LengthResult:
    if is_full_ellipse(shape):
        return LengthResult(ellipse_perimeter(shape), "exact")
    return LengthResult(polyline_length(tessellate(shape, 720)), "sampled")


@shape_length.register
def _(shape: Spline) -> LengthResult:
    integrated = integrated_spline_length(shape)
    if integrated is not None:
        return LengthResult(integrated, "integrated")

    try:
        sampled = polyline_length(tessellate(shape))
    except (ValueError, FloatingPointError) as e:
        logger.debug("Spline %s sampling failed: %s", shape.id, e)
        sampled = float("nan")
    if math.isfinite(sampled) and sampled > 0:
        return LengthResult(sampled, "sampled")

    ctrl = np.asarray(shape.control_points, dtype=float).reshape(-1, 2)
    polygon = polyline_length(ctrl) if len(ctrl) >= 2 else float("nan")
    if math.isfinite(polygon) and polygon > 0:
        return LengthResult(polygon, "control_polygon")

    return LengthResult(SPLINE_LENGTH_SENTINEL, "fallback")


# ---------------------------------------------------------------------------
# shape_parameter
# ---------------------------------------------------------------------------


@functools.singledispatch
def shape_parameter(shape: ShapeBase, point: Point) -> float:
    """Normalized position of the point projected onto the tessellated shape."""
    line = LineString(tessellate(shape))
    if line.length < EPSILON:
        return 0.0
    return float(line.project(ShapelyPoint(point), normalized=True))


@shape_parameter.register
def _(shape: Line, point: Point) -> float:
    dx, dy = shape.end[0] - shape.start[0], shape.end[1] - shape.start[1]
    denom = dx * dx + dy * dy
    if denom < EPSILON:
        return 0.0
    return ((point[0] - shape.start[0]) * dx + (point[1] - shape.start[1]) * dy) / denom


@shape_parameter.register
def _(shape: Arc, point: Point) -> float:
    return arc_parameter(point, shape)


@shape_parameter.register
def _(shape: Circle, point: Point) -> float:
    angle = math.atan2(point[1] - shape.center[1], point[0] - shape.center[0])
    return (angle % TWO_PI) / TWO_PI


@shape_parameter.register
def _(shape: Ellipse, point: Point) -> float:
    theta = ellipse_param_of_point(shape, point)
    offset = (theta - ellipse_start_param(shape)) % TWO_PI
    return offset / ellipse_span(shape)


@shape_parameter.register
def _(shape: Polyline, point: Point) -> float:
    lengths = _segment_lengths(shape)
    total = float(lengths.sum())
    if total < EPSILON:
        return 0.0
    best_index, best_dist = 0, math.inf
    for i, seg in enumerate(shape.shapes):
        d = distance_to_shape(point, seg)
        if d < best_dist:
            best_index, best_dist = i, d
    local = shape_parameter(shape.shapes[best_index], point)
    before = float(lengths[:best_index].sum())
    return (before + local * lengths[best_index]) / total


# ---------------------------------------------------------------------------
# distance_to_shape
# ---------------------------------------------------------------------------


def distance_to_shape(point: Point, shape: ShapeBase) -> float:
    """Shortest distance from the point to the shape."""
    return _distance(shape, point)


@functools.singledispatch
def _distance(shape: ShapeBase, point: Point) -> float:
    return float(LineString(tessellate(shape)).distance(ShapelyPoint(point)))


@_distance.register
def _(shape: Line, point: Point) -> float:
    t = min(max(shape_parameter(shape, point), 0.0), 1.0)
    return math.dist(point, point_at(shape, t))


@_distance.register
def _(shape: Circle, point: Point) -> float:
    return abs(math.dist(point, shape.center) - shape.radius)


@_distance.register
def _(shape: Arc, point: Point) -> float:
    angle = math.atan2(point[1] - shape.center[1], point[0] - shape.center[0])
    if angle_from_start(shape, angle) <= arc_sweep(shape) + EPSILON:
        return abs(math.dist(point, shape.center) - shape.radius)
    return min(math.dist(point, arc_start_point(shape)), math.dist(point, arc_end_point(shape)))


@_distance.register
def _(shape: Polyline, point: Point) -> float:
    return min(_distance(s, point) for s in shape.shapes)
