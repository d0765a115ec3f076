"""Trim engine — shorten (or stretch) consecutive shapes to meet at a corner.

``keep="before"`` keeps the part from the shape's start up to the point and
``keep="after"`` keeps the part from the point to the shape's end. When the
point lies on the shape's carrier beyond an end, the shape grows to reach it,
which is how corners found on extensions are closed.
"""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass, field
from typing import Literal

import numpy as np
from scipy.optimize import minimize_scalar

from chainoffset.geometry.arc import arc_parameter, arc_sweep
from chainoffset.geometry.ellipse import (
    ellipse_param_of_point,
    ellipse_points_at_params,
    ellipse_span,
    ellipse_start_param,
    is_full_ellipse,
)
from chainoffset.geometry.functions import (
    distance_to_shape,
    end_point,
    point_at,
    shape_length,
    shape_parameter,
    start_point,
    tangent_at,
)
from chainoffset.geometry.spline import fit_spline, spline_points, spline_sample_count
from chainoffset.models.offset import IntersectionResult
from chainoffset.models.shapes import Arc, Circle, Ellipse, Line, Point, Polyline, ShapeBase, Spline
from chainoffset.utils.math_helpers import EPSILON, MICRO_TOLERANCE, TWO_PI, midpoint

logger = logging.getLogger(__name__)

KeepSide = Literal["before", "after"]

TRIM_TOLERANCE_MULTIPLIER = 10

# select_trim_point scoring
DISTANCE_WEIGHT = 40.0
DISTANCE_NORMALIZATION = 100.0
CONFIDENCE_WEIGHT = 30.0
TYPE_SCORES = {"exact": 20.0, "tangent": 15.0, "approximate": 10.0, "coincident": 5.0}
PARAMETER_WEIGHT = 5.0


@dataclass
class TrimResult:
    success: bool
    shape: ShapeBase | None = None
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class ConsecutiveTrimResult:
    shape1_result: TrimResult
    shape2_result: TrimResult
    trim_point: IntersectionResult | None = None


def _fail(message: str) -> TrimResult:
    return TrimResult(success=False, errors=[message])


def trimming_tolerance(tolerance: float) -> float:
    return max(tolerance * TRIM_TOLERANCE_MULTIPLIER, MICRO_TOLERANCE)


@functools.singledispatch
def trim_shape_at_point(shape: ShapeBase, point: Point, keep: KeepSide, tolerance: float) -> TrimResult:
    return _fail(f"Trimming not supported for shape type {shape.type}")


@trim_shape_at_point.register
def _(shape: Line, point: Point, keep: KeepSide, tolerance: float) -> TrimResult:
    length = math.dist(shape.start, shape.end)
    if length < EPSILON:
        return _fail("Cannot trim a degenerate line")
    t = shape_parameter(shape, point)
    if math.dist(point_at(shape, t), point) > tolerance:
        return _fail("Trim point is not on the line")
    min_t = MICRO_TOLERANCE / length
    if keep == "before":
        if t <= min_t:
            return _fail("Trim would remove the entire line")
        return TrimResult(success=True, shape=shape.derive(end=point))
    if t >= 1.0 - min_t:
        return _fail("Trim would remove the entire line")
    return TrimResult(success=True, shape=shape.derive(start=point))


@trim_shape_at_point.register
def _(shape: Arc, point: Point, keep: KeepSide, tolerance: float) -> TrimResult:
    if abs(math.dist(shape.center, point) - shape.radius) > tolerance:
        return _fail("Trim point is not on the arc's circle")
    sweep = arc_sweep(shape)
    p = arc_parameter(point, shape)
    min_p = MICRO_TOLERANCE / (shape.radius * sweep) if shape.radius > EPSILON else EPSILON
    sign = -1.0 if shape.clockwise else 1.0
    if keep == "before":
        if p <= min_p:
            return _fail("Trim would remove the entire arc")
        new_sweep = min(p * sweep, TWO_PI)
        return TrimResult(success=True, shape=shape.derive(end_angle=shape.start_angle + sign * new_sweep))
    if p >= 1.0 - min_p:
        return _fail("Trim would remove the entire arc")
    new_start = shape.start_angle + sign * p * sweep
    new_sweep = min((1.0 - p) * sweep, TWO_PI)
    return TrimResult(success=True, shape=shape.derive(start_angle=new_start, end_angle=new_start + sign * new_sweep))


@trim_shape_at_point.register
def _(shape: Circle, point: Point, keep: KeepSide, tolerance: float) -> TrimResult:
    if abs(math.dist(shape.center, point) - shape.radius) > tolerance:
        return _fail("Trim point is not on the circle")
    theta = math.atan2(point[1] - shape.center[1], point[0] - shape.center[0]) % TWO_PI
    if theta < EPSILON:
        theta = TWO_PI
    if keep == "before":
        arc = Arc(center=shape.center, radius=shape.radius, start_angle=0.0, end_angle=theta)
    else:
        arc = Arc(center=shape.center, radius=shape.radius, start_angle=theta % TWO_PI, end_angle=TWO_PI)
    return TrimResult(success=True, shape=arc, warnings=["Circle converted to arc by trimming"])


@trim_shape_at_point.register
def _(shape: Polyline, point: Point, keep: KeepSide, tolerance: float) -> TrimResult:
    segments = list(shape.shapes)
    if not segments:
        return _fail("Polyline has no segments")
    distances = [distance_to_shape(point, s) for s in segments]
    index = int(np.argmin(distances))
    if distances[index] > tolerance:
        # Only the open ends may grow
        index = len(segments) - 1 if keep == "before" else 0

    if keep == "before" and index > 0 and math.dist(start_point(segments[index]), point) <= MICRO_TOLERANCE:
        return TrimResult(success=True, shape=shape.derive(shapes=tuple(segments[:index]), closed=False))
    if keep == "after" and index < len(segments) - 1 and math.dist(end_point(segments[index]), point) <= MICRO_TOLERANCE:
        return TrimResult(success=True, shape=shape.derive(shapes=tuple(segments[index + 1 :]), closed=False))

    trimmed = trim_shape_at_point(segments[index], point, keep, tolerance)
    if not trimmed.success:
        return trimmed
    if keep == "before":
        kept = segments[:index] + [trimmed.shape]
    else:
        kept = [trimmed.shape] + segments[index + 1 :]
    return TrimResult(success=True, shape=shape.derive(shapes=tuple(kept), closed=False), warnings=trimmed.warnings)


def _closest_spline_parameter(spline: Spline, point: Point) -> tuple[float, float]:
    guess = shape_parameter(spline, point)
    width = 2.0 / spline_sample_count(spline)

    def dist(u: float) -> float:
        p = spline_points(spline, np.array([u]))[0]
        return math.hypot(p[0] - point[0], p[1] - point[1])

    found = minimize_scalar(dist, bounds=(max(0.0, guess - width), min(1.0, guess + width)), method="bounded")
    return float(found.x), float(found.fun)


@trim_shape_at_point.register
def _(shape: Spline, point: Point, keep: KeepSide, tolerance: float) -> TrimResult:
    u, d = _closest_spline_parameter(shape, point)
    count = spline_sample_count(shape)
    if d > tolerance:
        # Accept points on the straight run-out past the kept end
        anchor_u = 1.0 if keep == "before" else 0.0
        anchor = start_point(shape) if anchor_u == 0.0 else end_point(shape)
        tx, ty = tangent_at(shape, anchor_u)
        vx, vy = point[0] - anchor[0], point[1] - anchor[1]
        along = vx * tx + vy * ty
        across = abs(vx * ty - vy * tx)
        ahead = along > 0 if keep == "before" else along < 0
        if across > tolerance or not ahead:
            return _fail("Trim point is not on the spline")
        u = anchor_u
    lo, hi = (0.0, u) if keep == "before" else (u, 1.0)
    if hi - lo < EPSILON and d <= tolerance:
        return _fail("Trim would remove the entire spline")
    pts = spline_points(shape, np.linspace(lo, hi, max(count // 2, 8)))
    target = np.asarray([point], dtype=float)
    # On-curve points replace the cut end; run-out points are appended to it
    head, tail = (pts, pts) if d > tolerance else (pts[:-1], pts[1:])
    pts = np.vstack([head, target]) if keep == "before" else np.vstack([target, tail])
    fitted = fit_spline(pts, degree=shape.degree, closed=False)
    if fitted is None:
        return _fail("Spline refit failed during trim")
    return TrimResult(success=True, shape=fitted)


@trim_shape_at_point.register
def _(shape: Ellipse, point: Point, keep: KeepSide, tolerance: float) -> TrimResult:
    theta = ellipse_param_of_point(shape, point)
    on_curve = ellipse_points_at_params(shape, np.array([theta]))[0]
    if math.hypot(on_curve[0] - point[0], on_curve[1] - point[1]) > tolerance:
        return _fail("Trim point is not on the ellipse")
    start = ellipse_start_param(shape)
    span = ellipse_span(shape)
    offset = (theta - start) % TWO_PI
    if not is_full_ellipse(shape) and offset > span and offset - span > (TWO_PI - span) / 2.0:
        offset -= TWO_PI
    if keep == "before":
        if offset <= EPSILON:
            return _fail("Trim would remove the entire ellipse")
        return TrimResult(success=True, shape=shape.derive(start_param=start, end_param=start + offset))
    if offset >= span - EPSILON:
        return _fail("Trim would remove the entire ellipse")
    return TrimResult(success=True, shape=shape.derive(start_param=start + offset, end_param=start + span))


def find_connection_point(shape1: ShapeBase, shape2: ShapeBase) -> Point:
    """Nominal joint between consecutive shapes."""
    return midpoint(end_point(shape1), start_point(shape2))


def select_trim_point(
    intersections: list[IntersectionResult],
    shape1: ShapeBase,
    shape2: ShapeBase,
) -> IntersectionResult | None:
    """Score candidates by proximity to the joint, confidence, type and parameter sanity."""
    if not intersections:
        return None
    joint = find_connection_point(shape1, shape2)

    def score(candidate: IntersectionResult) -> float:
        d = math.dist(candidate.point, joint)
        total = DISTANCE_WEIGHT * max(0.0, 1.0 - d / DISTANCE_NORMALIZATION)
        total += CONFIDENCE_WEIGHT * candidate.confidence
        total += TYPE_SCORES.get(candidate.type, 0.0)
        if 0.0 <= candidate.param1 <= 1.0 and 0.0 <= candidate.param2 <= 1.0:
            total += PARAMETER_WEIGHT
        return total

    return max(intersections, key=score)


def trim_consecutive_shapes(
    shape1: ShapeBase,
    shape2: ShapeBase,
    intersections: list[IntersectionResult],
    tolerance: float,
) -> ConsecutiveTrimResult:
    """Cut shape1 back to the corner (keeps its start) and shape2 forward (keeps its end)."""
    chosen = select_trim_point(intersections, shape1, shape2)
    if chosen is None:
        missing = _fail("No intersection to trim at")
        return ConsecutiveTrimResult(shape1_result=missing, shape2_result=_fail("No intersection to trim at"))
    trim_tol = trimming_tolerance(tolerance)
    first = trim_shape_at_point(shape1, chosen.point, "before", trim_tol)
    second = trim_shape_at_point(shape2, chosen.point, "after", trim_tol)
    return ConsecutiveTrimResult(shape1_result=first, shape2_result=second, trim_point=chosen)


def calculate_trim_amount(original: ShapeBase, trimmed: ShapeBase) -> float:
    """Diagnostic size of a trim; negative values mean the shape grew."""
    if isinstance(original, Line) and isinstance(trimmed, Line):
        return math.dist(original.start, original.end) - math.dist(trimmed.start, trimmed.end)
    if isinstance(original, Arc) and isinstance(trimmed, Arc):
        return (arc_sweep(original) - arc_sweep(trimmed)) * original.radius
    return shape_length(original).value - shape_length(trimmed).value
