"""Shape extension — virtual prolongation for intersection search and real
extension of an endpoint onto a target point for gap filling."""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass, field
from typing import Literal

import numpy as np

from chainoffset.geometry.arc import angle_from_start, arc_sweep
from chainoffset.geometry.ellipse import (
    ellipse_axes,
    ellipse_param_of_point,
    ellipse_points_at_params,
    ellipse_span,
    ellipse_start_param,
    is_full_ellipse,
)
from chainoffset.geometry.functions import (
    end_point,
    shape_parameter,
    start_point,
    tangent_at,
    tessellate,
)
from chainoffset.geometry.spline import fit_spline
from chainoffset.models.shapes import Arc, Circle, Ellipse, Line, Point, Polyline, ShapeBase, Spline
from chainoffset.utils.math_helpers import EPSILON, TWO_PI

logger = logging.getLogger(__name__)

ExtendDirection = Literal["start", "end", "auto"]


@dataclass
class ExtensionResult:
    success: bool
    shape: ShapeBase | None = None
    extension_length: float = 0.0
    errors: list[str] = field(default_factory=list)


def _fail(message: str) -> ExtensionResult:
    return ExtensionResult(success=False, errors=[message])


# ---------------------------------------------------------------------------
# Virtual extension (intersection search)
# ---------------------------------------------------------------------------


def create_extended_line(line: Line, extension_length: float) -> Line:
    """Prolong both ends of the line by ``extension_length``."""
    dx, dy = line.end[0] - line.start[0], line.end[1] - line.start[1]
    length = math.hypot(dx, dy)
    if length < EPSILON:
        return line
    ux, uy = dx / length, dy / length
    return line.derive(
        start=(line.start[0] - ux * extension_length, line.start[1] - uy * extension_length),
        end=(line.end[0] + ux * extension_length, line.end[1] + uy * extension_length),
    )


def create_extended_arc(arc: Arc, extension_length: float) -> Arc:
    """Widen the angular span symmetrically by ``extension_length / radius``, capped at a full turn."""
    if arc.radius < EPSILON:
        return arc
    sweep = arc_sweep(arc)
    delta = min(extension_length / arc.radius, (TWO_PI - sweep) / 2.0)
    if arc.clockwise:
        start = arc.start_angle + delta
        end = start - (sweep + 2.0 * delta)
    else:
        start = arc.start_angle - delta
        end = start + sweep + 2.0 * delta
    return arc.derive(start_angle=start, end_angle=end)


@functools.singledispatch
def create_extended_shape(shape: ShapeBase, extension_length: float) -> ShapeBase | None:
    """Extended stand-in used by the intersection search; ``None`` when not extendable."""
    return None


@create_extended_shape.register
def _(shape: Line, extension_length: float) -> ShapeBase | None:
    return create_extended_line(shape, extension_length)


@create_extended_shape.register
def _(shape: Arc, extension_length: float) -> ShapeBase | None:
    return create_extended_arc(shape, extension_length)


@create_extended_shape.register
def _(shape: Circle, extension_length: float) -> ShapeBase | None:
    return shape


@create_extended_shape.register
def _(shape: Polyline, extension_length: float) -> ShapeBase | None:
    if shape.closed or not shape.shapes:
        return shape
    segments = list(shape.shapes)
    segments[0] = _extend_segment(segments[0], extension_length, at_start=True)
    segments[-1] = _extend_segment(segments[-1], extension_length, at_start=False)
    return shape.derive(shapes=tuple(segments))


def _extend_segment(segment: Line | Arc, length: float, *, at_start: bool) -> Line | Arc:
    if isinstance(segment, Line):
        dx, dy = segment.end[0] - segment.start[0], segment.end[1] - segment.start[1]
        n = math.hypot(dx, dy)
        if n < EPSILON:
            return segment
        ux, uy = dx / n * length, dy / n * length
        if at_start:
            return segment.derive(start=(segment.start[0] - ux, segment.start[1] - uy))
        return segment.derive(end=(segment.end[0] + ux, segment.end[1] + uy))
    sweep = arc_sweep(segment)
    delta = min(length / segment.radius, TWO_PI - sweep) if segment.radius > EPSILON else 0.0
    sign = -1.0 if segment.clockwise else 1.0
    if at_start:
        start = segment.start_angle - sign * delta
        return segment.derive(start_angle=start, end_angle=start + sign * (sweep + delta))
    return segment.derive(end_angle=segment.start_angle + sign * (sweep + delta))


@create_extended_shape.register
def _(shape: Spline, extension_length: float) -> ShapeBase | None:
    # Tessellated stand-in with straight tangent run-outs at both ends
    if shape.closed:
        return None
    pts = tessellate(shape)
    (tx0, ty0), (tx1, ty1) = tangent_at(shape, 0.0), tangent_at(shape, 1.0)
    head = (float(pts[0][0] - tx0 * extension_length), float(pts[0][1] - ty0 * extension_length))
    tail = (float(pts[-1][0] + tx1 * extension_length), float(pts[-1][1] + ty1 * extension_length))
    vertices = [head] + [(float(x), float(y)) for x, y in pts] + [tail]
    lines = tuple(
        Line(start=a, end=b) for a, b in zip(vertices[:-1], vertices[1:]) if math.dist(a, b) > EPSILON
    )
    return Polyline(shapes=lines, closed=False)


@create_extended_shape.register
def _(shape: Ellipse, extension_length: float) -> ShapeBase | None:
    if is_full_ellipse(shape):
        return shape
    a, _, _ = ellipse_axes(shape)
    span = ellipse_span(shape)
    delta = min(extension_length / a, (TWO_PI - span) / 2.0) if a > EPSILON else 0.0
    start = ellipse_start_param(shape) - delta
    return shape.derive(start_param=start, end_param=start + span + 2.0 * delta)


# ---------------------------------------------------------------------------
# Extension onto a point (gap filling)
# ---------------------------------------------------------------------------


def extend_line_to_point(
    line: Line,
    point: Point,
    max_extension: float,
    tolerance: float = 1e-6,
    direction: ExtendDirection = "auto",
) -> ExtensionResult:
    """Move one endpoint of the line along its carrier onto ``point``."""
    length = math.dist(line.start, line.end)
    if length < EPSILON:
        return _fail("Cannot extend a degenerate line")
    t = shape_parameter(line, point)
    foot = (line.start[0] + (line.end[0] - line.start[0]) * t, line.start[1] + (line.end[1] - line.start[1]) * t)
    if math.dist(foot, point) > tolerance:
        return _fail("Point is not on the line's carrier")

    if direction == "auto":
        if 0.0 <= t <= 1.0:
            return ExtensionResult(success=True, shape=line)
        direction = "end" if t > 1.0 else "start"

    if direction == "end":
        needed = (t - 1.0) * length
        if needed < -tolerance:
            return _fail("Point lies before the line's end; extension would shorten it")
        if needed > max_extension:
            return _fail(f"Extension {needed:.3f} exceeds maximum {max_extension:.3f}")
        return ExtensionResult(success=True, shape=line.derive(end=point), extension_length=max(needed, 0.0))

    needed = -t * length
    if needed < -tolerance:
        return _fail("Point lies after the line's start; extension would shorten it")
    if needed > max_extension:
        return _fail(f"Extension {needed:.3f} exceeds maximum {max_extension:.3f}")
    return ExtensionResult(success=True, shape=line.derive(start=point), extension_length=max(needed, 0.0))


def extend_arc_to_point(
    arc: Arc,
    point: Point,
    max_extension: float,
    tolerance: float = 1e-6,
    direction: ExtendDirection = "auto",
) -> ExtensionResult:
    """Grow the arc's angular span so one endpoint lands on ``point``."""
    if abs(math.dist(arc.center, point) - arc.radius) > tolerance:
        return _fail("Point is not on the arc's circle")
    sweep = arc_sweep(arc)
    angle = math.atan2(point[1] - arc.center[1], point[0] - arc.center[0])
    offset = angle_from_start(arc, angle)
    if offset <= sweep + EPSILON:
        return ExtensionResult(success=True, shape=arc)

    beyond_end = offset - sweep
    before_start = TWO_PI - offset
    if direction == "auto":
        direction = "end" if beyond_end <= before_start else "start"
    needed_angle = beyond_end if direction == "end" else before_start
    if needed_angle * arc.radius > max_extension:
        return _fail(f"Extension {needed_angle * arc.radius:.3f} exceeds maximum {max_extension:.3f}")

    sign = -1.0 if arc.clockwise else 1.0
    if direction == "end":
        extended = arc.derive(end_angle=arc.start_angle + sign * (sweep + needed_angle))
    else:
        start = arc.start_angle - sign * needed_angle
        extended = arc.derive(start_angle=start, end_angle=start + sign * (sweep + needed_angle))
    return ExtensionResult(success=True, shape=extended, extension_length=needed_angle * arc.radius)


@functools.singledispatch
def extend_shape_to_point(
    shape: ShapeBase,
    point: Point,
    direction: ExtendDirection,
    max_extension: float,
    tolerance: float = 1e-6,
) -> ExtensionResult:
    return _fail(f"Cannot extend shape type {shape.type}")


@extend_shape_to_point.register
def _(shape: Line, point, direction, max_extension, tolerance=1e-6) -> ExtensionResult:
    return extend_line_to_point(shape, point, max_extension, tolerance, direction)


@extend_shape_to_point.register
def _(shape: Arc, point, direction, max_extension, tolerance=1e-6) -> ExtensionResult:
    return extend_arc_to_point(shape, point, max_extension, tolerance, direction)


@extend_shape_to_point.register
def _(shape: Circle, point, direction, max_extension, tolerance=1e-6) -> ExtensionResult:
    if abs(math.dist(shape.center, point) - shape.radius) > tolerance:
        return _fail("Point is not on the circle")
    return ExtensionResult(success=True, shape=shape)


@extend_shape_to_point.register
def _(shape: Polyline, point, direction, max_extension, tolerance=1e-6) -> ExtensionResult:
    if not shape.shapes:
        return _fail("Polyline has no segments")
    if direction == "auto":
        direction = "end" if math.dist(end_point(shape), point) <= math.dist(start_point(shape), point) else "start"
    index = len(shape.shapes) - 1 if direction == "end" else 0
    result = extend_shape_to_point(shape.shapes[index], point, direction, max_extension, tolerance)
    if not result.success:
        return result
    segments = list(shape.shapes)
    segments[index] = result.shape
    return ExtensionResult(
        success=True, shape=shape.derive(shapes=tuple(segments)), extension_length=result.extension_length
    )


@extend_shape_to_point.register
def _(shape: Spline, point, direction, max_extension, tolerance=1e-6) -> ExtensionResult:
    start, end = start_point(shape), end_point(shape)
    if direction == "auto":
        direction = "end" if math.dist(end, point) <= math.dist(start, point) else "start"
    anchor = end if direction == "end" else start
    needed = math.dist(anchor, point)
    if needed <= tolerance:
        return ExtensionResult(success=True, shape=shape)
    if needed > max_extension:
        return _fail(f"Extension {needed:.3f} exceeds maximum {max_extension:.3f}")
    pts = tessellate(shape)
    target = np.asarray([point], dtype=float)
    pts = np.vstack([pts, target]) if direction == "end" else np.vstack([target, pts])
    fitted = fit_spline(pts, degree=shape.degree, closed=shape.closed)
    if fitted is None:
        return _fail("Spline refit failed during extension")
    return ExtensionResult(success=True, shape=fitted, extension_length=needed)


@extend_shape_to_point.register
def _(shape: Ellipse, point, direction, max_extension, tolerance=1e-6) -> ExtensionResult:
    theta = ellipse_param_of_point(shape, point)
    on_curve = ellipse_points_at_params(shape, np.array([theta]))[0]
    if math.dist(point, (float(on_curve[0]), float(on_curve[1]))) > tolerance:
        return _fail("Point is not on the ellipse")
    if is_full_ellipse(shape):
        return ExtensionResult(success=True, shape=shape)
    a, _, _ = ellipse_axes(shape)
    start = ellipse_start_param(shape)
    span = ellipse_span(shape)
    offset = (theta - start) % TWO_PI
    if offset <= span + EPSILON:
        return ExtensionResult(success=True, shape=shape)
    beyond_end, before_start = offset - span, TWO_PI - offset
    if direction == "auto":
        direction = "end" if beyond_end <= before_start else "start"
    needed = (beyond_end if direction == "end" else before_start) * a
    if needed > max_extension:
        return _fail(f"Extension {needed:.3f} exceeds maximum {max_extension:.3f}")
    if direction == "end":
        return ExtensionResult(success=True, shape=shape.derive(end_param=start + offset), extension_length=needed)
    return ExtensionResult(
        success=True,
        shape=shape.derive(start_param=start - before_start, end_param=start + span),
        extension_length=needed,
    )
