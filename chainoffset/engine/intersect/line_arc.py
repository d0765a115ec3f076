"""Line–arc and line–circle intersection via the line/circle quadratic.

With the line written as P(s) = start + s·u (u the unit direction, s in
drawing units), substituting into |P - C|² = r² gives s² + b·s + c = 0.
The discriminant classifies the hit as missing, tangent or crossing.
"""

from __future__ import annotations

import math

from chainoffset.engine.config import DEFAULT_CHAIN_OFFSET_PARAMETERS, IntersectionMode
from chainoffset.engine.intersect.base import (
    SegmentPosition,
    intersect_with_extensions,
    is_parameter_valid_for_segment,
    make_result,
)
from chainoffset.engine.registry import intersector
from chainoffset.geometry.arc import arc_parameter, is_point_on_arc
from chainoffset.models.offset import IntersectionResult
from chainoffset.models.shapes import Arc, Circle, GeometryType, Line, Point
from chainoffset.utils.math_helpers import EPSILON, MICRO_TOLERANCE, TWO_PI, snap_parameter


def line_circle_parameters(line: Line, center: Point, radius: float) -> list[tuple[float, str]]:
    """Line parameters (0..1 on the segment) where the carrier meets the circle."""
    dx, dy = line.end[0] - line.start[0], line.end[1] - line.start[1]
    length = math.hypot(dx, dy)
    if length < EPSILON:
        return []
    ux, uy = dx / length, dy / length
    fx, fy = line.start[0] - center[0], line.start[1] - center[1]
    b = 2.0 * (fx * ux + fy * uy)
    c = fx * fx + fy * fy - radius * radius
    disc = b * b - 4.0 * c
    threshold = EPSILON * max(1.0, radius * radius)

    if disc < -threshold:
        return []
    if disc < threshold:
        return [(-b / 2.0 / length, "tangent")]
    root = math.sqrt(disc)
    return [((-b - root) / 2.0 / length, "exact"), ((-b + root) / 2.0 / length, "exact")]


def _line_arc_hits(line: Line, arc: Arc, position: SegmentPosition) -> list[IntersectionResult]:
    """Hits with param1 on the line and param2 on the arc."""
    angular_tol = max(EPSILON, MICRO_TOLERANCE / arc.radius) if arc.radius > EPSILON else EPSILON
    results = []
    for t, kind in line_circle_parameters(line, arc.center, arc.radius):
        if not is_parameter_valid_for_segment(t, position):
            continue
        point = (line.start[0] + (line.end[0] - line.start[0]) * t, line.start[1] + (line.end[1] - line.start[1]) * t)
        if not is_point_on_arc(point, arc, angular_tol):
            continue
        results.append(make_result(point, snap_parameter(t), snap_parameter(arc_parameter(point, arc)), kind))
    return results


def circle_as_arc(circle: Circle) -> Arc:
    return Arc(id=circle.id, center=circle.center, radius=circle.radius, start_angle=0.0, end_angle=TWO_PI)


@intersector(first=GeometryType.ARC, second=GeometryType.LINE, description="Arc/line quadratic")
def arc_line_intersections(
    arc: Arc,
    line: Line,
    tolerance: float,
    mode: IntersectionMode = "infinite",
) -> list[IntersectionResult]:
    return [r.swapped() for r in _line_arc_hits(line, arc, "intermediate")]


@intersector(first=GeometryType.CIRCLE, second=GeometryType.LINE, description="Circle/line quadratic")
def circle_line_intersections(
    circle: Circle,
    line: Line,
    tolerance: float,
    mode: IntersectionMode = "infinite",
) -> list[IntersectionResult]:
    return [r.swapped() for r in _line_arc_hits(line, circle_as_arc(circle), "intermediate")]


def find_line_arc_intersections(
    line: Line,
    arc: Arc,
    allow_extensions: bool = False,
    extension_length: float = DEFAULT_CHAIN_OFFSET_PARAMETERS.max_extension,
    tolerance: float = MICRO_TOLERANCE,
) -> list[IntersectionResult]:
    """Line/arc hits, falling back to virtually extended shapes when none exist."""
    results = _line_arc_hits(line, arc, "intermediate")
    if results or not allow_extensions:
        return results
    return intersect_with_extensions(line, arc, tolerance, extension_length)


def find_line_arc_intersections_segment_aware(
    line: Line,
    arc: Arc,
    position: SegmentPosition,
) -> list[IntersectionResult]:
    """Hits where the line is a polyline segment whose range is relaxed by ``position``."""
    return _line_arc_hits(line, arc, position)
