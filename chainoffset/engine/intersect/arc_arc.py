"""Arc/circle pair intersections from the two-circle construction."""

from __future__ import annotations

import math

from chainoffset.engine.config import IntersectionMode
from chainoffset.engine.intersect.base import make_result
from chainoffset.engine.intersect.line_arc import circle_as_arc
from chainoffset.engine.registry import intersector
from chainoffset.geometry.arc import arc_parameter, is_point_on_arc
from chainoffset.models.offset import IntersectionResult
from chainoffset.models.shapes import Arc, Circle, GeometryType, Point
from chainoffset.utils.math_helpers import EPSILON, MICRO_TOLERANCE, snap_parameter


def circle_circle_points(c1: Point, r1: float, c2: Point, r2: float) -> list[tuple[Point, str]]:
    """Meeting points of two circles; concentric circles never report points."""
    dx, dy = c2[0] - c1[0], c2[1] - c1[1]
    d = math.hypot(dx, dy)
    if d < EPSILON:
        return []
    scale = max(1.0, r1, r2)
    if d > r1 + r2 + EPSILON * scale or d < abs(r1 - r2) - EPSILON * scale:
        return []

    a = (r1 * r1 - r2 * r2 + d * d) / (2.0 * d)
    h_sq = r1 * r1 - a * a
    mx, my = c1[0] + a * dx / d, c1[1] + a * dy / d
    if h_sq <= EPSILON * scale * scale:
        return [((mx, my), "tangent")]
    h = math.sqrt(h_sq)
    ox, oy = -dy * h / d, dx * h / d
    return [((mx + ox, my + oy), "exact"), ((mx - ox, my - oy), "exact")]


def _arc_arc_hits(arc1: Arc, arc2: Arc) -> list[IntersectionResult]:
    results = []
    for point, kind in circle_circle_points(arc1.center, arc1.radius, arc2.center, arc2.radius):
        tol1 = MICRO_TOLERANCE / arc1.radius if arc1.radius > EPSILON else EPSILON
        tol2 = MICRO_TOLERANCE / arc2.radius if arc2.radius > EPSILON else EPSILON
        if is_point_on_arc(point, arc1, tol1) and is_point_on_arc(point, arc2, tol2):
            results.append(
                make_result(
                    point,
                    snap_parameter(arc_parameter(point, arc1)),
                    snap_parameter(arc_parameter(point, arc2)),
                    kind,
                )
            )
    return results


@intersector(first=GeometryType.ARC, second=GeometryType.ARC, description="Arc/arc two-circle construction")
def arc_arc_intersections(
    arc1: Arc,
    arc2: Arc,
    tolerance: float,
    mode: IntersectionMode = "infinite",
) -> list[IntersectionResult]:
    return _arc_arc_hits(arc1, arc2)


@intersector(first=GeometryType.ARC, second=GeometryType.CIRCLE, description="Arc/circle two-circle construction")
def arc_circle_intersections(
    arc: Arc,
    circle: Circle,
    tolerance: float,
    mode: IntersectionMode = "infinite",
) -> list[IntersectionResult]:
    return _arc_arc_hits(arc, circle_as_arc(circle))


@intersector(first=GeometryType.CIRCLE, second=GeometryType.CIRCLE, description="Circle/circle construction")
def circle_circle_intersections(
    circle1: Circle,
    circle2: Circle,
    tolerance: float,
    mode: IntersectionMode = "infinite",
) -> list[IntersectionResult]:
    return _arc_arc_hits(circle_as_arc(circle1), circle_as_arc(circle2))
