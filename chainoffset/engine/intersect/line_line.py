"""Line–line intersection on infinite carriers, filtered to the segment spans."""

from __future__ import annotations

import math

from chainoffset.engine.config import IntersectionMode
from chainoffset.engine.intersect.base import (
    SegmentPosition,
    is_parameter_valid_for_segment,
    make_result,
)
from chainoffset.engine.registry import intersector
from chainoffset.models.offset import IntersectionResult
from chainoffset.models.shapes import GeometryType, Line
from chainoffset.utils.math_helpers import EPSILON, cross2, snap_parameter

# Relative parallelism threshold on the normalized cross product
_PARALLEL_EPS = 1e-9


def line_line_candidates(line1: Line, line2: Line) -> list[tuple[tuple[float, float], float, float, str]]:
    """All (point, t, u, kind) hits of the two carriers; collinear overlaps yield their ends."""
    (px, py), (qx, qy) = line1.start, line2.start
    rx, ry = line1.end[0] - px, line1.end[1] - py
    sx, sy = line2.end[0] - qx, line2.end[1] - qy
    len_r, len_s = math.hypot(rx, ry), math.hypot(sx, sy)
    if len_r < EPSILON or len_s < EPSILON:
        return []

    denom = cross2(rx, ry, sx, sy)
    wx, wy = qx - px, qy - py
    if abs(denom) <= _PARALLEL_EPS * len_r * len_s:
        # Parallel: only collinear overlap produces points
        if abs(cross2(wx, wy, rx, ry)) / len_r > 1e-9 * max(1.0, len_r):
            return []
        rr = rx * rx + ry * ry
        t0 = (wx * rx + wy * ry) / rr
        t1 = ((line2.end[0] - px) * rx + (line2.end[1] - py) * ry) / rr
        lo, hi = max(0.0, min(t0, t1)), min(1.0, max(t0, t1))
        if lo > hi + EPSILON:
            return []
        hits = []
        for t in (lo, hi) if hi - lo > EPSILON else (lo,):
            point = (px + rx * t, py + ry * t)
            u = ((point[0] - qx) * sx + (point[1] - qy) * sy) / (len_s * len_s)
            hits.append((point, t, u, "coincident"))
        return hits

    t = cross2(wx, wy, sx, sy) / denom
    u = cross2(wx, wy, rx, ry) / denom
    return [((px + rx * t, py + ry * t), t, u, "exact")]


@intersector(first=GeometryType.LINE, second=GeometryType.LINE, description="Line/line carrier intersection")
def find_line_line_intersections(
    line1: Line,
    line2: Line,
    tolerance: float,
    mode: IntersectionMode = "infinite",
) -> list[IntersectionResult]:
    results = []
    for point, t, u, kind in line_line_candidates(line1, line2):
        if is_parameter_valid_for_segment(t, "intermediate") and is_parameter_valid_for_segment(u, "intermediate"):
            results.append(make_result(point, snap_parameter(t), snap_parameter(u), kind))
    return results


def find_line_line_intersections_segment_aware(
    line1: Line,
    line2: Line,
    position1: SegmentPosition,
    position2: SegmentPosition = "intermediate",
) -> list[IntersectionResult]:
    """Intersections where each line's range is relaxed by its place in a polyline."""
    results = []
    for point, t, u, kind in line_line_candidates(line1, line2):
        if is_parameter_valid_for_segment(t, position1) and is_parameter_valid_for_segment(u, position2):
            results.append(make_result(point, snap_parameter(t), snap_parameter(u), kind))
    return results
