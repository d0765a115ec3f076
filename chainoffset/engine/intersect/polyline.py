"""Polyline intersections, decomposed into segment pairs.

Segment ranges follow their position in the polyline: in ``infinite`` mode
the first segment of an open polyline may run backwards past its start and
the last segment forwards past its end. Polyline parameters are reported as
``(segment_index + t) / segment_count``.
"""

from __future__ import annotations

import logging

from shapely import STRtree
from shapely.geometry import LineString

from chainoffset.engine.config import IntersectionMode
from chainoffset.engine.intersect.arc_arc import arc_arc_intersections
from chainoffset.engine.intersect.base import SegmentPosition, dedupe_points, segment_position
from chainoffset.engine.intersect.line_arc import (
    circle_as_arc,
    find_line_arc_intersections_segment_aware,
)
from chainoffset.engine.intersect.line_line import find_line_line_intersections_segment_aware
from chainoffset.engine.registry import intersector
from chainoffset.geometry.functions import tessellate
from chainoffset.models.offset import IntersectionResult
from chainoffset.models.shapes import Arc, Circle, GeometryType, Line, Polyline

logger = logging.getLogger(__name__)

# Below this many segments a brute-force pair scan beats building a tree
SELF_INTERSECTION_TREE_THRESHOLD = 20


def _positions(polyline: Polyline, mode: IntersectionMode) -> list[SegmentPosition]:
    n = len(polyline.shapes)
    if mode == "bounded":
        return ["intermediate"] * n
    return [segment_position(i, n, polyline.closed) for i in range(n)]


def _segment_pair(
    a: Line | Arc,
    position_a: SegmentPosition,
    b: Line | Arc,
    position_b: SegmentPosition,
) -> list[IntersectionResult]:
    if isinstance(a, Line) and isinstance(b, Line):
        return find_line_line_intersections_segment_aware(a, b, position_a, position_b)
    if isinstance(a, Line):
        return find_line_arc_intersections_segment_aware(a, b, position_a)
    if isinstance(b, Line):
        return [r.swapped() for r in find_line_arc_intersections_segment_aware(b, a, position_b)]
    return arc_arc_intersections(a, b, 0.0)


def _global(index: int, count: int, t: float) -> float:
    return (index + t) / count


def polyline_shape_intersections(
    polyline: Polyline,
    other: Line | Arc | Circle,
    mode: IntersectionMode = "infinite",
) -> list[IntersectionResult]:
    """Hits with param1 on the polyline and param2 on ``other``."""
    if isinstance(other, Circle):
        other = circle_as_arc(other)
    n = len(polyline.shapes)
    results = []
    for i, (segment, position) in enumerate(zip(polyline.shapes, _positions(polyline, mode))):
        for hit in _segment_pair(segment, position, other, "intermediate"):
            results.append(hit.model_copy(update={"param1": _global(i, n, hit.param1), "on_extension": False}))
    return dedupe_points(results)


@intersector(first=GeometryType.LINE, second=GeometryType.POLYLINE, description="Line/polyline by segment")
def line_polyline_intersections(line: Line, polyline: Polyline, tolerance: float, mode: IntersectionMode = "infinite"):
    return [r.swapped() for r in polyline_shape_intersections(polyline, line, mode)]


@intersector(first=GeometryType.ARC, second=GeometryType.POLYLINE, description="Arc/polyline by segment")
def arc_polyline_intersections(arc: Arc, polyline: Polyline, tolerance: float, mode: IntersectionMode = "infinite"):
    return [r.swapped() for r in polyline_shape_intersections(polyline, arc, mode)]


@intersector(first=GeometryType.CIRCLE, second=GeometryType.POLYLINE, description="Circle/polyline by segment")
def circle_polyline_intersections(
    circle: Circle, polyline: Polyline, tolerance: float, mode: IntersectionMode = "infinite"
):
    return [r.swapped() for r in polyline_shape_intersections(polyline, circle, mode)]


@intersector(first=GeometryType.POLYLINE, second=GeometryType.POLYLINE, description="Polyline/polyline by segment")
def polyline_polyline_intersections(
    polyline1: Polyline,
    polyline2: Polyline,
    tolerance: float,
    mode: IntersectionMode = "infinite",
) -> list[IntersectionResult]:
    n1, n2 = len(polyline1.shapes), len(polyline2.shapes)
    positions1, positions2 = _positions(polyline1, mode), _positions(polyline2, mode)
    results = []
    for i, a in enumerate(polyline1.shapes):
        for j, b in enumerate(polyline2.shapes):
            for hit in _segment_pair(a, positions1[i], b, positions2[j]):
                results.append(
                    hit.model_copy(
                        update={
                            "param1": _global(i, n1, hit.param1),
                            "param2": _global(j, n2, hit.param2),
                            "on_extension": False,
                        }
                    )
                )
    return dedupe_points(results)


def find_polyline_self_intersections(polyline: Polyline) -> list[IntersectionResult]:
    """Crossings between non-adjacent segments of one polyline."""
    segments = polyline.shapes
    n = len(segments)
    if n < 3:
        return []

    if n < SELF_INTERSECTION_TREE_THRESHOLD:
        candidates = [(i, j) for i in range(n) for j in range(i + 2, n)]
    else:
        geometries = [LineString(tessellate(s)) for s in segments]
        tree = STRtree(geometries)
        candidates = []
        for i, geom in enumerate(geometries):
            for j in tree.query(geom):
                if int(j) >= i + 2:
                    candidates.append((i, int(j)))

    results = []
    for i, j in candidates:
        if polyline.closed and i == 0 and j == n - 1:
            continue
        for hit in _segment_pair(segments[i], "intermediate", segments[j], "intermediate"):
            results.append(
                hit.model_copy(update={"param1": _global(i, n, hit.param1), "param2": _global(j, n, hit.param2)})
            )
    logger.debug("Polyline %s: %d self-intersections", polyline.id, len(results))
    return dedupe_points(results)
