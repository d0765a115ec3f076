"""Shape–shape intersection engine.

Importing this package registers every pairwise intersector.
"""

from __future__ import annotations

import logging
import math

from chainoffset.engine.config import DEFAULT_CHAIN_OFFSET_PARAMETERS, IntersectionMode
from chainoffset.engine.intersect import arc_arc, line_arc, line_line, polyline, sampled  # noqa: F401
from chainoffset.engine.intersect.base import intersect_with_extensions
from chainoffset.engine.intersect.line_arc import (
    find_line_arc_intersections,
    find_line_arc_intersections_segment_aware,
)
from chainoffset.engine.intersect.line_line import (
    find_line_line_intersections,
    find_line_line_intersections_segment_aware,
)
from chainoffset.engine.intersect.polyline import find_polyline_self_intersections
from chainoffset.engine.registry import dispatch_intersections
from chainoffset.geometry.functions import end_point, start_point
from chainoffset.models.offset import IntersectionResult
from chainoffset.models.shapes import ShapeBase

logger = logging.getLogger(__name__)


def cluster_intersections(results: list[IntersectionResult], tolerance: float) -> list[IntersectionResult]:
    """Merge hits closer than ``tolerance`` into their centroid."""
    clusters: list[list[IntersectionResult]] = []
    for result in results:
        for cluster in clusters:
            cx = sum(r.point[0] for r in cluster) / len(cluster)
            cy = sum(r.point[1] for r in cluster) / len(cluster)
            if math.dist((cx, cy), result.point) <= tolerance:
                cluster.append(result)
                break
        else:
            clusters.append([result])

    merged = []
    for cluster in clusters:
        if len(cluster) == 1:
            merged.append(cluster[0])
            continue
        n = len(cluster)
        types = {r.type for r in cluster}
        merged.append(
            IntersectionResult(
                point=(sum(r.point[0] for r in cluster) / n, sum(r.point[1] for r in cluster) / n),
                param1=sum(r.param1 for r in cluster) / n,
                param2=sum(r.param2 for r in cluster) / n,
                distance=sum(r.distance for r in cluster) / n,
                type=types.pop() if len(types) == 1 else "approximate",
                confidence=min(r.confidence for r in cluster),
                on_extension=any(r.on_extension for r in cluster),
            )
        )
    return merged


def select_best_intersection(
    results: list[IntersectionResult],
    shape1: ShapeBase,
    shape2: ShapeBase,
) -> IntersectionResult | None:
    """Pick the hit nearest the joint between consecutive shapes (end of 1, start of 2)."""
    if not results:
        return None
    joint = (end_point(shape1), start_point(shape2))
    return min(results, key=lambda r: min(math.dist(r.point, p) for p in joint))


def find_shape_intersections(
    shape1: ShapeBase,
    shape2: ShapeBase,
    tolerance: float,
    allow_extensions: bool = False,
    max_extension_length: float = DEFAULT_CHAIN_OFFSET_PARAMETERS.max_extension,
    intersection_mode: IntersectionMode = "infinite",
) -> list[IntersectionResult]:
    """Intersections of the shapes as given, else of virtually extended stand-ins."""
    results = dispatch_intersections(shape1, shape2, tolerance, intersection_mode)
    if not results and allow_extensions and intersection_mode == "infinite":
        results = intersect_with_extensions(shape1, shape2, tolerance, max_extension_length, intersection_mode)
    return cluster_intersections(results, tolerance)


__all__ = [
    "cluster_intersections",
    "find_line_arc_intersections",
    "find_line_arc_intersections_segment_aware",
    "find_line_line_intersections",
    "find_line_line_intersections_segment_aware",
    "find_polyline_self_intersections",
    "find_shape_intersections",
    "select_best_intersection",
]
