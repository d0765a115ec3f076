"""Shared intersection plumbing: segment-position rules and the extension ladder."""

from __future__ import annotations

import logging
import math
from typing import Literal

from chainoffset.engine.config import IntersectionMode
from chainoffset.engine.extend import create_extended_shape
from chainoffset.engine.registry import dispatch_intersections
from chainoffset.geometry.functions import distance_to_shape, shape_parameter
from chainoffset.models.offset import IntersectionResult
from chainoffset.models.shapes import ShapeBase
from chainoffset.utils.math_helpers import MICRO_TOLERANCE

logger = logging.getLogger(__name__)

SegmentPosition = Literal["only", "first", "intermediate", "last"]


def segment_position(index: int, count: int, closed: bool = False) -> SegmentPosition:
    """Position of a segment inside its polyline; only open ends may extend."""
    if closed:
        return "intermediate"
    if count == 1:
        return "only"
    if index == 0:
        return "first"
    if index == count - 1:
        return "last"
    return "intermediate"


def is_parameter_valid_for_segment(t: float, position: SegmentPosition, tolerance: float = MICRO_TOLERANCE) -> bool:
    if position == "only":
        return True
    if position == "first":
        return t <= 1.0 + tolerance
    if position == "last":
        return t >= -tolerance
    return -tolerance <= t <= 1.0 + tolerance


def rebase_on_originals(
    result: IntersectionResult,
    shape1: ShapeBase,
    shape2: ShapeBase,
    tolerance: float,
) -> IntersectionResult:
    """Re-express a result found on extended stand-ins against the original shapes."""
    on_1 = distance_to_shape(result.point, shape1) <= tolerance
    on_2 = distance_to_shape(result.point, shape2) <= tolerance
    return result.model_copy(
        update={
            "param1": shape_parameter(shape1, result.point),
            "param2": shape_parameter(shape2, result.point),
            "on_extension": not (on_1 and on_2),
        }
    )


def intersect_with_extensions(
    shape1: ShapeBase,
    shape2: ShapeBase,
    tolerance: float,
    extension_length: float,
    mode: IntersectionMode = "infinite",
) -> list[IntersectionResult]:
    """Try extended-first, extended-second, then both extended; concatenate all hits."""
    extended1 = create_extended_shape(shape1, extension_length)
    extended2 = create_extended_shape(shape2, extension_length)
    attempts = ((extended1, shape2), (shape1, extended2), (extended1, extended2))

    results: list[IntersectionResult] = []
    for a, b in attempts:
        if a is None or b is None:
            continue
        for hit in dispatch_intersections(a, b, tolerance, mode):
            rebased = rebase_on_originals(hit, shape1, shape2, tolerance)
            reach = max(distance_to_shape(rebased.point, shape1), distance_to_shape(rebased.point, shape2))
            if reach > extension_length + tolerance:
                continue
            results.append(rebased)
    logger.debug("Extension search found %d candidates", len(results))
    return results


def make_result(
    point: tuple[float, float],
    param1: float,
    param2: float,
    kind: str = "exact",
    confidence: float = 1.0,
) -> IntersectionResult:
    return IntersectionResult(
        point=(float(point[0]), float(point[1])),
        param1=float(param1),
        param2=float(param2),
        type=kind,
        confidence=confidence,
    )


def dedupe_points(results: list[IntersectionResult], eps: float = 1e-9) -> list[IntersectionResult]:
    unique: list[IntersectionResult] = []
    for r in results:
        if all(math.dist(r.point, u.point) > eps for u in unique):
            unique.append(r)
    return unique
