"""Gap-fill engine — close residual gaps between consecutive offset shapes."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Literal

from chainoffset.engine.extend import ExtendDirection, extend_shape_to_point
from chainoffset.engine.intersect import find_shape_intersections
from chainoffset.engine.trim import trim_shape_at_point, trimming_tolerance
from chainoffset.geometry.functions import end_point, start_point
from chainoffset.models.shapes import Line, Point, ShapeBase
from chainoffset.utils.math_helpers import midpoint

logger = logging.getLogger(__name__)

# Intersections at or above this confidence are preferred over weaker ones
FILL_CONFIDENCE_THRESHOLD = 0.5


@dataclass
class GapContext:
    shape1: ShapeBase
    shape2: ShapeBase
    shape_index1: int
    shape_index2: int
    gap_size: float
    gap_location: Point


@dataclass
class FillOptions:
    max_extension: float
    tolerance: float
    extend_direction: ExtendDirection = "auto"
    snap_threshold: float = 0.0


@dataclass
class FillResult:
    success: bool
    method: Literal["extend", "snap"] = "extend"
    shape1: ShapeBase | None = None
    shape2: ShapeBase | None = None
    intersection_point: Point | None = None
    confidence: float = 0.0
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def detect_gap(
    shape1: ShapeBase,
    shape2: ShapeBase,
    shape_index1: int,
    shape_index2: int,
    tolerance: float,
) -> GapContext | None:
    """Gap between shape1's end and shape2's start, or None when they meet."""
    p1, p2 = end_point(shape1), start_point(shape2)
    size = math.dist(p1, p2)
    if size <= tolerance:
        return None
    return GapContext(
        shape1=shape1,
        shape2=shape2,
        shape_index1=shape_index1,
        shape_index2=shape_index2,
        gap_size=size,
        gap_location=midpoint(p1, p2),
    )


def _extend_onto(shape: ShapeBase, point: Point, direction: ExtendDirection, keep: str, options: FillOptions):
    tol = trimming_tolerance(options.tolerance)
    result = extend_shape_to_point(shape, point, direction, options.max_extension, tol)
    if not result.success:
        return None, result.errors
    extended = result.shape
    anchor = end_point(extended) if keep == "before" else start_point(extended)
    if math.dist(anchor, point) > options.tolerance:
        # The point fell inside the span; cut back instead
        trimmed = trim_shape_at_point(extended, point, keep, tol)
        if not trimmed.success:
            return None, trimmed.errors
        extended = trimmed.shape
    return extended, []


def fill_gap_between_shapes(context: GapContext, options: FillOptions) -> FillResult:
    """Extend both shapes to their virtual intersection, or snap a small gap shut."""
    if context.gap_size < 0:
        return FillResult(success=False, errors=["Gap size must be non-negative"])
    if options.max_extension <= 0:
        return FillResult(success=False, errors=["Maximum extension must be positive"])
    if context.gap_size > options.max_extension:
        return FillResult(
            success=False,
            errors=[
                f"Gap of {context.gap_size:.3f} between shapes {context.shape_index1} and "
                f"{context.shape_index2} exceeds maximum extension {options.max_extension:.3f}"
            ],
        )

    errors: list[str] = []
    candidates = find_shape_intersections(
        context.shape1,
        context.shape2,
        options.tolerance,
        allow_extensions=True,
        max_extension_length=options.max_extension,
    )
    strong = [c for c in candidates if c.confidence >= FILL_CONFIDENCE_THRESHOLD] or candidates
    if strong:
        best = min(strong, key=lambda c: math.dist(c.point, context.gap_location))
        shape1, errors1 = _extend_onto(context.shape1, best.point, options.extend_direction, "before", options)
        shape2, errors2 = _extend_onto(context.shape2, best.point, options.extend_direction, "after", options)
        if shape1 is not None and shape2 is not None:
            return FillResult(
                success=True,
                method="extend",
                shape1=shape1,
                shape2=shape2,
                intersection_point=best.point,
                confidence=best.confidence,
            )
        errors.extend(errors1 + errors2)
    else:
        errors.append("No extended intersection found between shapes")

    if context.gap_size <= options.snap_threshold:
        snapped = _snap(context)
        if snapped is not None:
            return snapped
    return FillResult(success=False, errors=errors)


def _snap(context: GapContext) -> FillResult | None:
    """Move a line endpoint onto its neighbour."""
    p1, p2 = end_point(context.shape1), start_point(context.shape2)
    if isinstance(context.shape1, Line):
        return FillResult(
            success=True,
            method="snap",
            shape1=context.shape1.derive(end=p2),
            shape2=context.shape2,
            intersection_point=p2,
            confidence=1.0,
        )
    if isinstance(context.shape2, Line):
        return FillResult(
            success=True,
            method="snap",
            shape1=context.shape1,
            shape2=context.shape2.derive(start=p1),
            intersection_point=p1,
            confidence=1.0,
        )
    return None
