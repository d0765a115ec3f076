"""Per-shape offset generators.

Offsets are measured to the right of the drawn direction for OUTSET and to
the left for INSET. Arcs and circles instead grow (OUTSET) or shrink (INSET)
their radius; callers normalize clockwise arcs by flipping the direction so
the right-hand convention holds for them too.
"""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass, field

import numpy as np

from chainoffset.engine.intersect import find_shape_intersections, select_best_intersection
from chainoffset.engine.trim import trim_consecutive_shapes
from chainoffset.geometry.ellipse import (
    ellipse_axes,
    ellipse_normals_at_params,
    ellipse_points_at_params,
    ellipse_span,
    ellipse_start_param,
)
from chainoffset.geometry.functions import end_point, start_point
from chainoffset.geometry.spline import fit_spline, spline_derivatives, spline_points
from chainoffset.models.offset import OffsetDirection
from chainoffset.models.shapes import Arc, Circle, Ellipse, Line, Polyline, ShapeBase, Spline
from chainoffset.utils.math_helpers import EPSILON

logger = logging.getLogger(__name__)

# Normal samples used to rebuild offset splines and ellipses
OFFSET_SAMPLES = 100


@dataclass
class OffsetResult:
    success: bool
    shapes: list[ShapeBase] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def _fail(message: str) -> OffsetResult:
    return OffsetResult(success=False, errors=[message])


def _sign(direction: OffsetDirection) -> float:
    return 1.0 if direction == OffsetDirection.OUTSET else -1.0


def flip_direction(direction: OffsetDirection) -> OffsetDirection:
    if direction == OffsetDirection.OUTSET:
        return OffsetDirection.INSET
    if direction == OffsetDirection.INSET:
        return OffsetDirection.OUTSET
    return direction


def normalized_direction(shape: ShapeBase, direction: OffsetDirection) -> OffsetDirection:
    """Clockwise arcs curve the other way, so their inset/outset swap."""
    if isinstance(shape, Arc) and shape.clockwise:
        return flip_direction(direction)
    return direction


def offset_shape(shape: ShapeBase, distance: float, direction: OffsetDirection) -> OffsetResult:
    """Offset a single shape by ``|distance|``; NONE or zero distance yields no shapes."""
    if direction == OffsetDirection.NONE or abs(distance) < EPSILON:
        return OffsetResult(success=True)
    return _offset(shape, abs(distance), direction)


@functools.singledispatch
def _offset(shape: ShapeBase, distance: float, direction: OffsetDirection) -> OffsetResult:
    return _fail(f"Offset not supported for shape type {shape.type}")


@_offset.register
def _(shape: Line, distance: float, direction: OffsetDirection) -> OffsetResult:
    dx, dy = shape.end[0] - shape.start[0], shape.end[1] - shape.start[1]
    length = math.hypot(dx, dy)
    if length < EPSILON:
        return _fail("Cannot offset a zero-length line")
    s = _sign(direction) * distance
    nx, ny = dy / length * s, -dx / length * s
    return OffsetResult(
        success=True,
        shapes=[shape.derive(start=(shape.start[0] + nx, shape.start[1] + ny), end=(shape.end[0] + nx, shape.end[1] + ny))],
    )


def _offset_radius(radius: float, distance: float, direction: OffsetDirection) -> float | str:
    new_radius = radius + _sign(direction) * distance
    if new_radius <= EPSILON:
        return f"Inset distance {distance:g} exceeds radius {radius:g}: negative radius"
    return new_radius


@_offset.register
def _(shape: Arc, distance: float, direction: OffsetDirection) -> OffsetResult:
    radius = _offset_radius(shape.radius, distance, direction)
    if isinstance(radius, str):
        return _fail(radius)
    return OffsetResult(success=True, shapes=[shape.derive(radius=radius)])


@_offset.register
def _(shape: Circle, distance: float, direction: OffsetDirection) -> OffsetResult:
    radius = _offset_radius(shape.radius, distance, direction)
    if isinstance(radius, str):
        return _fail(radius)
    return OffsetResult(success=True, shapes=[shape.derive(radius=radius)])


@_offset.register
def _(shape: Polyline, distance: float, direction: OffsetDirection) -> OffsetResult:
    segments: list[ShapeBase] = []
    warnings: list[str] = []
    for i, segment in enumerate(shape.shapes):
        result = _offset(segment, distance, normalized_direction(segment, direction))
        if not result.success:
            warnings.append(f"Polyline segment {i} dropped: {'; '.join(result.errors)}")
            continue
        segments.extend(result.shapes)
    if not segments:
        return OffsetResult(success=False, warnings=warnings, errors=["No polyline segment could be offset"])
    joined = join_offset_segments(segments, shape.closed, distance)
    return OffsetResult(success=True, shapes=[shape.derive(shapes=tuple(joined))], warnings=warnings)


def join_offset_segments(segments: list[ShapeBase], closed: bool, distance: float) -> list[ShapeBase]:
    """Trim or extend neighbouring segments to meet; bridge with a line where they cannot."""
    tolerance = max(distance * 1e-6, 1e-9)
    reach = max(distance * 10.0, 1.0)
    joined = list(segments)
    n = len(joined)
    pairs = [(i, i + 1) for i in range(n - 1)]
    if closed and n > 1:
        pairs.append((n - 1, 0))

    bridges: dict[int, Line] = {}
    for i, j in pairs:
        a, b = joined[i], joined[j]
        if math.dist(end_point(a), start_point(b)) <= tolerance:
            continue
        hits = find_shape_intersections(a, b, tolerance, allow_extensions=True, max_extension_length=reach)
        best = select_best_intersection(hits, a, b)
        if best is not None:
            trimmed = trim_consecutive_shapes(a, b, [best], tolerance)
            if trimmed.shape1_result.success and trimmed.shape2_result.success:
                joined[i], joined[j] = trimmed.shape1_result.shape, trimmed.shape2_result.shape
                continue
        bridges[i] = Line(start=end_point(joined[i]), end=start_point(joined[j]))

    out: list[ShapeBase] = []
    for i, segment in enumerate(joined):
        out.append(segment)
        if i in bridges:
            out.append(bridges[i])
    return out


@_offset.register
def _(shape: Spline, distance: float, direction: OffsetDirection) -> OffsetResult:
    ts = np.linspace(0.0, 1.0, OFFSET_SAMPLES)
    points = spline_points(shape, ts)
    derivs = spline_derivatives(shape, ts)
    norms = np.hypot(derivs[:, 0], derivs[:, 1])
    if np.any(norms < EPSILON):
        return _fail("Spline has a vanishing tangent; cannot compute normals")
    normals = np.column_stack([derivs[:, 1], -derivs[:, 0]]) / norms[:, None]
    shifted = points + normals * (_sign(direction) * distance)
    fitted = fit_spline(shifted, degree=max(shape.degree, 1), closed=shape.closed)
    if fitted is None:
        return _fail("Offset spline could not be fitted")
    return OffsetResult(success=True, shapes=[fitted])


@_offset.register
def _(shape: Ellipse, distance: float, direction: OffsetDirection) -> OffsetResult:
    _, b, _ = ellipse_axes(shape)
    if direction == OffsetDirection.INSET and distance >= b:
        return _fail(f"Inset distance {distance:g} exceeds semi-minor axis {b:g}: negative radius")
    thetas = ellipse_start_param(shape) + np.linspace(0.0, 1.0, OFFSET_SAMPLES) * ellipse_span(shape)
    points = ellipse_points_at_params(shape, thetas)
    normals = ellipse_normals_at_params(shape, thetas)
    shifted = points + normals * (_sign(direction) * distance)
    fitted = fit_spline(shifted, degree=3, closed=shape.start_param is None)
    if fitted is None:
        return _fail("Offset ellipse could not be fitted")
    return OffsetResult(success=True, shapes=[fitted])
