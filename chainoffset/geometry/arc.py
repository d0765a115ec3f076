"""Circular-arc helpers: sweep, angular range, parameterization."""

from __future__ import annotations

import math

from chainoffset.models.shapes import Arc, Point
from chainoffset.utils.math_helpers import EPSILON, TWO_PI, normalize_angle


def arc_sweep(arc: Arc) -> float:
    """Positive angular span of the arc in radians, in (0, 2π]."""
    raw = arc.start_angle - arc.end_angle if arc.clockwise else arc.end_angle - arc.start_angle
    if raw >= TWO_PI - EPSILON:
        return TWO_PI
    span = normalize_angle(raw)
    if span <= EPSILON:
        span = TWO_PI
    return span


def arc_point_at_angle(arc: Arc, angle: float) -> Point:
    return (
        arc.center[0] + arc.radius * math.cos(angle),
        arc.center[1] + arc.radius * math.sin(angle),
    )


def arc_angle_at(arc: Arc, t: float) -> float:
    """Absolute angle at normalized parameter ``t`` along the drawn direction."""
    sweep = arc_sweep(arc)
    return arc.start_angle - t * sweep if arc.clockwise else arc.start_angle + t * sweep


def arc_point_at(arc: Arc, t: float) -> Point:
    return arc_point_at_angle(arc, arc_angle_at(arc, t))


def arc_start_point(arc: Arc) -> Point:
    return arc_point_at_angle(arc, arc.start_angle)


def arc_end_point(arc: Arc) -> Point:
    return arc_point_at_angle(arc, arc_angle_at(arc, 1.0))


def angle_from_start(arc: Arc, angle: float) -> float:
    """Angular distance from the arc start to ``angle`` along the drawn direction, in [0, 2π)."""
    if arc.clockwise:
        return normalize_angle(arc.start_angle - angle)
    return normalize_angle(angle - arc.start_angle)


def is_angle_in_arc_range(angle: float, arc: Arc, tolerance: float = EPSILON) -> bool:
    sweep = arc_sweep(arc)
    if sweep >= TWO_PI - EPSILON:
        return True
    offset = angle_from_start(arc, angle)
    # Wrap-around near the start counts as on the arc
    return offset <= sweep + tolerance or offset >= TWO_PI - tolerance


def is_point_on_arc(point: Point, arc: Arc, tolerance: float = EPSILON) -> bool:
    """Angular containment only; the caller is responsible for the radius check."""
    angle = math.atan2(point[1] - arc.center[1], point[0] - arc.center[0])
    return is_angle_in_arc_range(angle, arc, tolerance)


def arc_parameter(point: Point, arc: Arc) -> float:
    """Normalized position of ``point`` along the arc.

    Points past the end yield values above 1; points just before the start
    (in the gap closer to the start) yield negative values.
    """
    sweep = arc_sweep(arc)
    angle = math.atan2(point[1] - arc.center[1], point[0] - arc.center[0])
    offset = angle_from_start(arc, angle)
    if offset > sweep and sweep < TWO_PI - EPSILON:
        gap = TWO_PI - sweep
        if offset - sweep > gap / 2.0:
            offset -= TWO_PI
    return offset / sweep


def arc_length(arc: Arc) -> float:
    return arc.radius * arc_sweep(arc)
