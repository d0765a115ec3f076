"""Scalar math helpers and tolerance constants. No engine imports."""

from __future__ import annotations

import math

# Algebraic tolerance: discriminants, parameter snapping, parallel tests.
EPSILON = 1e-10
# Geometric floor for trimming and degenerate-length checks.
MICRO_TOLERANCE = 1e-6
TWO_PI = 2.0 * math.pi

Point = tuple[float, float]


def normalize_angle(angle: float) -> float:
    """Wrap an angle into [0, 2π)."""
    a = math.fmod(angle, TWO_PI)
    if a < 0:
        a += TWO_PI
    if a >= TWO_PI:
        a -= TWO_PI
    return a


def snap_parameter(t: float) -> float:
    """Snap a parameter sitting on a segment boundary to exactly 0 or 1."""
    if abs(t) < EPSILON:
        return 0.0
    if abs(t - 1.0) < EPSILON:
        return 1.0
    return t


def cross2(ax: float, ay: float, bx: float, by: float) -> float:
    """z-component of the 2D cross product a × b."""
    return ax * by - ay * bx


def unit(dx: float, dy: float) -> tuple[float, float]:
    """Normalize a vector; the zero vector is returned unchanged."""
    n = math.hypot(dx, dy)
    if n < EPSILON:
        return (0.0, 0.0)
    return (dx / n, dy / n)


def midpoint(a: Point, b: Point) -> Point:
    return ((a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0)
