"""Ellipse evaluation in eccentric-angle parameterization."""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from chainoffset.models.shapes import Ellipse, Point
from chainoffset.utils.math_helpers import EPSILON, TWO_PI


def ellipse_axes(ellipse: Ellipse) -> tuple[float, float, float]:
    """Return (semi-major, semi-minor, rotation)."""
    mx, my = ellipse.major_axis_endpoint
    a = math.hypot(mx, my)
    return a, a * ellipse.minor_to_major_ratio, math.atan2(my, mx)


def is_full_ellipse(ellipse: Ellipse) -> bool:
    if ellipse.start_param is None or ellipse.end_param is None:
        return True
    return ellipse_span(ellipse) >= TWO_PI - EPSILON


def ellipse_span(ellipse: Ellipse) -> float:
    if ellipse.start_param is None or ellipse.end_param is None:
        return TWO_PI
    span = ellipse.end_param - ellipse.start_param
    if span >= TWO_PI - EPSILON:
        return TWO_PI
    span = math.fmod(span, TWO_PI)
    if span <= EPSILON:
        span += TWO_PI
    return span


def ellipse_start_param(ellipse: Ellipse) -> float:
    return 0.0 if ellipse.start_param is None else ellipse.start_param


def ellipse_points_at_params(ellipse: Ellipse, thetas: NDArray[np.float64]) -> NDArray[np.float64]:
    a, b, rot = ellipse_axes(ellipse)
    cos_r, sin_r = math.cos(rot), math.sin(rot)
    x = a * np.cos(thetas)
    y = b * np.sin(thetas)
    return np.column_stack([
        ellipse.center[0] + x * cos_r - y * sin_r,
        ellipse.center[1] + x * sin_r + y * cos_r,
    ])


def ellipse_points(ellipse: Ellipse, ts: NDArray[np.float64]) -> NDArray[np.float64]:
    """Evaluate at normalized parameters in [0, 1] over the elliptical span."""
    thetas = ellipse_start_param(ellipse) + np.atleast_1d(ts) * ellipse_span(ellipse)
    return ellipse_points_at_params(ellipse, thetas)


def ellipse_normals_at_params(ellipse: Ellipse, thetas: NDArray[np.float64]) -> NDArray[np.float64]:
    """Unit outward normals (pointing away from the center)."""
    a, b, rot = ellipse_axes(ellipse)
    cos_r, sin_r = math.cos(rot), math.sin(rot)
    nx = b * np.cos(thetas)
    ny = a * np.sin(thetas)
    norm = np.hypot(nx, ny)
    norm[norm < EPSILON] = 1.0
    nx, ny = nx / norm, ny / norm
    return np.column_stack([nx * cos_r - ny * sin_r, nx * sin_r + ny * cos_r])


def ellipse_param_of_point(ellipse: Ellipse, point: Point) -> float:
    """Eccentric angle of the point projected into the ellipse's local frame."""
    a, b, rot = ellipse_axes(ellipse)
    dx, dy = point[0] - ellipse.center[0], point[1] - ellipse.center[1]
    lx = dx * math.cos(rot) + dy * math.sin(rot)
    ly = -dx * math.sin(rot) + dy * math.cos(rot)
    if b < EPSILON:
        return math.atan2(0.0, lx)
    return math.atan2(ly / b, lx / a)


def ellipse_perimeter(ellipse: Ellipse) -> float:
    """Ramanujan's second approximation for a full ellipse."""
    a, b, _ = ellipse_axes(ellipse)
    h = ((a - b) ** 2) / ((a + b) ** 2) if (a + b) > 0 else 0.0
    return math.pi * (a + b) * (1 + 3 * h / (10 + math.sqrt(4 - 3 * h)))
