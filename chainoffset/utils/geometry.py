"""Leaf-node point-array helpers. No engine imports."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


def signed_area(points: NDArray[np.float64]) -> float:
    """Shoelace formula for signed area of a closed ring. Positive = CCW, Negative = CW."""
    x = points[:, 0]
    y = points[:, 1]
    return float(0.5 * np.sum(x[:-1] * y[1:] - x[1:] * y[:-1]))


def arc_lengths(points: NDArray[np.float64]) -> NDArray[np.float64]:
    """Cumulative arc-length along a point sequence."""
    diffs = np.diff(points, axis=0)
    segment_lengths = np.sqrt(np.sum(diffs**2, axis=1))
    return np.concatenate([[0.0], np.cumsum(segment_lengths)])


def polyline_length(points: NDArray[np.float64]) -> float:
    if len(points) < 2:
        return 0.0
    return float(arc_lengths(points)[-1])


def close_ring(points: NDArray[np.float64]) -> NDArray[np.float64]:
    """Append the first point if the ring is not already closed."""
    if len(points) == 0 or np.allclose(points[0], points[-1]):
        return points
    return np.vstack([points, points[:1]])


def dedupe_consecutive(points: NDArray[np.float64], eps: float = 1e-12) -> NDArray[np.float64]:
    """Drop points that coincide with their predecessor."""
    if len(points) < 2:
        return points
    keep = np.ones(len(points), dtype=bool)
    keep[1:] = np.linalg.norm(np.diff(points, axis=0), axis=1) > eps
    return points[keep]


def winding_number(point: tuple[float, float], polygon_points: NDArray[np.float64]) -> int:
    """Compute winding number of point w.r.t. a closed polygon ring.

    Non-zero → point is inside polygon.
    """
    px, py = point
    x = polygon_points[:, 0]
    y = polygon_points[:, 1]
    n = len(x)

    wn = 0
    for i in range(n - 1):
        if y[i] <= py:
            if y[i + 1] > py:
                # Upward crossing
                cross = (x[i + 1] - x[i]) * (py - y[i]) - (px - x[i]) * (y[i + 1] - y[i])
                if cross > 0:
                    wn += 1
        else:
            if y[i + 1] <= py:
                # Downward crossing
                cross = (x[i + 1] - x[i]) * (py - y[i]) - (px - x[i]) * (y[i + 1] - y[i])
                if cross < 0:
                    wn -= 1
    return wn


def point_in_polygon(point: tuple[float, float], polygon_points: NDArray[np.float64]) -> bool:
    """Test containment using winding number."""
    return winding_number(point, close_ring(polygon_points)) != 0
