"""Chain-level geometry: closure, containment, nearest point, orientation."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from shapely.geometry import LineString
from shapely.geometry import Point as ShapelyPoint

from chainoffset.geometry.functions import (
    distance_to_shape,
    end_point,
    point_at,
    shape_parameter,
    start_point,
    tessellate,
)
from chainoffset.models.shapes import Chain, Point
from chainoffset.utils.geometry import close_ring, dedupe_consecutive, point_in_polygon, signed_area
from chainoffset.utils.math_helpers import EPSILON


@dataclass(frozen=True)
class ClosestPoint:
    point: Point
    shape_index: int
    parameter: float
    distance: float


def is_chain_closed(chain: Chain, tolerance: float) -> bool:
    """Geometric closure: last shape's end meets the first shape's start."""
    if not chain.shapes:
        return False
    return math.dist(start_point(chain.shapes[0]), end_point(chain.shapes[-1])) < tolerance


def resolve_chain_closure(chain: Chain, tolerance: float) -> bool:
    """Explicit polyline flag wins; otherwise fall back to the geometric test."""
    if chain.closed is not None:
        return chain.closed
    return is_chain_closed(chain, tolerance)


def chain_points(chain: Chain) -> NDArray[np.float64]:
    parts = [tessellate(shape) for shape in chain.shapes]
    if not parts:
        return np.empty((0, 2))
    return dedupe_consecutive(np.vstack(parts))


def is_point_inside_chain(point: Point, chain: Chain, tolerance: float = 0.1) -> bool:
    """Winding-number containment against the tessellated chain boundary."""
    if not resolve_chain_closure(chain, tolerance):
        raise ValueError(f"Cannot test containment against open chain {chain.id}")
    return point_in_polygon(point, chain_points(chain))


def chain_signed_area(chain: Chain) -> float:
    """Positive for counter-clockwise chains."""
    return signed_area(close_ring(chain_points(chain)))


def distance_to_chain(point: Point, chain: Chain) -> float:
    pts = chain_points(chain)
    if len(pts) < 2:
        return math.inf
    return float(LineString(pts).distance(ShapelyPoint(point)))


def closest_point_on_chain(point: Point, chain: Chain) -> ClosestPoint:
    best: ClosestPoint | None = None
    for index, shape in enumerate(chain.shapes):
        d = distance_to_shape(point, shape)
        if best is None or d < best.distance:
            t = min(max(shape_parameter(shape, point), 0.0), 1.0)
            best = ClosestPoint(point=point_at(shape, t), shape_index=index, parameter=t, distance=d)
    if best is None:
        raise ValueError(f"Chain {chain.id} has no shapes")
    return best


def determine_chain_orientation(chain: Chain, tolerance: float = 0.1) -> tuple[float, float]:
    """Unit head-to-tail direction of an open chain."""
    if resolve_chain_closure(chain, tolerance):
        raise ValueError(f"Cannot determine orientation of closed chain {chain.id}")
    if not chain.shapes:
        raise ValueError(f"Chain {chain.id} has no shapes")
    sx, sy = start_point(chain.shapes[0])
    ex, ey = end_point(chain.shapes[-1])
    dx, dy = ex - sx, ey - sy
    n = math.hypot(dx, dy)
    if n < EPSILON:
        return (0.0, 0.0)
    return (dx / n, dy / n)
