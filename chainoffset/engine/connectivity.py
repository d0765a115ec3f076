"""Endpoint connectivity check over an ordered run of shapes."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from chainoffset.geometry.functions import end_point, start_point
from chainoffset.models.shapes import Point, ShapeBase


@dataclass(frozen=True)
class ConnectivityGap:
    shape_index1: int
    shape_index2: int
    point1: Point
    point2: Point
    distance: float


@dataclass
class ConnectivityReport:
    is_connected: bool
    gaps: list[ConnectivityGap] = field(default_factory=list)


def validate_chain_connectivity(
    shapes: Sequence[ShapeBase],
    tolerance: float,
    closed: bool = False,
) -> ConnectivityReport:
    """Every shape's end must meet the next shape's start (and the first, when closed)."""
    gaps: list[ConnectivityGap] = []
    n = len(shapes)
    pairs = [(i, i + 1) for i in range(n - 1)]
    if closed and n >= 1:
        pairs.append((n - 1, 0))
    for i, j in pairs:
        p1, p2 = end_point(shapes[i]), start_point(shapes[j])
        d = math.dist(p1, p2)
        if d > tolerance:
            gaps.append(ConnectivityGap(shape_index1=i, shape_index2=j, point1=p1, point2=p2, distance=d))
    return ConnectivityReport(is_connected=not gaps, gaps=gaps)
