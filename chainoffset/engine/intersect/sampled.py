"""Approximate intersections for curves without a closed form (splines, ellipses).

Both shapes are tessellated and intersected as shapely line strings; the
parameters are recovered by projecting each hit back onto its shape.
"""

from __future__ import annotations

from itertools import combinations_with_replacement

from shapely.geometry import LineString
from shapely.geometry.base import BaseGeometry

from chainoffset.engine.config import IntersectionMode
from chainoffset.engine.intersect.base import dedupe_points, make_result
from chainoffset.engine.registry import IntersectorSpec, get_registry
from chainoffset.geometry.functions import shape_parameter, tessellate
from chainoffset.models.offset import IntersectionResult
from chainoffset.models.shapes import GeometryType, ShapeBase

# Sampling is exact only up to the chord error, hence the reduced confidence
SAMPLED_CONFIDENCE = 0.9

_CURVED = {GeometryType.SPLINE, GeometryType.ELLIPSE}


def _points_of(geometry: BaseGeometry) -> list[tuple[tuple[float, float], str]]:
    if geometry.is_empty:
        return []
    kind = geometry.geom_type
    if kind == "Point":
        return [((geometry.x, geometry.y), "approximate")]
    if kind in ("LineString", "LinearRing"):
        coords = list(geometry.coords)
        return [(coords[0], "coincident"), (coords[-1], "coincident")]
    if kind.startswith("Multi") or kind == "GeometryCollection":
        found = []
        for part in geometry.geoms:
            found.extend(_points_of(part))
        return found
    return []


def sampled_intersections(
    shape1: ShapeBase,
    shape2: ShapeBase,
    tolerance: float,
    mode: IntersectionMode = "infinite",
) -> list[IntersectionResult]:
    line1 = LineString(tessellate(shape1))
    line2 = LineString(tessellate(shape2))
    results = []
    for point, kind in _points_of(line1.intersection(line2)):
        results.append(
            make_result(
                point,
                shape_parameter(shape1, point),
                shape_parameter(shape2, point),
                kind,
                SAMPLED_CONFIDENCE,
            )
        )
    return dedupe_points(results)


def _register_sampled_pairs() -> None:
    registry = get_registry()
    ordered = sorted(GeometryType, key=lambda g: g.value)
    for first, second in combinations_with_replacement(ordered, 2):
        if first in _CURVED or second in _CURVED:
            registry.register(
                IntersectorSpec(
                    first=first,
                    second=second,
                    fn=sampled_intersections,
                    description="Tessellated curve intersection",
                )
            )


_register_sampled_pairs()
