"""Intersection registry — every shape-pair intersector is a standalone function
registered via decorator.

Usage:
    @intersector(first=GeometryType.ARC, second=GeometryType.LINE)
    def arc_line(arc: Arc, line: Line, tolerance: float, mode: IntersectionMode):
        ...

Pairs are registered in sorted type order. Lookups for the reversed order
return the same intersector and the dispatcher swaps ``param1``/``param2``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from chainoffset.models.shapes import GeometryType, ShapeBase, geometry_type

if TYPE_CHECKING:
    from chainoffset.engine.config import IntersectionMode
    from chainoffset.models.offset import IntersectionResult

logger = logging.getLogger(__name__)

IntersectorFn = Callable[[ShapeBase, ShapeBase, float, "IntersectionMode"], "list[IntersectionResult]"]


@dataclass
class IntersectorSpec:
    first: GeometryType
    second: GeometryType
    fn: IntersectorFn
    description: str = ""

    @property
    def key(self) -> tuple[GeometryType, GeometryType]:
        return (self.first, self.second)


class IntersectorRegistry:
    """Registry of pairwise intersectors keyed by sorted geometry-type pair."""

    def __init__(self) -> None:
        self._intersectors: dict[tuple[GeometryType, GeometryType], IntersectorSpec] = {}

    def register(self, spec: IntersectorSpec) -> None:
        if spec.first.value > spec.second.value:
            raise ValueError(f"Pair must be registered in sorted order: {spec.first.value}/{spec.second.value}")
        if spec.key in self._intersectors:
            raise ValueError(f"Duplicate intersector for pair: {spec.first.value}/{spec.second.value}")
        self._intersectors[spec.key] = spec
        logger.debug("Registered intersector %s/%s", spec.first.value, spec.second.value)

    def get(self, first: GeometryType, second: GeometryType) -> tuple[IntersectorSpec, bool]:
        """Return the intersector and whether the caller's pair order was swapped."""
        if first.value <= second.value:
            return self._intersectors[(first, second)], False
        return self._intersectors[(second, first)], True

    def all(self) -> list[IntersectorSpec]:
        return sorted(self._intersectors.values(), key=lambda s: (s.first.value, s.second.value))

    @property
    def count(self) -> int:
        return len(self._intersectors)


# Module-level singleton
_registry = IntersectorRegistry()


def get_registry() -> IntersectorRegistry:
    return _registry


def intersector(
    *,
    first: GeometryType,
    second: GeometryType,
    description: str = "",
):
    """Decorator to register a pairwise intersector."""

    def decorator(fn: IntersectorFn):
        _registry.register(IntersectorSpec(first=first, second=second, fn=fn, description=description))
        return fn

    return decorator


def dispatch_intersections(
    shape1: ShapeBase,
    shape2: ShapeBase,
    tolerance: float,
    mode: IntersectionMode = "infinite",
    registry: IntersectorRegistry | None = None,
) -> list[IntersectionResult]:
    """Run the registered intersector for the pair, keeping param1 on ``shape1``."""
    spec, swapped = (registry or _registry).get(geometry_type(shape1), geometry_type(shape2))
    if swapped:
        return [r.swapped() for r in spec.fn(shape2, shape1, tolerance, mode)]
    return spec.fn(shape1, shape2, tolerance, mode)
