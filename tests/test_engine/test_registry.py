"""Tests for the intersector registry."""

import itertools

import pytest

import chainoffset.engine.intersect  # noqa: F401
from chainoffset.engine.registry import IntersectorRegistry, IntersectorSpec, dispatch_intersections, get_registry
from chainoffset.models.offset import IntersectionResult
from chainoffset.models.shapes import Circle, GeometryType, Line


def _noop(a, b, tolerance, mode):
    return []


def test_register_and_get():
    reg = IntersectorRegistry()
    spec = IntersectorSpec(first=GeometryType.ARC, second=GeometryType.LINE, fn=_noop)
    reg.register(spec)
    assert reg.get(GeometryType.ARC, GeometryType.LINE) == (spec, False)
    assert reg.get(GeometryType.LINE, GeometryType.ARC) == (spec, True)
    assert reg.count == 1


def test_unsorted_pair_is_rejected():
    reg = IntersectorRegistry()
    with pytest.raises(ValueError, match="sorted order"):
        reg.register(IntersectorSpec(first=GeometryType.LINE, second=GeometryType.ARC, fn=_noop))


def test_duplicate_pair_is_rejected():
    reg = IntersectorRegistry()
    reg.register(IntersectorSpec(first=GeometryType.ARC, second=GeometryType.LINE, fn=_noop))
    with pytest.raises(ValueError, match="Duplicate"):
        reg.register(IntersectorSpec(first=GeometryType.ARC, second=GeometryType.LINE, fn=_noop))


def test_every_pair_is_covered():
    reg = get_registry()
    for first, second in itertools.product(GeometryType, repeat=2):
        spec, _ = reg.get(first, second)
        assert spec.fn is not None
    assert reg.count == 21


def test_dispatch_swaps_params_for_reversed_pair():
    reg = IntersectorRegistry()

    def fixed(circle, line, tolerance, mode):
        return [IntersectionResult(point=(0.0, 0.0), param1=0.25, param2=0.75)]

    reg.register(IntersectorSpec(first=GeometryType.CIRCLE, second=GeometryType.LINE, fn=fixed))
    line = Line(start=(0.0, 0.0), end=(1.0, 0.0))
    circle = Circle(center=(0.0, 0.0), radius=1.0)
    [hit] = dispatch_intersections(line, circle, 0.1, registry=reg)
    assert (hit.param1, hit.param2) == (0.75, 0.25)
