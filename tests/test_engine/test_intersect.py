"""Tests for the shape-pair intersection engine."""

import math

import pytest

from chainoffset.engine.intersect import (
    cluster_intersections,
    find_line_arc_intersections,
    find_line_line_intersections_segment_aware,
    find_polyline_self_intersections,
    find_shape_intersections,
    select_best_intersection,
)
from chainoffset.engine.intersect.base import is_parameter_valid_for_segment, segment_position
from chainoffset.models.offset import IntersectionResult
from chainoffset.models.shapes import Arc, Circle, Line, Polyline, Spline
from tests.conftest import assert_point, lines_through


def test_crossing_lines():
    a = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    b = Line(start=(5.0, -5.0), end=(5.0, 5.0))
    hits = find_shape_intersections(a, b, 0.1)
    assert len(hits) == 1
    assert_point(hits[0].point, (5.0, 0.0))
    assert hits[0].type == "exact"
    assert hits[0].param1 == pytest.approx(0.5)
    assert hits[0].param2 == pytest.approx(0.5)
    assert not hits[0].on_extension


def test_parallel_lines_do_not_meet():
    a = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    b = Line(start=(0.0, 1.0), end=(10.0, 1.0))
    assert find_shape_intersections(a, b, 0.1, allow_extensions=True) == []


def test_collinear_overlap_is_coincident():
    a = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    b = Line(start=(5.0, 0.0), end=(15.0, 0.0))
    hits = find_shape_intersections(a, b, 0.1)
    assert hits
    assert all(h.type == "coincident" for h in hits)


def test_lines_meet_only_on_extension():
    a = Line(start=(0.0, 0.0), end=(8.0, 0.0))
    b = Line(start=(10.0, 2.0), end=(10.0, 10.0))
    assert find_shape_intersections(a, b, 0.1) == []
    hits = find_shape_intersections(a, b, 0.1, allow_extensions=True)
    assert len(hits) == 1
    assert_point(hits[0].point, (10.0, 0.0))
    assert hits[0].on_extension


def test_extension_reach_is_bounded():
    a = Line(start=(0.0, 0.0), end=(8.0, 0.0))
    b = Line(start=(100.0, 2.0), end=(100.0, 10.0))
    assert find_shape_intersections(a, b, 0.1, allow_extensions=True, max_extension_length=5.0) == []


def test_bounded_mode_skips_extensions():
    a = Line(start=(0.0, 0.0), end=(8.0, 0.0))
    b = Line(start=(10.0, 2.0), end=(10.0, 10.0))
    hits = find_shape_intersections(a, b, 0.1, allow_extensions=True, intersection_mode="bounded")
    assert hits == []


def test_line_arc_needs_extension():
    line = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    arc = Arc(center=(15.0, 5.0), radius=5.0, start_angle=0.0, end_angle=math.pi)
    assert find_line_arc_intersections(line, arc) == []
    hits = find_line_arc_intersections(line, arc, allow_extensions=True, extension_length=1000.0)
    assert hits
    assert all(h.on_extension for h in hits)
    assert_point(hits[0].point, (15.0, 0.0), tol=1e-6)


def test_tangent_line_circle():
    line = Line(start=(0.0, 5.0), end=(10.0, 5.0))
    circle = Circle(center=(5.0, 0.0), radius=5.0)
    hits = find_shape_intersections(line, circle, 0.1)
    assert len(hits) == 1
    assert hits[0].type == "tangent"
    assert_point(hits[0].point, (5.0, 5.0))
    assert hits[0].param1 == pytest.approx(0.5)


def test_reversed_pair_keeps_param_order():
    line = Line(start=(-10.0, 0.0), end=(10.0, 0.0))
    arc = Arc(center=(0.0, 0.0), radius=5.0, start_angle=0.0, end_angle=math.pi)
    forward = find_shape_intersections(line, arc, 0.1)
    backward = find_shape_intersections(arc, line, 0.1)
    assert len(forward) == len(backward) == 2
    for hit in forward:
        twin = min(backward, key=lambda h: math.dist(h.point, hit.point))
        assert twin.param1 == pytest.approx(hit.param2)
        assert twin.param2 == pytest.approx(hit.param1)


def test_circle_circle_two_points():
    a = Circle(center=(0.0, 0.0), radius=5.0)
    b = Circle(center=(6.0, 0.0), radius=5.0)
    hits = find_shape_intersections(a, b, 0.1)
    assert len(hits) == 2
    assert sorted(round(h.point[1], 6) for h in hits) == [-4.0, 4.0]
    assert all(h.point[0] == pytest.approx(3.0) for h in hits)


def test_disjoint_circles():
    a = Circle(center=(0.0, 0.0), radius=1.0)
    b = Circle(center=(10.0, 0.0), radius=1.0)
    assert find_shape_intersections(a, b, 0.1) == []


def test_spline_line_is_approximate():
    spline = Spline(control_points=((0.0, -5.0), (0.0, -2.0), (0.0, 2.0), (0.0, 5.0)))
    line = Line(start=(-5.0, 0.0), end=(5.0, 0.0))
    hits = find_shape_intersections(spline, line, 0.1)
    assert len(hits) == 1
    assert hits[0].confidence < 1.0
    assert_point(hits[0].point, (0.0, 0.0), tol=1e-6)


def test_polyline_line_intersection_param_is_global():
    polyline = Polyline(shapes=lines_through([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]))
    line = Line(start=(5.0, 5.0), end=(15.0, 5.0))
    hits = find_shape_intersections(polyline, line, 0.1, intersection_mode="bounded")
    assert len(hits) == 1
    assert_point(hits[0].point, (10.0, 5.0))
    assert hits[0].param1 == pytest.approx(0.75)


def test_segment_positions():
    assert segment_position(0, 1) == "only"
    assert segment_position(0, 3) == "first"
    assert segment_position(2, 3) == "last"
    assert segment_position(1, 3) == "intermediate"
    assert segment_position(0, 3, closed=True) == "intermediate"
    assert is_parameter_valid_for_segment(-5.0, "last") is False
    assert is_parameter_valid_for_segment(-5.0, "first") is True


def test_segment_aware_line_extends_first_segment_backwards():
    first = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    other = Line(start=(-5.0, -5.0), end=(-5.0, 5.0))
    assert find_line_line_intersections_segment_aware(first, other, "first")
    assert find_line_line_intersections_segment_aware(first, other, "last") == []


def test_polyline_self_intersection():
    bowtie = Polyline(shapes=lines_through([(0.0, 0.0), (10.0, 10.0), (10.0, 0.0), (0.0, 10.0)]))
    hits = find_polyline_self_intersections(bowtie)
    assert len(hits) == 1
    assert_point(hits[0].point, (5.0, 5.0))


def test_polyline_self_intersection_with_spatial_index():
    points = [(float(i), 0.0) for i in range(19)] + [(18.0, 5.0), (5.0, -5.0)]
    zigzag = Polyline(shapes=lines_through(points))
    assert len(zigzag.shapes) == 20
    hits = find_polyline_self_intersections(zigzag)
    assert len(hits) == 1
    assert_point(hits[0].point, (11.5, 0.0))


def test_cluster_merges_nearby_hits():
    results = [
        IntersectionResult(point=(0.0, 0.0), param1=0.1, param2=0.2),
        IntersectionResult(point=(0.01, 0.0), param1=0.3, param2=0.4, type="tangent"),
        IntersectionResult(point=(5.0, 5.0), param1=0.9, param2=0.9),
    ]
    merged = cluster_intersections(results, 0.1)
    assert len(merged) == 2
    assert merged[0].type == "approximate"
    assert merged[0].param1 == pytest.approx(0.2)


def test_best_intersection_is_nearest_joint():
    a = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    b = Line(start=(10.0, 0.0), end=(10.0, 10.0))
    near = IntersectionResult(point=(10.0, 0.0), param1=1.0, param2=0.0)
    far = IntersectionResult(point=(0.0, 0.0), param1=0.0, param2=-1.0)
    assert select_best_intersection([far, near], a, b) is near
    assert select_best_intersection([], a, b) is None
