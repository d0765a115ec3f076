"""Tests for trimming consecutive shapes at their corner."""

import math

import pytest

from chainoffset.engine.trim import (
    calculate_trim_amount,
    select_trim_point,
    trim_consecutive_shapes,
    trim_shape_at_point,
)
from chainoffset.geometry.functions import end_point, start_point
from chainoffset.models.offset import IntersectionResult
from chainoffset.models.shapes import Arc, Circle, Line, Polyline
from tests.conftest import assert_point


def test_trim_crossing_lines_at_corner():
    a = Line(start=(0.0, 0.0), end=(12.0, 0.0))
    b = Line(start=(10.0, -2.0), end=(10.0, 10.0))
    corner = IntersectionResult(point=(10.0, 0.0), param1=10.0 / 12.0, param2=2.0 / 12.0)
    result = trim_consecutive_shapes(a, b, [corner], 0.1)
    assert result.shape1_result.success
    assert result.shape2_result.success
    assert_point(result.shape1_result.shape.end, (10.0, 0.0))
    assert_point(result.shape1_result.shape.start, (0.0, 0.0))
    assert_point(result.shape2_result.shape.start, (10.0, 0.0))
    assert_point(result.shape2_result.shape.end, (10.0, 10.0))
    assert result.trim_point is corner


def test_trim_can_extend_line_along_carrier():
    line = Line(start=(0.0, 0.0), end=(8.0, 0.0))
    result = trim_shape_at_point(line, (10.0, 0.0), "before", 1e-3)
    assert result.success
    assert_point(result.shape.end, (10.0, 0.0))
    assert calculate_trim_amount(line, result.shape) == pytest.approx(-2.0)


def test_polyline_trim_amount_is_length_removed():
    original = Polyline(shapes=(Line(start=(0.0, 0.0), end=(10.0, 0.0)), Line(start=(10.0, 0.0), end=(10.0, 10.0))))
    trimmed = Polyline(shapes=(Line(start=(0.0, 0.0), end=(10.0, 0.0)), Line(start=(10.0, 0.0), end=(10.0, 4.0))))
    assert calculate_trim_amount(original, trimmed) == pytest.approx(6.0)


def test_trim_removing_whole_line_fails():
    line = Line(start=(0.0, 0.0), end=(8.0, 0.0))
    result = trim_shape_at_point(line, (0.0, 0.0), "before", 1e-3)
    assert not result.success
    assert "entire line" in result.errors[0]


def test_trim_point_off_line_fails():
    line = Line(start=(0.0, 0.0), end=(8.0, 0.0))
    assert not trim_shape_at_point(line, (4.0, 1.0), "before", 1e-3).success


def test_trim_arc_keeps_start():
    arc = Arc(center=(0.0, 0.0), radius=5.0, start_angle=0.0, end_angle=math.pi)
    result = trim_shape_at_point(arc, (0.0, 5.0), "before", 1e-3)
    assert result.success
    assert_point(start_point(result.shape), (5.0, 0.0))
    assert_point(end_point(result.shape), (0.0, 5.0))


def test_trim_arc_keeps_end():
    arc = Arc(center=(0.0, 0.0), radius=5.0, start_angle=0.0, end_angle=math.pi)
    result = trim_shape_at_point(arc, (0.0, 5.0), "after", 1e-3)
    assert result.success
    assert_point(start_point(result.shape), (0.0, 5.0))
    assert_point(end_point(result.shape), (-5.0, 0.0))


def test_trim_circle_becomes_arc():
    circle = Circle(center=(0.0, 0.0), radius=5.0)
    result = trim_shape_at_point(circle, (0.0, 5.0), "before", 1e-3)
    assert result.success
    assert isinstance(result.shape, Arc)
    assert result.warnings


def test_trim_without_intersections_fails():
    a = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    b = Line(start=(10.0, 0.0), end=(10.0, 10.0))
    result = trim_consecutive_shapes(a, b, [], 0.1)
    assert not result.shape1_result.success
    assert not result.shape2_result.success
    assert result.trim_point is None


def test_select_trim_point_prefers_joint_and_exact_hits():
    a = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    b = Line(start=(10.0, 0.0), end=(10.0, 10.0))
    near = IntersectionResult(point=(10.0, 0.0), param1=1.0, param2=0.0)
    far = IntersectionResult(point=(90.0, 0.0), param1=9.0, param2=0.0, type="approximate", confidence=0.5)
    assert select_trim_point([far, near], a, b) is near
