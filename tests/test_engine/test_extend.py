"""Tests for virtual extension and extension onto a point."""

import math

import pytest

from chainoffset.engine.extend import (
    create_extended_arc,
    create_extended_line,
    create_extended_shape,
    extend_arc_to_point,
    extend_line_to_point,
    extend_shape_to_point,
)
from chainoffset.geometry.arc import arc_sweep
from chainoffset.geometry.functions import end_point, start_point
from chainoffset.models.shapes import Arc, Circle, Ellipse, Line, Polyline, Spline
from tests.conftest import assert_point, lines_through


def test_extended_line_grows_both_ends():
    line = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    extended = create_extended_line(line, 5.0)
    assert_point(extended.start, (-5.0, 0.0))
    assert_point(extended.end, (15.0, 0.0))
    assert extended.id != line.id


def test_extended_arc_is_capped_at_full_turn():
    arc = Arc(center=(0.0, 0.0), radius=1.0, start_angle=0.0, end_angle=math.pi)
    extended = create_extended_arc(arc, 100.0)
    assert arc_sweep(extended) == pytest.approx(2 * math.pi)


def test_extended_arc_is_symmetric():
    arc = Arc(center=(0.0, 0.0), radius=10.0, start_angle=0.0, end_angle=math.pi / 2)
    extended = create_extended_arc(arc, 1.0)
    assert extended.start_angle == pytest.approx(-0.1)
    assert arc_sweep(extended) == pytest.approx(math.pi / 2 + 0.2)


def test_full_shapes_extend_to_themselves():
    circle = Circle(center=(0.0, 0.0), radius=1.0)
    ellipse = Ellipse(center=(0.0, 0.0), major_axis_endpoint=(2.0, 0.0), minor_to_major_ratio=0.5)
    assert create_extended_shape(circle, 10.0) is circle
    assert create_extended_shape(ellipse, 10.0) is ellipse


def test_open_polyline_extends_end_segments():
    polyline = Polyline(shapes=lines_through([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]))
    extended = create_extended_shape(polyline, 2.0)
    assert_point(start_point(extended), (-2.0, 0.0))
    assert_point(end_point(extended), (10.0, 12.0))


def test_open_spline_extends_with_tangent_run_outs():
    spline = Spline(control_points=((0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (3.0, 0.0)))
    extended = create_extended_shape(spline, 2.0)
    assert isinstance(extended, Polyline)
    assert_point(start_point(extended), (-2.0, 0.0), tol=1e-6)
    assert_point(end_point(extended), (5.0, 0.0), tol=1e-6)


def test_closed_spline_is_not_extendable():
    spline = Spline(control_points=((0.0, 0.0), (1.0, 1.0), (2.0, 0.0), (0.0, 0.0)), closed=True)
    assert create_extended_shape(spline, 2.0) is None


def test_extend_line_end_onto_point():
    line = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    result = extend_line_to_point(line, (12.0, 0.0), 5.0)
    assert result.success
    assert_point(result.shape.end, (12.0, 0.0))
    assert result.extension_length == pytest.approx(2.0)


def test_extend_line_start_onto_point():
    line = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    result = extend_line_to_point(line, (-3.0, 0.0), 5.0)
    assert result.success
    assert_point(result.shape.start, (-3.0, 0.0))


def test_extend_line_beyond_limit_fails():
    line = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    result = extend_line_to_point(line, (20.0, 0.0), 5.0)
    assert not result.success
    assert "exceeds maximum" in result.errors[0]


def test_extend_line_off_carrier_fails():
    line = Line(start=(0.0, 0.0), end=(10.0, 0.0))
    assert not extend_line_to_point(line, (12.0, 1.0), 5.0).success


def test_extend_arc_end_onto_point():
    arc = Arc(center=(0.0, 0.0), radius=5.0, start_angle=0.0, end_angle=math.pi / 2)
    result = extend_arc_to_point(arc, (-5.0, 0.0), 10.0)
    assert result.success
    assert_point(end_point(result.shape), (-5.0, 0.0))
    assert result.extension_length == pytest.approx(5.0 * math.pi / 2)


def test_extend_polyline_picks_nearest_end():
    polyline = Polyline(shapes=lines_through([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]))
    result = extend_shape_to_point(polyline, (10.0, 12.0), "auto", 5.0)
    assert result.success
    assert_point(end_point(result.shape), (10.0, 12.0))
