"""Tests for point-array and scalar helpers."""

import math

import numpy as np
import pytest

from chainoffset.utils.geometry import close_ring, dedupe_consecutive, point_in_polygon, signed_area, winding_number
from chainoffset.utils.math_helpers import normalize_angle, snap_parameter, unit

SQUARE = np.array([[0.0, 0.0], [10.0, 0.0], [10.0, 10.0], [0.0, 10.0]])


def test_winding_number_inside_and_outside():
    ring = close_ring(SQUARE)
    assert winding_number((5.0, 5.0), ring) == 1
    assert winding_number((15.0, 5.0), ring) == 0


def test_winding_number_clockwise_ring():
    ring = close_ring(SQUARE[::-1])
    assert winding_number((5.0, 5.0), ring) == -1
    assert point_in_polygon((5.0, 5.0), SQUARE[::-1])


def test_point_in_polygon_closes_ring():
    assert point_in_polygon((5.0, 5.0), SQUARE)
    assert not point_in_polygon((5.0, -0.5), SQUARE)


def test_signed_area():
    assert signed_area(close_ring(SQUARE)) == pytest.approx(100.0)
    assert signed_area(close_ring(SQUARE[::-1])) == pytest.approx(-100.0)


def test_close_ring_is_idempotent():
    ring = close_ring(SQUARE)
    assert len(ring) == 5
    assert len(close_ring(ring)) == 5


def test_dedupe_consecutive():
    pts = np.array([[0.0, 0.0], [0.0, 0.0], [1.0, 0.0], [1.0, 0.0], [0.0, 0.0]])
    assert len(dedupe_consecutive(pts)) == 3


def test_normalize_angle():
    assert normalize_angle(-math.pi / 2) == pytest.approx(3 * math.pi / 2)
    assert normalize_angle(5 * math.pi) == pytest.approx(math.pi)
    assert 0.0 <= normalize_angle(2 * math.pi) < 2 * math.pi


def test_snap_parameter():
    assert snap_parameter(1e-12) == 0.0
    assert snap_parameter(1.0 - 1e-12) == 1.0
    assert snap_parameter(0.5) == 0.5


def test_unit_of_zero_vector():
    assert unit(0.0, 0.0) == (0.0, 0.0)
    assert unit(3.0, 4.0) == pytest.approx((0.6, 0.8))
