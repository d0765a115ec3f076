"""End-to-end tests for the chain offset orchestrator."""

import math

import pytest

from chainoffset.engine.config import ChainOffsetParameters
from chainoffset.engine.pipeline import ChainOffsetPipeline, consecutive_pairs, offset_chain
from chainoffset.geometry.functions import end_point, start_point
from chainoffset.models.offset import OffsetSide
from chainoffset.models.shapes import Chain, Line, Polyline
from tests.conftest import SQUARE_POINTS, assert_point, lines_through


def _corners(offset_chain_result):
    return [start_point(s) for s in offset_chain_result.shapes]


def test_consecutive_pairs():
    assert consecutive_pairs(3, False) == [(0, 1), (1, 2)]
    assert consecutive_pairs(3, True) == [(0, 1), (1, 2), (2, 0)]
    assert consecutive_pairs(1, True) == []


def test_square_inner_and_outer(square_chain):
    result = offset_chain(square_chain, 1.0)
    assert result.success
    inner, outer = result.inner_chain, result.outer_chain
    assert inner.side == OffsetSide.INNER
    assert outer.side == OffsetSide.OUTER
    assert inner.closed and outer.closed
    assert inner.continuous and outer.continuous
    assert inner.original_chain_id == "square"

    for got, want in zip(_corners(inner), [(1.0, 1.0), (9.0, 1.0), (9.0, 9.0), (1.0, 9.0)]):
        assert_point(got, want)
    for got, want in zip(_corners(outer), [(-1.0, -1.0), (11.0, -1.0), (11.0, 11.0), (-1.0, 11.0)]):
        assert_point(got, want)


def test_square_metrics(square_chain):
    result = offset_chain(square_chain, 1.0)
    assert result.metrics.total_shapes == 4
    assert result.metrics.intersections_found == 8
    assert result.metrics.gaps_filled == 0
    assert result.metrics.processing_time_ms >= 0
    assert len(result.inner_chain.trim_points) == 4


def test_negative_distance_uses_magnitude(square_chain):
    result = offset_chain(square_chain, -1.0)
    assert_point(start_point(result.inner_chain.shapes[0]), (1.0, 1.0))


def test_open_l_chain_left_and_right(l_chain):
    result = offset_chain(l_chain, 2.0)
    assert result.success
    left, right = result.inner_chain, result.outer_chain
    assert left.side == OffsetSide.LEFT
    assert right.side == OffsetSide.RIGHT
    assert not left.closed

    first = left.shapes[0]
    assert first.start[1] == pytest.approx(2.0)
    assert first.end[1] == pytest.approx(2.0)
    assert_point(first.end, (8.0, 2.0))
    assert_point(left.shapes[1].start, (8.0, 2.0))
    assert_point(right.shapes[0].end, (12.0, -2.0))
    assert_point(right.shapes[1].start, (12.0, -2.0))
    assert left.continuous and right.continuous


def test_half_disc_with_arc(half_disc_chain):
    result = offset_chain(half_disc_chain, 1.0)
    assert result.success
    inner = result.inner_chain
    assert inner.continuous
    base, arc = inner.shapes
    assert_point(base.end, (math.sqrt(15.0), 1.0))
    assert_point(base.start, (-math.sqrt(15.0), 1.0))
    assert_point(start_point(arc), base.end)
    assert_point(end_point(arc), base.start)

    outer = result.outer_chain
    assert outer.continuous
    assert_point(outer.shapes[0].end, (math.sqrt(35.0), -1.0))


def test_circle_chain(circle_chain):
    result = offset_chain(circle_chain, 1.0)
    assert result.success
    assert result.inner_chain.shapes[0].radius == pytest.approx(4.0)
    assert result.outer_chain.shapes[0].radius == pytest.approx(6.0)
    assert result.inner_chain.continuous


def test_explicit_closed_flag_wins():
    chain = Chain(shapes=lines_through([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0), (0.0, 0.0)]), closed=False)
    result = offset_chain(chain, 1.0)
    assert result.inner_chain.side == OffsetSide.LEFT


def test_repeat_runs_are_geometrically_identical(square_chain):
    first = offset_chain(square_chain, 1.0)
    second = offset_chain(square_chain, 1.0)
    assert first.inner_chain.id != second.inner_chain.id
    assert first.inner_chain.shapes[0].id != second.inner_chain.shapes[0].id
    for a, b in zip(first.inner_chain.shapes, second.inner_chain.shapes):
        assert_point(a.start, b.start, tol=1e-12)
        assert_point(a.end, b.end, tol=1e-12)


def test_empty_chain_fails():
    result = offset_chain(Chain(shapes=()), 1.0)
    assert not result.success
    assert result.errors == ("No valid offsets could be generated",)
    assert result.inner_chain is None


def test_degenerate_chain_fails():
    result = offset_chain(Chain(shapes=(Line(start=(1.0, 1.0), end=(1.0, 1.0)),)), 1.0)
    assert not result.success


def test_unexpected_error_is_reported(square_chain, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("kaboom")

    monkeypatch.setattr("chainoffset.engine.pipeline.group_offsets_by_side", boom)
    result = offset_chain(square_chain, 1.0)
    assert not result.success
    assert result.errors[0].startswith("Chain offset failed")
    assert "kaboom" in result.errors[0]


def test_side_failure_returns_raw_offsets(square_chain, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("kaboom")

    pipeline = ChainOffsetPipeline()
    monkeypatch.setattr(pipeline, "collect_intersections", boom)
    result = pipeline.run(square_chain, 1.0)
    assert result.success
    assert not result.inner_chain.continuous
    assert len(result.inner_chain.shapes) == 4
    assert any("processing failed" in w for w in result.warnings)


def test_closed_polyline_chain():
    square = Polyline(shapes=lines_through(SQUARE_POINTS, closed=True), closed=True)
    params = ChainOffsetParameters(polyline_intersections=True)
    result = offset_chain(Chain(shapes=(square,), closed=True), 1.0, params)
    assert result.success
    inner = result.inner_chain.shapes[0]
    assert isinstance(inner, Polyline)
    assert len(inner.shapes) == 4
    assert_point(start_point(inner), (1.0, 1.0))
    assert_point(end_point(inner), (1.0, 1.0))
    assert result.inner_chain.continuous
    assert result.inner_chain.intersection_points == ()


def test_bounded_mode_leaves_outer_corners_open(square_chain):
    params = ChainOffsetParameters(intersection_type="bounded", snap_threshold=0.0, gap_max_extension=0.5)
    result = offset_chain(square_chain, 1.0, params)
    assert result.inner_chain.continuous
    assert not result.outer_chain.continuous
    assert result.warnings


def test_bounded_mode_fills_every_outer_corner(square_chain):
    result = offset_chain(square_chain, 1.0, ChainOffsetParameters(intersection_type="bounded"))
    outer = result.outer_chain
    assert len(outer.gap_fills) == 4
    locations = {(g.gap_location.shape_index1, g.gap_location.shape_index2) for g in outer.gap_fills}
    assert (3, 0) in locations
    assert result.metrics.gaps_filled == 4
    assert outer.continuous
