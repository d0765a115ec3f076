"""Shared test fixtures."""

from __future__ import annotations

import math

import pytest

from chainoffset.models.shapes import Arc, Chain, Circle, Line


# Counter-clockwise 10x10 square
SQUARE_POINTS = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]

# Open L: right along x, then up
L_POINTS = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]

# Half-disc: flat base then the upper semicircle back to the start
HALF_DISC_RADIUS = 5.0


def lines_through(points: list[tuple[float, float]], closed: bool = False) -> tuple[Line, ...]:
    pairs = list(zip(points[:-1], points[1:]))
    if closed:
        pairs.append((points[-1], points[0]))
    return tuple(Line(start=a, end=b) for a, b in pairs)


def make_square_chain() -> Chain:
    return Chain(id="square", shapes=lines_through(SQUARE_POINTS, closed=True))


def make_l_chain() -> Chain:
    return Chain(id="l-shape", shapes=lines_through(L_POINTS))


def make_half_disc_chain() -> Chain:
    r = HALF_DISC_RADIUS
    return Chain(
        id="half-disc",
        shapes=(
            Line(start=(-r, 0.0), end=(r, 0.0)),
            Arc(center=(0.0, 0.0), radius=r, start_angle=0.0, end_angle=math.pi),
        ),
    )


def assert_point(actual, expected, tol: float = 1e-6) -> None:
    assert math.dist(actual, expected) <= tol, f"{actual} != {expected}"


@pytest.fixture
def square_chain() -> Chain:
    return make_square_chain()


@pytest.fixture
def l_chain() -> Chain:
    return make_l_chain()


@pytest.fixture
def half_disc_chain() -> Chain:
    return make_half_disc_chain()


@pytest.fixture
def circle_chain() -> Chain:
    return Chain(id="circle", shapes=(Circle(center=(0.0, 0.0), radius=5.0),))
