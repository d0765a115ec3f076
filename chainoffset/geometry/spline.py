"""NURBS evaluation, fitting and validation on top of scipy's B-splines.

Rational curves are evaluated in homogeneous coordinates: the control
points are pre-multiplied by their weights, evaluated as a 3-D B-spline
and projected back by dividing through the weight channel.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray
from scipy.integrate import quad
from scipy.interpolate import BSpline, make_interp_spline

from chainoffset.models.shapes import Point, Spline
from chainoffset.utils.geometry import arc_lengths, dedupe_consecutive

logger = logging.getLogger(__name__)


def clamped_uniform_knots(n_control: int, degree: int) -> tuple[float, ...]:
    """Open-uniform knot vector on [0, 1] with ``degree + 1`` fold end knots."""
    interior = n_control - degree - 1
    inner = [(i + 1) / (interior + 1) for i in range(max(interior, 0))]
    return tuple([0.0] * (degree + 1) + inner + [1.0] * (degree + 1))


def _knots_ok(knots: tuple[float, ...], n: int, degree: int) -> bool:
    if len(knots) != n + degree + 1:
        return False
    arr = np.asarray(knots, dtype=float)
    return bool(np.all(np.isfinite(arr)) and np.all(np.diff(arr) >= 0) and arr[degree] < arr[n])


def _weights_ok(weights: tuple[float, ...], n: int) -> bool:
    if len(weights) != n:
        return False
    arr = np.asarray(weights, dtype=float)
    return bool(np.all(np.isfinite(arr)) and np.all(arr > 0))


@functools.lru_cache(maxsize=512)
def _homogeneous(spline: Spline) -> tuple[BSpline, BSpline, float, float]:
    """Curve and first derivative in homogeneous form, plus the parameter domain."""
    ctrl = np.asarray(spline.control_points, dtype=float)
    n = len(ctrl)
    degree = max(1, min(spline.degree, n - 1))
    knots = spline.knots if _knots_ok(spline.knots, n, degree) else clamped_uniform_knots(n, degree)
    weights = (
        np.asarray(spline.weights, dtype=float) if _weights_ok(spline.weights, n) else np.ones(n)
    )
    coeffs = np.column_stack([ctrl * weights[:, None], weights])
    curve = BSpline(np.asarray(knots, dtype=float), coeffs, degree)
    return curve, curve.derivative(), float(knots[degree]), float(knots[n])


def _params(spline: Spline, ts: NDArray[np.float64]) -> NDArray[np.float64]:
    _, _, lo, hi = _homogeneous(spline)
    return lo + np.clip(ts, 0.0, 1.0) * (hi - lo)


def spline_points(spline: Spline, ts: NDArray[np.float64]) -> NDArray[np.float64]:
    """Evaluate the curve at normalized parameters ``ts`` in [0, 1]."""
    curve, _, _, _ = _homogeneous(spline)
    h = curve(_params(spline, np.atleast_1d(ts)))
    return h[:, :2] / h[:, 2:3]


def spline_derivatives(spline: Spline, ts: NDArray[np.float64]) -> NDArray[np.float64]:
    """First derivative with respect to the normalized parameter."""
    curve, deriv, lo, hi = _homogeneous(spline)
    x = _params(spline, np.atleast_1d(ts))
    h = curve(x)
    dh = deriv(x)
    w = h[:, 2:3]
    # Quotient rule on (A / w)
    return (dh[:, :2] * w - h[:, :2] * dh[:, 2:3]) / (w * w) * (hi - lo)


def spline_sample_count(spline: Spline) -> int:
    return max(20, 10 * len(spline.control_points))


def integrated_spline_length(spline: Spline) -> float | None:
    """Arc length by adaptive quadrature of |C'(u)|; ``None`` when it does not converge."""

    def speed(u: float) -> float:
        return float(np.linalg.norm(spline_derivatives(spline, np.array([u]))[0]))

    try:
        value, _ = quad(speed, 0.0, 1.0, limit=200)
    except (ValueError, ZeroDivisionError, FloatingPointError) as e:
        logger.debug("Spline %s quadrature failed: %s", spline.id, e)
        return None
    if not np.isfinite(value) or value <= 0:
        return None
    return float(value)


def fit_spline(
    points: NDArray[np.float64],
    degree: int = 3,
    closed: bool = False,
) -> Spline | None:
    """Interpolate a clamped B-spline through ``points`` using chord-length parameters."""
    pts = dedupe_consecutive(np.asarray(points, dtype=float))
    if len(pts) < 2:
        return None
    k = max(1, min(degree, len(pts) - 1))
    lengths = arc_lengths(pts)
    u = lengths / lengths[-1]
    fitted = make_interp_spline(u, pts, k=k)
    ctrl = np.asarray(fitted.c, dtype=float)
    return Spline(
        control_points=tuple((float(x), float(y)) for x, y in ctrl),
        degree=k,
        knots=tuple(float(v) for v in fitted.t),
        weights=tuple([1.0] * len(ctrl)),
        fit_points=tuple((float(x), float(y)) for x, y in pts),
        closed=closed,
    )


@dataclass
class SplineValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    # The spline to use: the input when valid, a repaired copy otherwise, None if irreparable
    spline: Spline | None = None


def validate_spline_geometry(spline: Spline) -> SplineValidationResult:
    """Check NURBS structural rules and repair what can be repaired."""
    errors: list[str] = []
    ctrl = np.asarray(spline.control_points, dtype=float).reshape(-1, 2)
    n = len(ctrl)

    if n < 2:
        errors.append("Spline must have at least 2 control points")
    if not np.all(np.isfinite(ctrl)):
        errors.append("Spline control points must be finite")
    if spline.degree < 1:
        errors.append("Spline degree must be at least 1")
    elif spline.degree >= n:
        errors.append(f"Spline degree {spline.degree} requires more than {spline.degree} control points")
    if spline.knots:
        expected = n + spline.degree + 1
        if len(spline.knots) != expected:
            errors.append(f"Expected {expected} knots, got {len(spline.knots)}")
        if np.any(np.diff(np.asarray(spline.knots, dtype=float)) < 0):
            errors.append("Knot vector must be non-decreasing")
    if spline.weights:
        if len(spline.weights) != n:
            errors.append(f"Expected {n} weights, got {len(spline.weights)}")
        if any(not np.isfinite(w) or w <= 0 for w in spline.weights):
            errors.append("Spline weights must be positive")
    if n >= 2 and np.any(np.linalg.norm(np.diff(ctrl, axis=0), axis=1) < 1e-12):
        errors.append("Spline has duplicate consecutive control points")

    if not errors:
        return SplineValidationResult(is_valid=True, spline=spline)

    repaired = _repair(spline, ctrl)
    if repaired is None:
        logger.debug("Spline %s is irreparable: %s", spline.id, "; ".join(errors))
    return SplineValidationResult(is_valid=False, errors=errors, spline=repaired)


def _repair(spline: Spline, ctrl: NDArray[np.float64]) -> Spline | None:
    weights = list(spline.weights) if len(spline.weights) == len(ctrl) else [1.0] * len(ctrl)
    pts: list[Point] = []
    kept_weights: list[float] = []
    for (x, y), w in zip(ctrl, weights):
        if not (np.isfinite(x) and np.isfinite(y)):
            continue
        if pts and abs(pts[-1][0] - x) < 1e-12 and abs(pts[-1][1] - y) < 1e-12:
            continue
        pts.append((float(x), float(y)))
        kept_weights.append(float(w) if np.isfinite(w) and w > 0 else 1.0)

    n = len(pts)
    if n < 2:
        return None
    degree = max(1, min(spline.degree, n - 1))
    knots = spline.knots if _knots_ok(spline.knots, n, degree) else clamped_uniform_knots(n, degree)
    return spline.model_copy(
        update={
            "control_points": tuple(pts),
            "degree": degree,
            "knots": tuple(knots),
            "weights": tuple(kept_weights),
        }
    )
