"""Logistic S-curve progression and calibration.

A distress grows along a logistic curve that passes through 1 % at
``p = 0`` and 99 % at ``p = T100`` periods after initiation:

    s(p) = 100 / (1 + exp(-k (p - T100 / 2))),   k = 2 ln(99) / T100

The observed percentage at age ``a`` for parameters ``(AADI, IV, T100)``
is ``IV + s(a - AADI) - s(0)`` once ``a >= AADI``, capped at 100.
"""

from __future__ import annotations

import math

import numpy as np

_LN99: float = math.log(99.0)

# Grid resolution used when the reference parameters do not already fit.
_T100_STEPS: int = 41
_AADI_STEPS: int = 41
_IV_STEPS: int = 11


def _steepness(t100: float) -> float:
    if t100 <= 0.0:
        raise ValueError("t100 must be > 0.")
    return 2.0 * _LN99 / t100


def s_curve_value(t100: float, periods: float) -> float:
    """Return the S-curve percentage *periods* after initiation."""
    k = _steepness(t100)
    return 100.0 / (1.0 + math.exp(-k * (periods - t100 / 2.0)))


def progression_increment(t100: float, periods_since_initiation: float) -> float:
    """Return the growth over the period ending *periods_since_initiation*.

    Args:
        t100: Years to reach full coverage.
        periods_since_initiation: Periods since the distress initiated.

    Returns:
        ``s(p) - s(p - 1)``, which is never negative.
    """
    p = periods_since_initiation
    return max(0.0, s_curve_value(t100, p) - s_curve_value(t100, p - 1.0))


def predicted_value(age: float, aadi: float, initial_value: float, t100: float) -> float:
    """Distress percentage at *age* under the given curve parameters."""
    if age < aadi:
        return 0.0
    grown = s_curve_value(t100, age - aadi) - s_curve_value(t100, 0.0)
    return min(100.0, initial_value + grown)


def _predicted_grid(
    age: float,
    aadi: np.ndarray,
    iv: np.ndarray,
    t100: np.ndarray,
) -> np.ndarray:
    k = 2.0 * _LN99 / t100
    s_now = 100.0 / (1.0 + np.exp(-k * ((age - aadi) - t100 / 2.0)))
    s_zero = 100.0 / (1.0 + np.exp(k * t100 / 2.0))
    values = np.minimum(100.0, iv + s_now - s_zero)
    return np.where(age < aadi, 0.0, values)


def calibrate(
    age: float,
    observed: float,
    t100_bounds: tuple[float, float],
    aadi_bounds: tuple[float, float],
    iv_bounds: tuple[float, float],
    t100_ref: float,
    aadi_ref: float,
    iv_ref: float,
    tolerance: float,
) -> tuple[float, float, float]:
    """Fit ``(T100, AADI, IV)`` so the curve reproduces *observed* at *age*.

    The reference parameters are returned unchanged when they already
    predict *observed* within *tolerance*.  Otherwise a regular grid over
    the three bounded ranges is searched; among points within tolerance the
    one closest to the references (distance normalised by each range) wins.
    When no grid point is within tolerance the point with the smallest
    absolute error is returned.

    Args:
        age: Surface age at which the observation was made.
        observed: Observed distress percentage.
        t100_bounds: ``(min, max)`` for T100.
        aadi_bounds: ``(min, max)`` for AADI.
        iv_bounds: ``(min, max)`` for the initial value.
        t100_ref: Expected T100.
        aadi_ref: Expected AADI.
        iv_ref: Expected initial value.
        tolerance: Acceptable absolute error in percentage points.

    Returns:
        Tuple ``(t100, aadi, iv)``, always inside the supplied bounds.

    Raises:
        ValueError: If any bound pair is inverted or T100 is not positive.
    """
    for label, (lo, hi) in (
        ("t100", t100_bounds),
        ("aadi", aadi_bounds),
        ("iv", iv_bounds),
    ):
        if lo > hi:
            raise ValueError(f"{label} bounds are inverted: ({lo}, {hi})")
    if t100_bounds[0] <= 0.0:
        raise ValueError("t100 lower bound must be > 0.")

    t100_ref = float(np.clip(t100_ref, *t100_bounds))
    aadi_ref = float(np.clip(aadi_ref, *aadi_bounds))
    iv_ref = float(np.clip(iv_ref, *iv_bounds))

    if abs(predicted_value(age, aadi_ref, iv_ref, t100_ref) - observed) <= tolerance:
        return t100_ref, aadi_ref, iv_ref

    t100_axis = np.linspace(t100_bounds[0], t100_bounds[1], _T100_STEPS)
    aadi_axis = np.linspace(aadi_bounds[0], aadi_bounds[1], _AADI_STEPS)
    iv_axis = np.linspace(iv_bounds[0], iv_bounds[1], _IV_STEPS)
    t100_g, aadi_g, iv_g = np.meshgrid(t100_axis, aadi_axis, iv_axis, indexing="ij")

    error = np.abs(_predicted_grid(age, aadi_g, iv_g, t100_g) - observed)

    def _span(bounds: tuple[float, float]) -> float:
        return max(bounds[1] - bounds[0], 1e-9)

    distance = (
        ((t100_g - t100_ref) / _span(t100_bounds)) ** 2
        + ((aadi_g - aadi_ref) / _span(aadi_bounds)) ** 2
        + ((iv_g - iv_ref) / _span(iv_bounds)) ** 2
    )

    within = error <= tolerance
    if within.any():
        idx = np.unravel_index(np.argmin(np.where(within, distance, np.inf)), error.shape)
    else:
        idx = np.unravel_index(np.argmin(error), error.shape)

    return float(t100_g[idx]), float(aadi_g[idx]), float(iv_g[idx])
