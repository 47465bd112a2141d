"""Tests for the piecewise linear lookup curve."""

import pytest

from pavement_engine.core.piecewise import PiecewiseLinear

# ---------------------------------------------------------------------------
# Interpolation
# ---------------------------------------------------------------------------


def test_interpolates_between_points() -> None:
    """A query between two points lies on the straight line joining them."""
    curve = PiecewiseLinear([(0.0, 0.0), (10.0, 100.0)])
    assert curve.value(5.0) == pytest.approx(50.0)
    assert curve(2.5) == pytest.approx(25.0)


def test_points_are_sorted_by_x() -> None:
    """Points supplied out of order are evaluated in x order."""
    curve = PiecewiseLinear([(10.0, 100.0), (0.0, 0.0), (5.0, 20.0)])
    assert curve.xs == [0.0, 5.0, 10.0]
    assert curve.value(7.5) == pytest.approx(60.0)


def test_clamps_without_extrapolation() -> None:
    """Queries outside the x-range return the end-point y values."""
    curve = PiecewiseLinear([(0.0, 0.0), (10.0, 100.0)], extrapolate=False)
    assert curve.value(-5.0) == 0.0
    assert curve.value(20.0) == 100.0


def test_extrapolates_outer_segments() -> None:
    """With extrapolation the first and last segments extend linearly."""
    curve = PiecewiseLinear([(0.0, 0.0), (10.0, 100.0)], extrapolate=True)
    assert curve.value(-5.0) == pytest.approx(-50.0)
    assert curve.value(20.0) == pytest.approx(200.0)


def test_single_point_is_constant() -> None:
    """A one-point curve returns its y everywhere."""
    curve = PiecewiseLinear([(3.0, 7.0)], extrapolate=True)
    assert curve.value(-100.0) == 7.0
    assert curve.value(3.0) == 7.0
    assert curve.value(100.0) == 7.0


def test_empty_points_rejected() -> None:
    """At least one control point is required."""
    with pytest.raises(ValueError):
        PiecewiseLinear([])


def test_duplicate_x_behaves_like_step() -> None:
    """At a duplicated x the first y wins; to its right the last one is used."""
    curve = PiecewiseLinear([(0.0, 0.0), (5.0, 10.0), (5.0, 20.0), (10.0, 30.0)])
    assert curve.value(5.0) == pytest.approx(10.0)
    assert curve.value(2.5) == pytest.approx(5.0)
    assert curve.value(7.5) == pytest.approx(25.0)


# ---------------------------------------------------------------------------
# Setup codes
# ---------------------------------------------------------------------------


def test_from_setup_code() -> None:
    """Setup codes list ``x,y`` pairs separated by ``|``."""
    curve = PiecewiseLinear.from_setup_code(" 0, 1 | 10, 0 ")
    assert len(curve) == 2
    assert curve.value(5.0) == pytest.approx(0.5)


def test_from_setup_code_rejects_malformed_point() -> None:
    """Each point must have exactly two parts."""
    with pytest.raises(ValueError):
        PiecewiseLinear.from_setup_code("0,1,2|10,0")


def test_values_evaluates_each_x() -> None:
    curve = PiecewiseLinear([(0.0, 0.0), (10.0, 10.0)])
    assert curve.values([0.0, 5.0, 10.0]) == pytest.approx([0.0, 5.0, 10.0])
