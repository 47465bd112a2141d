"""Tests for the inverse-distribution sampler."""

import pytest

from pavement_engine.core.sampler import sample


def test_lognormal_median_is_central_tendency() -> None:
    assert sample("a", 0.1, 0.5) == pytest.approx(0.1)


def test_lognormal_is_right_skewed() -> None:
    """Equal probability steps either side of the median give a longer upper tail."""
    median = sample("a", 1.0, 0.5)
    upper = sample("a", 1.0, 0.9) - median
    lower = median - sample("a", 1.0, 0.1)
    assert upper > lower


def test_sample_increases_with_probability() -> None:
    """Higher "high rate" probabilities give higher rates for every code."""
    for code in ("a", "n", "u"):
        values = [sample(code, 0.9, p) for p in (0.1, 0.3, 0.5, 0.7, 0.9)]
        assert values == sorted(values), code


def test_normal_floored_at_zero() -> None:
    assert sample("n", 0.5, 0.0) >= 0.0


def test_uniform_quantile() -> None:
    assert sample("u", 2.0, 0.25) == pytest.approx(1.0)


def test_probability_is_clipped() -> None:
    """Probabilities of 0 and 1 are clipped rather than giving infinities."""
    assert sample("a", 1.0, 0.0) == pytest.approx(sample("a", 1.0, 0.001))
    assert sample("a", 1.0, 1.0) == pytest.approx(sample("a", 1.0, 0.999))


def test_code_is_case_insensitive() -> None:
    assert sample("A", 0.1, 0.5) == pytest.approx(sample("a", 0.1, 0.5))


def test_unknown_code_rejected() -> None:
    with pytest.raises(ValueError):
        sample("z", 1.0, 0.5)


def test_negative_central_tendency_rejected() -> None:
    with pytest.raises(ValueError):
        sample("a", -1.0, 0.5)
