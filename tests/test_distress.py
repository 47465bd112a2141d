"""Tests for the distress curve models and curve parameter strings."""

import logging
from dataclasses import replace
from datetime import date

import pytest

from pavement_engine.config import load_lookups
from pavement_engine.core import scurve
from pavement_engine.core.distress import (
    DISTRESS_PROFILES,
    CurveParameters,
    DistressCurveModel,
    DistressType,
    build_distress_models,
)
from pavement_engine.core.errors import ConfigurationError, CurveParameterParseError
from pavement_engine.core.segment import RoadSegment

BASE_DATE = date(2025, 7, 1)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _sample_segment(**overrides: object) -> RoadSegment:
    segment = RoadSegment(
        element_index=7,
        seg_name="TEST-01",
        length=100.0,
        area=700.0,
        urban_rural="r",
        onrc="arterial",
        road_class="m",
        surface_class="cs",
        next_surface="cs",
        adt=2000.0,
        heavy_perc=10.0,
        pavement_age=20.0,
        pavement_remaining_life=20.0,
        surface_age=6.0,
        surface_function="2",
        surface_material="chipseal",
        surface_expected_life=12.0,
    )
    for name, value in overrides.items():
        setattr(segment, name, value)
    return segment


def _sample_models() -> dict[DistressType, DistressCurveModel]:
    return build_distress_models(load_lookups())


# ---------------------------------------------------------------------------
# Curve parameter strings
# ---------------------------------------------------------------------------


def test_parse_curve_parameters() -> None:
    params = CurveParameters.parse("5.00_0.50_20.00")
    assert params == CurveParameters(aadi=5.0, initial_value=0.5, t100=20.0)


def test_encode_rounds_to_two_decimals() -> None:
    params = CurveParameters(aadi=5.126, initial_value=0.5, t100=20.0)
    assert params.encode() == "5.13_0.50_20.00"


@pytest.mark.parametrize("code", ["5_0.5", "1_2_3_4", "a_0.5_20", "", "5.0-0.5-20"])
def test_parse_rejects_malformed_strings(code: str) -> None:
    """Exactly three numeric underscore-delimited tokens are required."""
    with pytest.raises(CurveParameterParseError):
        CurveParameters.parse(code)


def test_parse_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        CurveParameters.parse("bad")


# ---------------------------------------------------------------------------
# Probability and expected parameters
# ---------------------------------------------------------------------------


def test_every_distress_has_a_profile() -> None:
    assert set(DISTRESS_PROFILES) == set(DistressType)
    assert list(_sample_models()) == list(DistressType)


def test_probability_in_open_unit_interval() -> None:
    segment = _sample_segment()
    for model in _sample_models().values():
        p = model.probability(segment)
        assert 0.0 < p < 1.0, model


def test_chipseal_raises_flushing_probability() -> None:
    model = _sample_models()[DistressType.FLUSHING]
    cs = model.probability(_sample_segment(surface_class="cs"))
    ac = model.probability(_sample_segment(surface_class="ac"))
    assert cs > ac


def test_expected_parameters_inside_bounds() -> None:
    """Expected AADI, IV and T100 are kept strictly inside their bounds."""
    segment = _sample_segment(surface_expected_life=500.0)
    for model in _sample_models().values():
        s = model.settings
        expected = model.expected_parameters(segment)
        assert s.aadi_min < expected.aadi < s.aadi_max
        assert s.t100_min < expected.t100 < s.t100_max
        assert s.iv_min < expected.initial_value < s.iv_max
        assert expected.initial_value == s.iv_expected


def test_expected_initial_value_nudged_off_bounds() -> None:
    segment = _sample_segment()
    model = _sample_models()[DistressType.SHOVING]
    s = model.settings

    high = DistressCurveModel(model.profile, replace(s, iv_expected=s.iv_max + 1.0))
    assert high.expected_parameters(segment).initial_value == pytest.approx(s.iv_max * 0.95)

    low = DistressCurveModel(model.profile, replace(s, iv_expected=s.iv_min))
    assert low.expected_parameters(segment).initial_value == pytest.approx(s.iv_min * 1.05)


# ---------------------------------------------------------------------------
# Increment
# ---------------------------------------------------------------------------


def test_increment_zero_while_dormant() -> None:
    model = _sample_models()[DistressType.MESH_CRACKS]
    params = CurveParameters(aadi=5.0, initial_value=0.8, t100=20.0)
    assert model.increment(_sample_segment(surface_age=3.0), params) == 0.0
    assert model.increment(_sample_segment(surface_age=4.99), params) == 0.0


def test_increment_is_initial_value_in_first_period() -> None:
    model = _sample_models()[DistressType.MESH_CRACKS]
    params = CurveParameters(aadi=5.0, initial_value=0.8, t100=20.0)
    assert model.increment(_sample_segment(surface_age=5.0), params) == 0.8
    assert model.increment(_sample_segment(surface_age=5.5), params) == 0.8


def test_increment_follows_s_curve_afterwards() -> None:
    model = _sample_models()[DistressType.MESH_CRACKS]
    params = CurveParameters(aadi=5.0, initial_value=0.8, t100=20.0)
    growth = model.increment(_sample_segment(surface_age=8.0), params)
    assert growth == pytest.approx(scurve.progression_increment(20.0, 3.0))


def test_next_value_skips_other_surfaces() -> None:
    """Blocks, concrete and other surfaces do not progress."""
    model = _sample_models()[DistressType.LT_CRACKS]
    segment = _sample_segment(surface_class="blocks", surface_age=10.0)
    assert model.next_value_after_increment(segment, 4.0, "2.00_0.50_20.00") == 4.0


def test_next_value_adds_increment() -> None:
    model = _sample_models()[DistressType.LT_CRACKS]
    segment = _sample_segment(surface_age=5.0)
    assert model.next_value_after_increment(segment, 4.0, "5.00_0.50_20.00") == pytest.approx(4.5)


def test_next_value_rejects_bad_encoding() -> None:
    model = _sample_models()[DistressType.LT_CRACKS]
    with pytest.raises(CurveParameterParseError):
        model.next_value_after_increment(_sample_segment(), 4.0, "5.00_0.50")


# ---------------------------------------------------------------------------
# Reset
# ---------------------------------------------------------------------------


def test_value_after_reset_is_zero() -> None:
    for model in _sample_models().values():
        assert model.value_after_reset() == 0.0


def test_reset_over_preseal_keeps_previous_curve() -> None:
    """A treatment over a pre-seal inherits the pre-seal's curve parameters."""
    segment = _sample_segment(previous_surface_function="1a")
    for model in _sample_models().values():
        assert model.resetted_setup(segment, 30.0, "Resurfacing", "4.00_0.40_18.00") == "4.00_0.40_18.00"


def test_rehab_reset_uses_expected_parameters() -> None:
    """Category matching is a case-insensitive substring test."""
    segment = _sample_segment(surface_age=0.0, previous_surface_function="2")
    model = _sample_models()[DistressType.MESH_CRACKS]
    expected = model.expected_parameters(segment).encode()
    assert model.resetted_setup(segment, 50.0, "REHABILITATION", "x") == expected


def test_holding_reset_applies_penalty() -> None:
    """A large pre-treatment value drives AADI and T100 to their minimums."""
    segment = _sample_segment(surface_age=0.0, previous_surface_function="2")
    model = _sample_models()[DistressType.LT_CRACKS]
    s = model.settings
    result = CurveParameters.parse(model.resetted_setup(segment, 90.0, "Holding", "x"))
    assert result.aadi == s.aadi_min
    assert result.t100 == s.t100_min


def test_small_pre_value_gets_no_penalty() -> None:
    """Below the first penalty threshold the expected parameters stand."""
    segment = _sample_segment(surface_age=0.0, previous_surface_function="2")
    model = _sample_models()[DistressType.LT_CRACKS]
    expected = model.expected_parameters(segment).encode()
    assert model.resetted_setup(segment, 0.0, "Resurfacing", "x") == expected


def test_full_reset_distress_ignores_penalty() -> None:
    """Flushing resets straight to its expected parameters."""
    segment = _sample_segment(surface_age=0.0, previous_surface_function="2")
    model = _sample_models()[DistressType.FLUSHING]
    expected = model.expected_parameters(segment).encode()
    assert model.resetted_setup(segment, 90.0, "Holding", "x") == expected


# ---------------------------------------------------------------------------
# Initialisation
# ---------------------------------------------------------------------------


def test_initial_value_without_survey_date() -> None:
    model = _sample_models()[DistressType.SCABBING]
    assert model.initial_value(_sample_segment(), 7.0, BASE_DATE) == 7.0


def test_initial_value_fresh_survey() -> None:
    """A survey newer than the surface is used unchanged."""
    segment = _sample_segment(surface_age=6.0, condition_survey_date=date(2024, 7, 1))
    model = _sample_models()[DistressType.SCABBING]
    assert model.initial_value(segment, 7.0, BASE_DATE) == 7.0


def test_initial_value_stale_first_coat_is_zero() -> None:
    segment = _sample_segment(
        surface_age=1.0, surface_function="1", condition_survey_date=date(2022, 7, 1)
    )
    model = _sample_models()[DistressType.SCABBING]
    assert model.initial_value(segment, 7.0, BASE_DATE) == 0.0


def test_initial_value_stale_resurfacing_uses_historic_curve() -> None:
    segment = _sample_segment(surface_age=1.0, condition_survey_date=date(2022, 7, 1))
    model = _sample_models()[DistressType.SCABBING]
    expected = model.settings.historic_reset_cs.value(20.0)
    assert model.initial_value(segment, 20.0, BASE_DATE) == pytest.approx(expected)
    assert expected == pytest.approx(2.0)


def test_initial_value_stale_on_blocks_is_configuration_error() -> None:
    segment = _sample_segment(
        surface_class="blocks", surface_age=1.0, condition_survey_date=date(2022, 7, 1)
    )
    model = _sample_models()[DistressType.SCABBING]
    with pytest.raises(ConfigurationError):
        model.initial_value(segment, 20.0, BASE_DATE)


def test_future_survey_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    segment = _sample_segment(condition_survey_date=date(2026, 1, 1))
    model = _sample_models()[DistressType.SCABBING]
    with caplog.at_level(logging.WARNING):
        value = model.initial_value(segment, 7.0, BASE_DATE)
    assert value == 7.0
    assert "condition survey date" in caplog.text
    assert "TEST-01" in caplog.text


def test_calibrated_setup_is_parseable_and_bounded() -> None:
    segment = _sample_segment(surface_age=9.0)
    for dt, model in _sample_models().items():
        s = model.settings
        params = CurveParameters.parse(model.calibrated_setup(segment, 3.0, 0.5))
        assert s.aadi_min - 0.01 <= params.aadi <= s.aadi_max + 0.01, dt
        assert s.t100_min - 0.01 <= params.t100 <= s.t100_max + 0.01, dt
        assert s.iv_min - 0.01 <= params.initial_value <= s.iv_max + 0.01, dt
