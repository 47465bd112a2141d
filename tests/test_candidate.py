"""Tests for candidate selection."""

from dataclasses import replace

import pytest

from pavement_engine.config import load_model_constants
from pavement_engine.core.candidate import (
    CandidateSelectionResult,
    TreatmentInfo,
    apply_candidate_selection,
    evaluate_candidate,
    has_sufficient_distress_long_segment,
    has_sufficient_distress_short_segment,
)
from pavement_engine.core.constants import ModelConstants
from pavement_engine.core.distress import DistressType
from pavement_engine.core.segment import RoadSegment

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _sample_segment(**overrides: object) -> RoadSegment:
    segment = RoadSegment(
        element_index=5,
        seg_name="CSL-01",
        length=100.0,
        area=700.0,
        urban_rural="r",
        road_class="m",
        surface_class="cs",
        next_surface="cs",
        pavement_age=20.0,
        pavement_remaining_life=20.0,
        surface_age=8.0,
        surface_function="2",
        surface_expected_life=12.0,
        pdi=4.0,
        sdi=6.0,
    )
    for name, value in overrides.items():
        setattr(segment, name, value)
    return segment


# ---------------------------------------------------------------------------
# Rule chain
# ---------------------------------------------------------------------------


def test_next_treatment_too_soon() -> None:
    constants = load_model_constants()
    result = evaluate_candidate(_sample_segment(), 1, 6, constants)
    assert result == CandidateSelectionResult(False, "Next treatment in 6 periods: too soon")


def test_second_coat_accepted_regardless_of_indices() -> None:
    """A first-coat chipseal with half a year of life left is always accepted."""
    constants = load_model_constants()
    segment = _sample_segment(surface_function="1", surface_age=11.5, pdi=0.0, sdi=0.0)
    assert segment.surface_remaining_life == pytest.approx(0.5)
    assert segment.second_coat_needed
    result = evaluate_candidate(segment, 1, 999, constants)
    assert result.is_valid_candidate
    assert result.reason == "Second-Coat Needed"


def test_preseal_awaiting_follow_up_accepted() -> None:
    constants = load_model_constants()
    segment = _sample_segment(surface_function="1a", surface_age=0.5, pdi=0.0, sdi=0.0)
    result = evaluate_candidate(segment, 1, 999, constants)
    assert result == CandidateSelectionResult(True, "Second-Coat Needed over Preseal Repairs")


def test_earliest_treatment_period() -> None:
    constants = load_model_constants()
    segment = _sample_segment(earliest_treat_period=5)
    early = evaluate_candidate(segment, 3, 999, constants)
    assert early == CandidateSelectionResult(False, "Earliest treatment period 5 not reached")
    assert evaluate_candidate(segment, 4, 999, constants).is_valid_candidate


def test_young_surface_rejected() -> None:
    constants = load_model_constants()
    result = evaluate_candidate(_sample_segment(surface_age=2.0), 1, 999, constants)
    assert not result.is_valid_candidate
    assert result.reason == f"Surface Age = 2.0: below threshold ({constants.min_surf_age})"


def test_low_sla_rejected_by_surface_class() -> None:
    constants = load_model_constants()
    cs = evaluate_candidate(_sample_segment(surface_age=4.0), 1, 999, constants)
    assert cs.reason == f"SLA = 33.33: below threshold ({constants.min_sla_to_treat_cs})"

    # 55 % is enough for chipseal but not for asphalt.
    ac = evaluate_candidate(
        _sample_segment(surface_class="ac", surface_age=6.6), 1, 999, constants
    )
    assert ac.reason == f"SLA = 55.0: below threshold ({constants.min_sla_to_treat_ac})"
    assert evaluate_candidate(_sample_segment(surface_age=6.6), 1, 999, constants).is_valid_candidate


def test_low_indices_rejected() -> None:
    constants = load_model_constants()
    result = evaluate_candidate(_sample_segment(pdi=1.0, sdi=1.0), 1, 999, constants)
    assert not result.is_valid_candidate
    assert result.reason == (
        f"PDI = 1.0 or SDI = 1.0: below thresholds "
        f"({constants.min_pdi_to_treat}, {constants.min_sdi_to_treat})"
    )
    assert result.outcome == result.reason


def test_either_index_above_threshold_accepted() -> None:
    constants = load_model_constants()
    result = evaluate_candidate(_sample_segment(pdi=4.0, sdi=1.0), 1, 999, constants)
    assert result.is_valid_candidate
    assert "above thresholds" in result.reason
    assert result.outcome == "ok"


def test_selection_is_idempotent() -> None:
    constants = load_model_constants()
    segment = _sample_segment()
    first = evaluate_candidate(segment, 2, 999, constants)
    second = evaluate_candidate(segment, 2, 999, constants)
    assert first == second


def test_apply_writes_verdict_to_segment() -> None:
    constants = load_model_constants()
    segment = _sample_segment(pdi=1.0, sdi=1.0)
    result = apply_candidate_selection(segment, 1, 999, constants)
    assert segment.is_candidate is False
    assert segment.candidate_outcome == result.reason

    segment.pdi = 10.0
    apply_candidate_selection(segment, 1, 999, constants)
    assert segment.is_candidate
    assert segment.candidate_outcome == "ok"


# ---------------------------------------------------------------------------
# Treatment history
# ---------------------------------------------------------------------------


def test_treatment_info_defaults() -> None:
    assert TreatmentInfo.from_mapping(None) == TreatmentInfo(999, 999, "")
    info = TreatmentInfo.from_mapping({"periods_to_last_treatment": "3", "last_treatment_name": None})
    assert info.periods_to_next_treatment == 999
    assert info.periods_to_last_treatment == 3
    assert info.last_treatment_name == ""


# ---------------------------------------------------------------------------
# Short-term screening
# ---------------------------------------------------------------------------


def _screening_constants(periods: int = 3) -> ModelConstants:
    return replace(load_model_constants(), short_term_screening_periods=periods)


def _with_distress(segment: RoadSegment, **values: float) -> RoadSegment:
    for name, value in values.items():
        segment.distress_values[DistressType(name)] = value
    return segment


def test_screening_off_by_default() -> None:
    constants = load_model_constants()
    assert constants.short_term_screening_periods == 0
    result = evaluate_candidate(_sample_segment(adt=1.0), 1, 999, constants)
    assert result.is_valid_candidate
    assert "above thresholds" in result.reason


def test_screening_rejects_low_adt() -> None:
    constants = _screening_constants()
    result = evaluate_candidate(_sample_segment(adt=20.0), 1, 999, constants)
    assert result == CandidateSelectionResult(
        False, f"ADT = 20.0: below threshold ({constants.min_adt_to_treat})"
    )


def test_screening_only_in_leading_periods() -> None:
    constants = _screening_constants(3)
    segment = _sample_segment(adt=20.0)
    assert not evaluate_candidate(segment, 3, 999, constants).is_valid_candidate
    late = evaluate_candidate(segment, 4, 999, constants)
    assert late.is_valid_candidate
    assert "above thresholds" in late.reason


def test_screening_keeps_preliminary_rules() -> None:
    constants = _screening_constants()
    segment = _sample_segment(adt=20.0, surface_function="1", surface_age=11.5)
    assert evaluate_candidate(segment, 1, 999, constants).reason == "Second-Coat Needed"


def test_short_segment_distress_lengths() -> None:
    """40 m segment: 30 % is 12 m, 60 % is 24 m against limits of 20 m and 10 m."""
    constants = _screening_constants()
    segment = _with_distress(_sample_segment(length=40.0, adt=500.0), scabbing=30.0)
    assert not has_sufficient_distress_short_segment(segment, constants)
    result = evaluate_candidate(segment, 1, 999, constants)
    assert result == CandidateSelectionResult(False, "Short Segment, Short Term: Distress too low")

    # Two distresses over the lower limit.
    _with_distress(segment, mesh_cracks=30.0)
    assert has_sufficient_distress_short_segment(segment, constants)
    result = evaluate_candidate(segment, 1, 999, constants)
    assert result == CandidateSelectionResult(True, "Short Segment, Short Term: Distress above threshold")
    assert result.outcome == "ok"

    # One distress over the upper limit.
    single = _with_distress(_sample_segment(length=40.0, adt=500.0), flushing=60.0)
    assert has_sufficient_distress_short_segment(single, constants)


def test_long_segment_distress_against_sla_threshold() -> None:
    """At 66.7 % SLA the distress threshold is 30 - 25 * (16.67 / 30) = 16.1 %."""
    constants = _screening_constants()
    segment = _with_distress(
        _sample_segment(length=100.0, adt=500.0), flushing=10.0, potholes=0.5
    )
    assert not has_sufficient_distress_long_segment(segment, constants)
    result = evaluate_candidate(segment, 1, 999, constants)
    assert result == CandidateSelectionResult(
        False, "Long Segment, Short Term: Distress not sufficient for treatment"
    )

    _with_distress(segment, shoving=2.0)
    assert has_sufficient_distress_long_segment(segment, constants)
    result = evaluate_candidate(segment, 1, 999, constants)
    assert result == CandidateSelectionResult(True, "Long Segment, Short Term: Distress above threshold")


def test_long_segment_threshold_falls_with_age() -> None:
    constants = _screening_constants()
    segment = _with_distress(_sample_segment(length=100.0, adt=500.0), flushing=1.0)
    assert not has_sufficient_distress_long_segment(segment, constants)
    segment.surface_age = 12.0
    assert has_sufficient_distress_long_segment(segment, constants)
