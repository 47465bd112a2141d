"""Candidate selection: may a segment be considered for treatment?

Rules are evaluated in a fixed order and the first one that decides wins.
Evaluation is pure; the facade writes the verdict onto the segment.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pavement_engine.core.constants import ModelConstants
from pavement_engine.core.distress import DistressType
from pavement_engine.core.piecewise import PiecewiseLinear
from pavement_engine.core.segment import RoadSegment

NO_TREATMENT_PERIODS: int = 999

# Distress (%) a long segment needs before treatment, by surface life achieved.
_LONG_SEGMENT_DISTRESS_BY_SLA: PiecewiseLinear = PiecewiseLinear.from_setup_code(
    "30,70 | 50,30 | 80,5 | 100,0 | 150,0"
)

_SHORT_SEGMENT_DISTRESSES: tuple[DistressType, ...] = (
    DistressType.FLUSHING,
    DistressType.SCABBING,
    DistressType.MESH_CRACKS,
    DistressType.SHOVING,
)


@dataclass(frozen=True)
class TreatmentInfo:
    """Host-supplied treatment history of a segment.

    Attributes:
        periods_to_next_treatment: Periods until a committed treatment,
            ``999`` if none.
        periods_to_last_treatment: Periods since the last treatment,
            ``999`` if none.
        last_treatment_name: Name of the last treatment, blank if none.
    """

    periods_to_next_treatment: int = NO_TREATMENT_PERIODS
    periods_to_last_treatment: int = NO_TREATMENT_PERIODS
    last_treatment_name: str = ""

    @classmethod
    def from_mapping(cls, info: Mapping[str, Any] | None) -> TreatmentInfo:
        """Build from the host's info mapping; missing keys take defaults."""
        if not info:
            return cls()
        return cls(
            periods_to_next_treatment=int(
                info.get("periods_to_next_treatment", NO_TREATMENT_PERIODS)
            ),
            periods_to_last_treatment=int(
                info.get("periods_to_last_treatment", NO_TREATMENT_PERIODS)
            ),
            last_treatment_name=str(info.get("last_treatment_name", "") or ""),
        )


@dataclass(frozen=True)
class CandidateSelectionResult:
    """Verdict of candidate selection.

    Attributes:
        is_valid_candidate: Whether treatment options should be generated.
        reason: Human-readable explanation of the deciding rule.
    """

    is_valid_candidate: bool
    reason: str

    @property
    def outcome(self) -> str:
        """``"ok"`` for accepted candidates, else the rejection reason."""
        return "ok" if self.is_valid_candidate else self.reason


def _accept(reason: str) -> CandidateSelectionResult:
    return CandidateSelectionResult(is_valid_candidate=True, reason=reason)


def _reject(reason: str) -> CandidateSelectionResult:
    return CandidateSelectionResult(is_valid_candidate=False, reason=reason)


def has_sufficient_distress_short_segment(
    segment: RoadSegment, constants: ModelConstants
) -> bool:
    """Short segments qualify on distressed length rather than percentage.

    One distress longer than ``short_seg_distress1_limit`` metres, or two
    longer than ``short_seg_distress2_limit`` metres, is enough.
    """
    lengths = [
        segment.distress_values[dt] / 100.0 * segment.length for dt in _SHORT_SEGMENT_DISTRESSES
    ]
    over_limit1 = sum(1 for length in lengths if length > constants.short_seg_distress1_limit)
    over_limit2 = sum(1 for length in lengths if length > constants.short_seg_distress2_limit)
    return over_limit1 > 0 or over_limit2 > 1


def has_sufficient_distress_long_segment(
    segment: RoadSegment, constants: ModelConstants
) -> bool:
    """Key distresses plus boosted potholes and pavement faults, against an SLA threshold.

    Younger surfaces need more distress before they qualify.
    """
    d = segment.distress_values
    distress_pct = (
        sum(d[dt] for dt in _SHORT_SEGMENT_DISTRESSES)
        + d[DistressType.POTHOLES] * constants.pothole_boost_factor
        + segment.pavement_fault_percent
    )
    return distress_pct > _LONG_SEGMENT_DISTRESS_BY_SLA.value(segment.surface_life_achieved)


def _is_short_term(period: int, constants: ModelConstants) -> bool:
    screening = constants.short_term_screening_periods
    return screening > 0 and period <= screening


def _short_term_screening(
    segment: RoadSegment, constants: ModelConstants
) -> CandidateSelectionResult:
    if segment.adt < constants.min_adt_to_treat:
        return _reject(
            f"ADT = {round(segment.adt, 1)}: below threshold ({constants.min_adt_to_treat})"
        )
    if segment.length < constants.short_seg_length:
        if has_sufficient_distress_short_segment(segment, constants):
            return _accept("Short Segment, Short Term: Distress above threshold")
        return _reject("Short Segment, Short Term: Distress too low")
    if has_sufficient_distress_long_segment(segment, constants):
        return _accept("Long Segment, Short Term: Distress above threshold")
    return _reject("Long Segment, Short Term: Distress not sufficient for treatment")


def evaluate_candidate(
    segment: RoadSegment,
    period: int,
    periods_to_next_treatment: int,
    constants: ModelConstants,
) -> CandidateSelectionResult:
    """Decide whether *segment* is a treatment candidate in *period*.

    In the first ``short_term_screening_periods`` periods the final PDI/SDI
    rule is replaced by an ADT gate and a segment-length dependent distress
    check.

    Args:
        segment: Segment with current indices.
        period: Current modelling period.
        periods_to_next_treatment: Periods until a committed treatment.
        constants: Model constants.

    Returns:
        The first deciding rule's verdict.
    """
    if periods_to_next_treatment <= constants.min_periods_to_next_treat:
        return _reject(f"Next treatment in {periods_to_next_treatment} periods: too soon")

    if segment.second_coat_needed:
        return _accept("Second-Coat Needed")

    if segment.surface_function == "1a":
        return _accept("Second-Coat Needed over Preseal Repairs")

    if period + 1 < segment.earliest_treat_period:
        return _reject(f"Earliest treatment period {segment.earliest_treat_period} not reached")

    if segment.surface_age < constants.min_surf_age:
        return _reject(
            f"Surface Age = {round(segment.surface_age, 2)}: "
            f"below threshold ({constants.min_surf_age})"
        )

    sla = segment.surface_life_achieved
    if segment.surface_class == "ac" and sla < constants.min_sla_to_treat_ac:
        return _reject(f"SLA = {round(sla, 2)}: below threshold ({constants.min_sla_to_treat_ac})")
    if segment.surface_class == "cs" and sla < constants.min_sla_to_treat_cs:
        return _reject(f"SLA = {round(sla, 2)}: below threshold ({constants.min_sla_to_treat_cs})")

    if _is_short_term(period, constants):
        return _short_term_screening(segment, constants)

    values = f"PDI = {round(segment.pdi, 2)} or SDI = {round(segment.sdi, 2)}"
    thresholds = f"({constants.min_pdi_to_treat}, {constants.min_sdi_to_treat})"
    if segment.sdi < constants.min_sdi_to_treat and segment.pdi < constants.min_pdi_to_treat:
        return _reject(f"{values}: below thresholds {thresholds}")
    return _accept(f"{values}: above thresholds {thresholds}")


def apply_candidate_selection(
    segment: RoadSegment,
    period: int,
    periods_to_next_treatment: int,
    constants: ModelConstants,
) -> CandidateSelectionResult:
    """Evaluate candidate selection and store the verdict on *segment*."""
    result = evaluate_candidate(segment, period, periods_to_next_treatment, constants)
    segment.is_candidate = result.is_valid_candidate
    segment.candidate_outcome = result.outcome
    return result
