"""Treatment trigger engine.

For a candidate segment this produces the competing treatment proposals an
external optimiser chooses between.  Some situations force a single
treatment (second coats, pre-seal follow-ups, end-of-life replacement of
non-bituminous surfaces); otherwise every applicable option is scored with
a treatment suitability score (TSS) and poorly scoring options are dropped.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from pavement_engine.core.candidate import TreatmentInfo
from pavement_engine.core.constants import ModelConstants
from pavement_engine.core.errors import ConfigurationError
from pavement_engine.core.lookups import LookupTables
from pavement_engine.core.segment import RoadSegment
from pavement_engine.core.suitability import (
    FORCED_SCORE,
    preservation_score,
    preseal_holding_score,
    rehabilitation_score,
)

ROUTINE_MAINTENANCE: str = "RMaint"

_BIRTHDAY_TREATMENTS: dict[str, str] = {
    "blocks": "BlockRep",
    "concrete": "ConcRep",
    "other": "Xtreat",
}


@dataclass(frozen=True)
class TreatmentProposal:
    """One treatment option for one segment in one period.

    Attributes:
        element_index: Host handle of the segment.
        treatment_name: Treatment type name.
        period: Period the treatment would be applied in.
        quantity: Quantity in the treatment's unit (usually m2).
        is_forced: Whether the optimiser must apply this treatment.
        reason: Short trigger reason.
        comment: Supporting index values.
        suitability_score: TSS used to rank options.
        budget_fractions: Optional split of the cost over budget
            categories; fractions sum to 1.
    """

    element_index: int
    treatment_name: str
    period: int
    quantity: float
    is_forced: bool = False
    reason: str = ""
    comment: str = ""
    suitability_score: float = 0.0
    budget_fractions: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.treatment_name:
            raise ValueError("treatment_name must be non-empty.")
        if self.quantity < 0.0:
            raise ValueError("quantity must be >= 0.")
        object.__setattr__(self, "budget_fractions", MappingProxyType(dict(self.budget_fractions)))


# ---------------------------------------------------------------------------
# Forced treatments
# ---------------------------------------------------------------------------


def _forced(segment: RoadSegment, name: str, period: int, reason: str, comment: str) -> TreatmentProposal:
    return TreatmentProposal(
        element_index=segment.element_index,
        treatment_name=name,
        period=period,
        quantity=segment.area,
        is_forced=True,
        reason=reason,
        comment=comment,
        suitability_score=FORCED_SCORE,
    )


def birthday_treatment_name(segment: RoadSegment) -> str | None:
    """Like-for-like replacement for blocks, concrete and other surfaces."""
    return _BIRTHDAY_TREATMENTS.get(segment.next_surface)


def _forced_proposal(segment: RoadSegment, period: int) -> TreatmentProposal | None:
    if segment.second_coat_needed:
        return _forced(segment, "Chipseal_S", period, "Second coat", "Second coat")

    if segment.surface_function == "1a" and segment.next_surface_is_chipseal:
        return _forced(segment, "ChipSeal_H", period, "Pre-seal follow-up", "")

    if segment.can_treat:
        name = birthday_treatment_name(segment)
        if (
            name is not None
            and segment.surface_remaining_life <= 1.0
            and period >= segment.earliest_treat_period
        ):
            return _forced(segment, name, period, "Birthday treatment", "")
    return None


# ---------------------------------------------------------------------------
# Optional treatments
# ---------------------------------------------------------------------------


def _sla_reason(segment: RoadSegment) -> str:
    return f"SLA={round(segment.surface_life_achieved, 1)}"


def _preservation_proposal(
    segment: RoadSegment, name: str, period: int, constants: ModelConstants
) -> TreatmentProposal:
    tss = preservation_score(segment, constants)
    return TreatmentProposal(
        element_index=segment.element_index,
        treatment_name=name,
        period=period,
        quantity=segment.area,
        reason=_sla_reason(segment),
        comment=f"SDI={round(segment.sdi, 1)}, TSS={round(tss, 2)}",
        suitability_score=tss,
    )


def _preseal_proposal(
    segment: RoadSegment,
    name: str,
    period: int,
    fraction: float,
    constants: ModelConstants,
) -> TreatmentProposal:
    if segment.can_rehab:
        tss = preseal_holding_score(segment, constants)
    else:
        tss = rehabilitation_score(segment, constants)
    return TreatmentProposal(
        element_index=segment.element_index,
        treatment_name=name,
        period=period,
        quantity=segment.area * fraction,
        reason=_sla_reason(segment),
        comment=f"PDI={round(segment.pdi, 1)}, TSS={round(tss, 2)}",
        suitability_score=tss,
    )


def _holding_overlay_proposal(
    segment: RoadSegment,
    period: int,
    lookups: LookupTables,
    constants: ModelConstants,
) -> TreatmentProposal:
    """Thin asphalt overlay with pre-repairs, quantified as total cost.

    Raises:
        ConfigurationError: If the ``ThinAC_H`` unit rate is not 1.0, since
            the quantity is already a cost.
    """
    holding = lookups.treatment("ThinAC_H")
    if holding.unit_rate != 1.0:
        raise ConfigurationError(
            f"Treatment 'ThinAC_H' must have a unit rate of 1.0, got {holding.unit_rate}"
        )
    overlay_cost = segment.area * lookups.treatment("ThinAC_P").unit_rate
    repair_quantity = segment.area * min(100.0, segment.pdi) / 100.0
    repair_cost = repair_quantity * lookups.treatment("HMaint_AC").unit_rate
    total = overlay_cost + repair_cost

    fractions = {}
    if total > 0.0:
        fractions = {"Resurfacing": overlay_cost / total, "Pre-Repairs": repair_cost / total}

    tss = preservation_score(segment, constants)
    return TreatmentProposal(
        element_index=segment.element_index,
        treatment_name="ThinAC_H",
        period=period,
        quantity=total,
        reason=_sla_reason(segment),
        comment=f"SDI={round(segment.sdi, 1)}, TSS={round(tss, 2)}",
        suitability_score=tss,
        budget_fractions=fractions,
    )


def _rehab_proposal(
    segment: RoadSegment, period: int, constants: ModelConstants
) -> TreatmentProposal:
    tss = rehabilitation_score(segment, constants)
    return TreatmentProposal(
        element_index=segment.element_index,
        treatment_name=f"Rehab_{segment.surface_road_type.upper()}",
        period=period,
        quantity=segment.area,
        reason=_sla_reason(segment),
        comment=f"PDI={round(segment.pdi, 1)}, TSS={round(tss, 2)}",
        suitability_score=tss,
    )


def _periods_since_non_routine_treatment(info: TreatmentInfo) -> int:
    if info.last_treatment_name.strip().lower() == ROUTINE_MAINTENANCE.lower():
        return 999
    return info.periods_to_last_treatment


def _preservation_allowed(segment: RoadSegment, max_pdi: float, constants: ModelConstants) -> bool:
    return (
        segment.rut <= constants.preserve_max_rut
        and segment.surface_life_achieved >= constants.preserve_min_sla
        and segment.pdi <= max_pdi
    )


def _optional_proposals(
    segment: RoadSegment,
    period: int,
    info: TreatmentInfo,
    lookups: LookupTables,
    constants: ModelConstants,
) -> list[TreatmentProposal]:
    proposals: list[TreatmentProposal] = []
    to_chipseal = segment.next_surface_is_chipseal

    if to_chipseal and _preservation_allowed(segment, constants.preserve_max_pdi_cs, constants):
        proposals.append(_preservation_proposal(segment, "ChipSeal_P", period, constants))

    if to_chipseal and segment.surface_function != "1a":
        fraction = lookups.range_value("preseal_effective", segment.pdi)
        if fraction > 0.0:
            proposals.append(_preseal_proposal(segment, "PreSeal", period, fraction, constants))

    if not to_chipseal:
        if _preservation_allowed(segment, constants.preserve_max_pdi_ac, constants):
            proposals.append(_preservation_proposal(segment, "ThinAC_P", period, constants))
        if _preservation_allowed(segment, constants.holding_max_pdi_ac, constants):
            proposals.append(_holding_overlay_proposal(segment, period, lookups, constants))

        spacing_ok = (
            _periods_since_non_routine_treatment(info) >= constants.min_periods_between_ac_hmaint
        )
        sla_ok = not (
            segment.asphalt_ok
            and segment.surface_life_achieved > constants.max_sla_for_ac_hmaint
        )
        if spacing_ok and sla_ok:
            fraction = lookups.range_value("preseal_effective", segment.pdi)
            if fraction > 0.0:
                proposals.append(
                    _preseal_proposal(segment, "HMaint_AC", period, fraction, constants)
                )

    if to_chipseal:
        rehab_ok = segment.can_rehab and segment.is_chipseal
    else:
        rehab_ok = segment.can_rehab and segment.next_surface == "ac" and not segment.is_chipseal
    if rehab_ok:
        proposals.append(_rehab_proposal(segment, period, constants))

    return [p for p in proposals if p.suitability_score > constants.min_tss_allowed]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def get_treatment_proposals(
    segment: RoadSegment,
    period: int,
    info: TreatmentInfo,
    lookups: LookupTables,
    constants: ModelConstants,
) -> list[TreatmentProposal]:
    """Treatment options for *segment* in *period*.

    Nothing is proposed for non-candidates or when a committed treatment is
    too close.  A forced treatment is returned on its own; otherwise every
    applicable option scoring above ``min_tss_allowed`` is returned.

    Args:
        segment: Segment with current indices, ranks and candidate flag.
        period: Current modelling period.
        info: Host-supplied treatment history.
        lookups: Shared lookup tables.
        constants: Model constants.

    Raises:
        ConfigurationError: If a treatment or lookup used for costing is
            missing or inconsistent.
    """
    if not segment.is_candidate:
        return []
    if info.periods_to_next_treatment <= constants.min_periods_to_next_treat:
        return []

    forced = _forced_proposal(segment, period)
    if forced is not None:
        return [forced]
    return _optional_proposals(segment, period, info, lookups, constants)
