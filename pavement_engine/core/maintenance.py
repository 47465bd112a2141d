"""Routine maintenance trigger."""

from __future__ import annotations

from pavement_engine.core.segment import RoadSegment
from pavement_engine.core.triggers import ROUTINE_MAINTENANCE, TreatmentProposal


def routine_maintenance_proposal(segment: RoadSegment, period: int) -> TreatmentProposal | None:
    """Routine maintenance for the period, costed from the predicted cost per km.

    Uses ``segment.maintenance_cost_per_km``, so indices must be current.
    Returns ``None`` when no maintenance cost is predicted.
    """
    cost_per_km = segment.maintenance_cost_per_km
    if cost_per_km <= 0.0:
        return None
    return TreatmentProposal(
        element_index=segment.element_index,
        treatment_name=ROUTINE_MAINTENANCE,
        period=period,
        quantity=cost_per_km * segment.length / 1000.0,
        is_forced=False,
        reason="Routine Maintenance",
        comment=f"PDI = {round(segment.pdi, 2)}; Rut = {round(segment.rut, 2)}mm",
    )
