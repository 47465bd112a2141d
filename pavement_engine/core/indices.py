"""Distress indices, benefit-cost objectives and maintenance cost.

All functions are pure.  :func:`update_indices` writes the full set of
derived values onto a segment after every lifecycle operation.
"""

from __future__ import annotations

import math

from pavement_engine.core.constants import ModelConstants
from pavement_engine.core.distress import DistressType
from pavement_engine.core.lookups import LookupTables
from pavement_engine.core.segment import RoadSegment

# Objective value assigned to the unweighted share of the objective.
OBJECTIVE_CONSTANT: float = 30.0

_LOG_FLOOR: float = 0.001


# ---------------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------------


def logit(x: float) -> float:
    """Logistic transform ``exp(x) / (1 + exp(x))``."""
    if x >= 0.0:
        return 1.0 / (1.0 + math.exp(-x))
    e = math.exp(x)
    return e / (1.0 + e)


def exceedance_reset(value: float, threshold: float, improvement_fraction: float) -> float:
    """Value after a treatment that removes part of the exceedance.

    Values at or below *threshold* are unchanged; above it, the
    exceedance is reduced by *improvement_fraction*.

    >>> exceedance_reset(15.0, 10.0, 0.5)
    12.5
    """
    if value <= threshold:
        return value
    return value - (value - threshold) * improvement_fraction


# ---------------------------------------------------------------------------
# Distress indices
# ---------------------------------------------------------------------------


def boosted_potholes(segment: RoadSegment, constants: ModelConstants) -> float:
    return segment.distress_values[DistressType.POTHOLES] * constants.pothole_boost_factor


def pavement_distress_index(segment: RoadSegment, constants: ModelConstants) -> float:
    """Pavement Distress Index (PDI).

    Weights cracking, shoving, boosted potholes and pavement faults.  One
    formula serves both the short and the long term.
    """
    d = segment.distress_values
    return (
        0.2 * d[DistressType.LT_CRACKS]
        + d[DistressType.MESH_CRACKS]
        + d[DistressType.SHOVING]
        + boosted_potholes(segment, constants)
        + segment.pavement_fault_percent
    )


def surface_distress_index(segment: RoadSegment, constants: ModelConstants) -> float:
    """Surface Distress Index (SDI)."""
    d = segment.distress_values
    return (
        d[DistressType.FLUSHING]
        + d[DistressType.SCABBING]
        + 0.5 * d[DistressType.LT_CRACKS]
        + boosted_potholes(segment, constants)
        + segment.surface_fault_percent
    )


# ---------------------------------------------------------------------------
# Benefit-cost objectives
# ---------------------------------------------------------------------------


def objective_distress(pdi: float, sdi: float) -> float:
    return 100.0 * logit(0.4 * (0.7 * pdi + 0.3 * sdi) - 4.0)


def objective_remaining_surface_life(remaining_life: float) -> float:
    return 100.0 * logit(-0.5 * remaining_life - 2.5)


def objective_rutting(rut: float, threshold: float) -> float:
    return 100.0 * logit(0.55 * (rut - threshold) - 1.65)


def objective_roughness(naasra: float, threshold: float) -> float:
    return 100.0 * logit(0.044 * (naasra - threshold) - 1.76)


def objective_raw(distress: float, rsl: float, rutting: float, roughness: float) -> float:
    return 0.3 * distress + 0.2 * rsl + 0.25 * rutting + 0.25 * roughness


def objective_weighted(raw: float, weighting: float) -> float:
    return raw * weighting + OBJECTIVE_CONSTANT * (1.0 - weighting)


# ---------------------------------------------------------------------------
# Maintenance cost
# ---------------------------------------------------------------------------


def maintenance_cost_per_km(segment: RoadSegment, constants: ModelConstants) -> float:
    """Predicted routine maintenance cost per km.

    Zero for surfaces other than chipseal or asphalt and for segments whose
    PDI is below the maintenance threshold.  Uses ``segment.pdi``, so the
    indices must be current.
    """
    if not segment.is_cs_or_ac:
        return 0.0
    if segment.pdi < constants.maintenance_cost_pdi_threshold:
        return 0.0

    d = segment.distress_values

    def _ln(x: float) -> float:
        return math.log(max(x, _LOG_FLOOR))

    exponent = (
        0.0122 * segment.naasra
        + 0.055 * _ln(d[DistressType.SHOVING])
        + 0.048 * _ln(d[DistressType.MESH_CRACKS])
        + 0.243 * _ln(segment.adt)
        + 0.644 * _ln(segment.rut)
        + 0.01 * segment.pavement_age
        + 0.03 * _ln(d[DistressType.POTHOLES])
        + 5.227
    )
    return constants.maintenance_cost_calibration * math.exp(exponent)


# ---------------------------------------------------------------------------
# Segment update
# ---------------------------------------------------------------------------


def update_indices(
    segment: RoadSegment,
    lookups: LookupTables,
    constants: ModelConstants,
) -> None:
    """Recompute PDI, SDI, objectives and maintenance cost on *segment*.

    Raises:
        ConfigurationError: If a threshold or weighting lookup is missing.
    """
    segment.pdi = pavement_distress_index(segment, constants)
    segment.sdi = surface_distress_index(segment, constants)

    rut_threshold = lookups.number_value("reset_exceed_thresh_rut", "preserve")
    naasra_threshold = lookups.number_value_or_default(
        "reset_exceed_thresh_naasra", segment.surface_road_type
    )
    weighting = lookups.number_value("bca_weighting", segment.road_type)

    segment.obj_distress = objective_distress(segment.pdi, segment.sdi)
    segment.obj_rsl = objective_remaining_surface_life(segment.surface_remaining_life)
    segment.obj_rutting = objective_rutting(segment.rut, rut_threshold)
    segment.obj_naasra = objective_roughness(segment.naasra, naasra_threshold)
    segment.obj_raw = objective_raw(
        segment.obj_distress, segment.obj_rsl, segment.obj_rutting, segment.obj_naasra
    )
    segment.obj_weighted = objective_weighted(segment.obj_raw, weighting)
    segment.obj_auc = segment.obj_weighted * segment.area

    segment.maintenance_cost_per_km = maintenance_cost_per_km(segment, constants)
