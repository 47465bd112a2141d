"""Rutting and roughness (NAASRA) estimators.

Initial values account for treatments applied since the high-speed or
roughness survey.  Yearly rates come from the survey history until the
segment is first treated; after that they are drawn from the
inverse-distribution sampler using a "high rate" probability.
"""

from __future__ import annotations

from pavement_engine.core.distress import DistressType
from pavement_engine.core.indices import exceedance_reset, logit
from pavement_engine.core.lookups import LookupTables
from pavement_engine.core.sampler import sample
from pavement_engine.core.segment import RoadSegment

RUT: str = "rut"
NAASRA: str = "naasra"

RUT_INCREMENT_BOUNDS: tuple[float, float] = (0.05, 1.5)
NAASRA_INCREMENT_BOUNDS: tuple[float, float] = (0.2, 1.5)

# Sampler distribution code and central tendency for post-treatment rates.
RUT_RATE_DISTRIBUTION: tuple[str, float] = ("a", 0.1)
NAASRA_RATE_DISTRIBUTION: tuple[str, float] = ("a", 0.9)


# ---------------------------------------------------------------------------
# High-rate probabilities
# ---------------------------------------------------------------------------


def high_rut_probability(segment: RoadSegment) -> float:
    d = segment.distress_values
    x = (
        -1.6
        + 1.1 * (1.0 if segment.is_chipseal else 0.0)
        - 0.4 * (1.0 if segment.is_urban else 0.0)
        + 0.02 * segment.hcv_risk
        + 0.06 * d[DistressType.SHOVING]
        + 0.02 * d[DistressType.MESH_CRACKS]
        + 0.04 * d[DistressType.SCABBING]
        + 0.01 * d[DistressType.FLUSHING]
    )
    return logit(x)


def high_roughness_probability(segment: RoadSegment) -> float:
    d = segment.distress_values
    x = (
        -2.8
        + 0.6 * (1.0 if segment.is_chipseal else 0.0)
        + 0.5 * (1.0 if segment.is_urban else 0.0)
        + 0.03 * segment.hcv_risk
        + 0.02 * d[DistressType.SHOVING]
        + 0.01 * d[DistressType.MESH_CRACKS]
        + 0.03 * d[DistressType.SCABBING]
        + 1.67 * d[DistressType.POTHOLES]
        + 0.09 * segment.rut
    )
    return logit(x)


def rut_increment_after_treatment(segment: RoadSegment) -> float:
    code, central = RUT_RATE_DISTRIBUTION
    return sample(code, central, high_rut_probability(segment))


def naasra_increment_after_treatment(segment: RoadSegment) -> float:
    code, central = NAASRA_RATE_DISTRIBUTION
    return sample(code, central, high_roughness_probability(segment))


# ---------------------------------------------------------------------------
# Initial values and rates
# ---------------------------------------------------------------------------


def _exceedance_value(
    segment: RoadSegment,
    lookups: LookupTables,
    value: float,
    kind: str,
) -> float:
    srt = segment.surface_road_type
    threshold = lookups.number_value_or_default(f"reset_exceed_thresh_{kind}", srt)
    fraction = lookups.number_value_or_default(f"reset_perc_improv_facts_{kind}", srt)
    return exceedance_reset(value, threshold, fraction)


def _rehab_value(segment: RoadSegment, lookups: LookupTables, kind: str) -> float:
    return lookups.number_value_or_default(f"rehab_resets_{kind}", segment.surface_road_type)


def initial_condition_value(
    segment: RoadSegment,
    lookups: LookupTables,
    surveyed: float,
    survey_age: float,
    kind: str,
) -> float:
    """Condition value at the base date, allowing for work since the survey.

    * Pavement younger than the survey: a rehabilitation happened since,
      so the rehab reset value applies.
    * Surface younger than the survey: a resurfacing happened since, so
      the exceedance reset applies to the surveyed value.
    * Otherwise the surveyed value stands.

    Args:
        segment: Segment with ages already derived.
        lookups: Shared lookup tables.
        surveyed: Raw surveyed rut depth or NAASRA count.
        survey_age: Years between the survey and the base date.
        kind: ``"rut"`` or ``"naasra"``.
    """
    if segment.pavement_age < survey_age:
        return _rehab_value(segment, lookups, kind)
    if segment.surface_age < survey_age:
        return _exceedance_value(segment, lookups, surveyed, kind)
    return surveyed


def initial_increment(
    value: float,
    settling_in: float,
    surface_age: float,
    bounds: tuple[float, float],
) -> float:
    """Historic yearly rate ``(value - settling_in) / surface_age``, clamped."""
    lower, upper = bounds
    rate = max(0.0, value - settling_in) / surface_age
    return max(lower, min(upper, rate))


def value_after_treatment(
    segment: RoadSegment,
    lookups: LookupTables,
    current: float,
    kind: str,
    is_rehab: bool,
) -> float:
    """Rut or roughness value once a treatment has been applied.

    Surfaces other than chipseal or asphalt and pre-seal surfaces (function
    ``1a``) keep their value.  Rehabilitation uses the rehab reset value;
    other treatments apply the exceedance reset.
    """
    if not segment.is_cs_or_ac or segment.surface_function == "1a":
        return current
    if is_rehab:
        return _rehab_value(segment, lookups, kind)
    return _exceedance_value(segment, lookups, current, kind)
