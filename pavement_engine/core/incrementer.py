"""One-period progression of an untreated segment."""

from __future__ import annotations

from pavement_engine.core.context import ModelContext
from pavement_engine.core.rut_roughness import (
    naasra_increment_after_treatment,
    rut_increment_after_treatment,
)
from pavement_engine.core.segment import RoadSegment


def increment_segment(segment: RoadSegment, context: ModelContext) -> RoadSegment:
    """Advance *segment* by one period with no treatment applied.

    Traffic grows, pavement and surface age by one year and every distress
    follows its curve.  Rut and roughness rates keep their historic value
    until the segment is first treated, and are re-sampled every period
    afterwards.

    Args:
        segment: Segment to advance in place.
        context: Shared lookups, constants and curve models.

    Returns:
        The same segment, for chaining.

    Raises:
        CurveParameterParseError: If a stored curve parameter string is
            malformed.
    """
    segment.adt = segment.adt * (1.0 + segment.traffic_growth_perc / 100.0)
    segment.pavement_age += 1.0
    segment.pavement_remaining_life -= 1.0
    segment.surface_age += 1.0

    for dt, model in context.distress_models.items():
        segment.distress_values[dt] = model.next_value_after_increment(
            segment, segment.distress_values[dt], segment.distress_setups[dt]
        )

    if segment.treatment_count > 0:
        segment.rut_increment = rut_increment_after_treatment(segment)
        segment.naasra_increment = naasra_increment_after_treatment(segment)

    segment.rut += segment.rut_increment
    segment.naasra += segment.naasra_increment
    return segment
