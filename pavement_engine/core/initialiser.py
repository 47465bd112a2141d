"""Segment initialisation from a raw inventory row.

Ages are measured from the raw surfacing, pavement and survey dates to the
model base date.  Distress curves are calibrated to the observed
percentages, and rut/roughness values are adjusted for work done since
their surveys.
"""

from __future__ import annotations

import logging
from datetime import date

from pavement_engine.core.context import ModelContext
from pavement_engine.core.dates import parse_date, years_between
from pavement_engine.core.errors import SegmentComputationError
from pavement_engine.core.factory import segment_from_raw
from pavement_engine.core.rut_roughness import (
    NAASRA,
    NAASRA_INCREMENT_BOUNDS,
    RUT,
    RUT_INCREMENT_BOUNDS,
    initial_condition_value,
    initial_increment,
)
from pavement_engine.core.segment import RoadSegment
from pavement_engine.data_ingestion.raw_data import RawRow

logger = logging.getLogger(__name__)

MIN_SURFACE_AGE: float = 0.1


def _parse_required_date(segment: RoadSegment, row: RawRow, column: str) -> date:
    text = row.text(column)
    try:
        return parse_date(text)
    except ValueError as exc:
        raise SegmentComputationError(
            f"{segment.feedback_code}: cannot parse '{column}': {exc}",
            element_index=segment.element_index,
            feedback_code=segment.feedback_code,
            operation="initialise",
        ) from exc


def _parse_optional_date(segment: RoadSegment, row: RawRow, column: str) -> date | None:
    if not row.text(column):
        return None
    return _parse_required_date(segment, row, column)


def _age(segment: RoadSegment, base_date: date, when: date, label: str) -> float:
    age = round(years_between(base_date, when), 2)
    if age < 0.0:
        logger.warning(
            "%s: %s date %s is after base date %s",
            segment.feedback_code,
            label,
            when.isoformat(),
            base_date.isoformat(),
        )
    return age


def _survey_age(segment: RoadSegment, base_date: date, when: date | None, label: str) -> float | None:
    if when is None:
        return None
    age = years_between(base_date, when)
    if age < 0.0:
        logger.warning(
            "%s: %s survey date %s is after base date %s",
            segment.feedback_code,
            label,
            when.isoformat(),
            base_date.isoformat(),
        )
    return age


def initialise_segment(element_index: int, row: RawRow, context: ModelContext) -> RoadSegment:
    """Build and initialise a segment from its raw row.

    Args:
        element_index: Host handle of the segment.
        row: Raw inventory row.
        context: Shared lookups, constants and curve models.

    Returns:
        Segment with ages, calibrated distress curves and rut/roughness
        values and rates set.  Indices are not yet computed.

    Raises:
        SegmentComputationError: If a required date cannot be parsed.
        ConfigurationError: If a required lookup is missing.
    """
    lookups = context.lookups
    base_date = context.constants.base_date

    segment = segment_from_raw(element_index, row, lookups)
    segment.adt = max(1.0, segment.adt)

    pavement_date = _parse_required_date(segment, row, "file_pave_date")
    surface_date = _parse_required_date(segment, row, "file_surf_date")
    segment.condition_survey_date = _parse_optional_date(segment, row, "file_cond_survey_date")
    hsd_date = _parse_optional_date(segment, row, "file_hsd_date")
    roughness_date = _parse_optional_date(segment, row, "file_roughsegment_date")

    segment.pavement_age = _age(segment, base_date, pavement_date, "pavement")
    segment.surface_age = max(MIN_SURFACE_AGE, _age(segment, base_date, surface_date, "surfacing"))

    tolerance = context.constants.calibration_tolerance
    for dt, model in context.distress_models.items():
        observed = segment.distress_values[dt]
        value = model.initial_value(segment, observed, base_date)
        segment.distress_values[dt] = value
        segment.distress_setups[dt] = model.calibrated_setup(segment, value, tolerance)

    rut_survey_age = _survey_age(segment, base_date, hsd_date, "high-speed")
    if rut_survey_age is not None:
        segment.rut = initial_condition_value(segment, lookups, segment.rut, rut_survey_age, RUT)
    segment.rut_increment = initial_increment(
        segment.rut,
        lookups.number_value("settling_in_values", RUT),
        segment.surface_age,
        RUT_INCREMENT_BOUNDS,
    )

    naasra_survey_age = _survey_age(segment, base_date, roughness_date, "roughness")
    if naasra_survey_age is not None:
        segment.naasra = initial_condition_value(
            segment, lookups, segment.naasra, naasra_survey_age, NAASRA
        )
    segment.naasra_increment = initial_increment(
        segment.naasra,
        lookups.number_value("settling_in_values", NAASRA),
        segment.surface_age,
        NAASRA_INCREMENT_BOUNDS,
    )
    return segment
