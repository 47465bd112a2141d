"""Segment state after a treatment is applied.

A treatment replaces the surface (and for rehabilitations, the pavement).
Surface attributes come from the treatment lookups, distress curves are
reset to new expected parameters, and rut/roughness are reduced and get
sampled rates from then on.
"""

from __future__ import annotations

from pavement_engine.core.context import ModelContext
from pavement_engine.core.errors import ConfigurationError
from pavement_engine.core.rut_roughness import (
    NAASRA,
    RUT,
    naasra_increment_after_treatment,
    rut_increment_after_treatment,
    value_after_treatment,
)
from pavement_engine.core.segment import RoadSegment

PRESEAL_FUNCTION: str = "1a"

# Surfaces whose expected life is not changed by a treatment.
_FIXED_LIFE_CLASSES: tuple[str, ...] = ("blocks", "concrete", "other")

# Function transitions for treatments other than pre-seals and rehabs.
_NEXT_FUNCTION: dict[str, str] = {"1a": "H", "h": "2", "1": "2", "2": "R"}


def is_rehab_treatment(name: str) -> bool:
    return name.strip().lower().startswith("rehab")


def is_preseal_treatment(name: str) -> bool:
    """Pre-seal repairs and asphalt heavy maintenance count as pre-seals."""
    key = name.strip().lower()
    return key.startswith("preseal") or key in ("hmaint_ac", "ac_hmaint")


def next_surface_function(name: str, current: str) -> str:
    """Surface function code once treatment *name* is applied.

    >>> next_surface_function("PreSeal", "2")
    '1a'
    >>> next_surface_function("ChipSeal_P", "1")
    '2'
    """
    key = name.strip().lower()
    if is_preseal_treatment(key):
        return PRESEAL_FUNCTION
    if key.startswith("rehab_ac"):
        return "2"
    if key.startswith("rehab_cs"):
        return "1"
    return _NEXT_FUNCTION.get(current.strip().lower(), current)


def _surface_life_key(segment: RoadSegment) -> str:
    function = segment.surface_function.lower()
    if function == PRESEAL_FUNCTION:
        function = "r"
    return f"{function}_{segment.surface_material}_{segment.road_class}".lower()


def expected_surface_life(segment: RoadSegment, context: ModelContext) -> float:
    """Expected life of the segment's (new) surface.

    Raises:
        ConfigurationError: If no ``surf_life_exp`` entry exists for the
            surface function, material and road class.
    """
    if segment.surface_class in _FIXED_LIFE_CLASSES:
        return segment.surface_expected_life
    key = _surface_life_key(segment)
    if not context.lookups.has_key("surf_life_exp", key):
        raise ConfigurationError(
            f"{segment.feedback_code}: no expected surface life for '{key}' "
            "in lookup set 'surf_life_exp'"
        )
    return context.lookups.number_value("surf_life_exp", key)


def reset_segment(
    segment: RoadSegment,
    treatment_name: str | None,
    context: ModelContext,
) -> RoadSegment:
    """Apply treatment *treatment_name* to *segment* in place.

    A ``None`` or blank treatment leaves the segment unchanged.

    Args:
        segment: Segment to reset.
        treatment_name: Name of the applied treatment type.
        context: Shared lookups, constants and curve models.

    Returns:
        The same segment, for chaining.

    Raises:
        ConfigurationError: If the treatment or one of its surface lookups
            is not defined.
    """
    if not treatment_name or not treatment_name.strip():
        return segment

    lookups = context.lookups
    key = treatment_name.strip().lower()
    category = lookups.treatment(treatment_name).category
    is_rehab = is_rehab_treatment(key)
    is_preseal = is_preseal_treatment(key)

    segment.adt = segment.adt * (1.0 + segment.traffic_growth_perc / 100.0)

    if is_rehab:
        segment.pavement_age = 0.0
        segment.pavement_remaining_life = lookups.number_value(
            "pavement_expected_life", segment.road_type
        )
    else:
        segment.pavement_age += 1.0
        segment.pavement_remaining_life -= 1.0

    segment.surface_material = lookups.text_value("treat_surf_materials", key).lower()
    segment.surface_class = lookups.text_value("treat_surf_class", key).lower()
    if is_rehab:
        segment.surface_thickness = lookups.number_value(
            "surf_thickness_new", segment.surface_material
        )
        segment.surface_layers = 1.0
    else:
        segment.surface_thickness += lookups.number_value(
            "surf_thickness_add", segment.surface_material
        )
        if segment.is_chipseal:
            segment.surface_layers += 1.0

    segment.change_surface_function(next_surface_function(key, segment.surface_function))
    segment.surface_expected_life = expected_surface_life(segment, context)
    segment.advance_surface_age(segment.surface_age + 1.0 if is_preseal else 0.0)

    for dt, model in context.distress_models.items():
        pre_value = segment.distress_values[dt]
        segment.distress_values[dt] = model.value_after_reset()
        segment.distress_setups[dt] = model.resetted_setup(
            segment, pre_value, category, segment.distress_setups[dt]
        )

    segment.rut = value_after_treatment(segment, lookups, segment.rut, RUT, is_rehab)
    segment.naasra = value_after_treatment(segment, lookups, segment.naasra, NAASRA, is_rehab)
    segment.rut_increment = rut_increment_after_treatment(segment)
    segment.naasra_increment = naasra_increment_after_treatment(segment)

    segment.record_treatment()
    return segment
