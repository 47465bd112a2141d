"""Build :class:`RoadSegment` objects from raw rows and parameter maps.

Two entry points mirror the two ways the host hands a segment over:

* :func:`segment_from_raw` before initialisation, from the raw inventory
  row only.
* :func:`segment_from_parameters` in every later period, from a single
  mapping holding both the static ``file_*`` columns and the persisted
  ``para_*`` values.

:func:`segment_to_parameters` is the inverse of the second: feeding its
output back into :func:`segment_from_parameters` reproduces the segment.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pavement_engine.core.constants import ModelConstants
from pavement_engine.core.distress import DistressType
from pavement_engine.core.lookups import LookupTables
from pavement_engine.core.segment import RoadSegment
from pavement_engine.data_ingestion.raw_data import RawRow

# Static raw columns carried unchanged through every period.
RAW_COLUMNS: tuple[str, ...] = (
    "file_seg_name",
    "file_section_id",
    "file_section_name",
    "file_loc_from",
    "file_loc_to",
    "file_lane_name",
    "file_length",
    "file_area_m2",
    "file_is_roundabout_flag",
    "file_can_treat_flag",
    "file_can_rehab_flag",
    "file_ac_ok_flag",
    "file_earliest_treat_period",
    "file_urban_rural",
    "file_onrc",
    "file_nzta_hierarchy",
    "file_onf_street_category",
    "file_onf_movement_rank",
    "file_onf_freight",
    "file_adt",
    "file_heavy_perc",
    "file_no_of_bus_routes",
    "file_traff_growth_perc",
    "file_surf_class",
    "file_next_surf",
    "file_surf_date",
    "file_surf_function",
    "file_surf_material",
    "file_surf_life_expected",
    "file_surf_layer_no",
    "file_surf_thick",
    "file_pave_type",
    "file_pave_date",
    "file_pave_remlife",
    "file_su_fault_qty",
    "file_pa_fault_qty",
    "file_roughsegment_date",
    "file_naasra_85",
    "file_hsd_date",
    "file_rut_lwpmean_85",
    "file_rut_rwpmean_85",
    "file_cond_survey_date",
    "file_pct_allig",
    "file_pct_lt_crax",
    "file_pct_poth",
    "file_pct_scabb",
    "file_pct_flush",
    "file_pct_shove",
    "file_pct_edgebreak",
)

RANK_KEYS: tuple[str, ...] = ("para_pdi_rank", "para_rut_rank", "para_sdi_rank", "para_sla_rank")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "1.0", "yes", "y", "t")
    return bool(value)


# ---------------------------------------------------------------------------
# Static attributes
# ---------------------------------------------------------------------------


def _apply_static_columns(segment: RoadSegment, row: RawRow, lookups: LookupTables) -> None:
    """Set identity, geometry, flags and classification from raw columns."""
    segment.seg_name = row.text("file_seg_name")
    segment.section_id = row.number("file_section_id")
    segment.section_name = row.text("file_section_name")
    segment.loc_from = row.number("file_loc_from")
    segment.loc_to = row.number("file_loc_to")
    segment.lane_name = row.text("file_lane_name")

    segment.length = row.number("file_length")
    segment.area = row.number("file_area_m2")

    segment.is_roundabout = row.flag("file_is_roundabout_flag")
    segment.can_treat = row.flag("file_can_treat_flag")
    segment.can_rehab = row.flag("file_can_rehab_flag")
    segment.asphalt_ok = row.flag("file_ac_ok_flag")
    segment.earliest_treat_period = int(row.number("file_earliest_treat_period"))

    segment.urban_rural = row.text("file_urban_rural").lower()
    segment.onrc = row.text("file_onrc").lower()
    # Road class comes from ONRC; the client road-class column is not reliable.
    segment.road_class = lookups.text_value_or_default("road_class", segment.onrc).lower()

    segment.heavy_perc = row.number("file_heavy_perc")
    segment.traffic_growth_perc = row.number("file_traff_growth_perc")
    segment.next_surface = row.text("file_next_surf").lower()
    segment.pavement_type = row.text("file_pave_type")

    segment.surface_fault_m2 = row.number("file_su_fault_qty")
    segment.pavement_fault_m2 = row.number("file_pa_fault_qty")

    cells = row.to_dict()
    segment.raw_values = {col: cells.get(col, "") for col in RAW_COLUMNS}


def segment_from_raw(element_index: int, row: RawRow, lookups: LookupTables) -> RoadSegment:
    """Build an uninitialised segment from a raw inventory row.

    Ages and curve parameters are left for the initialiser; the surface and
    condition attributes hold the raw surveyed values.
    """
    segment = RoadSegment(element_index=element_index)
    _apply_static_columns(segment, row, lookups)

    segment.adt = row.number("file_adt")
    segment.surface_class = row.text("file_surf_class").lower()
    segment.surface_function = row.text("file_surf_function")
    segment.surface_material = row.text("file_surf_material")
    segment.surface_expected_life = row.number("file_surf_life_expected")
    segment.surface_layers = row.number("file_surf_layer_no")
    segment.surface_thickness = row.number("file_surf_thick")
    segment.pavement_remaining_life = row.number("file_pave_remlife")
    segment.naasra = row.number("file_naasra_85")
    segment.rut = max(row.number("file_rut_lwpmean_85"), row.number("file_rut_rwpmean_85"))

    for dt in DistressType:
        segment.distress_values[dt] = row.number(dt.raw_column)
    return segment


# ---------------------------------------------------------------------------
# Parameter dictionary
# ---------------------------------------------------------------------------


def segment_from_parameters(
    element_index: int,
    values: Mapping[str, Any],
    lookups: LookupTables,
    constants: ModelConstants,
    period: int,
) -> RoadSegment:
    """Rebuild a segment from the static columns and persisted parameters.

    Args:
        element_index: Host handle of the segment.
        values: Mapping with every ``file_*`` column and ``para_*`` value.
        lookups: Shared lookup tables.
        constants: Model constants.
        period: Current modelling period.  Once it passes
            ``rehab_allowed_after_period`` every segment may be
            rehabilitated.

    Raises:
        KeyError: If a persisted parameter is missing.
    """
    segment = RoadSegment(element_index=element_index)
    _apply_static_columns(segment, RawRow(values), lookups)
    if period > constants.rehab_allowed_after_period:
        segment.can_rehab = True

    segment.adt = float(values["para_adt"])
    segment.pavement_age = float(values["para_pave_age"])
    segment.pavement_remaining_life = float(values["para_pave_remlife"])

    segment.surface_material = str(values["para_surf_mat"])
    segment.surface_class = str(values["para_surf_class"]).lower()
    segment.surface_thickness = float(values["para_surf_thick"])
    segment.surface_layers = float(values["para_surf_layers"])
    segment.surface_function = str(values["para_surf_func"])
    segment.surface_expected_life = float(values["para_surf_exp_life"])
    segment.surface_age = float(values["para_surf_age"])

    for dt in DistressType:
        key = dt.parameter_key
        segment.distress_values[dt] = float(values[f"para_{key}_pct"])
        segment.distress_setups[dt] = str(values[f"para_{key}_info"])

    segment.rut_increment = float(values["para_rut_increm"])
    segment.rut = float(values["para_rut"])
    segment.naasra_increment = float(values["para_naasra_increm"])
    segment.naasra = float(values["para_naasra"])

    segment.sdi = float(values["para_sdi"])
    segment.pdi = float(values["para_pdi"])
    segment.obj_distress = float(values["para_obj_distress"])
    segment.obj_rsl = float(values["para_obj_rsl"])
    segment.obj_rutting = float(values["para_obj_rutting"])
    segment.obj_naasra = float(values["para_obj_naasra"])
    segment.obj_raw = float(values["para_obj_o"])
    segment.obj_weighted = float(values["para_obj"])
    segment.obj_auc = float(values["para_obj_auc"])
    segment.maintenance_cost_per_km = float(values["para_maint_cost_perkm"])
    segment.candidate_outcome = str(values["para_csl_status"])
    segment.is_candidate = _as_bool(values["para_csl_flag"])

    segment.treatment_count = int(values["para_treat_count"])
    if segment.treatment_count > 0:
        segment.is_treated = True
        segment.surface_fault_m2 = 0.0
        segment.pavement_fault_m2 = 0.0

    segment.pdi_rank = float(values.get("para_pdi_rank", 0.0))
    segment.rut_rank = float(values.get("para_rut_rank", 0.0))
    segment.sdi_rank = float(values.get("para_sdi_rank", 0.0))
    segment.sla_rank = float(values.get("para_sla_rank", 0.0))
    return segment


def segment_to_parameters(segment: RoadSegment) -> dict[str, Any]:
    """Flatten a segment into the persisted parameter dictionary.

    The result holds every ``file_*`` column, every ``para_*`` value and
    the host-written ranks.
    """
    params: dict[str, Any] = dict(segment.raw_values)

    params["para_adt"] = segment.adt
    params["para_hcv"] = segment.hcv_per_day
    params["para_pave_age"] = segment.pavement_age
    params["para_pave_remlife"] = segment.pavement_remaining_life
    params["para_pave_life_ach"] = segment.pavement_achieved_life
    params["para_hcv_risk"] = segment.hcv_risk

    params["para_surf_mat"] = segment.surface_material
    params["para_surf_class"] = segment.surface_class
    params["para_surf_cs_flag"] = 1 if segment.is_chipseal else 0
    params["para_surf_cs_or_ac_flag"] = 1 if segment.is_cs_or_ac else 0
    params["para_surf_road_type"] = segment.surface_road_type
    params["para_surf_thick"] = segment.surface_thickness
    params["para_surf_layers"] = segment.surface_layers
    params["para_surf_func"] = segment.surface_function
    params["para_surf_exp_life"] = segment.surface_expected_life
    params["para_surf_age"] = segment.surface_age
    params["para_surf_life_ach"] = segment.surface_life_achieved
    params["para_surf_remain_life"] = segment.surface_remaining_life

    for dt in DistressType:
        key = dt.parameter_key
        params[f"para_{key}_pct"] = segment.distress_values[dt]
        params[f"para_{key}_info"] = segment.distress_setups[dt]

    params["para_rut_increm"] = segment.rut_increment
    params["para_rut"] = segment.rut
    params["para_naasra_increm"] = segment.naasra_increment
    params["para_naasra"] = segment.naasra

    params["para_sdi"] = segment.sdi
    params["para_pdi"] = segment.pdi
    params["para_obj_distress"] = segment.obj_distress
    params["para_obj_rsl"] = segment.obj_rsl
    params["para_obj_rutting"] = segment.obj_rutting
    params["para_obj_naasra"] = segment.obj_naasra
    params["para_obj_o"] = segment.obj_raw
    params["para_obj"] = segment.obj_weighted
    params["para_obj_auc"] = segment.obj_auc
    params["para_maint_cost_perkm"] = segment.maintenance_cost_per_km

    params["para_csl_status"] = segment.candidate_outcome
    params["para_csl_flag"] = 1 if segment.is_candidate else 0
    params["para_is_treated_flag"] = 1 if segment.is_treated else 0
    params["para_treat_count"] = segment.treatment_count

    params["para_pdi_rank"] = segment.pdi_rank
    params["para_rut_rank"] = segment.rut_rank
    params["para_sdi_rank"] = segment.sdi_rank
    params["para_sla_rank"] = segment.sla_rank
    return params
