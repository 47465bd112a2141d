"""Model constants resolved from lookup sets.

All scalar thresholds used by candidate selection, treatment triggering
and suitability scoring are read once into an immutable
:class:`ModelConstants` instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from pavement_engine.core.dates import parse_date
from pavement_engine.core.errors import ConfigurationError
from pavement_engine.core.lookups import LookupTables


@dataclass(frozen=True)
class ModelConstants:
    """Immutable model-wide constants.

    Attributes:
        base_date: Date at which initial ages are measured.
        calibration_tolerance: Error tolerance (percent) used when
            calibrating distress curves to observed values.
        rehab_allowed_after_period: Periods after which every segment is
            allowed a rehabilitation regardless of its can-rehab flag.
        min_periods_to_next_treat: Candidate selection rejects a segment
            if a committed treatment is this many periods away or closer.
        min_sdi_to_treat: Minimum SDI to accept a candidate.
        min_pdi_to_treat: Minimum PDI to accept a candidate.
        min_sla_to_treat_ac: Minimum surface life achieved (%) for asphalt.
        min_sla_to_treat_cs: Minimum surface life achieved (%) for chipseal.
        min_surf_age: Minimum surface age (years) to accept a candidate.
        short_term_screening_periods: Number of leading periods (counting
            initialisation as period 0) in which candidates are screened on
            ADT and segment distress instead of the PDI/SDI thresholds.
            0 turns the screening off.
        min_adt_to_treat: Short-term screening rejects segments below this ADT.
        short_seg_length: Segments shorter than this (m) use the
            short-segment distress check.
        short_seg_distress1_limit: Distress length (m) that qualifies a
            short segment on its own.
        short_seg_distress2_limit: Distress length (m) that qualifies a
            short segment when two distresses exceed it.
        pothole_boost_factor: Multiplier applied to pothole percentage in
            the distress indices.
        maintenance_cost_calibration: Multiplier on the maintenance cost model.
        maintenance_cost_pdi_threshold: PDI below which no maintenance cost
            is predicted.
        min_tss_allowed: Proposals scoring at or below this are discarded.
    """

    base_date: date
    calibration_tolerance: float
    rehab_allowed_after_period: int

    # Candidate selection
    min_periods_to_next_treat: int
    min_sdi_to_treat: float
    min_pdi_to_treat: float
    min_sla_to_treat_ac: float
    min_sla_to_treat_cs: float
    min_surf_age: float
    short_term_screening_periods: int
    min_adt_to_treat: float
    short_seg_length: float
    short_seg_distress1_limit: float
    short_seg_distress2_limit: float

    # Distress indices and maintenance
    pothole_boost_factor: float
    maintenance_cost_calibration: float
    maintenance_cost_pdi_threshold: float

    # Treatment suitability scores
    min_tss_allowed: float
    rehab_excess_rut_thresh: float
    rehab_excess_rut_fact: float
    rehab_pdi_rank: float
    holding_pdi_rank_pt1: float
    holding_pdi_rank_pt2: float
    holding_pdi_rank_pt3: float
    holding_max_rut: float
    holding_max_pdi_ac: float
    preserve_sdi_rank: float
    preserve_max_pdi_cs: float
    preserve_max_pdi_ac: float
    preserve_max_rut: float
    preserve_min_sla: float

    # Asphalt heavy maintenance
    min_periods_between_ac_hmaint: int
    max_sla_for_ac_hmaint: float

    def __post_init__(self) -> None:
        if self.short_term_screening_periods < 0:
            raise ValueError("short_term_screening_periods must be >= 0.")
        if self.calibration_tolerance <= 0.0:
            raise ValueError("calibration_tolerance must be > 0.")
        if self.pothole_boost_factor < 0.0:
            raise ValueError("pothole_boost_factor must be >= 0.")

    @classmethod
    def from_lookups(cls, lookups: LookupTables) -> ModelConstants:
        """Resolve every constant from its lookup set.

        Raises:
            ConfigurationError: If any required set or key is missing or
                the base date cannot be parsed.
        """
        num = lookups.number_value
        tss = "treatment_suitability_scores"
        csl = "candidate_selection"

        raw_base_date = lookups.raw_value("general", "base_date")
        try:
            base_date = parse_date(raw_base_date)
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid base date in lookup set 'general': {exc}"
            ) from exc

        return cls(
            base_date=base_date,
            calibration_tolerance=num("general", "calibration_tolerance"),
            rehab_allowed_after_period=int(num("general", "rehab_allowed_after_period")),
            min_periods_to_next_treat=int(num(csl, "min_periods_to_next_treat")),
            min_sdi_to_treat=num(csl, "min_sdi_to_treat"),
            min_pdi_to_treat=num(csl, "min_pdi_to_treat"),
            min_sla_to_treat_ac=num(csl, "min_sla_to_treat_ac"),
            min_sla_to_treat_cs=num(csl, "min_sla_to_treat_cs"),
            min_surf_age=num(csl, "min_surf_age"),
            short_term_screening_periods=int(num(csl, "short_term_screening_periods")),
            min_adt_to_treat=num(csl, "min_adt_to_treat"),
            short_seg_length=num(csl, "short_seg_length"),
            short_seg_distress1_limit=num(csl, "short_seg_distress1_limit"),
            short_seg_distress2_limit=num(csl, "short_seg_distress2_limit"),
            pothole_boost_factor=num("distress", "poth_booster"),
            maintenance_cost_calibration=num("maint_pred", "cal_maint_pred"),
            maintenance_cost_pdi_threshold=num("maint_pred", "maint_pdi_threshold"),
            min_tss_allowed=num(tss, "min_tss_allowed"),
            rehab_excess_rut_thresh=num(tss, "rehab_excess_rut_thresh"),
            rehab_excess_rut_fact=num(tss, "rehab_excess_rut_fact"),
            rehab_pdi_rank=num(tss, "rehab_pdi_rank"),
            holding_pdi_rank_pt1=num(tss, "holding_pdi_rank_pt1"),
            holding_pdi_rank_pt2=num(tss, "holding_pdi_rank_pt2"),
            holding_pdi_rank_pt3=num(tss, "holding_pdi_rank_pt3"),
            holding_max_rut=num(tss, "holding_max_rut"),
            holding_max_pdi_ac=num(tss, "holding_max_pdi_ac"),
            preserve_sdi_rank=num(tss, "preserve_sdi_rank"),
            preserve_max_pdi_cs=num(tss, "preserve_max_pdi_cs"),
            preserve_max_pdi_ac=num(tss, "preserve_max_pdi_ac"),
            preserve_max_rut=num(tss, "preserve_max_rut"),
            preserve_min_sla=num(tss, "preserve_min_sla"),
            min_periods_between_ac_hmaint=int(num(tss, "min_periods_between_ac_hmaint")),
            max_sla_for_ac_hmaint=num(tss, "max_sla_for_ac_hmaint"),
        )
