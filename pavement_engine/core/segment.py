"""Road segment state.

A :class:`RoadSegment` is rebuilt every period from the host's raw row and
parameter dictionary, advanced by one lifecycle operation, and written back
as a parameter dictionary.  It carries no references to other segments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from pavement_engine.core.distress import DistressType
from pavement_engine.core.errors import ConfigurationError

SURFACE_CLASSES: tuple[str, ...] = ("cs", "ac", "blocks", "concrete", "other")


def _zero_distress() -> dict[DistressType, float]:
    return {dt: 0.0 for dt in DistressType}


def _empty_setups() -> dict[DistressType, str]:
    return {dt: "" for dt in DistressType}


@dataclass
class RoadSegment:
    """Mutable condition state of one road segment.

    Attributes are grouped by concern.  Values derived purely from other
    attributes (width, achieved life, HCV risk, ...) are properties; the
    indices written by :func:`~pavement_engine.core.indices.update_indices`
    and the ranks written by the host are plain attributes so that they
    round-trip through the parameter dictionary.
    """

    element_index: int

    # Identity
    seg_name: str = ""
    section_id: float = 0.0
    section_name: str = ""
    loc_from: float = 0.0
    loc_to: float = 0.0
    lane_name: str = ""

    # Physical
    length: float = 0.0
    area: float = 0.0

    # Flags
    is_roundabout: bool = False
    can_treat: bool = True
    can_rehab: bool = True
    asphalt_ok: bool = True
    earliest_treat_period: int = 0

    # Classification
    urban_rural: str = "r"
    onrc: str = ""
    road_class: str = ""
    surface_class: str = "cs"
    next_surface: str = "cs"

    # Traffic
    adt: float = 1.0
    heavy_perc: float = 0.0
    traffic_growth_perc: float = 0.0

    # Pavement
    pavement_type: str = ""
    pavement_age: float = 0.0
    pavement_remaining_life: float = 0.0

    # Surface
    surface_age: float = 0.1
    surface_function: str = "1"
    previous_surface_function: str = ""
    surface_age_before_change: float = 0.0
    surface_material: str = ""
    surface_layers: float = 1.0
    surface_thickness: float = 0.0
    surface_expected_life: float = 1.0

    # Survey dates, parsed at initialisation only
    condition_survey_date: date | None = None

    # Distress
    distress_values: dict[DistressType, float] = field(default_factory=_zero_distress)
    distress_setups: dict[DistressType, str] = field(default_factory=_empty_setups)

    # Rutting and roughness
    rut: float = 0.0
    rut_increment: float = 0.0
    naasra: float = 0.0
    naasra_increment: float = 0.0

    # Faults and maintenance areas (m2)
    surface_fault_m2: float = 0.0
    pavement_fault_m2: float = 0.0

    # Derived indices
    pdi: float = 0.0
    sdi: float = 0.0
    obj_distress: float = 0.0
    obj_rsl: float = 0.0
    obj_rutting: float = 0.0
    obj_naasra: float = 0.0
    obj_raw: float = 0.0
    obj_weighted: float = 0.0
    obj_auc: float = 0.0
    maintenance_cost_per_km: float = 0.0
    is_candidate: bool = False
    candidate_outcome: str = ""

    # Treatment history
    treatment_count: int = 0
    is_treated: bool = False

    # Ranks written by the host
    pdi_rank: float = 0.0
    rut_rank: float = 0.0
    sdi_rank: float = 0.0
    sla_rank: float = 0.0

    # Static raw columns carried through the parameter dictionary
    raw_values: dict[str, Any] = field(default_factory=dict)

    # -- identity and classification -----------------------------------------

    @property
    def feedback_code(self) -> str:
        return f"elem_index: {self.element_index:04d} - {self.seg_name}"

    @property
    def width(self) -> float:
        if self.length <= 0.0:
            return 0.0
        return self.area / self.length

    @property
    def road_type(self) -> str:
        """Urban/rural code followed by road class, e.g. ``"rh"``."""
        return f"{self.urban_rural}{self.road_class}"

    @property
    def surface_road_type(self) -> str:
        """Surface class and road type, e.g. ``"cs_rh"``."""
        return f"{self.surface_class}_{self.road_type}"

    @property
    def is_urban(self) -> bool:
        return self.urban_rural == "u"

    @property
    def is_chipseal(self) -> bool:
        return self.surface_class == "cs"

    @property
    def is_cs_or_ac(self) -> bool:
        return self.surface_class in ("cs", "ac")

    @property
    def next_surface_is_chipseal(self) -> bool:
        return self.next_surface == "cs"

    # -- traffic and pavement ------------------------------------------------

    @property
    def hcv_per_day(self) -> float:
        return self.adt * self.heavy_perc / 100.0

    @property
    def pavement_achieved_life(self) -> float:
        """Pavement age as a percentage of its total life.

        Raises:
            ConfigurationError: If age plus remaining life is not positive.
        """
        total = self.pavement_age + self.pavement_remaining_life
        if total <= 0.0:
            raise ConfigurationError(
                f"{self.feedback_code}: pavement age ({self.pavement_age}) plus "
                f"remaining life ({self.pavement_remaining_life}) must be > 0"
            )
        return self.pavement_age / total * 100.0

    @property
    def hcv_risk(self) -> float:
        """Heavy-vehicle risk, ``HCV/day^0.1 * pavement achieved life^0.5``."""
        life = max(0.0, self.pavement_achieved_life)
        return max(0.0, self.hcv_per_day) ** 0.1 * life**0.5

    # -- surface -------------------------------------------------------------

    @property
    def surface_life_achieved(self) -> float:
        """Surface age as a percentage of expected life, capped at 200.

        Raises:
            ConfigurationError: If the expected surface life is not positive.
        """
        if self.surface_expected_life <= 0.0:
            raise ConfigurationError(
                f"{self.feedback_code}: expected surface life "
                f"({self.surface_expected_life}) must be > 0"
            )
        return min(200.0, 100.0 * self.surface_age / self.surface_expected_life)

    @property
    def surface_remaining_life(self) -> float:
        return self.surface_expected_life - self.surface_age

    @property
    def second_coat_needed(self) -> bool:
        return (
            self.surface_class == "cs"
            and self.surface_function == "1"
            and self.next_surface == "cs"
            and self.surface_remaining_life <= 1.0
        )

    # -- faults --------------------------------------------------------------

    @property
    def surface_fault_percent(self) -> float:
        if self.area <= 0.0:
            return 0.0
        return self.surface_fault_m2 / self.area * 100.0

    @property
    def pavement_fault_percent(self) -> float:
        if self.area <= 0.0:
            return 0.0
        return self.pavement_fault_m2 / self.area * 100.0

    # -- explicit mutations --------------------------------------------------

    def advance_surface_age(self, new_age: float) -> float:
        """Set the surface age, keeping the previous age.

        Returns:
            The surface age before the change.
        """
        previous = self.surface_age
        self.surface_age_before_change = previous
        self.surface_age = new_age
        return previous

    def change_surface_function(self, new_code: str) -> str:
        """Set the surface function code, keeping the previous code.

        Returns:
            The surface function before the change.
        """
        previous = self.surface_function
        self.previous_surface_function = previous
        self.surface_function = new_code
        return previous

    def record_treatment(self) -> int:
        """Count a treatment and clear carried-over fault areas.

        Returns:
            The new treatment count.
        """
        self.treatment_count += 1
        self.is_treated = True
        self.surface_fault_m2 = 0.0
        self.pavement_fault_m2 = 0.0
        return self.treatment_count
