"""S-curve distress progression models.

Seven visual distresses (flushing, edge break, scabbing, longitudinal and
transverse cracking, mesh cracking, shoving and potholes) share one
:class:`DistressCurveModel`.  The per-distress differences live in two
places:

* :data:`DISTRESS_PROFILES` holds the logistic regression coefficients of
  the probability-of-occurrence formula and whether a treatment reset
  applies the pre-treatment penalty curves.
* The ``distress_<type>`` lookup set holds the curve parameter bounds,
  the historic reset curves and the penalty curve thresholds.

Curve parameters are persisted as ``"AADI_InitialValue_T100"`` strings and
parsed into :class:`CurveParameters` at the boundary.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

from pavement_engine.core import scurve
from pavement_engine.core.dates import years_between
from pavement_engine.core.errors import ConfigurationError, CurveParameterParseError
from pavement_engine.core.lookups import LookupTables
from pavement_engine.core.piecewise import PiecewiseLinear

if TYPE_CHECKING:
    from pavement_engine.core.segment import RoadSegment

logger = logging.getLogger(__name__)


class DistressType(Enum):
    """Visual distress types, in initialisation order."""

    FLUSHING = "flushing"
    EDGE_BREAK = "edge_break"
    SCABBING = "scabbing"
    LT_CRACKS = "lt_cracks"
    MESH_CRACKS = "mesh_cracks"
    SHOVING = "shoving"
    POTHOLES = "potholes"

    @property
    def parameter_key(self) -> str:
        """Short key used in ``para_<key>_pct`` / ``para_<key>_info``."""
        return _PARAMETER_KEYS[self]

    @property
    def raw_column(self) -> str:
        """Raw survey column holding the observed percentage."""
        return _RAW_COLUMNS[self]

    @property
    def lookup_set(self) -> str:
        return f"distress_{self.value}"


_PARAMETER_KEYS: dict[DistressType, str] = {
    DistressType.FLUSHING: "flush",
    DistressType.EDGE_BREAK: "edgeb",
    DistressType.SCABBING: "scabb",
    DistressType.LT_CRACKS: "lt_cracks",
    DistressType.MESH_CRACKS: "mesh_cracks",
    DistressType.SHOVING: "shove",
    DistressType.POTHOLES: "poth",
}

_RAW_COLUMNS: dict[DistressType, str] = {
    DistressType.FLUSHING: "file_pct_flush",
    DistressType.EDGE_BREAK: "file_pct_edgebreak",
    DistressType.SCABBING: "file_pct_scabb",
    DistressType.LT_CRACKS: "file_pct_lt_crax",
    DistressType.MESH_CRACKS: "file_pct_allig",
    DistressType.SHOVING: "file_pct_shove",
    DistressType.POTHOLES: "file_pct_poth",
}


# ---------------------------------------------------------------------------
# Curve parameters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CurveParameters:
    """S-curve parameters of one distress on one segment.

    Attributes:
        aadi: Age at distress initiation (years).
        initial_value: Percentage observed in the first year after AADI.
        t100: Years for the distress to reach 100 % coverage.
    """

    aadi: float
    initial_value: float
    t100: float

    @classmethod
    def parse(cls, code: str) -> CurveParameters:
        """Parse an ``"AADI_InitialValue_T100"`` string.

        Raises:
            CurveParameterParseError: If the string does not contain exactly
                three numeric underscore-delimited tokens.
        """
        tokens = str(code).strip().split("_")
        if len(tokens) != 3:
            raise CurveParameterParseError(
                f"Curve parameter string '{code}' must have exactly 3 "
                f"underscore-delimited tokens, got {len(tokens)}"
            )
        try:
            aadi, iv, t100 = (float(t) for t in tokens)
        except ValueError:
            raise CurveParameterParseError(
                f"Curve parameter string '{code}' contains a non-numeric token"
            ) from None
        return cls(aadi=aadi, initial_value=iv, t100=t100)

    def encode(self) -> str:
        """Return the ``"AADI_InitialValue_T100"`` string, 2 dp each."""
        return f"{self.aadi:.2f}_{self.initial_value:.2f}_{self.t100:.2f}"


# ---------------------------------------------------------------------------
# Per-distress constant tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DistressProfile:
    """Probability coefficients and reset behaviour of one distress.

    The linear predictor is::

        intercept + chipseal * cs_flag + urban * urban_flag
                  + hcv_risk * HCV risk + width * width
                  + sum(coef * pct(other) for other, coef in distress_terms)

    Attributes:
        distress_type: Distress this profile describes.
        intercept: Constant term.
        chipseal: Coefficient on the chipseal surface flag.
        urban: Coefficient on the urban flag.
        hcv_risk: Coefficient on the segment HCV risk.
        width: Coefficient on the carriageway width.
        distress_terms: Coefficients on other distress percentages.
        applies_reset_penalty: Whether non-rehab resets shorten AADI/T100
            by the pre-treatment penalty curve.
    """

    distress_type: DistressType
    intercept: float
    chipseal: float = 0.0
    urban: float = 0.0
    hcv_risk: float = 0.0
    width: float = 0.0
    distress_terms: tuple[tuple[DistressType, float], ...] = ()
    applies_reset_penalty: bool = True


DISTRESS_PROFILES: dict[DistressType, DistressProfile] = {
    DistressType.FLUSHING: DistressProfile(
        DistressType.FLUSHING,
        intercept=-11.95,
        chipseal=10.0,
        urban=-0.37,
        hcv_risk=0.05,
        applies_reset_penalty=False,
    ),
    DistressType.EDGE_BREAK: DistressProfile(
        DistressType.EDGE_BREAK,
        intercept=4.0,
        urban=-10.0,
        width=-1.0,
        applies_reset_penalty=False,
    ),
    DistressType.SCABBING: DistressProfile(
        DistressType.SCABBING,
        intercept=-2.89,
        chipseal=1.71,
        urban=0.62,
        hcv_risk=0.06,
        applies_reset_penalty=False,
    ),
    DistressType.LT_CRACKS: DistressProfile(
        DistressType.LT_CRACKS,
        intercept=-1.39,
        chipseal=-1.24,
        urban=0.82,
        hcv_risk=0.09,
        distress_terms=((DistressType.SCABBING, 0.03),),
    ),
    DistressType.MESH_CRACKS: DistressProfile(
        DistressType.MESH_CRACKS,
        intercept=-2.18,
        chipseal=-0.43,
        urban=0.28,
        hcv_risk=0.12,
        distress_terms=((DistressType.LT_CRACKS, 0.02), (DistressType.SCABBING, 0.01)),
    ),
    DistressType.SHOVING: DistressProfile(
        DistressType.SHOVING,
        intercept=-3.63,
        chipseal=0.62,
        urban=0.31,
        hcv_risk=0.08,
        distress_terms=((DistressType.MESH_CRACKS, 0.03), (DistressType.SCABBING, 0.01)),
    ),
    DistressType.POTHOLES: DistressProfile(
        DistressType.POTHOLES,
        intercept=-3.0,
        chipseal=1.15,
        urban=0.36,
        hcv_risk=0.03,
        distress_terms=(
            (DistressType.SHOVING, 0.03),
            (DistressType.MESH_CRACKS, 0.02),
            (DistressType.SCABBING, 0.02),
        ),
    ),
}


@dataclass(frozen=True)
class DistressCurveSettings:
    """Lookup-driven bounds and reset curves for one distress."""

    aadi_min: float
    aadi_max: float
    t100_min: float
    t100_max: float
    iv_min: float
    iv_max: float
    iv_expected: float
    historic_reset_cs: PiecewiseLinear
    historic_reset_ac: PiecewiseLinear
    resurfacing_penalty: PiecewiseLinear
    holding_penalty: PiecewiseLinear

    def __post_init__(self) -> None:
        if self.aadi_min > self.aadi_max:
            raise ValueError("aadi_min must be <= aadi_max.")
        if self.t100_min <= 0.0 or self.t100_min > self.t100_max:
            raise ValueError("t100 bounds must satisfy 0 < t100_min <= t100_max.")
        if self.iv_min > self.iv_max:
            raise ValueError("iv_min must be <= iv_max.")

    @classmethod
    def from_lookups(cls, lookups: LookupTables, set_name: str) -> DistressCurveSettings:
        """Read the settings from lookup set *set_name*.

        Raises:
            ConfigurationError: If a key is missing or a reset curve setup
                code is malformed.
        """
        num = lookups.number_value

        def _penalty(prefix: str) -> PiecewiseLinear:
            t1 = num(set_name, f"{prefix}_thresh1")
            t2 = num(set_name, f"{prefix}_thresh2")
            return PiecewiseLinear([(t1, 1.0), (t2, 0.0)], extrapolate=False)

        def _curve(key: str) -> PiecewiseLinear:
            code = lookups.text_value(set_name, key)
            try:
                return PiecewiseLinear.from_setup_code(code, extrapolate=False)
            except ValueError as exc:
                raise ConfigurationError(
                    f"Invalid curve '{key}' in lookup set '{set_name}': {exc}"
                ) from exc

        return cls(
            aadi_min=num(set_name, "aadi_min"),
            aadi_max=num(set_name, "aadi_max"),
            t100_min=num(set_name, "t100_min"),
            t100_max=num(set_name, "t100_max"),
            iv_min=num(set_name, "iv_min"),
            iv_max=num(set_name, "iv_max"),
            iv_expected=num(set_name, "iv_expected"),
            historic_reset_cs=_curve("historic_reset_cs"),
            historic_reset_ac=_curve("historic_reset_ac"),
            resurfacing_penalty=_penalty("reset_resurf"),
            holding_penalty=_penalty("reset_holding"),
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _virtual_clamp(value: float, lower: float, upper: float) -> float:
    """Clamp into ``[lower, upper]``, nudging values on a bound 5 % inside."""
    if value <= lower:
        return lower * 1.05
    if value >= upper:
        return upper * 0.95
    return value


def _logistic(x: float) -> float:
    if x >= 0.0:
        return 1.0 / (1.0 + math.exp(-x))
    e = math.exp(x)
    return e / (1.0 + e)


# ---------------------------------------------------------------------------
# Curve model
# ---------------------------------------------------------------------------


class DistressCurveModel:
    """Progression, calibration and reset logic for one distress type.

    Args:
        profile: Per-distress coefficients.
        settings: Per-distress bounds and reset curves.
    """

    __slots__ = ("profile", "settings")

    def __init__(self, profile: DistressProfile, settings: DistressCurveSettings):
        self.profile: DistressProfile = profile
        self.settings: DistressCurveSettings = settings

    @property
    def distress_type(self) -> DistressType:
        return self.profile.distress_type

    def __repr__(self) -> str:
        return f"DistressCurveModel({self.distress_type.value})"

    # -- probability ---------------------------------------------------------

    def probability(self, segment: RoadSegment) -> float:
        """Probability of the distress occurring on *segment*, in (0, 1)."""
        p = self.profile
        x = (
            p.intercept
            + p.chipseal * (1.0 if segment.is_chipseal else 0.0)
            + p.urban * (1.0 if segment.is_urban else 0.0)
            + p.hcv_risk * segment.hcv_risk
            + p.width * segment.width
        )
        for other, coef in p.distress_terms:
            x += coef * segment.distress_values[other]
        return _logistic(x)

    def expected_parameters(self, segment: RoadSegment) -> CurveParameters:
        """Expected AADI/IV/T100 for the segment's current surface.

        AADI follows ``expected surface life * (1 - p)`` and T100 follows
        ``T100 max * (1 - p)``.  All three are kept strictly inside their bounds.
        """
        s = self.settings
        p = self.probability(segment)
        aadi = _virtual_clamp(
            segment.surface_expected_life * (1.0 - p), s.aadi_min, s.aadi_max
        )
        t100 = _virtual_clamp(s.t100_max * (1.0 - p), s.t100_min, s.t100_max)
        iv = _virtual_clamp(s.iv_expected, s.iv_min, s.iv_max)
        return CurveParameters(aadi=aadi, initial_value=iv, t100=t100)

    # -- initialisation ------------------------------------------------------

    def initial_value(
        self,
        segment: RoadSegment,
        observed: float,
        base_date: date,
    ) -> float:
        """Adjust an observed percentage for treatments since the survey.

        A survey is stale when the current surface is younger than the
        survey.  A stale survey on a first-coat surface means the pavement
        was rebuilt since, so the distress is zero; otherwise the
        observation is mapped through the historic reset curve of the
        surface class.

        Raises:
            ConfigurationError: If a stale survey applies to a surface class
                with no historic reset curve.
        """
        survey_date = segment.condition_survey_date
        if survey_date is None:
            return observed

        survey_age = years_between(base_date, survey_date)
        if survey_age < 0.0:
            logger.warning(
                "%s: condition survey date %s is after base date %s",
                segment.feedback_code,
                survey_date.isoformat(),
                base_date.isoformat(),
            )

        if segment.surface_age >= survey_age:
            return observed

        if segment.surface_function == "1":
            return 0.0
        if segment.surface_class == "cs":
            return self.settings.historic_reset_cs.value(observed)
        if segment.surface_class == "ac":
            return self.settings.historic_reset_ac.value(observed)
        raise ConfigurationError(
            f"{segment.feedback_code}: no historic {self.distress_type.value} "
            f"reset curve for surface class '{segment.surface_class}'"
        )

    def calibrated_setup(
        self,
        segment: RoadSegment,
        observed: float,
        tolerance: float,
    ) -> str:
        """Fit curve parameters to *observed* at the current surface age.

        Returns:
            Encoded ``"AADI_InitialValue_T100"`` string.
        """
        s = self.settings
        refs = self.expected_parameters(segment)
        t100, aadi, iv = scurve.calibrate(
            age=segment.surface_age,
            observed=observed,
            t100_bounds=(s.t100_min, s.t100_max),
            aadi_bounds=(s.aadi_min, s.aadi_max),
            iv_bounds=(s.iv_min, s.iv_max),
            t100_ref=refs.t100,
            aadi_ref=refs.aadi,
            iv_ref=refs.initial_value,
            tolerance=tolerance,
        )
        return CurveParameters(aadi=aadi, initial_value=iv, t100=t100).encode()

    # -- progression ---------------------------------------------------------

    def increment(self, segment: RoadSegment, params: CurveParameters) -> float:
        """Growth of the distress over the period ending at the surface age.

        Zero while the distress is dormant, the initial value in the first
        period past AADI, and the S-curve growth afterwards.
        """
        age = segment.surface_age
        if age < params.aadi:
            return 0.0
        if age - 1.0 < params.aadi:
            return params.initial_value
        return scurve.progression_increment(params.t100, age - params.aadi)

    def next_value_after_increment(
        self,
        segment: RoadSegment,
        current: float,
        encoded: str,
    ) -> float:
        """Distress percentage after one period of growth.

        Surfaces other than chipseal or asphalt do not progress.

        Raises:
            CurveParameterParseError: If *encoded* is malformed.
        """
        if not segment.is_cs_or_ac:
            return current
        return current + self.increment(segment, CurveParameters.parse(encoded))

    # -- reset ---------------------------------------------------------------

    @staticmethod
    def value_after_reset() -> float:
        return 0.0

    def resetted_setup(
        self,
        segment: RoadSegment,
        pre_treatment_value: float,
        treatment_category: str,
        previous_encoded: str,
    ) -> str:
        """Curve parameters after a treatment.

        A treatment over a pre-seal (previous function ``1a``) keeps the
        pre-seal's curve.  Rehabilitation categories take the expected
        parameters directly.  Other categories shorten AADI and T100 by the
        holding or resurfacing penalty for the pre-treatment value, unless
        this distress resets fully.

        Args:
            segment: Segment with its post-treatment surface already set.
            pre_treatment_value: Distress percentage before the treatment.
            treatment_category: Category of the applied treatment.
            previous_encoded: Curve parameters before the treatment.
        """
        if segment.previous_surface_function == "1a":
            return previous_encoded

        s = self.settings
        expected = self.expected_parameters(segment)
        category = treatment_category.lower()
        if "rehab" in category or not self.profile.applies_reset_penalty:
            return expected.encode()

        if "holding" in category:
            factor = s.holding_penalty.value(pre_treatment_value)
        else:
            factor = s.resurfacing_penalty.value(pre_treatment_value)

        return CurveParameters(
            aadi=_clamp(expected.aadi * factor, s.aadi_min, s.aadi_max),
            initial_value=expected.initial_value,
            t100=_clamp(expected.t100 * factor, s.t100_min, s.t100_max),
        ).encode()


def build_distress_models(lookups: LookupTables) -> dict[DistressType, DistressCurveModel]:
    """Build one curve model per distress type, in initialisation order."""
    return {
        dt: DistressCurveModel(
            DISTRESS_PROFILES[dt],
            DistressCurveSettings.from_lookups(lookups, dt.lookup_set),
        )
        for dt in DistressType
    }
