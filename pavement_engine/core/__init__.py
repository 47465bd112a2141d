"""Core deterioration, lifecycle and treatment modules."""

from pavement_engine.core.candidate import (
    CandidateSelectionResult,
    TreatmentInfo,
    apply_candidate_selection,
    evaluate_candidate,
    has_sufficient_distress_long_segment,
    has_sufficient_distress_short_segment,
)
from pavement_engine.core.constants import ModelConstants
from pavement_engine.core.context import ModelContext
from pavement_engine.core.distress import (
    DISTRESS_PROFILES,
    CurveParameters,
    DistressCurveModel,
    DistressCurveSettings,
    DistressProfile,
    DistressType,
    build_distress_models,
)
from pavement_engine.core.errors import (
    ConfigurationError,
    CurveParameterParseError,
    PavementModelError,
    SegmentComputationError,
)
from pavement_engine.core.factory import (
    segment_from_parameters,
    segment_from_raw,
    segment_to_parameters,
)
from pavement_engine.core.incrementer import increment_segment
from pavement_engine.core.indices import (
    exceedance_reset,
    logit,
    maintenance_cost_per_km,
    pavement_distress_index,
    surface_distress_index,
    update_indices,
)
from pavement_engine.core.initialiser import initialise_segment
from pavement_engine.core.lookups import LookupTables, TreatmentType
from pavement_engine.core.maintenance import routine_maintenance_proposal
from pavement_engine.core.model import RoadNetworkModel
from pavement_engine.core.piecewise import PiecewiseLinear
from pavement_engine.core.resetter import (
    is_preseal_treatment,
    is_rehab_treatment,
    next_surface_function,
    reset_segment,
)
from pavement_engine.core.segment import RoadSegment
from pavement_engine.core.suitability import (
    FORCED_SCORE,
    preservation_score,
    preseal_holding_score,
    rehabilitation_score,
)
from pavement_engine.core.triggers import TreatmentProposal, get_treatment_proposals

__all__ = [
    "CandidateSelectionResult",
    "ConfigurationError",
    "CurveParameterParseError",
    "CurveParameters",
    "DISTRESS_PROFILES",
    "DistressCurveModel",
    "DistressCurveSettings",
    "DistressProfile",
    "DistressType",
    "FORCED_SCORE",
    "LookupTables",
    "ModelConstants",
    "ModelContext",
    "PavementModelError",
    "PiecewiseLinear",
    "RoadNetworkModel",
    "RoadSegment",
    "SegmentComputationError",
    "TreatmentInfo",
    "TreatmentProposal",
    "TreatmentType",
    "apply_candidate_selection",
    "build_distress_models",
    "evaluate_candidate",
    "exceedance_reset",
    "get_treatment_proposals",
    "has_sufficient_distress_long_segment",
    "has_sufficient_distress_short_segment",
    "increment_segment",
    "initialise_segment",
    "is_preseal_treatment",
    "is_rehab_treatment",
    "logit",
    "maintenance_cost_per_km",
    "next_surface_function",
    "pavement_distress_index",
    "preservation_score",
    "preseal_holding_score",
    "rehabilitation_score",
    "reset_segment",
    "routine_maintenance_proposal",
    "segment_from_parameters",
    "segment_from_raw",
    "segment_to_parameters",
    "surface_distress_index",
    "update_indices",
]
