"""Treatment suitability scores (TSS).

Scores run roughly 0-100 and rank competing treatments on one segment.
Forced treatments bypass scoring with :data:`FORCED_SCORE`.
"""

from __future__ import annotations

from pavement_engine.core.constants import ModelConstants
from pavement_engine.core.piecewise import PiecewiseLinear
from pavement_engine.core.segment import RoadSegment

FORCED_SCORE: float = 102.0


def preservation_score(segment: RoadSegment, constants: ModelConstants) -> float:
    """Higher SDI rank favours preservation; pavement distress counts against it."""
    curve = PiecewiseLinear(
        [(constants.preserve_sdi_rank, 0.0), (100.0, 100.0)], extrapolate=True
    )
    return curve.value(segment.sdi_rank) - 0.5 * segment.pdi


def rehabilitation_score(segment: RoadSegment, constants: ModelConstants) -> float:
    """PDI rank score plus a bonus for rutting above the excess threshold."""
    curve = PiecewiseLinear(
        [(constants.rehab_pdi_rank, 0.0), (100.0, 100.0)], extrapolate=False
    )
    score = curve.value(segment.pdi_rank)
    if segment.rut > constants.rehab_excess_rut_thresh:
        score += (segment.rut - constants.rehab_excess_rut_thresh) * constants.rehab_excess_rut_fact
    return score


def preseal_holding_score(segment: RoadSegment, constants: ModelConstants) -> float:
    """Score for pre-seal repairs used as a holding action.

    Zero when rutting is too deep for a holding action to help.
    """
    if segment.rut > constants.holding_max_rut:
        return 0.0
    curve = PiecewiseLinear(
        [
            (constants.holding_pdi_rank_pt1, 0.0),
            (constants.holding_pdi_rank_pt2, 100.0),
            (100.0, constants.holding_pdi_rank_pt3),
        ],
        extrapolate=True,
    )
    return curve.value(segment.pdi_rank)
