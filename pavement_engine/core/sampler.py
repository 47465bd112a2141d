"""Inverse-distribution sampler for post-treatment rates.

The sampler is deterministic: the caller supplies the cumulative
probability (usually a logistic "high rate" probability) and receives the
matching quantile of the chosen distribution.
"""

from __future__ import annotations

import math
from statistics import NormalDist

LOGNORMAL_SIGMA: float = 0.8
NORMAL_CV: float = 0.25

_P_MIN: float = 0.001
_P_MAX: float = 0.999
_STANDARD_NORMAL = NormalDist()


def sample(code: str, central_tendency: float, probability: float) -> float:
    """Return the *probability* quantile of the distribution *code*.

    Args:
        code: ``"a"`` right-skewed lognormal with median *central_tendency*,
            ``"n"`` normal with mean *central_tendency* and a coefficient of
            variation of 0.25 (floored at 0), ``"u"`` uniform on
            ``[0, 2 * central_tendency]``.
        central_tendency: Median or mean of the distribution.
        probability: Cumulative probability, clipped to ``[0.001, 0.999]``.

    Raises:
        ValueError: If *code* is not recognised or *central_tendency* is
            negative.
    """
    if central_tendency < 0.0:
        raise ValueError("central_tendency must be >= 0.")
    p = min(_P_MAX, max(_P_MIN, probability))
    key = str(code).strip().lower()

    if key == "a":
        z = _STANDARD_NORMAL.inv_cdf(p)
        return central_tendency * math.exp(LOGNORMAL_SIGMA * z)
    if key == "n":
        z = _STANDARD_NORMAL.inv_cdf(p)
        return max(0.0, central_tendency + NORMAL_CV * central_tendency * z)
    if key == "u":
        return 2.0 * central_tendency * p
    raise ValueError(f"Unknown distribution code '{code}'")
