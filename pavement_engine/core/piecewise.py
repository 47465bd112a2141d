"""Piecewise linear lookup curve.

Curves are defined by ``(x, y)`` control points and evaluated by linear
interpolation between neighbouring points.  Queries outside the x-range
either clamp to the end-point y value or extend the outer segment
linearly, depending on the ``extrapolate`` flag.

Duplicate x values are allowed.  A query exactly at a duplicated x returns
the y of the *first* point with that x (in the order supplied); queries
strictly to the right of it interpolate from the *last* duplicate.  This
makes a duplicate pair behave like a step.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Sequence


class PiecewiseLinear:
    """Linear interpolation over sorted control points.

    Attributes:
        xs: Control point x values in ascending order.
        ys: Control point y values matching ``xs``.
        extrapolate: Extend the first/last segment beyond the x-range
            instead of clamping.
    """

    __slots__ = ("xs", "ys", "extrapolate")

    def __init__(
        self,
        points: Iterable[tuple[float, float]],
        extrapolate: bool = False,
    ):
        """Build the curve from ``(x, y)`` pairs.

        Args:
            points: Control points in any order.  They are stable-sorted
                by x, so duplicates keep their supplied order.
            extrapolate: Extend beyond the end points linearly.

        Raises:
            ValueError: If no points are supplied.
        """
        pts = sorted(((float(x), float(y)) for x, y in points), key=lambda p: p[0])
        if not pts:
            raise ValueError("PiecewiseLinear requires at least one control point.")
        self.xs: list[float] = [p[0] for p in pts]
        self.ys: list[float] = [p[1] for p in pts]
        self.extrapolate: bool = extrapolate

    @classmethod
    def from_setup_code(cls, code: str, extrapolate: bool = False) -> PiecewiseLinear:
        """Parse a setup code of the form ``"x1,y1|x2,y2|..."``.

        Whitespace around tokens is ignored.

        Raises:
            ValueError: If a point does not have exactly two numeric parts.
        """
        points: list[tuple[float, float]] = []
        for chunk in str(code).split("|"):
            chunk = chunk.strip()
            if not chunk:
                continue
            parts = [p.strip() for p in chunk.split(",")]
            if len(parts) != 2:
                raise ValueError(
                    f"Invalid piecewise linear point '{chunk}' in setup code '{code}'"
                )
            points.append((float(parts[0]), float(parts[1])))
        return cls(points, extrapolate=extrapolate)

    def __len__(self) -> int:
        return len(self.xs)

    def value(self, x: float) -> float:
        """Return the interpolated y at *x*."""
        xs, ys = self.xs, self.ys
        if len(xs) == 1:
            return ys[0]

        if x < xs[0]:
            if not self.extrapolate:
                return ys[0]
            return self._segment_value(0, 1, x)
        if x > xs[-1]:
            if not self.extrapolate:
                return ys[-1]
            return self._segment_value(len(xs) - 2, len(xs) - 1, x)

        i = bisect_left(xs, x)
        if xs[i] == x:
            return ys[i]

        right = bisect_right(xs, x)
        return self._segment_value(right - 1, right, x)

    __call__ = value

    def _segment_value(self, i: int, j: int, x: float) -> float:
        x0, x1 = self.xs[i], self.xs[j]
        y0, y1 = self.ys[i], self.ys[j]
        if x1 == x0:
            return y0
        return y0 + (y1 - y0) * (x - x0) / (x1 - x0)

    def values(self, xs: Sequence[float]) -> list[float]:
        """Evaluate the curve at every x in *xs*."""
        return [self.value(x) for x in xs]
