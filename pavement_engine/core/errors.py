"""Exception types raised by the pavement deterioration engine."""

from __future__ import annotations


class PavementModelError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(PavementModelError, KeyError):
    """A lookup set, lookup key or treatment type is missing or unusable.

    Configuration errors are fatal for the segment being processed.
    """

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class CurveParameterParseError(PavementModelError, ValueError):
    """An encoded ``AADI_InitialValue_T100`` string could not be parsed."""


class SegmentComputationError(PavementModelError):
    """A computation on a single segment failed.

    Attributes:
        element_index: Host handle of the failing segment.
        feedback_code: Human-readable segment identity.
        operation: Name of the lifecycle operation that failed.
    """

    def __init__(
        self,
        message: str,
        element_index: int | None = None,
        feedback_code: str = "",
        operation: str = "",
    ):
        super().__init__(message)
        self.element_index = element_index
        self.feedback_code = feedback_code
        self.operation = operation
