"""Host-facing facade over the segment lifecycle.

The host owns persistence and scheduling.  Each call receives one
segment's raw row or parameter dictionary, runs a single operation and
returns the new parameter dictionary (or the proposals for the period).
Any failure is re-raised as :class:`SegmentComputationError` carrying the
segment's element index.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from pavement_engine.core.candidate import TreatmentInfo, apply_candidate_selection
from pavement_engine.core.context import ModelContext
from pavement_engine.core.errors import SegmentComputationError
from pavement_engine.core.factory import segment_from_parameters, segment_to_parameters
from pavement_engine.core.incrementer import increment_segment
from pavement_engine.core.indices import update_indices
from pavement_engine.core.initialiser import initialise_segment
from pavement_engine.core.lookups import LookupTables
from pavement_engine.core.maintenance import routine_maintenance_proposal
from pavement_engine.core.resetter import reset_segment
from pavement_engine.core.segment import RoadSegment
from pavement_engine.core.triggers import TreatmentProposal, get_treatment_proposals
from pavement_engine.data_ingestion.raw_data import RawRow

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RoadNetworkModel:
    """Lifecycle operations for individual road segments.

    Args:
        lookups: Loaded lookup tables, shared read-only by every call.
    """

    def __init__(self, lookups: LookupTables):
        self.context: ModelContext = ModelContext.from_lookups(lookups)

    @property
    def lookups(self) -> LookupTables:
        return self.context.lookups

    # -- helpers -------------------------------------------------------------

    def _run(self, operation: str, element_index: int, func: Callable[[], T]) -> T:
        try:
            return func()
        except SegmentComputationError as exc:
            if exc.element_index is None:
                exc.element_index = element_index
            if not exc.operation:
                exc.operation = operation
            raise
        except Exception as exc:
            raise SegmentComputationError(
                f"Error in {operation} on element index {element_index}: {exc}",
                element_index=element_index,
                operation=operation,
            ) from exc

    def _load(self, element_index: int, parameters: Mapping[str, Any], period: int) -> RoadSegment:
        return segment_from_parameters(
            element_index, parameters, self.context.lookups, self.context.constants, period
        )

    def _refresh(self, segment: RoadSegment, period: int, info: TreatmentInfo) -> None:
        constants = self.context.constants
        update_indices(segment, self.context.lookups, constants)
        apply_candidate_selection(segment, period, info.periods_to_next_treatment, constants)

    # -- lifecycle -----------------------------------------------------------

    def initialise(
        self,
        element_index: int,
        raw_row: RawRow | Mapping[str, Any],
        info: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Initialise a segment from its raw row.

        Returns:
            Parameter dictionary for period 0.

        Raises:
            SegmentComputationError: On any failure.
        """
        history = TreatmentInfo.from_mapping(info)
        row = raw_row if isinstance(raw_row, RawRow) else RawRow(raw_row)

        def _op() -> dict[str, Any]:
            segment = initialise_segment(element_index, row, self.context)
            self._refresh(segment, 0, history)
            return segment_to_parameters(segment)

        return self._run("initialise", element_index, _op)

    def increment(
        self,
        element_index: int,
        period: int,
        parameters: Mapping[str, Any],
        info: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Advance a segment by one untreated period.

        Raises:
            SegmentComputationError: On any failure.
        """
        history = TreatmentInfo.from_mapping(info)

        def _op() -> dict[str, Any]:
            segment = self._load(element_index, parameters, period)
            self._refresh(segment, period, history)
            increment_segment(segment, self.context)
            self._refresh(segment, period, history)
            return segment_to_parameters(segment)

        return self._run("increment", element_index, _op)

    def reset(
        self,
        treatment_name: str | None,
        element_index: int,
        period: int,
        parameters: Mapping[str, Any],
        info: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Apply a treatment to a segment.

        Raises:
            SegmentComputationError: On any failure, including an undefined
                treatment type.
        """
        history = TreatmentInfo.from_mapping(info)

        def _op() -> dict[str, Any]:
            segment = self._load(element_index, parameters, period)
            self._refresh(segment, period, history)
            reset_segment(segment, treatment_name, self.context)
            self._refresh(segment, period, history)
            logger.debug("%s: applied %s in period %d", segment.feedback_code, treatment_name, period)
            return segment_to_parameters(segment)

        return self._run("reset", element_index, _op)

    # -- treatments ----------------------------------------------------------

    def get_treatment_candidates(
        self,
        element_index: int,
        period: int,
        parameters: Mapping[str, Any],
        info: Mapping[str, Any] | None = None,
    ) -> list[TreatmentProposal]:
        """Treatment proposals for the period.

        Uses the stored indices, ranks and candidate flag as they are.

        Raises:
            SegmentComputationError: On any failure.
        """
        history = TreatmentInfo.from_mapping(info)

        def _op() -> list[TreatmentProposal]:
            segment = self._load(element_index, parameters, period)
            return get_treatment_proposals(
                segment, period, history, self.context.lookups, self.context.constants
            )

        return self._run("get_treatment_candidates", element_index, _op)

    def get_triggered_maintenance(
        self,
        element_index: int,
        period: int,
        parameters: Mapping[str, Any],
    ) -> TreatmentProposal | None:
        """Routine maintenance proposal for the period, if any.

        Raises:
            SegmentComputationError: On any failure.
        """

        def _op() -> TreatmentProposal | None:
            segment = self._load(element_index, parameters, period)
            update_indices(segment, self.context.lookups, self.context.constants)
            return routine_maintenance_proposal(segment, period)

        return self._run("get_triggered_maintenance", element_index, _op)
