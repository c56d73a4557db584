"""Finalization: closing a process, capturing feedback, attributing its time."""

import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.core.errors import (
    ConcurrentModificationError,
    InvalidInputError,
    InvalidStateError,
    NoTerminalPhaseError,
    NotFoundError,
)
from src.crm.core.logging import bind_process_context, get_logger
from src.crm.models import Process, ProcessEvent, ProcessFeedback, ProcessStatus, utc_now
from src.crm.repositories import (
    ProcessEventRepository,
    ProcessFeedbackRepository,
    ProcessRepository,
)
from src.crm.services.attribution import AttributionReport, attribute_time
from src.crm.services.phase_catalog_service import PhaseCatalogService
from src.crm.services.unit_of_work import atomic

logger = get_logger(__name__)

FINALIZED_NOTE = "process finalized"


@dataclass(frozen=True)
class FinalizationResult:
    process: Process
    report: AttributionReport


def validate_score(name: str, value: float) -> int:
    """Check a satisfaction score and round it half up to the stored integer.

    Raises:
        InvalidInputError: If the score is not a finite number in [0, 100]
    """
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise InvalidInputError(f"{name} must be a number")
    if not math.isfinite(value) or not 0 <= value <= 100:
        raise InvalidInputError(f"{name} must be between 0 and 100", details={name: value})
    return math.floor(value + 0.5)


class FinalizationService:
    """Closes processes into their type's terminal phase."""

    def __init__(
        self,
        process_repo: ProcessRepository,
        event_repo: ProcessEventRepository,
        feedback_repo: ProcessFeedbackRepository,
        catalog: PhaseCatalogService,
        session: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.process_repo = process_repo
        self.event_repo = event_repo
        self.feedback_repo = feedback_repo
        self.catalog = catalog
        self.session = session
        self.clock = clock

    async def finalize(
        self,
        process_id: UUID,
        actor: str,
        user_satisfaction: float,
        client_satisfaction: float,
        improvement_text: str | None = None,
        note: str | None = None,
    ) -> FinalizationResult:
        """Close a process, store its feedback and attribute its lifetime.

        Closing, the final event and the feedback row are written in one
        transaction; nothing is written if any step fails. Scores are checked
        before the store is touched.

        Raises:
            InvalidInputError: If a score is not a finite number in [0, 100]
            NotFoundError: If the process does not exist
            InvalidStateError: If the process is already closed
            NoTerminalPhaseError: If the type has no active terminal phase
            ConcurrentModificationError: If the process changed since it was read
        """
        user_score = validate_score("user_satisfaction", user_satisfaction)
        client_score = validate_score("client_satisfaction", client_satisfaction)
        if improvement_text is not None:
            improvement_text = improvement_text.strip() or None

        bind_process_context(process_id)
        async with atomic(self.session, "finalize process"):
            process = await self.process_repo.get_by_id(process_id)
            if process is None:
                raise NotFoundError(resource="Process", resource_id=process_id)
            if not process.is_open:
                raise InvalidStateError(f"Process {process_id} is already closed")

            terminal = await self.catalog.get_final_phase(process.type)
            if terminal is None:
                raise NoTerminalPhaseError(process.type)

            now = self.clock()
            from_phase_id = process.current_phase_id
            expected_version = process.version
            closed = await self.process_repo.update_if_current(
                process.id,
                expected_version,
                {
                    "status": ProcessStatus.CLOSED.value,
                    "closed_at": now,
                    "current_phase_id": terminal.id,
                    "current_phase_started_at": now,
                    "updated_by": actor,
                    "updated_at": now,
                },
            )
            if not closed:
                raise ConcurrentModificationError(process.id)

            self.event_repo.add(
                ProcessEvent(
                    process_id=process.id,
                    sequence=expected_version + 1,
                    at=now,
                    from_phase_id=from_phase_id,
                    to_phase_id=terminal.id,
                    owner=process.current_owner,
                    note=note or FINALIZED_NOTE,
                    actor=actor,
                )
            )
            self.feedback_repo.add(
                ProcessFeedback(
                    process_id=process.id,
                    user_satisfaction=user_score,
                    client_satisfaction=client_score,
                    improvement_text=improvement_text,
                    actor=actor,
                    created_at=now,
                )
            )
            await self.session.flush()
            await self.session.refresh(process)
            events = await self.event_repo.list_for_process(process.id)

        report = attribute_time(
            events,
            start_at=process.start_at,
            closed_at=process.closed_at or now,
            fallback_owner=process.current_owner,
        )
        logger.info(
            "Process finalized",
            process_type=process.type,
            total_minutes=int(report.total.total_seconds() // 60),
        )
        return FinalizationResult(process=process, report=report)
