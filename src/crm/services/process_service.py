"""Process lifecycle service: opening, listing and transitioning processes."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.core.errors import (
    ConcurrentModificationError,
    InvalidStateError,
    NotFoundError,
    RequiresFinalizationError,
)
from src.crm.core.logging import bind_process_context, get_logger
from src.crm.models import (
    Process,
    ProcessEvent,
    ProcessFeedback,
    ProcessPhase,
    ProcessStatus,
    ProcessType,
    SlaStatus,
    utc_now,
)
from src.crm.repositories import (
    PhaseRepository,
    ProcessEventRepository,
    ProcessFeedbackRepository,
    ProcessRepository,
)
from src.crm.schemas import ProcessCreate, TransitionRequest
from src.crm.services.sla import evaluate as evaluate_sla
from src.crm.services.phase_catalog_service import PhaseCatalogService
from src.crm.services.unit_of_work import atomic

logger = get_logger(__name__)

CREATED_NOTE = "process created"


@dataclass(frozen=True)
class ProcessView:
    """A process with its display phase and SLA state at read time."""

    process: Process
    phase_name: str | None
    deadline: datetime | None
    sla_status: SlaStatus


@dataclass(frozen=True)
class ProcessPage:
    rows: list[ProcessView]
    page: int
    page_size: int
    total: int


@dataclass(frozen=True)
class TypeSummary:
    type: ProcessType
    open: int
    overdue: int
    due_today: int


class ProcessService:
    """Process engine - business logic only.

    ``clock`` returns naive UTC now; ``sla_zone`` is the zone in which
    "due today" is judged.
    """

    def __init__(
        self,
        process_repo: ProcessRepository,
        phase_repo: PhaseRepository,
        event_repo: ProcessEventRepository,
        feedback_repo: ProcessFeedbackRepository,
        catalog: PhaseCatalogService,
        session: AsyncSession,
        sla_zone: tzinfo = UTC,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.process_repo = process_repo
        self.phase_repo = phase_repo
        self.event_repo = event_repo
        self.feedback_repo = feedback_repo
        self.catalog = catalog
        self.session = session
        self.sla_zone = sla_zone
        self.clock = clock

    async def _get_process(self, process_id: UUID) -> Process:
        process = await self.process_repo.get_by_id(process_id)
        if process is None:
            raise NotFoundError(resource="Process", resource_id=process_id)
        return process

    def _view(self, process: Process, phase: ProcessPhase | None, now: datetime) -> ProcessView:
        # Inactive phases still name the row but carry no SLA; closed rows have none
        sla_phase = phase if phase is not None and phase.is_active and process.is_open else None
        deadline, status = evaluate_sla(
            sla_phase, process.current_phase_started_at, now, self.sla_zone
        )
        return ProcessView(
            process=process,
            phase_name=phase.name if phase is not None else None,
            deadline=deadline,
            sla_status=status,
        )

    async def create_process(self, data: ProcessCreate, actor: str) -> Process:
        """Open a process and record its creation event.

        Raises:
            NotFoundError: If ``phase_id`` is not a selectable phase of the type
            RequiresFinalizationError: If ``phase_id`` is the terminal phase
        """
        async with atomic(self.session, "create process"):
            if data.phase_id is not None:
                phase = await self.catalog.get_selectable_phase(data.phase_id, data.type)
                if phase.is_terminal:
                    raise RequiresFinalizationError(
                        "A process cannot be opened in the terminal phase"
                    )
            else:
                phase = await self.catalog.get_default_phase(data.type)

            now = self.clock()
            process = Process(
                type=data.type.value,
                status=ProcessStatus.OPEN.value,
                current_phase_id=phase.id if phase is not None else None,
                current_phase_started_at=now,
                current_owner=data.owner_kind.value,
                start_at=now,
                version=1,
                start_date=data.start_date,
                administradora=data.administradora,
                proposta=data.proposta,
                grupo=data.grupo,
                cota=data.cota,
                segmento=data.segmento,
                cliente_nome=data.cliente_nome,
                credito_disponivel=data.credito_disponivel,
                lead_id=data.lead_id,
                cliente_id=data.cliente_id,
                created_by=actor,
                updated_by=actor,
                created_at=now,
                updated_at=now,
            )
            self.process_repo.add(process)
            await self.session.flush()

            self.event_repo.add(
                ProcessEvent(
                    process_id=process.id,
                    sequence=process.version,
                    at=now,
                    from_phase_id=None,
                    to_phase_id=process.current_phase_id,
                    owner=process.current_owner,
                    note=data.note or CREATED_NOTE,
                    actor=actor,
                )
            )

        logger.info(
            "Process created",
            process_id=str(process.id),
            process_type=process.type,
            phase_id=str(process.current_phase_id) if process.current_phase_id else None,
        )
        return process

    async def list_processes(
        self,
        process_type: ProcessType,
        status: ProcessStatus,
        page: int,
        page_size: int,
    ) -> ProcessPage:
        """One page of processes, each enriched with phase name and SLA state.

        ``page`` and ``page_size`` must already be normalized by the caller.
        """
        async with atomic(self.session, "list processes"):
            processes, total = await self.process_repo.list_page(
                process_type.value, status.value, page, page_size
            )
            phases = await self.phase_repo.get_many(
                p.current_phase_id for p in processes if p.current_phase_id is not None
            )

        now = self.clock()
        rows = [
            self._view(
                p, phases.get(p.current_phase_id) if p.current_phase_id else None, now
            )
            for p in processes
        ]
        return ProcessPage(rows=rows, page=page, page_size=page_size, total=total)

    async def get_process(self, process_id: UUID) -> ProcessView:
        """
        Raises:
            NotFoundError: If the process does not exist
        """
        async with atomic(self.session, "load process"):
            process = await self._get_process(process_id)
            phase = (
                await self.phase_repo.get_by_id(process.current_phase_id)
                if process.current_phase_id
                else None
            )
        return self._view(process, phase, self.clock())

    async def list_events(self, process_id: UUID) -> list[ProcessEvent]:
        """Event log of a process, oldest first.

        Raises:
            NotFoundError: If the process does not exist
        """
        async with atomic(self.session, "list process events"):
            await self._get_process(process_id)
            return await self.event_repo.list_for_process(process_id)

    async def get_feedback(self, process_id: UUID) -> ProcessFeedback:
        """
        Raises:
            NotFoundError: If the process does not exist or was never finalized
        """
        async with atomic(self.session, "load feedback"):
            await self._get_process(process_id)
            feedback = await self.feedback_repo.get_by_process(process_id)
        if feedback is None:
            raise NotFoundError(resource="Feedback for process", resource_id=process_id)
        return feedback

    async def summarize_open(self) -> list[TypeSummary]:
        """Open, overdue and due-today counters per process type."""
        async with atomic(self.session, "summarize processes"):
            processes = await self.process_repo.list_open()
            phases = {p.id: p for p in await self.phase_repo.list_active_all_types()}

        now = self.clock()
        counters = {t: {"open": 0, "overdue": 0, "due_today": 0} for t in ProcessType}
        for process in processes:
            counter = counters[ProcessType(process.type)]
            counter["open"] += 1
            phase = phases.get(process.current_phase_id) if process.current_phase_id else None
            _, status = evaluate_sla(phase, process.current_phase_started_at, now, self.sla_zone)
            if status is SlaStatus.OVERDUE:
                counter["overdue"] += 1
            elif status is SlaStatus.DUE_TODAY:
                counter["due_today"] += 1

        return [TypeSummary(type=t, **counter) for t, counter in counters.items()]

    async def transition(
        self, process_id: UUID, request: TransitionRequest, actor: str
    ) -> Process:
        """Move an open process to another phase and/or owner, editing its payload.

        The phase clock restarts only when the phase actually changes. An
        event is recorded when the phase or owner changes or a note is given;
        payload-only edits leave no event.

        Raises:
            NotFoundError: If the process or the target phase does not exist
            InvalidStateError: If the process is closed
            RequiresFinalizationError: If the target phase is terminal
            ConcurrentModificationError: If the process changed since it was read
        """
        bind_process_context(process_id)
        async with atomic(self.session, "transition process"):
            process = await self._get_process(process_id)
            if not process.is_open:
                raise InvalidStateError(f"Process {process_id} is already closed")

            from_phase_id = process.current_phase_id
            phase_changed = request.phase_id is not None and request.phase_id != from_phase_id
            if phase_changed:
                await self.catalog.get_selectable_phase(request.phase_id, process.type)  # type: ignore[arg-type]
            to_phase_id = request.phase_id if phase_changed else from_phase_id

            # Also covers a process left in a phase that was later marked terminal
            terminal = await self.catalog.get_final_phase(process.type)
            if terminal is not None and to_phase_id == terminal.id:
                raise RequiresFinalizationError(
                    "Moving into the terminal phase requires finalization"
                )

            new_owner = request.owner_kind.value if request.owner_kind else process.current_owner
            owner_changed = new_owner != process.current_owner

            now = self.clock()
            values: dict[str, Any] = {
                **request.payload_changes(),
                "current_phase_id": to_phase_id,
                "current_owner": new_owner,
                "updated_by": actor,
                "updated_at": now,
            }
            if phase_changed:
                values["current_phase_started_at"] = now

            expected_version = process.version
            if not await self.process_repo.update_if_current(process.id, expected_version, values):
                raise ConcurrentModificationError(process.id)

            if phase_changed or owner_changed or request.note:
                self.event_repo.add(
                    ProcessEvent(
                        process_id=process.id,
                        sequence=expected_version + 1,
                        at=now,
                        from_phase_id=from_phase_id,
                        to_phase_id=to_phase_id,
                        owner=new_owner,
                        note=request.note,
                        actor=actor,
                    )
                )
            await self.session.flush()
            await self.session.refresh(process)

        logger.info(
            "Process transitioned",
            phase_changed=phase_changed,
            owner_changed=owner_changed,
            version=process.version,
        )
        return process
