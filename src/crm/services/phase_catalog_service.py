"""Phase catalog service: lookups used by the process engine plus catalog admin."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.core.errors import ConflictError, NotFoundError
from src.crm.core.logging import get_logger
from src.crm.models import ProcessPhase, ProcessType, SlaKind, utc_now
from src.crm.repositories import PhaseRepository
from src.crm.schemas import DaysSla, HoursSla, PhaseUpdate
from src.crm.services.unit_of_work import atomic

logger = get_logger(__name__)


def _apply_sla(phase: ProcessPhase, sla: DaysSla | HoursSla) -> None:
    # Exactly one of the two columns is set, matching the policy kind
    if isinstance(sla, DaysSla):
        phase.sla_kind = SlaKind.DAYS.value
        phase.sla_days = sla.days
        phase.sla_minutes = None
    else:
        phase.sla_kind = SlaKind.HOURS.value
        phase.sla_days = None
        phase.sla_minutes = sla.minutes


class PhaseCatalogService:
    """Read and maintain the configurable phases of each process type."""

    def __init__(self, phase_repo: PhaseRepository, session: AsyncSession):
        self.phase_repo = phase_repo
        self.session = session

    async def list_active_phases(self, process_type: ProcessType) -> list[ProcessPhase]:
        """Active phases of a type, ordered by sort order then name."""
        async with atomic(self.session, "list phases"):
            return await self.phase_repo.list_active(process_type.value)

    async def get_default_phase(self, process_type: ProcessType) -> ProcessPhase | None:
        """Phase assigned to new processes when none is requested."""
        return await self.phase_repo.get_first_active(process_type.value)

    async def get_final_phase(self, process_type: ProcessType | str) -> ProcessPhase | None:
        """The active terminal phase of a type, if one is configured."""
        return await self.phase_repo.get_active_terminal(ProcessType(process_type).value)

    async def get_phase(self, phase_id: UUID) -> ProcessPhase:
        """Any phase by id, active or not.

        Raises:
            NotFoundError: If no phase has this id
        """
        phase = await self.phase_repo.get_by_id(phase_id)
        if phase is None:
            raise NotFoundError(resource="Phase", resource_id=phase_id)
        return phase

    async def get_selectable_phase(
        self, phase_id: UUID, process_type: ProcessType | str
    ) -> ProcessPhase:
        """A phase a process of ``process_type`` may be moved into.

        Raises:
            NotFoundError: If the phase is missing, inactive or belongs to
                another process type
        """
        phase = await self.phase_repo.get_by_id(phase_id)
        if (
            phase is None
            or not phase.is_active
            or phase.process_type != ProcessType(process_type).value
        ):
            raise NotFoundError(resource="Phase", resource_id=phase_id)
        return phase

    async def _ensure_single_terminal(
        self, process_type: str, exclude_id: UUID | None = None
    ) -> None:
        existing = await self.phase_repo.count_active_terminal(process_type, exclude_id=exclude_id)
        if existing:
            raise ConflictError(
                f"Process type '{process_type}' already has an active terminal phase"
            )

    async def create_phase(
        self,
        process_type: ProcessType,
        name: str,
        sla: DaysSla | HoursSla,
        sort_order: int = 100,
        is_terminal: bool = False,
    ) -> ProcessPhase:
        """Add a phase to the catalog.

        Raises:
            ConflictError: If a terminal phase is requested and the type
                already has an active one
        """
        async with atomic(self.session, "create phase"):
            if is_terminal:
                await self._ensure_single_terminal(process_type.value)

            phase = ProcessPhase(
                process_type=process_type.value,
                name=name,
                sort_order=sort_order,
                is_terminal=is_terminal,
            )
            _apply_sla(phase, sla)
            self.phase_repo.add(phase)

        logger.info(
            "Phase created",
            phase_id=str(phase.id),
            process_type=phase.process_type,
            is_terminal=phase.is_terminal,
        )
        return phase

    async def update_phase(self, phase_id: UUID, data: PhaseUpdate) -> ProcessPhase:
        """Edit name, SLA, ordering or terminal flag of a phase.

        Raises:
            NotFoundError: If the phase does not exist
            ConflictError: If the edit would give the type a second active
                terminal phase
        """
        async with atomic(self.session, "update phase"):
            phase = await self.get_phase(phase_id)

            if data.is_terminal and phase.is_active and not phase.is_terminal:
                await self._ensure_single_terminal(phase.process_type, exclude_id=phase.id)

            if data.name is not None:
                phase.name = data.name
            if data.sla is not None:
                _apply_sla(phase, data.sla)
            if data.sort_order is not None:
                phase.sort_order = data.sort_order
            if data.is_terminal is not None:
                phase.is_terminal = data.is_terminal
            phase.updated_at = utc_now()

        logger.info("Phase updated", phase_id=str(phase.id))
        return phase

    async def deactivate_phase(self, phase_id: UUID) -> ProcessPhase:
        """Hide a phase from selection. Historical events keep resolving it.

        Raises:
            NotFoundError: If the phase does not exist
        """
        async with atomic(self.session, "deactivate phase"):
            phase = await self.get_phase(phase_id)
            phase.is_active = False
            phase.updated_at = utc_now()

        logger.info("Phase deactivated", phase_id=str(phase.id), was_terminal=phase.is_terminal)
        return phase
