"""Repository for the phase catalog."""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import func
from sqlmodel import col, select

from src.crm.models import ProcessPhase
from src.crm.repositories.base import BaseRepository


class PhaseRepository(BaseRepository[ProcessPhase]):
    """Repository for ProcessPhase entity."""

    model = ProcessPhase

    def _active(self, process_type: str):  # type: ignore[no-untyped-def]
        return (
            select(ProcessPhase)
            .where(
                ProcessPhase.process_type == process_type,
                ProcessPhase.is_active == True,  # noqa: E712
            )
            .order_by(col(ProcessPhase.sort_order).asc(), col(ProcessPhase.name).asc())
        )

    async def list_active(self, process_type: str) -> list[ProcessPhase]:
        """Active phases of a type in workflow order."""
        result = await self.session.execute(self._active(process_type))
        return list(result.scalars().all())

    async def get_first_active(self, process_type: str) -> ProcessPhase | None:
        """First active non-terminal phase by sort order (default phase for new processes)."""
        query = self._active(process_type).where(ProcessPhase.is_terminal == False)  # noqa: E712
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def get_active_terminal(self, process_type: str) -> ProcessPhase | None:
        """The active terminal phase of a type.

        Uniqueness is enforced when the catalog is written; ordering keeps the
        result deterministic for rows that predate that check.
        """
        query = self._active(process_type).where(ProcessPhase.is_terminal == True)  # noqa: E712
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def count_active_terminal(
        self, process_type: str, exclude_id: UUID | None = None
    ) -> int:
        """Number of active terminal phases of a type, optionally ignoring one phase."""
        query = (
            select(func.count())
            .select_from(ProcessPhase)
            .where(
                ProcessPhase.process_type == process_type,
                ProcessPhase.is_active == True,  # noqa: E712
                ProcessPhase.is_terminal == True,  # noqa: E712
            )
        )
        if exclude_id is not None:
            query = query.where(ProcessPhase.id != exclude_id)
        return (await self.session.execute(query)).scalar_one()

    async def get_many(self, ids: Iterable[UUID]) -> dict[UUID, ProcessPhase]:
        """Phases by id, including inactive ones (for display of historical rows)."""
        wanted = set(ids)
        if not wanted:
            return {}
        result = await self.session.execute(
            select(ProcessPhase).where(col(ProcessPhase.id).in_(wanted))
        )
        return {phase.id: phase for phase in result.scalars().all()}

    async def list_active_all_types(self) -> list[ProcessPhase]:
        result = await self.session.execute(
            select(ProcessPhase).where(ProcessPhase.is_active == True)  # noqa: E712
        )
        return list(result.scalars().all())
