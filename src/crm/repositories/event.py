"""Repository for the process event log (append-only)."""

from uuid import UUID

from sqlmodel import col, select

from src.crm.models import ProcessEvent
from src.crm.repositories.base import BaseRepository


class ProcessEventRepository(BaseRepository[ProcessEvent]):
    """Repository for ProcessEvent entity. Exposes no update or delete."""

    model = ProcessEvent

    async def list_for_process(self, process_id: UUID) -> list[ProcessEvent]:
        """Full event log of a process in chronological order."""
        result = await self.session.execute(
            select(ProcessEvent)
            .where(ProcessEvent.process_id == process_id)
            .order_by(col(ProcessEvent.at).asc(), col(ProcessEvent.sequence).asc())
        )
        return list(result.scalars().all())
