"""Repository for process feedback."""

from uuid import UUID

from sqlmodel import select

from src.crm.models import ProcessFeedback
from src.crm.repositories.base import BaseRepository


class ProcessFeedbackRepository(BaseRepository[ProcessFeedback]):
    """Repository for ProcessFeedback entity."""

    model = ProcessFeedback

    async def get_by_process(self, process_id: UUID) -> ProcessFeedback | None:
        result = await self.session.execute(
            select(ProcessFeedback).where(ProcessFeedback.process_id == process_id)
        )
        return result.scalar_one_or_none()
