"""Repository for Process records."""

from typing import Any, cast
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.engine import CursorResult
from sqlmodel import col, select

from src.crm.models import Process, ProcessStatus
from src.crm.repositories.base import BaseRepository


class ProcessRepository(BaseRepository[Process]):
    """Repository for Process entity."""

    model = Process

    async def list_page(
        self,
        process_type: str,
        status: str,
        page: int,
        page_size: int,
    ) -> tuple[list[Process], int]:
        """One page of processes of a type and status, oldest start date first."""
        query = (
            select(Process)
            .where(Process.type == process_type, Process.status == status)
            .order_by(col(Process.start_date).asc(), col(Process.created_at).asc())
        )
        return await self.paginate(query, page, page_size)

    async def list_open(self) -> list[Process]:
        """All open processes, any type."""
        result = await self.session.execute(
            select(Process).where(Process.status == ProcessStatus.OPEN.value)
        )
        return list(result.scalars().all())

    async def update_if_current(
        self,
        process_id: UUID,
        expected_version: int,
        values: dict[str, Any],
    ) -> bool:
        """Conditionally update an open process.

        The write only applies if the row is still open and still at
        ``expected_version``; ``version`` is bumped as part of the same
        statement.

        Returns:
            True if exactly one row was updated, False if the process was
            closed or modified since it was read.
        """
        stmt = (
            update(Process)
            .where(
                col(Process.id) == process_id,
                col(Process.status) == ProcessStatus.OPEN.value,
                col(Process.version) == expected_version,
            )
            .values(**values, version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return cast(CursorResult[Any], result).rowcount == 1
