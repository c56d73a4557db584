"""Transaction boundary shared by the services."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.core.errors import DomainError, InfrastructureError
from src.crm.core.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def atomic(session: AsyncSession, operation: str) -> AsyncIterator[AsyncSession]:
    """Run a block as one transaction.

    Commits when the block finishes and rolls back on any error. Store
    failures surface as ``InfrastructureError``; domain errors propagate
    unchanged.

    Usage:
        async with atomic(self.session, "transition process"):
            ...
    """
    try:
        yield session
        await session.commit()
    except DomainError:
        await session.rollback()
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error("Store operation failed", operation=operation, error=str(e))
        raise InfrastructureError(f"Could not {operation}: backing store unavailable") from e
    except Exception:
        await session.rollback()
        raise
