"""Root test fixtures shared across all test types.

Every test runs against a private in-memory SQLite database; tables are
created from the SQLModel metadata. HTTP fixtures live in
tests/integration/conftest.py.
"""

import os

# Test settings must be in place before any application import
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-process-engine-0123456789")
os.environ.setdefault("SLA_TIMEZONE", "UTC")

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import AsyncGenerator
from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import src.crm.models  # noqa: F401 - registers tables on the metadata
from src.crm.core.config import get_settings
from src.crm.core.db import engine as engine_module
from src.crm.models import ProcessPhase, ProcessType
from src.crm.repositories import (
    PhaseRepository,
    ProcessEventRepository,
    ProcessFeedbackRepository,
    ProcessRepository,
)
from src.crm.services import FinalizationService, PhaseCatalogService, ProcessService
from tests.factories import PhaseFactory
from tests.helpers import FrozenClock

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()

T0 = datetime(2024, 1, 1, 9, 0, 0)


@pytest.fixture
async def engine(monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[AsyncEngine]:
    """In-memory database shared by every session of one test.

    Installed as the application engine so code paths that open their own
    session (health check, request dependencies) see the same data.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    monkeypatch.setattr(engine_module, "_engine", test_engine)
    yield test_engine
    monkeypatch.setattr(engine_module, "_engine", None)
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session with the same flags the application uses."""
    async with AsyncSession(engine, expire_on_commit=False, autoflush=False) as session:
        yield session


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(T0)


@pytest.fixture
def catalog(db_session: AsyncSession) -> PhaseCatalogService:
    return PhaseCatalogService(PhaseRepository(db_session), db_session)


@pytest.fixture
def process_service(
    db_session: AsyncSession, catalog: PhaseCatalogService, clock: FrozenClock
) -> ProcessService:
    return ProcessService(
        ProcessRepository(db_session),
        PhaseRepository(db_session),
        ProcessEventRepository(db_session),
        ProcessFeedbackRepository(db_session),
        catalog,
        db_session,
        clock=clock,
    )


@pytest.fixture
def finalization_service(
    db_session: AsyncSession, catalog: PhaseCatalogService, clock: FrozenClock
) -> FinalizationService:
    return FinalizationService(
        ProcessRepository(db_session),
        ProcessEventRepository(db_session),
        ProcessFeedbackRepository(db_session),
        catalog,
        db_session,
        clock=clock,
    )


@pytest.fixture
async def phases(db_session: AsyncSession) -> dict[str, ProcessPhase]:
    """A small faturamento workflow: two working phases and a terminal one."""
    catalog_rows = {
        "documentacao": PhaseFactory.build(name="Documentacao", sort_order=10, sla_days=2),
        "analise": PhaseFactory.hours(name="Analise", sort_order=20, sla_minutes=240),
        "concluido": PhaseFactory.terminal(name="Concluido", sort_order=90),
        "transfer_start": PhaseFactory.build(
            name="Solicitacao",
            process_type=ProcessType.TRANSFERENCIA_COTA.value,
            sort_order=10,
        ),
    }
    db_session.add_all(catalog_rows.values())
    await db_session.commit()
    return catalog_rows
