"""Service factory dependencies."""

from collections.abc import Callable
from datetime import datetime
from typing import Annotated

from fastapi import Depends

from src.crm.api.dependencies.db import DBSession
from src.crm.api.dependencies.repositories import (
    EventRepo,
    FeedbackRepo,
    PhaseRepo,
    ProcessRepo,
)
from src.crm.core.config import get_settings
from src.crm.models import utc_now
from src.crm.services import FinalizationService, PhaseCatalogService, ProcessService


def get_clock() -> Callable[[], datetime]:
    """Wall clock that stamps writes and judges SLA."""
    return utc_now


Clock = Annotated[Callable[[], datetime], Depends(get_clock)]


def get_phase_catalog_service(phase_repo: PhaseRepo, session: DBSession) -> PhaseCatalogService:
    """Get phase catalog service."""
    return PhaseCatalogService(phase_repo, session)


PhaseCatalogServiceDep = Annotated[PhaseCatalogService, Depends(get_phase_catalog_service)]


def get_process_service(
    process_repo: ProcessRepo,
    phase_repo: PhaseRepo,
    event_repo: EventRepo,
    feedback_repo: FeedbackRepo,
    catalog: PhaseCatalogServiceDep,
    session: DBSession,
    clock: Clock,
) -> ProcessService:
    """Get process service, judging SLA days in the configured zone."""
    return ProcessService(
        process_repo,
        phase_repo,
        event_repo,
        feedback_repo,
        catalog,
        session,
        sla_zone=get_settings().sla_zone,
        clock=clock,
    )


def get_finalization_service(
    process_repo: ProcessRepo,
    event_repo: EventRepo,
    feedback_repo: FeedbackRepo,
    catalog: PhaseCatalogServiceDep,
    session: DBSession,
    clock: Clock,
) -> FinalizationService:
    """Get finalization service."""
    return FinalizationService(
        process_repo, event_repo, feedback_repo, catalog, session, clock=clock
    )


ProcessServiceDep = Annotated[ProcessService, Depends(get_process_service)]
FinalizationServiceDep = Annotated[FinalizationService, Depends(get_finalization_service)]
