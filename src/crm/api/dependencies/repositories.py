"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.crm.api.dependencies.db import DBSession
from src.crm.repositories import (
    PhaseRepository,
    ProcessEventRepository,
    ProcessFeedbackRepository,
    ProcessRepository,
)


def get_phase_repository(session: DBSession) -> PhaseRepository:
    return PhaseRepository(session)


def get_process_repository(session: DBSession) -> ProcessRepository:
    return ProcessRepository(session)


def get_event_repository(session: DBSession) -> ProcessEventRepository:
    return ProcessEventRepository(session)


def get_feedback_repository(session: DBSession) -> ProcessFeedbackRepository:
    return ProcessFeedbackRepository(session)


PhaseRepo = Annotated[PhaseRepository, Depends(get_phase_repository)]
ProcessRepo = Annotated[ProcessRepository, Depends(get_process_repository)]
EventRepo = Annotated[ProcessEventRepository, Depends(get_event_repository)]
FeedbackRepo = Annotated[ProcessFeedbackRepository, Depends(get_feedback_repository)]
