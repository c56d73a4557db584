"""FastAPI dependency injection definitions.

Re-exports all dependencies so routes import from one place.
"""

# Auth
from src.crm.api.dependencies.auth import (
    Actor,
    AdminActor,
    CurrentActor,
    get_current_actor,
    require_admin_role,
)

# Database
from src.crm.api.dependencies.db import DBSession, get_db_session

# Repositories
from src.crm.api.dependencies.repositories import (
    EventRepo,
    FeedbackRepo,
    PhaseRepo,
    ProcessRepo,
    get_event_repository,
    get_feedback_repository,
    get_phase_repository,
    get_process_repository,
)

# Services
from src.crm.api.dependencies.services import (
    Clock,
    FinalizationServiceDep,
    PhaseCatalogServiceDep,
    ProcessServiceDep,
    get_clock,
    get_finalization_service,
    get_phase_catalog_service,
    get_process_service,
)

__all__ = [
    # Auth
    "Actor",
    "AdminActor",
    "CurrentActor",
    "get_current_actor",
    "require_admin_role",
    # Database
    "DBSession",
    "get_db_session",
    # Repositories
    "EventRepo",
    "FeedbackRepo",
    "PhaseRepo",
    "ProcessRepo",
    "get_event_repository",
    "get_feedback_repository",
    "get_phase_repository",
    "get_process_repository",
    # Services
    "Clock",
    "FinalizationServiceDep",
    "PhaseCatalogServiceDep",
    "ProcessServiceDep",
    "get_clock",
    "get_finalization_service",
    "get_phase_catalog_service",
    "get_process_service",
]
