"""Repository layer - data access abstraction."""

from src.crm.repositories.base import BaseRepository
from src.crm.repositories.event import ProcessEventRepository
from src.crm.repositories.feedback import ProcessFeedbackRepository
from src.crm.repositories.phase import PhaseRepository
from src.crm.repositories.process import ProcessRepository

__all__ = [
    "BaseRepository",
    "PhaseRepository",
    "ProcessEventRepository",
    "ProcessFeedbackRepository",
    "ProcessRepository",
]
