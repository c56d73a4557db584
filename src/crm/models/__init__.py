"""Model exports.

Import from here: `from src.crm.models import Process, ProcessPhase`
"""

from src.crm.models.base import utc_now
from src.crm.models.enums import OwnerKind, ProcessStatus, ProcessType, SlaKind, SlaStatus
from src.crm.models.process import Process, ProcessEvent, ProcessFeedback, ProcessPhase

__all__ = [
    # Enums
    "OwnerKind",
    "ProcessStatus",
    "ProcessType",
    "SlaKind",
    "SlaStatus",
    # Models
    "Process",
    "ProcessEvent",
    "ProcessFeedback",
    "ProcessPhase",
    # Helpers
    "utc_now",
]
