from src.crm.schemas.pagination import PagedResponse, clamp_page
from src.crm.schemas.phase import (
    DaysSla,
    HoursSla,
    PhaseCreate,
    PhaseRead,
    PhaseUpdate,
    SlaPolicy,
    sla_from_phase,
)
from src.crm.schemas.process import (
    PAYLOAD_FIELDS,
    DurationRead,
    FinalizeRequest,
    FinalizeResponse,
    FinalizeStats,
    OwnerDurations,
    ProcessCreate,
    ProcessEnvelope,
    ProcessEventRead,
    ProcessFeedbackRead,
    ProcessListItem,
    ProcessPayload,
    ProcessRead,
    ProcessSummary,
    ProcessSummaryItem,
    TransitionRequest,
)

__all__ = [
    "PAYLOAD_FIELDS",
    "DaysSla",
    "DurationRead",
    "FinalizeRequest",
    "FinalizeResponse",
    "FinalizeStats",
    "HoursSla",
    "OwnerDurations",
    "PagedResponse",
    "PhaseCreate",
    "PhaseRead",
    "PhaseUpdate",
    "ProcessCreate",
    "ProcessEnvelope",
    "ProcessEventRead",
    "ProcessFeedbackRead",
    "ProcessListItem",
    "ProcessPayload",
    "ProcessRead",
    "ProcessSummary",
    "ProcessSummaryItem",
    "SlaPolicy",
    "TransitionRequest",
    "clamp_page",
    "sla_from_phase",
]
