"""Process schemas for API request/response."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.crm.models import OwnerKind, ProcessStatus, ProcessType, SlaStatus

# Business payload fields a transition may overwrite
PAYLOAD_FIELDS: tuple[str, ...] = (
    "start_date",
    "administradora",
    "proposta",
    "grupo",
    "cota",
    "segmento",
    "cliente_nome",
    "credito_disponivel",
)


def _blank_to_none(v: str | None) -> str | None:
    if v is not None:
        v = v.strip()
        if not v:
            return None
    return v


class ProcessPayload(BaseModel):
    """Business payload shared by creation and transition requests."""

    administradora: str | None = Field(default=None, max_length=120)
    proposta: str | None = Field(default=None, max_length=60)
    grupo: str | None = Field(default=None, max_length=30)
    cota: str | None = Field(default=None, max_length=30)
    segmento: str | None = Field(default=None, max_length=60)
    cliente_nome: str | None = Field(default=None, max_length=200)
    credito_disponivel: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)

    @field_validator("administradora", "proposta", "grupo", "cota", "segmento", "cliente_nome")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class ProcessCreate(ProcessPayload):
    """Schema for opening a process.

    Without ``phase_id`` the process starts in the first active phase of its
    type.
    """

    type: ProcessType = ProcessType.FATURAMENTO
    start_date: date
    lead_id: str | None = Field(default=None, max_length=64)
    cliente_id: str | None = Field(default=None, max_length=64)
    phase_id: UUID | None = None
    owner_kind: OwnerKind = OwnerKind.CORRETORA
    note: str | None = Field(default=None, max_length=2000)

    @field_validator("lead_id", "cliente_id", "note")
    @classmethod
    def strip_optional(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class TransitionRequest(ProcessPayload):
    """Schema for moving a process and/or editing its payload.

    Every field is optional. Payload fields that are present overwrite the
    stored value (explicit null clears it); absent fields are untouched.
    """

    phase_id: UUID | None = None
    owner_kind: OwnerKind | None = None
    note: str | None = Field(default=None, max_length=2000)
    start_date: date | None = None

    @field_validator("note")
    @classmethod
    def strip_note(cls, v: str | None) -> str | None:
        return _blank_to_none(v)

    def payload_changes(self) -> dict[str, Any]:
        """Payload fields explicitly sent by the client."""
        changes = {name: getattr(self, name) for name in PAYLOAD_FIELDS if name in self.model_fields_set}
        # start_date is required on the record and cannot be cleared
        if changes.get("start_date", date.min) is None:
            del changes["start_date"]
        return changes


class FinalizeRequest(BaseModel):
    """Schema for closing a process with satisfaction feedback.

    Scores are range-checked by the service so a bad score is rejected
    before anything is read or written.
    """

    user_satisfaction: float
    client_satisfaction: float
    improvement_text: str | None = Field(default=None, max_length=4000)
    note: str | None = Field(default=None, max_length=2000)

    @field_validator("improvement_text", "note")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class ProcessRead(BaseModel):
    """Schema for reading a process."""

    id: UUID
    type: ProcessType
    status: ProcessStatus
    current_phase_id: UUID | None
    current_phase_started_at: datetime
    current_owner: OwnerKind
    start_at: datetime
    closed_at: datetime | None
    version: int
    start_date: date
    administradora: str | None
    proposta: str | None
    grupo: str | None
    cota: str | None
    segmento: str | None
    cliente_nome: str | None
    credito_disponivel: Decimal | None
    lead_id: str | None
    cliente_id: str | None
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProcessListItem(ProcessRead):
    """Process row enriched with its phase name and SLA state."""

    phase_name: str | None = None
    deadline: datetime | None = None
    sla_status: SlaStatus = SlaStatus.ON_TRACK
    sla_label: str = SlaStatus.ON_TRACK.label


class ProcessEnvelope(BaseModel):
    process: ProcessRead


class ProcessEventRead(BaseModel):
    """Schema for reading a process event."""

    id: UUID
    process_id: UUID
    sequence: int
    at: datetime
    from_phase_id: UUID | None
    to_phase_id: UUID | None
    owner: OwnerKind
    note: str | None
    actor: str

    model_config = {"from_attributes": True}


class ProcessFeedbackRead(BaseModel):
    """Schema for reading finalization feedback."""

    process_id: UUID
    user_satisfaction: int
    client_satisfaction: int
    improvement_text: str | None
    actor: str
    created_at: datetime

    model_config = {"from_attributes": True}


class DurationRead(BaseModel):
    """Elapsed time split into whole days, hours and minutes."""

    model_config = ConfigDict(populate_by_name=True)

    days: int
    hours: int
    minutes: int
    total_minutes: int = Field(serialization_alias="totalMinutes")


class OwnerDurations(BaseModel):
    administradora: DurationRead
    corretora: DurationRead
    cliente: DurationRead


class FinalizeStats(BaseModel):
    total: DurationRead
    by_owner: OwnerDurations


class FinalizeResponse(BaseModel):
    process: ProcessRead
    stats: FinalizeStats


class ProcessSummaryItem(BaseModel):
    """Open-process counters for one process type."""

    type: ProcessType
    open: int
    overdue: int
    due_today: int


class ProcessSummary(BaseModel):
    items: list[ProcessSummaryItem]
