"""Phase catalog schemas for API request/response."""

from datetime import datetime
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.crm.models import ProcessPhase, ProcessType, SlaKind


class DaysSla(BaseModel):
    """SLA of N calendar days from phase entry."""

    kind: Literal["days"] = "days"
    days: int = Field(ge=0)


class HoursSla(BaseModel):
    """SLA of N minutes from phase entry (entered as hours:minutes in the UI)."""

    kind: Literal["hours"] = "hours"
    minutes: int = Field(ge=0)


SlaPolicy = Annotated[DaysSla | HoursSla, Field(discriminator="kind")]


def sla_from_phase(phase: ProcessPhase) -> DaysSla | HoursSla:
    if phase.sla_kind == SlaKind.DAYS.value:
        return DaysSla(days=phase.sla_days or 0)
    return HoursSla(minutes=phase.sla_minutes or 0)


def _strip_name(v: str | None) -> str | None:
    if v is not None:
        v = v.strip()
        if not v:
            raise ValueError("Phase name cannot be empty or whitespace only")
    return v


class PhaseCreate(BaseModel):
    """Schema for creating a phase."""

    process_type: ProcessType
    name: str = Field(min_length=1, max_length=120)
    sla: SlaPolicy
    sort_order: int = 100
    is_terminal: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_name(v)  # type: ignore[return-value]


class PhaseUpdate(BaseModel):
    """Schema for updating a phase. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=120)
    sla: SlaPolicy | None = None
    sort_order: int | None = None
    is_terminal: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return _strip_name(v)


class PhaseRead(BaseModel):
    """Schema for reading a phase."""

    id: UUID
    process_type: ProcessType
    name: str
    sla: SlaPolicy
    sort_order: int
    is_active: bool
    is_terminal: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, phase: ProcessPhase) -> "PhaseRead":
        return cls(
            id=phase.id,
            process_type=ProcessType(phase.process_type),
            name=phase.name,
            sla=sla_from_phase(phase),
            sort_order=phase.sort_order,
            is_active=phase.is_active,
            is_terminal=phase.is_terminal,
            created_at=phase.created_at,
            updated_at=phase.updated_at,
        )
