"""Process lifecycle models: phase catalog, process records, event log, feedback."""

from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Index, UniqueConstraint
from sqlmodel import Field, SQLModel

from src.crm.models.base import utc_now
from src.crm.models.enums import OwnerKind, ProcessStatus, ProcessType, SlaKind


class ProcessPhase(SQLModel, table=True):
    """A named stage in a process type's workflow, with its SLA policy.

    The SLA policy is a tagged variant: ``sla_kind == "days"`` uses
    ``sla_days``, ``sla_kind == "hours"`` uses ``sla_minutes``. The unused
    column is always NULL.

    Phases are never deleted; ``is_active = False`` hides them from selection
    while keeping historical events resolvable.
    """

    __tablename__ = "process_phases"
    __table_args__ = (
        Index("ix_process_phases_type_active_order", "process_type", "is_active", "sort_order"),
        CheckConstraint("sla_days IS NULL OR sla_days >= 0", name="ck_process_phases_sla_days"),
        CheckConstraint(
            "sla_minutes IS NULL OR sla_minutes >= 0", name="ck_process_phases_sla_minutes"
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    process_type: str = Field(max_length=50)  # ProcessType value
    name: str = Field(max_length=120)
    sla_kind: str = Field(default=SlaKind.DAYS.value, max_length=10)
    sla_days: int | None = Field(default=None)
    sla_minutes: int | None = Field(default=None)
    sort_order: int = Field(default=100)
    is_active: bool = Field(default=True)
    is_terminal: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def process_type_enum(self) -> ProcessType:
        return ProcessType(self.process_type)

    @property
    def sla_kind_enum(self) -> SlaKind:
        return SlaKind(self.sla_kind)

    @property
    def sla_duration(self) -> timedelta:
        """SLA policy as a duration from phase entry."""
        if self.sla_kind == SlaKind.DAYS.value:
            return timedelta(days=self.sla_days or 0)
        return timedelta(minutes=self.sla_minutes or 0)


class Process(SQLModel, table=True):
    """One in-flight or closed back-office workflow instance.

    ``version`` is bumped on every write and used as the optimistic
    concurrency token for conditional updates.
    """

    __tablename__ = "processes"
    __table_args__ = (
        Index("ix_processes_type_status_start", "type", "status", "start_date"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    type: str = Field(default=ProcessType.FATURAMENTO.value, max_length=50)
    status: str = Field(default=ProcessStatus.OPEN.value, max_length=20)

    # Workflow position
    current_phase_id: UUID | None = Field(default=None, foreign_key="process_phases.id")
    current_phase_started_at: datetime = Field(default_factory=utc_now)
    current_owner: str = Field(default=OwnerKind.CORRETORA.value, max_length=30)

    # Lifecycle
    start_at: datetime = Field(default_factory=utc_now)
    closed_at: datetime | None = Field(default=None)
    version: int = Field(default=1)

    # Business payload
    start_date: date
    administradora: str | None = Field(default=None, max_length=120)
    proposta: str | None = Field(default=None, max_length=60)
    grupo: str | None = Field(default=None, max_length=30)
    cota: str | None = Field(default=None, max_length=30)
    segmento: str | None = Field(default=None, max_length=60)
    cliente_nome: str | None = Field(default=None, max_length=200)
    credito_disponivel: Decimal | None = Field(default=None, max_digits=14, decimal_places=2)
    lead_id: str | None = Field(default=None, max_length=64)
    cliente_id: str | None = Field(default=None, max_length=64)

    # Audit
    created_by: str = Field(max_length=64)
    updated_by: str = Field(max_length=64)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def status_enum(self) -> ProcessStatus:
        return ProcessStatus(self.status)

    @property
    def owner_enum(self) -> OwnerKind:
        return OwnerKind(self.current_owner)

    @property
    def is_open(self) -> bool:
        return self.status == ProcessStatus.OPEN.value


class ProcessEvent(SQLModel, table=True):
    """Append-only audit record of a creation, transition or finalization.

    ``sequence`` is the process version produced by the write that recorded
    the event; it orders events that share a timestamp.
    """

    __tablename__ = "process_events"
    __table_args__ = (
        Index("ix_process_events_process_at", "process_id", "at"),
        UniqueConstraint("process_id", "sequence", name="uq_process_events_sequence"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    process_id: UUID = Field(foreign_key="processes.id")
    sequence: int
    at: datetime = Field(default_factory=utc_now)
    from_phase_id: UUID | None = Field(default=None, foreign_key="process_phases.id")
    to_phase_id: UUID | None = Field(default=None, foreign_key="process_phases.id")
    owner: str = Field(max_length=30)
    note: str | None = Field(default=None, max_length=2000)
    actor: str = Field(max_length=64)


class ProcessFeedback(SQLModel, table=True):
    """Satisfaction feedback captured exactly once, when a process is finalized."""

    __tablename__ = "process_feedback"
    __table_args__ = (
        CheckConstraint(
            "user_satisfaction BETWEEN 0 AND 100", name="ck_process_feedback_user_satisfaction"
        ),
        CheckConstraint(
            "client_satisfaction BETWEEN 0 AND 100",
            name="ck_process_feedback_client_satisfaction",
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    process_id: UUID = Field(foreign_key="processes.id", unique=True)
    user_satisfaction: int
    client_satisfaction: int
    improvement_text: str | None = Field(default=None, max_length=4000)
    actor: str = Field(max_length=64)
    created_at: datetime = Field(default_factory=utc_now)
