"""Shared enums for models."""

from enum import Enum


class ProcessType(str, Enum):
    """Back-office workflow kinds tracked by the Processes module."""

    FATURAMENTO = "faturamento"
    TRANSFERENCIA_COTA = "transferencia_cota"


class ProcessStatus(str, Enum):
    """Process lifecycle status. Only ever moves open -> closed."""

    OPEN = "open"
    CLOSED = "closed"


class OwnerKind(str, Enum):
    """Party currently responsible for moving a process forward."""

    ADMINISTRADORA = "administradora"
    CORRETORA = "corretora"
    CLIENTE = "cliente"


class SlaKind(str, Enum):
    """Unit of a phase's SLA policy."""

    DAYS = "days"
    HOURS = "hours"  # stored as minutes


class SlaStatus(str, Enum):
    """Live SLA status of a process in its current phase."""

    ON_TRACK = "on_track"
    DUE_TODAY = "due_today"
    OVERDUE = "overdue"

    @property
    def label(self) -> str:
        """Portuguese label shown by the CRM front-end."""
        return _SLA_LABELS[self]


_SLA_LABELS = {
    SlaStatus.ON_TRACK: "Em dia",
    SlaStatus.DUE_TODAY: "No dia",
    SlaStatus.OVERDUE: "Atrasado",
}
