"""Test helper functions for common data creation patterns."""

from datetime import date, datetime, timedelta

from src.crm.models import OwnerKind, ProcessType
from src.crm.schemas import ProcessCreate


class FrozenClock:
    """Stand-in for ``utc_now`` that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now


def process_create(**overrides) -> ProcessCreate:
    """A valid creation request with a realistic payload."""
    data = {
        "type": ProcessType.FATURAMENTO,
        "start_date": date(2024, 1, 1),
        "administradora": "Porto Seguro",
        "proposta": "P-1001",
        "grupo": "1234",
        "cota": "56",
        "segmento": "imovel",
        "cliente_nome": "Maria Souza",
        "owner_kind": OwnerKind.CORRETORA,
    }
    data.update(overrides)
    return ProcessCreate(**data)
