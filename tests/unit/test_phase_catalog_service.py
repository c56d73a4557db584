"""Tests for the phase catalog service."""

from uuid import uuid4

import pytest

from src.crm.core.errors import ConflictError, NotFoundError
from src.crm.models import ProcessType, SlaKind
from src.crm.schemas import DaysSla, HoursSla, PhaseUpdate
from tests.factories import PhaseFactory

pytestmark = pytest.mark.unit


class TestLookups:
    async def test_active_phases_in_workflow_order(self, catalog, phases, db_session):
        db_session.add_all(
            [
                PhaseFactory.build(name="B tie", sort_order=20),
                PhaseFactory.inactive(name="Retired", sort_order=5),
            ]
        )
        await db_session.commit()

        listed = await catalog.list_active_phases(ProcessType.FATURAMENTO)

        assert [p.name for p in listed] == ["Documentacao", "Analise", "B tie", "Concluido"]

    async def test_default_and_final_phase(self, catalog, phases):
        assert (await catalog.get_default_phase(ProcessType.FATURAMENTO)).id == phases[
            "documentacao"
        ].id
        assert (await catalog.get_final_phase(ProcessType.FATURAMENTO)).id == phases[
            "concluido"
        ].id
        assert await catalog.get_final_phase(ProcessType.TRANSFERENCIA_COTA) is None

    async def test_empty_catalog_has_no_default(self, catalog):
        assert await catalog.get_default_phase(ProcessType.FATURAMENTO) is None

    async def test_get_phase_finds_inactive_phases(self, catalog, db_session):
        retired = PhaseFactory.inactive()
        db_session.add(retired)
        await db_session.commit()

        assert (await catalog.get_phase(retired.id)).id == retired.id
        with pytest.raises(NotFoundError):
            await catalog.get_selectable_phase(retired.id, ProcessType.FATURAMENTO)

    async def test_unknown_phase(self, catalog):
        with pytest.raises(NotFoundError):
            await catalog.get_phase(uuid4())


class TestCatalogMaintenance:
    async def test_create_days_phase(self, catalog):
        phase = await catalog.create_phase(
            ProcessType.FATURAMENTO, "Vistoria", DaysSla(days=5), sort_order=30
        )

        assert phase.sla_kind == SlaKind.DAYS.value
        assert (phase.sla_days, phase.sla_minutes) == (5, None)

    async def test_create_hours_phase(self, catalog):
        phase = await catalog.create_phase(
            ProcessType.FATURAMENTO, "Contato", HoursSla(minutes=90)
        )

        assert phase.sla_kind == SlaKind.HOURS.value
        assert (phase.sla_days, phase.sla_minutes) == (None, 90)

    async def test_second_terminal_phase_conflicts(self, catalog, phases):
        with pytest.raises(ConflictError):
            await catalog.create_phase(
                ProcessType.FATURAMENTO, "Encerrado", DaysSla(days=0), is_terminal=True
            )

    async def test_terminal_phases_are_per_type(self, catalog, phases):
        phase = await catalog.create_phase(
            ProcessType.TRANSFERENCIA_COTA, "Transferida", DaysSla(days=0), is_terminal=True
        )

        assert phase.is_terminal

    async def test_update_switches_sla_kind(self, catalog, phases):
        updated = await catalog.update_phase(
            phases["documentacao"].id, PhaseUpdate(sla=HoursSla(minutes=30), name="Docs")
        )

        assert updated.name == "Docs"
        assert (updated.sla_kind, updated.sla_days, updated.sla_minutes) == (
            SlaKind.HOURS.value,
            None,
            30,
        )

    async def test_update_to_terminal_conflicts(self, catalog, phases):
        with pytest.raises(ConflictError):
            await catalog.update_phase(phases["analise"].id, PhaseUpdate(is_terminal=True))

    async def test_deactivated_terminal_frees_the_slot(self, catalog, phases):
        await catalog.deactivate_phase(phases["concluido"].id)

        assert await catalog.get_final_phase(ProcessType.FATURAMENTO) is None
        replacement = await catalog.create_phase(
            ProcessType.FATURAMENTO, "Finalizado", DaysSla(days=0), is_terminal=True
        )
        assert (await catalog.get_final_phase(ProcessType.FATURAMENTO)).id == replacement.id

    async def test_deactivate_unknown_phase(self, catalog):
        with pytest.raises(NotFoundError):
            await catalog.deactivate_phase(uuid4())
