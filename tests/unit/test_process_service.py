"""Tests for ProcessService: opening, transitions, listing and summary."""

from datetime import date, timedelta
from uuid import uuid4

import pytest
from sqlalchemy import func, update
from sqlmodel import select

from src.crm.core.errors import (
    ConcurrentModificationError,
    InvalidStateError,
    NotFoundError,
    RequiresFinalizationError,
)
from src.crm.models import (
    OwnerKind,
    Process,
    ProcessEvent,
    ProcessStatus,
    ProcessType,
    SlaStatus,
)
from src.crm.schemas import DaysSla, PhaseUpdate, TransitionRequest
from src.crm.services.process_service import CREATED_NOTE
from tests.conftest import T0
from tests.factories import PhaseFactory, ProcessFactory
from tests.helpers import process_create

pytestmark = pytest.mark.unit


async def _event_count(session, process_id) -> int:
    result = await session.execute(
        select(func.count()).select_from(ProcessEvent).where(ProcessEvent.process_id == process_id)
    )
    return result.scalar_one()


class TestCreateProcess:
    async def test_starts_in_first_active_phase(self, process_service, phases, db_session):
        process = await process_service.create_process(process_create(), actor="user-1")

        assert process.current_phase_id == phases["documentacao"].id
        assert process.status == ProcessStatus.OPEN.value
        assert process.version == 1
        assert process.start_at == T0
        assert process.current_phase_started_at == T0
        assert process.created_by == process.updated_by == "user-1"

        events = await process_service.list_events(process.id)
        assert len(events) == 1
        assert events[0].sequence == 1
        assert events[0].from_phase_id is None
        assert events[0].to_phase_id == phases["documentacao"].id
        assert events[0].owner == OwnerKind.CORRETORA.value
        assert events[0].note == CREATED_NOTE

    async def test_explicit_phase_and_note(self, process_service, phases):
        process = await process_service.create_process(
            process_create(phase_id=phases["analise"].id, note="documentos recebidos"),
            actor="user-1",
        )

        events = await process_service.list_events(process.id)
        assert process.current_phase_id == phases["analise"].id
        assert events[0].note == "documentos recebidos"

    async def test_phase_of_another_type_is_not_found(self, process_service, phases):
        with pytest.raises(NotFoundError):
            await process_service.create_process(
                process_create(phase_id=phases["transfer_start"].id), actor="user-1"
            )

    async def test_terminal_phase_is_rejected(self, process_service, phases):
        with pytest.raises(RequiresFinalizationError):
            await process_service.create_process(
                process_create(phase_id=phases["concluido"].id), actor="user-1"
            )

    async def test_empty_catalog_leaves_phase_unset(self, process_service):
        process = await process_service.create_process(process_create(), actor="user-1")

        assert process.current_phase_id is None

        view = await process_service.get_process(process.id)
        assert view.deadline is None
        assert view.sla_status is SlaStatus.ON_TRACK

    async def test_default_phase_skips_terminal_on_sort_order_tie(self, process_service, catalog):
        documentacao = await catalog.create_phase(
            ProcessType.FATURAMENTO, "Documentacao", DaysSla(days=2)
        )
        # Same default sort order; the name alone would put this one first
        await catalog.create_phase(
            ProcessType.FATURAMENTO, "Concluido", DaysSla(days=0), is_terminal=True
        )

        process = await process_service.create_process(process_create(), actor="user-1")

        assert process.current_phase_id == documentacao.id

    async def test_terminal_only_catalog_leaves_phase_unset(self, process_service, catalog):
        await catalog.create_phase(
            ProcessType.FATURAMENTO, "Concluido", DaysSla(days=0), is_terminal=True
        )

        process = await process_service.create_process(process_create(), actor="user-1")

        assert process.current_phase_id is None


class TestTransition:
    async def test_phase_change_restarts_phase_clock(self, process_service, phases, clock):
        process = await process_service.create_process(process_create(), actor="user-1")
        clock.advance(hours=5)

        moved = await process_service.transition(
            process.id, TransitionRequest(phase_id=phases["analise"].id), actor="user-2"
        )

        assert moved.current_phase_id == phases["analise"].id
        assert moved.current_phase_started_at == T0 + timedelta(hours=5)
        assert moved.version == 2
        assert moved.updated_by == "user-2"

        events = await process_service.list_events(process.id)
        assert [e.sequence for e in events] == [1, 2]
        assert events[1].from_phase_id == phases["documentacao"].id
        assert events[1].to_phase_id == phases["analise"].id
        assert events[1].actor == "user-2"

    async def test_payload_only_edit_records_no_event(
        self, process_service, phases, clock, db_session
    ):
        process = await process_service.create_process(process_create(), actor="user-1")
        clock.advance(hours=1)

        edited = await process_service.transition(
            process.id, TransitionRequest(grupo="9999", cota="12"), actor="user-1"
        )

        assert edited.grupo == "9999"
        assert edited.cota == "12"
        assert edited.current_phase_started_at == T0
        assert edited.version == 2
        assert await _event_count(db_session, process.id) == 1

    async def test_same_phase_with_note_keeps_clock(self, process_service, phases, clock):
        process = await process_service.create_process(process_create(), actor="user-1")
        clock.advance(hours=3)

        updated = await process_service.transition(
            process.id,
            TransitionRequest(phase_id=phases["documentacao"].id, note="cobrado cliente"),
            actor="user-1",
        )

        events = await process_service.list_events(process.id)
        assert updated.current_phase_started_at == T0
        assert len(events) == 2
        assert events[1].from_phase_id == events[1].to_phase_id == phases["documentacao"].id
        assert events[1].note == "cobrado cliente"

    async def test_owner_change_records_event(self, process_service, phases, clock):
        process = await process_service.create_process(process_create(), actor="user-1")
        clock.advance(hours=2)

        updated = await process_service.transition(
            process.id, TransitionRequest(owner_kind=OwnerKind.CLIENTE), actor="user-1"
        )

        events = await process_service.list_events(process.id)
        assert updated.current_owner == OwnerKind.CLIENTE.value
        assert events[-1].owner == OwnerKind.CLIENTE.value
        assert events[-1].sequence == updated.version
        assert updated.current_phase_id == phases["documentacao"].id
        assert updated.current_phase_started_at == T0

    async def test_explicit_null_clears_payload_field(self, process_service, phases):
        process = await process_service.create_process(process_create(), actor="user-1")

        updated = await process_service.transition(
            process.id,
            TransitionRequest.model_validate({"segmento": None, "start_date": None}),
            actor="user-1",
        )

        assert updated.segmento is None
        assert updated.administradora == "Porto Seguro"
        assert updated.start_date == date(2024, 1, 1)

    async def test_terminal_target_requires_finalization(
        self, process_service, phases, db_session
    ):
        process = await process_service.create_process(process_create(), actor="user-1")

        with pytest.raises(RequiresFinalizationError):
            await process_service.transition(
                process.id, TransitionRequest(phase_id=phases["concluido"].id), actor="user-1"
            )

        await db_session.refresh(process)
        assert process.is_open
        assert process.version == 1
        assert await _event_count(db_session, process.id) == 1

    async def test_phase_later_marked_terminal_blocks_owner_change(
        self, process_service, catalog, phases, db_session
    ):
        process = await process_service.create_process(process_create(), actor="user-1")
        await catalog.deactivate_phase(phases["concluido"].id)
        await catalog.update_phase(phases["documentacao"].id, PhaseUpdate(is_terminal=True))

        with pytest.raises(RequiresFinalizationError):
            await process_service.transition(
                process.id, TransitionRequest(owner_kind=OwnerKind.CLIENTE), actor="user-1"
            )

        await db_session.refresh(process)
        assert process.current_owner == OwnerKind.CORRETORA.value
        assert process.version == 1
        assert await _event_count(db_session, process.id) == 1

    async def test_open_process_in_terminal_phase_blocks_note(
        self, process_service, phases, db_session
    ):
        stranded = ProcessFactory.build(current_phase_id=phases["concluido"].id)
        db_session.add(stranded)
        await db_session.commit()

        with pytest.raises(RequiresFinalizationError):
            await process_service.transition(
                stranded.id, TransitionRequest(note="seguir"), actor="user-1"
            )

        assert await _event_count(db_session, stranded.id) == 0

    async def test_inactive_target_is_not_found(self, process_service, phases, db_session):
        retired = PhaseFactory.inactive(sort_order=50)
        db_session.add(retired)
        await db_session.commit()
        process = await process_service.create_process(process_create(), actor="user-1")

        with pytest.raises(NotFoundError):
            await process_service.transition(
                process.id, TransitionRequest(phase_id=retired.id), actor="user-1"
            )

    async def test_closed_process_is_rejected(self, process_service, phases, db_session):
        closed = ProcessFactory.build(
            status=ProcessStatus.CLOSED.value,
            closed_at=T0,
            current_phase_id=phases["concluido"].id,
        )
        db_session.add(closed)
        await db_session.commit()
        version_before, owner_before = closed.version, closed.current_owner
        grupo_before, updated_by_before = closed.grupo, closed.updated_by

        with pytest.raises(InvalidStateError):
            await process_service.transition(
                closed.id,
                TransitionRequest(
                    phase_id=phases["analise"].id,
                    owner_kind=OwnerKind.CLIENTE,
                    note="reabrir",
                    grupo="0000",
                ),
                actor="user-2",
            )

        await db_session.refresh(closed)
        assert closed.status == ProcessStatus.CLOSED.value
        assert closed.version == version_before
        assert closed.current_phase_id == phases["concluido"].id
        assert closed.current_owner == owner_before
        assert closed.grupo == grupo_before
        assert closed.updated_by == updated_by_before
        assert await _event_count(db_session, closed.id) == 0

    async def test_missing_process_is_not_found(self, process_service, phases):
        with pytest.raises(NotFoundError):
            await process_service.transition(uuid4(), TransitionRequest(), actor="user-1")

    async def test_stale_version_is_rejected_without_writing(
        self, process_service, phases, db_session
    ):
        process = await process_service.create_process(process_create(), actor="user-1")
        # Another writer bumps the row behind the loaded instance
        await db_session.execute(
            update(Process)
            .where(Process.id == process.id)
            .values(version=2)
            .execution_options(synchronize_session=False)
        )
        await db_session.commit()

        with pytest.raises(ConcurrentModificationError):
            await process_service.transition(
                process.id, TransitionRequest(phase_id=phases["analise"].id), actor="user-1"
            )

        await db_session.refresh(process)
        assert process.current_phase_id == phases["documentacao"].id
        assert await _event_count(db_session, process.id) == 1


class TestListing:
    async def test_pages_are_counted_over_all_matches(self, process_service, phases, db_session):
        db_session.add_all(
            ProcessFactory.build(
                start_date=date(2024, 1, 1) + timedelta(days=i),
                current_phase_id=phases["documentacao"].id,
            )
            for i in range(25)
        )
        await db_session.commit()

        pages = [await process_service.list_processes(
            ProcessType.FATURAMENTO, ProcessStatus.OPEN, page, 10
        ) for page in (1, 2, 3)]

        assert [len(p.rows) for p in pages] == [10, 10, 5]
        assert all(p.total == 25 for p in pages)
        assert pages[0].rows[0].process.start_date == date(2024, 1, 1)
        assert pages[2].rows[-1].process.start_date == date(2024, 1, 25)

    async def test_rows_carry_phase_name_and_sla(self, process_service, phases, clock):
        process = await process_service.create_process(process_create(), actor="user-1")
        clock.advance(days=2, hours=1)

        result = await process_service.list_processes(
            ProcessType.FATURAMENTO, ProcessStatus.OPEN, 1, 10
        )

        (row,) = result.rows
        assert row.process.id == process.id
        assert row.phase_name == "Documentacao"
        assert row.deadline == T0 + timedelta(days=2)
        assert row.sla_status is SlaStatus.OVERDUE

    async def test_inactive_phase_named_but_without_sla(
        self, process_service, phases, clock, db_session
    ):
        process = await process_service.create_process(process_create(), actor="user-1")
        phase = phases["documentacao"]
        phase.is_active = False
        await db_session.commit()
        clock.advance(days=10)

        view = await process_service.get_process(process.id)

        assert view.phase_name == "Documentacao"
        assert view.deadline is None
        assert view.sla_status is SlaStatus.ON_TRACK

    async def test_filters_by_type_and_status(self, process_service, phases, db_session):
        db_session.add_all(
            [
                ProcessFactory.build(),
                ProcessFactory.build(type=ProcessType.TRANSFERENCIA_COTA.value),
                ProcessFactory.build(status=ProcessStatus.CLOSED.value, closed_at=T0),
            ]
        )
        await db_session.commit()

        result = await process_service.list_processes(
            ProcessType.TRANSFERENCIA_COTA, ProcessStatus.OPEN, 1, 10
        )

        assert result.total == 1
        assert result.rows[0].process.type == ProcessType.TRANSFERENCIA_COTA.value

    async def test_get_missing_process(self, process_service):
        with pytest.raises(NotFoundError):
            await process_service.get_process(uuid4())

    async def test_events_of_missing_process(self, process_service):
        with pytest.raises(NotFoundError):
            await process_service.list_events(uuid4())


class TestSummary:
    async def test_counts_open_overdue_and_due_today(
        self, process_service, phases, clock, db_session
    ):
        documentacao = phases["documentacao"]  # 2 days
        analise = phases["analise"]  # 4 hours
        now = clock()
        db_session.add_all(
            [
                # Overdue: entered 3 days ago
                ProcessFactory.build(
                    current_phase_id=documentacao.id,
                    current_phase_started_at=now - timedelta(days=3),
                ),
                # Due today: 4h SLA entered an hour ago, deadline 12:00
                ProcessFactory.build(
                    current_phase_id=analise.id,
                    current_phase_started_at=now - timedelta(hours=1),
                ),
                # On track: just entered a 2 day phase
                ProcessFactory.build(
                    current_phase_id=documentacao.id, current_phase_started_at=now
                ),
                # Closed processes are not counted
                ProcessFactory.build(status=ProcessStatus.CLOSED.value, closed_at=now),
                ProcessFactory.build(type=ProcessType.TRANSFERENCIA_COTA.value),
            ]
        )
        await db_session.commit()

        summary = {s.type: s for s in await process_service.summarize_open()}

        faturamento = summary[ProcessType.FATURAMENTO]
        assert (faturamento.open, faturamento.overdue, faturamento.due_today) == (3, 1, 1)
        assert summary[ProcessType.TRANSFERENCIA_COTA].open == 1
