"""Process endpoints: listing, opening, transitioning and finalizing processes."""

from datetime import timedelta
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.crm.api.dependencies import CurrentActor, FinalizationServiceDep, ProcessServiceDep
from src.crm.core.config import get_settings
from src.crm.models import OwnerKind, ProcessStatus, ProcessType
from src.crm.schemas import (
    DurationRead,
    FinalizeRequest,
    FinalizeResponse,
    FinalizeStats,
    OwnerDurations,
    PagedResponse,
    ProcessCreate,
    ProcessEnvelope,
    ProcessEventRead,
    ProcessFeedbackRead,
    ProcessListItem,
    ProcessRead,
    ProcessSummary,
    ProcessSummaryItem,
    TransitionRequest,
    clamp_page,
)
from src.crm.services import AttributionReport, DurationBreakdown, ProcessView

router = APIRouter(prefix="/processes", tags=["processes"])


def _list_item(view: ProcessView) -> ProcessListItem:
    return ProcessListItem(
        **ProcessRead.model_validate(view.process).model_dump(),
        phase_name=view.phase_name,
        deadline=view.deadline,
        sla_status=view.sla_status,
        sla_label=view.sla_status.label,
    )


def _duration(delta: timedelta) -> DurationRead:
    breakdown = DurationBreakdown.from_timedelta(delta)
    return DurationRead(
        days=breakdown.days,
        hours=breakdown.hours,
        minutes=breakdown.minutes,
        total_minutes=breakdown.total_minutes,
    )


def _stats(report: AttributionReport) -> FinalizeStats:
    return FinalizeStats(
        total=_duration(report.total),
        by_owner=OwnerDurations(
            administradora=_duration(report.owner_total(OwnerKind.ADMINISTRADORA)),
            corretora=_duration(report.owner_total(OwnerKind.CORRETORA)),
            cliente=_duration(report.owner_total(OwnerKind.CLIENTE)),
        ),
    )


@router.get(
    "",
    response_model=PagedResponse[ProcessListItem],
    summary="List processes",
    description="Page through processes of one type and status, oldest start date first.",
)
async def list_processes(
    service: ProcessServiceDep,
    _actor: CurrentActor,
    type: Annotated[ProcessType, Query()] = ProcessType.FATURAMENTO,
    status_filter: Annotated[ProcessStatus, Query(alias="status")] = ProcessStatus.OPEN,
    page: Annotated[int, Query()] = 1,
    page_size: Annotated[int | None, Query(alias="pageSize")] = None,
) -> PagedResponse[ProcessListItem]:
    """Out-of-range page parameters are clamped, not rejected."""
    settings = get_settings()
    page, size = clamp_page(
        page,
        page_size if page_size is not None else settings.default_page_size,
        settings.min_page_size,
        settings.max_page_size,
    )
    result = await service.list_processes(type, status_filter, page, size)
    return PagedResponse(
        page=result.page,
        page_size=result.page_size,
        total=result.total,
        rows=[_list_item(view) for view in result.rows],
    )


@router.post(
    "",
    response_model=ProcessEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Open process",
    responses={
        201: {"description": "Process opened"},
        404: {"description": "Phase not found for this process type"},
        409: {"description": "Requested phase is terminal"},
    },
)
async def create_process(
    request: ProcessCreate,
    service: ProcessServiceDep,
    actor: CurrentActor,
) -> ProcessEnvelope:
    process = await service.create_process(request, actor.id)
    return ProcessEnvelope(process=ProcessRead.model_validate(process))


@router.get(
    "/summary",
    response_model=ProcessSummary,
    summary="Open process counters",
    description="Open, overdue and due-today counts per process type.",
)
async def summarize_processes(
    service: ProcessServiceDep,
    _actor: CurrentActor,
) -> ProcessSummary:
    summaries = await service.summarize_open()
    return ProcessSummary(
        items=[
            ProcessSummaryItem(
                type=s.type, open=s.open, overdue=s.overdue, due_today=s.due_today
            )
            for s in summaries
        ]
    )


@router.get(
    "/{process_id}",
    response_model=ProcessListItem,
    summary="Get process",
    responses={404: {"description": "Process not found"}},
)
async def get_process(
    process_id: UUID,
    service: ProcessServiceDep,
    _actor: CurrentActor,
) -> ProcessListItem:
    return _list_item(await service.get_process(process_id))


@router.patch(
    "/{process_id}",
    response_model=ProcessEnvelope,
    summary="Transition process",
    description=(
        "Move an open process to another phase and/or owner and edit its payload. "
        "The terminal phase can only be reached through finalize."
    ),
    responses={
        400: {"description": "Process is closed or input is invalid"},
        404: {"description": "Process or phase not found"},
        409: {"description": "Terminal phase requested or concurrent modification"},
    },
)
async def transition_process(
    process_id: UUID,
    request: TransitionRequest,
    service: ProcessServiceDep,
    actor: CurrentActor,
) -> ProcessEnvelope:
    process = await service.transition(process_id, request, actor.id)
    return ProcessEnvelope(process=ProcessRead.model_validate(process))


@router.post(
    "/{process_id}/finalize",
    response_model=FinalizeResponse,
    summary="Finalize process",
    description="Close the process in its terminal phase, store feedback and report time per owner.",
    responses={
        400: {"description": "Invalid score or process already closed"},
        404: {"description": "Process not found"},
        409: {"description": "No terminal phase configured or concurrent modification"},
    },
)
async def finalize_process(
    process_id: UUID,
    request: FinalizeRequest,
    service: FinalizationServiceDep,
    actor: CurrentActor,
) -> FinalizeResponse:
    result = await service.finalize(
        process_id,
        actor.id,
        user_satisfaction=request.user_satisfaction,
        client_satisfaction=request.client_satisfaction,
        improvement_text=request.improvement_text,
        note=request.note,
    )
    return FinalizeResponse(
        process=ProcessRead.model_validate(result.process),
        stats=_stats(result.report),
    )


@router.get(
    "/{process_id}/events",
    response_model=list[ProcessEventRead],
    summary="Process history",
    responses={404: {"description": "Process not found"}},
)
async def list_process_events(
    process_id: UUID,
    service: ProcessServiceDep,
    _actor: CurrentActor,
) -> list[ProcessEventRead]:
    events = await service.list_events(process_id)
    return [ProcessEventRead.model_validate(e) for e in events]


@router.get(
    "/{process_id}/feedback",
    response_model=ProcessFeedbackRead,
    summary="Finalization feedback",
    responses={404: {"description": "Process not found or not finalized"}},
)
async def get_process_feedback(
    process_id: UUID,
    service: ProcessServiceDep,
    _actor: CurrentActor,
) -> ProcessFeedbackRead:
    return ProcessFeedbackRead.model_validate(await service.get_feedback(process_id))
