"""Phase catalog endpoints.

Reads are open to any authenticated actor; catalog changes need the admin
role.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from src.crm.api.dependencies import AdminActor, CurrentActor, PhaseCatalogServiceDep
from src.crm.models import ProcessType
from src.crm.schemas import PhaseCreate, PhaseRead, PhaseUpdate

router = APIRouter(prefix="/phases", tags=["phases"])


@router.get(
    "",
    response_model=list[PhaseRead],
    summary="List active phases",
    description="Active phases of a process type in workflow order.",
)
async def list_phases(
    service: PhaseCatalogServiceDep,
    _actor: CurrentActor,
    type: Annotated[ProcessType, Query()] = ProcessType.FATURAMENTO,
) -> list[PhaseRead]:
    phases = await service.list_active_phases(type)
    return [PhaseRead.from_model(p) for p in phases]


@router.post(
    "",
    response_model=PhaseRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create phase",
    responses={
        201: {"description": "Phase created"},
        409: {"description": "Process type already has an active terminal phase"},
    },
)
async def create_phase(
    request: PhaseCreate,
    service: PhaseCatalogServiceDep,
    _admin: AdminActor,
) -> PhaseRead:
    phase = await service.create_phase(
        process_type=request.process_type,
        name=request.name,
        sla=request.sla,
        sort_order=request.sort_order,
        is_terminal=request.is_terminal,
    )
    return PhaseRead.from_model(phase)


@router.patch(
    "/{phase_id}",
    response_model=PhaseRead,
    summary="Update phase",
    responses={
        404: {"description": "Phase not found"},
        409: {"description": "Process type already has an active terminal phase"},
    },
)
async def update_phase(
    phase_id: UUID,
    request: PhaseUpdate,
    service: PhaseCatalogServiceDep,
    _admin: AdminActor,
) -> PhaseRead:
    return PhaseRead.from_model(await service.update_phase(phase_id, request))


@router.delete(
    "/{phase_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate phase",
    description="Phases are never deleted; this hides the phase from selection.",
    responses={404: {"description": "Phase not found"}},
)
async def deactivate_phase(
    phase_id: UUID,
    service: PhaseCatalogServiceDep,
    _admin: AdminActor,
) -> Response:
    await service.deactivate_phase(phase_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
