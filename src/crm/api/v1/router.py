from fastapi import APIRouter

from src.crm.api.v1 import phases, processes

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(processes.router)
api_router.include_router(phases.router)
