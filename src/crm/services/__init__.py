from src.crm.services.attribution import (
    AttributionReport,
    DurationBreakdown,
    OwnerSegment,
    attribute_time,
    build_segments,
)
from src.crm.services.finalization_service import FinalizationResult, FinalizationService
from src.crm.services.phase_catalog_service import PhaseCatalogService
from src.crm.services.process_service import (
    ProcessPage,
    ProcessService,
    ProcessView,
    TypeSummary,
)
from src.crm.services.sla import compute_deadline, compute_status, evaluate

__all__ = [
    "AttributionReport",
    "DurationBreakdown",
    "FinalizationResult",
    "FinalizationService",
    "OwnerSegment",
    "PhaseCatalogService",
    "ProcessPage",
    "ProcessService",
    "ProcessView",
    "TypeSummary",
    "attribute_time",
    "build_segments",
    "compute_deadline",
    "compute_status",
    "evaluate",
]
