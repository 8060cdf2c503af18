# usersync/api/routers/health.py

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from usersync.api.dependencies import get_admission_queue, get_uow_factory
from usersync.application.repositories import UnitOfWorkFactory
from usersync.config.settings import get_settings
from usersync.domain.schemas.event import SyncStatusResponse
from usersync.infrastructure.queue.admission_queue import AdmissionQueue

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Health check with correlation ID from request state."""
    settings = get_settings()
    return {
        "status": "ok",
        "correlation_id": request.state.correlation_id,
        "environment": settings.environment,
        "version": settings.version,
    }


@router.get("/sync/status", response_model=SyncStatusResponse)
async def sync_status(
    queue: Annotated[AdmissionQueue, Depends(get_admission_queue)] = ...,
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)] = ...,
):
    """Current catch-up cursor (newest ledger entry) and admission queue depth."""
    async with uow_factory() as uow:
        latest = await uow.ledger.latest()
    depth = await queue.depth()
    return SyncStatusResponse(
        cursor_event_id=latest.event_id if latest else None,
        cursor_updated_at=latest.updated_at if latest else None,
        pending_tasks=depth["pending"] + depth["processing"],
        failed_tasks=depth["failed"],
    )
