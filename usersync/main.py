# usersync/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from usersync.api import dependencies
from usersync.api.middleware import AuditTriggerMiddleware, CorrelationIdMiddleware
from usersync.api.routers import auth, health, users, webhook
from usersync.application.exceptions import ApplicationError, QueueUnavailableError
from usersync.config.logging import configure_logging
from usersync.config.settings import get_settings
from usersync.domain.exceptions import (
    DomainError,
    MalformedPayloadError,
    SignatureInvalidError,
    SignatureMissingError,
    UserNotFoundError,
)
from usersync.infrastructure.database.session import create_tables, engine

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, wire the task handlers and run the single queue worker for the app's lifetime."""
    await create_tables()
    queue = dependencies.get_admission_queue()
    service = dependencies.build_sync_service(
        queue=queue,
        uow_factory=dependencies.get_uow_factory(),
        provider=dependencies.get_event_client(),
        hooks=dependencies.get_hook_dispatcher(),
    )
    queue.register_all(service.handlers())
    queue.start()
    logger.info("queue_worker_started", extra={"queue": settings.queue_name})
    try:
        yield
    finally:
        await queue.stop()
        await dependencies.get_event_client().close()
        await dependencies.get_redis_client().close()
        await engine.dispose()
        logger.info("queue_worker_stopped", extra={"queue": settings.queue_name})


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> AuditTrigger.
app.add_middleware(AuditTriggerMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(SignatureMissingError)
async def signature_missing_error_handler(request, exc: SignatureMissingError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(SignatureInvalidError)
async def signature_invalid_error_handler(request, exc: SignatureInvalidError):
    return JSONResponse(status_code=401, content={"detail": exc.message})


@app.exception_handler(MalformedPayloadError)
async def malformed_payload_error_handler(request, exc: MalformedPayloadError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(UserNotFoundError)
async def user_not_found_error_handler(request, exc: UserNotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(QueueUnavailableError)
async def queue_unavailable_error_handler(request, exc: QueueUnavailableError):
    return JSONResponse(status_code=503, content={"detail": exc.message})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Routers: /health, /sync/status, {webhook_path}, {action_path}, /auth/providers, /users
app.include_router(health.router)
app.include_router(webhook.router)
app.include_router(auth.router)
app.include_router(users.router, prefix="/users")
