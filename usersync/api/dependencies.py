"""FastAPI dependency injection: Redis, admission queue, unit of work, provider, hook, services."""

import logging
from datetime import timedelta
from typing import Annotated

from fastapi import Depends, Request

from usersync.application.action_responder import ActionHandler, ActionResponder
from usersync.application.catch_up import CatchUpSynchronizer
from usersync.application.event_applier import EventApplier
from usersync.application.hook_dispatcher import EventHook, HookDispatcher
from usersync.application.repositories import UnitOfWorkFactory
from usersync.application.sync_service import EventSyncService
from usersync.application.webhook_receiver import WebhookReceiver
from usersync.config.settings import get_settings
from usersync.domain.models.event import event_types_of_interest
from usersync.infrastructure.database.session import AsyncSessionLocal
from usersync.infrastructure.database.unit_of_work import DbUnitOfWorkFactory
from usersync.infrastructure.messaging.rabbitmq_publisher import RabbitMQEventHook
from usersync.infrastructure.provider.client import WorkOSEventClient
from usersync.infrastructure.provider.signature import WorkOSSignatureVerifier
from usersync.infrastructure.queue.admission_queue import AdmissionQueue
from usersync.infrastructure.queue.redis_client import RedisClient

_redis_client: RedisClient | None = None
_queue: AdmissionQueue | None = None
_event_client: WorkOSEventClient | None = None
_hooks: HookDispatcher | None = None
_action_responder: ActionResponder | None = None


def get_redis_client() -> RedisClient:
    """Return singleton Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client


def get_admission_queue() -> AdmissionQueue:
    """Return singleton admission queue. Only the process running the worker consumes it."""
    global _queue
    if _queue is None:
        settings = get_settings()
        _queue = AdmissionQueue(
            backend=get_redis_client(),
            name=settings.queue_name,
            max_attempts=settings.queue_max_attempts,
            backoff_base_seconds=settings.queue_backoff_base_seconds,
            backoff_max_seconds=settings.queue_backoff_max_seconds,
            poll_timeout_seconds=settings.queue_poll_timeout_seconds,
        )
    return _queue


def get_event_client() -> WorkOSEventClient:
    """Return singleton provider list-events client."""
    global _event_client
    if _event_client is None:
        settings = get_settings()
        _event_client = WorkOSEventClient(
            api_key=settings.api_key,
            base_url=settings.provider_base_url,
            timeout_seconds=settings.provider_timeout_seconds,
            max_retries=settings.provider_max_retries,
            page_limit=settings.provider_page_limit,
        )
    return _event_client


def get_hook_dispatcher() -> HookDispatcher:
    """Return singleton hook dispatcher; publishes to RabbitMQ when rabbitmq_url is configured."""
    global _hooks
    if _hooks is None:
        settings = get_settings()
        _hooks = HookDispatcher()
        if settings.rabbitmq_url:
            _hooks.register(RabbitMQEventHook(settings.rabbitmq_url, settings.hook_exchange))
    return _hooks


def register_event_hook(handler: EventHook) -> EventHook:
    """Register the downstream handler invoked after each applied event. Usable as a decorator."""
    get_hook_dispatcher().register(handler)
    return handler


def get_uow_factory() -> UnitOfWorkFactory:
    return DbUnitOfWorkFactory(AsyncSessionLocal)


def build_sync_service(
    queue: AdmissionQueue,
    uow_factory: UnitOfWorkFactory,
    provider,
    hooks: HookDispatcher,
) -> EventSyncService:
    """Assemble applier, synchronizer and service. Used by the queue worker."""
    settings = get_settings()
    logger = logging.getLogger("usersync.sync")
    debug = settings.log_level == "DEBUG"
    applier = EventApplier(uow_factory=uow_factory, hooks=hooks, logger=logger, debug=debug)
    synchronizer = CatchUpSynchronizer(
        provider=provider,
        applier=applier,
        event_types=event_types_of_interest(settings.additional_event_types),
        logger=logger,
        horizon=timedelta(seconds=settings.catch_up_horizon_seconds),
    )
    return EventSyncService(
        uow_factory=uow_factory,
        queue=queue,
        synchronizer=synchronizer,
        logger=logger,
    )


def get_signature_verifier() -> WorkOSSignatureVerifier:
    return WorkOSSignatureVerifier(tolerance_seconds=get_settings().webhook_tolerance_seconds)


async def get_webhook_receiver(
    queue: Annotated[AdmissionQueue, Depends(get_admission_queue)],
    verifier: Annotated[WorkOSSignatureVerifier, Depends(get_signature_verifier)],
) -> WebhookReceiver:
    """Build WebhookReceiver with injected verifier, queue, secret and logger."""
    settings = get_settings()
    return WebhookReceiver(
        verifier=verifier,
        queue=queue,
        secret=settings.webhook_secret,
        logger=logging.getLogger("usersync.webhook"),
        debug=settings.log_level == "DEBUG",
    )


def get_action_responder() -> ActionResponder:
    """Return singleton action responder; handlers registered on it survive across requests."""
    global _action_responder
    if _action_responder is None:
        settings = get_settings()
        _action_responder = ActionResponder(
            verifier=get_signature_verifier(),
            secret=settings.action_secret,
            logger=logging.getLogger("usersync.action"),
            debug=settings.log_level == "DEBUG",
        )
    return _action_responder


def register_action_handler(kind: str, handler: ActionHandler) -> ActionHandler:
    """Register the verdict handler for `authentication` or `user_registration` actions."""
    get_action_responder().register(kind, handler)
    return handler


def get_correlation_id(request: Request) -> str:
    """Extract correlation_id from request.state (set by middleware)."""
    return getattr(request.state, "correlation_id", "") or ""
