# Application layer: services that orchestrate domain and infrastructure.

from usersync.application.action_responder import ActionHandler, ActionResponder, ActionVerdicts
from usersync.application.catch_up import CatchUpResult, CatchUpState, CatchUpSynchronizer
from usersync.application.event_applier import ApplyOutcome, EventApplier
from usersync.application.exceptions import (
    ApplicationError,
    DownstreamHookError,
    NonRetriableError,
    ProviderApiError,
    ProviderAuthenticationError,
    QueueUnavailableError,
    TaskFailedError,
    UnknownTaskError,
)
from usersync.application.hook_dispatcher import EventHook, HookDispatcher
from usersync.application.repositories import EventLedger, SyncUnitOfWork, UserStore
from usersync.application.sync_service import EventSyncService
from usersync.application.task_queue import QueuedTask, TaskQueue
from usersync.application.webhook_receiver import WebhookReceiver

__all__ = [
    "ActionHandler",
    "ActionResponder",
    "ActionVerdicts",
    "ApplicationError",
    "ApplyOutcome",
    "CatchUpResult",
    "CatchUpState",
    "CatchUpSynchronizer",
    "DownstreamHookError",
    "EventApplier",
    "EventHook",
    "EventLedger",
    "EventSyncService",
    "HookDispatcher",
    "NonRetriableError",
    "ProviderApiError",
    "ProviderAuthenticationError",
    "QueueUnavailableError",
    "QueuedTask",
    "SyncUnitOfWork",
    "TaskFailedError",
    "TaskQueue",
    "UnknownTaskError",
    "UserStore",
    "WebhookReceiver",
]
