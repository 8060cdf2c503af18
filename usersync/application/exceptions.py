"""Application-layer exceptions. Do not reuse domain exceptions."""

from typing import Optional


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NonRetriableError(ApplicationError):
    """Marker base: the admission queue dead-letters these without retrying."""


class ProviderApiError(ApplicationError):
    """Raised when the provider's list-events API fails after client-side retries."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ProviderAuthenticationError(ProviderApiError, NonRetriableError):
    """Raised when the provider rejects the API key (401/403). Retrying will not help."""


class DownstreamHookError(ApplicationError):
    """Raised when the registered downstream hook fails. The whole unit of work is retried."""


class QueueUnavailableError(ApplicationError):
    """Raised when a task cannot be durably recorded in the admission queue."""


class UnknownTaskError(NonRetriableError):
    """Raised when the queue holds a task no handler is registered for."""


class TaskFailedError(ApplicationError):
    """Raised when a task exhausts its retry budget (or fails non-retriably) and is dead-lettered."""

    def __init__(self, task_name: str, task_id: str, attempts: int, cause: BaseException) -> None:
        self.task_name = task_name
        self.task_id = task_id
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Task {task_name} ({task_id}) failed after {attempts} attempt(s): {cause}")
