"""Domain-specific exceptions. Pure domain layer — no infrastructure."""


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SignatureMissingError(DomainError):
    """Raised when an inbound webhook carries no signature header."""


class SignatureInvalidError(DomainError):
    """Raised when the webhook signature does not match the payload or is outside the tolerance window."""


class MalformedPayloadError(DomainError):
    """Raised when a webhook payload or provider event cannot be parsed into an event."""


class UserNotFoundError(DomainError):
    """Raised when a user is not in the mirror."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")
