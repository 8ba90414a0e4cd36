"""Custom exceptions shared across services."""

from dataclasses import dataclass


@dataclass(eq=False)
class ServiceError(Exception):
    """Base exception for service layer failures."""

    message: str
    code: str = "service_error"
    status_code: int | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


@dataclass(eq=False)
class ChatServiceError(ServiceError):
    """Raised when the messages endpoint cannot be reached or decoded."""

    code: str = "connection_error"


@dataclass(eq=False)
class SessionConfigError(ServiceError):
    """Raised when a session is given request parameters it cannot use."""

    code: str = "validation_error"
