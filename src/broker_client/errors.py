from __future__ import annotations

from typing import Optional


class BrokerClientError(Exception):
    """Base class for every error raised by broker_client."""


class UsageError(BrokerClientError, ValueError):
    """The caller used the client incorrectly; nothing was sent to the broker."""


class ValidationError(UsageError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class ClientClosedError(UsageError):
    def __init__(self, message: str = "client is closed") -> None:
        super().__init__(message)


class _CommandError(BrokerClientError):
    """Error tied to a command send; `command` is filled in once the kind is known."""

    def __init__(self, details: str = "", *, command: str = "") -> None:
        super().__init__(details)
        self.details = details
        self.command = command

    def __str__(self) -> str:
        if self.command:
            return f"{self.command}: {self.details}"
        return self.details


class TransportError(_CommandError):
    """The request never got a broker verdict."""

    code = "transport"

    def __init__(self, details: str = "", *, command: str = "", code: Optional[str] = None) -> None:
        super().__init__(details, command=command)
        if code:
            self.code = code


class ConnectionUnavailableError(TransportError):
    code = "unavailable"


class DeadlineExceededError(TransportError):
    code = "deadline_exceeded"


class CanceledError(TransportError):
    code = "canceled"


class TransportInternalError(TransportError):
    code = "internal"


class BrokerRejectedError(_CommandError):
    """The broker received the command and refused it."""

    def __init__(self, reason: str, details: str = "", *, command: str = "") -> None:
        super().__init__(details or reason, command=command)
        self.reason = reason

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base} (rejected: {self.reason})"
