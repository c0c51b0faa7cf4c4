"""Failure taxonomy shared by every service, plus HTTP error classification."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Optional

import httpx

EXPIRED_MESSAGE = "Login expired, please log in again"
FORBIDDEN_MESSAGE = "Insufficient permissions, please confirm you are logged in"
NETWORK_MESSAGE = "Unable to reach the server, please check your network connection"


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTH_EXPIRED = "auth_expired"
    AUTH_FORBIDDEN = "auth_forbidden"
    UPSTREAM = "upstream"
    NETWORK = "network"


class PortalError(RuntimeError):
    """Base class for failures that carry a user-facing message."""

    kind: ErrorKind = ErrorKind.UPSTREAM

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    """Input rejected, either locally before any request or by the backend (400/422)."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.fields = tuple(fields)


class AuthError(PortalError):
    pass


class AuthExpired(AuthError):
    kind = ErrorKind.AUTH_EXPIRED

    def __init__(self, message: str = EXPIRED_MESSAGE) -> None:
        super().__init__(message)


class AuthForbidden(AuthError):
    kind = ErrorKind.AUTH_FORBIDDEN

    def __init__(self, message: str = FORBIDDEN_MESSAGE) -> None:
        super().__init__(message)


class UpstreamError(PortalError):
    kind = ErrorKind.UPSTREAM

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkError(PortalError):
    kind = ErrorKind.NETWORK

    def __init__(self, message: str = NETWORK_MESSAGE) -> None:
        super().__init__(message)


class LookupFailure(Exception):
    """Name lookup miss. Only used inside the name resolver."""


def backend_error_message(response: httpx.Response) -> Optional[str]:
    try:
        payload: Any = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        message = payload.get("error") or payload.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


def classify_status_error(
    exc: httpx.HTTPStatusError,
    *,
    fallback: str,
    validation_statuses: Iterable[int] = (),
) -> PortalError:
    response = exc.response
    status = response.status_code
    if status == 401:
        return AuthExpired()
    if status == 403:
        return AuthForbidden()
    message = backend_error_message(response) or fallback
    if status in tuple(validation_statuses):
        return ValidationError(message)
    return UpstreamError(message, status_code=status)


def classify_transport_error(exc: httpx.TransportError) -> NetworkError:
    return NetworkError()


__all__ = [
    "AuthError",
    "AuthExpired",
    "AuthForbidden",
    "ErrorKind",
    "LookupFailure",
    "NetworkError",
    "PortalError",
    "UpstreamError",
    "ValidationError",
    "backend_error_message",
    "classify_status_error",
    "classify_transport_error",
]
