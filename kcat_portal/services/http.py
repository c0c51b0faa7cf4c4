"""Async HTTP plumbing shared by the backend-facing services."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import httpx

from kcat_portal.core.errors import classify_status_error, classify_transport_error
from kcat_portal.core.settings import get_settings
from kcat_portal.services.session import SessionStore


def bearer_headers(session: Optional[SessionStore]) -> Dict[str, str]:
    """Build request headers from the token as it is right now."""
    token = session.get_token() if session is not None else None
    return {
        "Authorization": f"Bearer {token}" if token else "",
        "Content-Type": "application/json",
    }


class ServiceClient:
    """One `httpx.AsyncClient` per call; failures mapped to portal errors."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout if timeout is not None else get_settings().http.timeout_seconds
        self._transport = transport

    def url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        fallback_message: str,
        validation_statuses: Iterable[int] = (),
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.request(method, self.url(path), **kwargs)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise classify_status_error(
                exc, fallback=fallback_message, validation_statuses=validation_statuses
            ) from exc
        except httpx.TransportError as exc:
            raise classify_transport_error(exc) from exc
        return response


__all__ = ["ServiceClient", "bearer_headers"]
