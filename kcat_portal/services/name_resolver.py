"""Best-effort substrate naming through the PubChem PUG REST title property."""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import httpx

from kcat_portal.core.errors import LookupFailure
from kcat_portal.core.settings import get_settings
from kcat_portal.utils.logger import get_logger

logger = get_logger(__name__)


class PubChemNameResolver:
    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.services.pubchem.base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.http.timeout_seconds
        self._transport = transport

    async def resolve_name(self, smiles: Optional[str]) -> Optional[str]:
        """Return the compound title for a SMILES string, or None.

        Never raises: network errors, misses and malformed replies all
        come back as None so callers can substitute a placeholder.
        """
        if not smiles or not smiles.strip():
            return None
        encoded = quote(smiles.strip(), safe="")
        url = f"{self._base_url}/compound/smiles/{encoded}/property/Title/JSON"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                title = _extract_title(response.json())
        except (httpx.HTTPError, ValueError, LookupFailure) as exc:
            logger.warning(
                "name_resolver.lookup_failed",
                smiles=smiles,
                error=str(exc) or type(exc).__name__,
            )
            return None

        logger.info("name_resolver.lookup_success", smiles=smiles, title=title)
        return title


def _extract_title(payload: Any) -> str:
    try:
        title = payload["PropertyTable"]["Properties"][0]["Title"]
    except (KeyError, IndexError, TypeError) as exc:
        raise LookupFailure("no title in PubChem response") from exc
    if not isinstance(title, str) or not title.strip():
        raise LookupFailure("empty PubChem title")
    return title


__all__ = ["PubChemNameResolver"]
