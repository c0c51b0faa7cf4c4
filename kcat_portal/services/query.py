"""Authenticated kcat search against the enzyme-data backend."""

from __future__ import annotations

from typing import List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from kcat_portal.core.errors import UpstreamError, ValidationError
from kcat_portal.core.settings import get_settings
from kcat_portal.interfaces.schemas import EnzymeRecord, QueryFilter
from kcat_portal.services.http import ServiceClient, bearer_headers
from kcat_portal.services.session import SessionStore
from kcat_portal.utils.logger import get_logger

logger = get_logger(__name__)

SEARCH_PATH = "/enzyme/findKcat"
EMPTY_FILTER_MESSAGE = "Please enter at least one search condition"
SEARCH_FAILED_MESSAGE = "An error occurred during the query"


class QueryService:
    def __init__(
        self,
        session: SessionStore,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._session = session
        self._client = ServiceClient(
            base_url or get_settings().services.enzyme_api.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def search(self, query: QueryFilter) -> List[EnzymeRecord]:
        """Fetch measured kcat records matching at least one populated filter field."""
        params = query.to_params()
        if not params:
            raise ValidationError(
                EMPTY_FILTER_MESSAGE,
                fields=("ec_number", "prot_id", "substrate_name", "substrate_smiles"),
            )

        logger.info("query.search.request", params=params)
        response = await self._client.request(
            "GET",
            SEARCH_PATH,
            params=params,
            headers=bearer_headers(self._session),
            fallback_message=SEARCH_FAILED_MESSAGE,
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(SEARCH_FAILED_MESSAGE, status_code=response.status_code) from exc

        rows = payload.get("records") if isinstance(payload, dict) else None
        try:
            records = [EnzymeRecord.from_backend_row(row) for row in rows or []]
        except (PydanticValidationError, ValueError, TypeError, AttributeError) as exc:
            logger.warning("query.search.malformed_record", params=params, error=str(exc))
            raise UpstreamError(SEARCH_FAILED_MESSAGE, status_code=response.status_code) from exc
        logger.info("query.search.success", params=params, record_count=len(records))
        return records


__all__ = ["QueryService"]
