"""Store a confirmed prediction as an enzyme record on the backend."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from kcat_portal.core.errors import AuthExpired, UpstreamError
from kcat_portal.core.settings import get_settings
from kcat_portal.interfaces.schemas import PredictionResult
from kcat_portal.services.http import ServiceClient, bearer_headers
from kcat_portal.services.name_resolver import PubChemNameResolver
from kcat_portal.services.prediction import DLTKcatAdapter, UniKPAdapter, placeholder_for
from kcat_portal.services.session import SessionStore
from kcat_portal.utils.logger import get_logger

logger = get_logger(__name__)

SAVE_PATH = "/enzyme/save"
SAVE_FAILED_MESSAGE = "Failed to save the prediction"
PLACEHOLDER_NAMES = frozenset(
    placeholder_for(adapter.model_name) for adapter in (UniKPAdapter, DLTKcatAdapter)
)


class PersistenceGateway:
    def __init__(
        self,
        session: SessionStore,
        resolver: PubChemNameResolver,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._session = session
        self._resolver = resolver
        self._client = ServiceClient(
            base_url or get_settings().services.enzyme_api.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def save(self, result: PredictionResult) -> Any:
        """Submit the prediction and return the id the backend assigned.

        Every call inserts a new record; identical predictions are not merged.
        """
        if not self._session.get_token():
            raise AuthExpired("Please log in before saving predictions")

        substrate_name = await self._improve_name(result)
        payload = _build_payload(result, substrate_name)

        logger.info(
            "persistence.save.request",
            model=result.model_name,
            predicted=payload["predicted"],
            substrate_name=substrate_name,
        )
        response = await self._client.request(
            "POST",
            SAVE_PATH,
            json=payload,
            headers=bearer_headers(self._session),
            fallback_message=SAVE_FAILED_MESSAGE,
            validation_statuses=(400, 422),
        )
        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamError(SAVE_FAILED_MESSAGE, status_code=response.status_code) from exc

        record_id = body.get("id") if isinstance(body, dict) else None
        if record_id is None:
            raise UpstreamError(
                f"{SAVE_FAILED_MESSAGE}: no record id returned",
                status_code=response.status_code,
            )
        logger.info("persistence.save.success", record_id=record_id, predicted=payload["predicted"])
        return record_id

    async def _improve_name(self, result: PredictionResult) -> str:
        name = result.substrate_name
        if (not name or name in PLACEHOLDER_NAMES) and result.substrate_smiles:
            resolved = await self._resolver.resolve_name(result.substrate_smiles)
            if resolved:
                return resolved
        return name


def _build_payload(result: PredictionResult, substrate_name: str) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "sub": substrate_name,
        "smiles": result.substrate_smiles,
        "sequences": result.protein_sequence,
        "kcat": result.kcat_value,
        "predicted": int(result.provenance),
    }
    if result.temperature_celsius is not None:
        payload["temperature"] = result.temperature_celsius
    return payload


__all__ = ["PersistenceGateway"]
