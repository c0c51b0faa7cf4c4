"""Adapters for the UniKP and DLTKcat kcat inference services."""

from __future__ import annotations

import abc
import math
from typing import Any, Dict, List, Optional, Tuple

import httpx

from kcat_portal.core.errors import UpstreamError, ValidationError
from kcat_portal.core.settings import get_settings
from kcat_portal.interfaces.schemas import (
    DLTKcatRequest,
    PredictionRequest,
    PredictionResult,
    Provenance,
    UniKPRequest,
    format_kcat,
)
from kcat_portal.services.http import ServiceClient
from kcat_portal.services.name_resolver import PubChemNameResolver
from kcat_portal.utils.logger import get_logger

logger = get_logger(__name__)

PREDICTION_FAILED_MESSAGE = "An error occurred during prediction"

_FIELD_LABELS = {
    "substrate_smiles": "SMILES structure",
    "protein_sequence": "amino acid sequence",
    "temperature_celsius": "temperature",
}


class PredictionAdapter(abc.ABC):
    """Validate, name the substrate, call the model, normalise its reply."""

    model_name: str
    source_model: str
    provenance: Provenance
    required_fields: Tuple[str, ...] = ("substrate_smiles", "protein_sequence")

    def __init__(
        self,
        resolver: PubChemNameResolver,
        *,
        base_url: str,
        predict_path: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._resolver = resolver
        self._predict_path = predict_path
        self._client = ServiceClient(base_url, timeout=timeout, transport=transport)

    @property
    def placeholder_name(self) -> str:
        return placeholder_for(self.model_name)

    @property
    def _event(self) -> str:
        return f"prediction.{self.model_name.lower()}"

    async def predict(self, request: PredictionRequest) -> PredictionResult:
        values = self.validate(request)

        resolved = await self._resolver.resolve_name(values["substrate_smiles"])
        substrate_name = resolved or self.placeholder_name

        logger.info(
            f"{self._event}.request",
            smiles=values["substrate_smiles"],
            sequence_length=len(values["protein_sequence"]),
        )
        response = await self._client.request(
            "POST",
            self._predict_path,
            json=self.build_payload(values),
            headers={"Content-Type": "application/json"},
            fallback_message=PREDICTION_FAILED_MESSAGE,
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(
                PREDICTION_FAILED_MESSAGE, status_code=response.status_code
            ) from exc

        kcat = self.extract_kcat(payload)
        result = PredictionResult(
            substrate_name=substrate_name,
            substrate_smiles=values["substrate_smiles"],
            protein_sequence=values["protein_sequence"],
            temperature_celsius=values.get("temperature_celsius"),
            kcat_value=kcat,
            formatted_kcat=format_kcat(kcat),
            source_model=self.source_model,
            model_name=self.model_name,
            provenance=int(self.provenance),
        )
        logger.info(f"{self._event}.success", kcat=kcat, substrate_name=substrate_name)
        return result

    def validate(self, request: PredictionRequest) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        missing: List[str] = []
        for field in self.required_fields:
            value = getattr(request, field, None)
            if isinstance(value, str):
                value = value.strip()
            if value is None or value == "":
                missing.append(field)
            else:
                values[field] = value
        if missing:
            labels = " and ".join(_FIELD_LABELS.get(field, field) for field in missing)
            raise ValidationError(f"{self.model_name} requires {labels}", fields=missing)
        return values

    @abc.abstractmethod
    def build_payload(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Translate validated inputs into the model service's request body."""

    @abc.abstractmethod
    def extract_kcat(self, payload: Any) -> Optional[float]:
        """Pull the numeric kcat out of the model service's reply."""


class UniKPAdapter(PredictionAdapter):
    model_name = "UniKP"
    source_model = "A"
    provenance = Provenance.MODEL_A

    def __init__(
        self,
        resolver: PubChemNameResolver,
        *,
        base_url: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        settings = get_settings().services.unikp
        super().__init__(
            resolver,
            base_url=base_url or settings.base_url,
            predict_path=settings.predict_path,
            **kwargs,
        )

    def build_payload(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "substrate_smiles": values["substrate_smiles"],
            "protein_sequence": values["protein_sequence"],
        }

    def extract_kcat(self, payload: Any) -> Optional[float]:
        return _numeric(payload.get("kcat_value")) if isinstance(payload, dict) else None


class DLTKcatAdapter(PredictionAdapter):
    model_name = "DLTKcat"
    source_model = "B"
    provenance = Provenance.MODEL_B
    required_fields = ("substrate_smiles", "protein_sequence", "temperature_celsius")

    def __init__(
        self,
        resolver: PubChemNameResolver,
        *,
        base_url: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        settings = get_settings().services.dltkcat
        super().__init__(
            resolver,
            base_url=base_url or settings.base_url,
            predict_path=settings.predict_path,
            **kwargs,
        )

    def validate(self, request: PredictionRequest) -> Dict[str, Any]:
        values = super().validate(request)
        raw = values["temperature_celsius"]
        temperature: Optional[float] = None
        if not isinstance(raw, bool):
            try:
                temperature = float(raw)
            except (TypeError, ValueError):
                temperature = None
        if temperature is None or not math.isfinite(temperature):
            raise ValidationError("Temperature must be a number", fields=("temperature_celsius",))
        values["temperature_celsius"] = temperature
        return values

    def build_payload(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "smiles": values["substrate_smiles"],
            "seq": values["protein_sequence"],
            "temperature_celsius": values["temperature_celsius"],
        }

    def extract_kcat(self, payload: Any) -> Optional[float]:
        return _numeric(payload.get("kcat")) if isinstance(payload, dict) else None


def placeholder_for(model_name: str) -> str:
    return f"{model_name} prediction"


def _numeric(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


__all__ = [
    "DLTKcatAdapter",
    "DLTKcatRequest",
    "PredictionAdapter",
    "UniKPAdapter",
    "UniKPRequest",
    "placeholder_for",
]
