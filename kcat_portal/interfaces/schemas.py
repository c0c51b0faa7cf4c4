"""Data models shared across services and workflows."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict


class Provenance(IntEnum):
    EXPERIMENTAL = 0
    MODEL_A = 1
    MODEL_B = 2


_PROVENANCE_LABELS = {
    Provenance.EXPERIMENTAL: "experimental",
    Provenance.MODEL_A: "UniKP",
    Provenance.MODEL_B: "DLTKcat",
}


def provenance_label(code: int) -> str:
    try:
        return _PROVENANCE_LABELS[Provenance(code)]
    except ValueError:
        return f"other({code})"


def format_kcat(value: Any) -> Optional[str]:
    """Render a kcat value with four decimals, or None when it is not numeric."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return f"{value:.4f}"


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: str = ""


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    user: User


class QueryFilter(BaseModel):
    model_config = ConfigDict(frozen=True)

    ec_number: Optional[str] = None
    prot_id: Optional[str] = None
    substrate_name: Optional[str] = None
    substrate_smiles: Optional[str] = None

    def to_params(self) -> Dict[str, str]:
        wire_names = {
            "ec_number": "ecNumber",
            "prot_id": "protId",
            "substrate_name": "sub",
            "substrate_smiles": "smiles",
        }
        params: Dict[str, str] = {}
        for field, wire_name in wire_names.items():
            value = getattr(self, field)
            if value and value.strip():
                params[wire_name] = value.strip()
        return params


class EnzymeRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    ec_number: Optional[str] = None
    prot_id: Optional[str] = None
    substrate_name: Optional[str] = None
    smiles: Optional[str] = None
    protein_sequence: Optional[str] = None
    temperature_celsius: Optional[float] = None
    kcat_value: Optional[float] = None
    formatted_kcat: Optional[str] = None
    provenance: int = Provenance.EXPERIMENTAL.value

    @classmethod
    def from_backend_row(cls, row: Mapping[str, Any]) -> "EnzymeRecord":
        """Map one `findKcat` row. Raises ValueError/TypeError on malformed fields."""
        predicted = row.get("predicted")
        record = cls(
            ec_number=row.get("ecNumber"),
            prot_id=row.get("protId"),
            substrate_name=_first_present(row, "sub", "substrateName"),
            smiles=row.get("smiles"),
            protein_sequence=row.get("sequences"),
            temperature_celsius=row.get("temperature"),
            kcat_value=_first_present(row, "kcat", "kcatValue"),
            formatted_kcat=row.get("formattedKcat"),
            provenance=int(predicted) if predicted is not None else Provenance.EXPERIMENTAL.value,
        )
        if record.formatted_kcat is None:
            # Format the coerced float so "12.5" renders like 12.5.
            record = record.model_copy(update={"formatted_kcat": format_kcat(record.kcat_value)})
        return record


class PredictionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    substrate_name: str
    substrate_smiles: str
    protein_sequence: str
    temperature_celsius: Optional[float] = None
    kcat_value: Optional[float] = None
    formatted_kcat: Optional[str] = None
    source_model: Literal["A", "B"]
    model_name: str
    provenance: int


@dataclass(frozen=True)
class UniKPRequest:
    substrate_smiles: Optional[str] = None
    protein_sequence: Optional[str] = None


@dataclass(frozen=True)
class DLTKcatRequest:
    substrate_smiles: Optional[str] = None
    protein_sequence: Optional[str] = None
    temperature_celsius: Union[float, int, str, None] = None


PredictionRequest = Union[UniKPRequest, DLTKcatRequest]


class DisplayRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    ec_number: Optional[str] = None
    prot_id: Optional[str] = None
    substrate_name: Optional[str] = None
    smiles: Optional[str] = None
    protein_sequence: Optional[str] = None
    temperature_celsius: Optional[float] = None
    kcat_value: Optional[float] = None
    formatted_kcat: Optional[str] = None
    provenance: int = Provenance.EXPERIMENTAL.value

    @property
    def provenance_label(self) -> str:
        return provenance_label(self.provenance)


def _first_present(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


__all__ = [
    "DLTKcatRequest",
    "DisplayRecord",
    "EnzymeRecord",
    "PredictionRequest",
    "PredictionResult",
    "Provenance",
    "QueryFilter",
    "Session",
    "UniKPRequest",
    "User",
    "format_kcat",
    "provenance_label",
]
