"""Combine search hits and model predictions into one display sequence."""

from __future__ import annotations

from typing import Iterable, List, Union

import pandas as pd

from kcat_portal.interfaces.schemas import (
    DisplayRecord,
    EnzymeRecord,
    PredictionResult,
    provenance_label,
)

QUERY_SOURCE = "query"

DISPLAY_COLUMNS = [
    "source",
    "ec_number",
    "prot_id",
    "substrate_name",
    "smiles",
    "temperature_celsius",
    "formatted_kcat",
    "provenance",
]


def to_display(record: Union[EnzymeRecord, PredictionResult]) -> DisplayRecord:
    if isinstance(record, PredictionResult):
        return DisplayRecord(
            source=record.model_name,
            substrate_name=record.substrate_name,
            smiles=record.substrate_smiles,
            protein_sequence=record.protein_sequence,
            temperature_celsius=record.temperature_celsius,
            kcat_value=record.kcat_value,
            formatted_kcat=record.formatted_kcat,
            provenance=record.provenance,
        )
    return DisplayRecord(
        source=QUERY_SOURCE,
        ec_number=record.ec_number,
        prot_id=record.prot_id,
        substrate_name=record.substrate_name,
        smiles=record.smiles,
        protein_sequence=record.protein_sequence,
        temperature_celsius=record.temperature_celsius,
        kcat_value=record.kcat_value,
        formatted_kcat=record.formatted_kcat,
        provenance=record.provenance,
    )


def merge(
    query_results: Iterable[EnzymeRecord],
    *prediction_results: Iterable[PredictionResult],
) -> List[DisplayRecord]:
    """Query hits first, then each prediction batch in the order given.

    Provenance codes pass through untouched and nothing is deduplicated.
    """
    merged = [to_display(record) for record in query_results]
    for batch in prediction_results:
        merged.extend(to_display(result) for result in batch)
    return merged


def results_frame(records: Iterable[DisplayRecord]) -> pd.DataFrame:
    rows = [record.model_dump() for record in records]
    frame = pd.DataFrame(rows, columns=list(DisplayRecord.model_fields))
    frame["provenance_label"] = frame["provenance"].map(provenance_label)
    return frame


__all__ = ["DISPLAY_COLUMNS", "merge", "results_frame", "to_display"]
