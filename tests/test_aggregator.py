from kcat_portal.interfaces.schemas import EnzymeRecord, PredictionResult
from kcat_portal.services.aggregator import merge, results_frame


def _prediction(model_name: str, source_model: str, provenance: int, kcat: float) -> PredictionResult:
    return PredictionResult(
        substrate_name="Ethanol",
        substrate_smiles="CCO",
        protein_sequence="MKT",
        kcat_value=kcat,
        formatted_kcat=f"{kcat:.4f}",
        source_model=source_model,
        model_name=model_name,
        provenance=provenance,
    )


def test_merge_orders_query_then_model_a_then_model_b() -> None:
    query = [
        EnzymeRecord(ec_number="1.1.1.1", smiles="CCO", kcat_value=1.0, formatted_kcat="1.0000"),
        EnzymeRecord(ec_number="1.1.1.1", smiles="CCO", kcat_value=5.0, provenance=7),
    ]
    model_a = [_prediction("UniKP", "A", 1, 2.0)]
    model_b = [_prediction("DLTKcat", "B", 2, 3.0)]

    merged = merge(query, model_a, model_b)

    assert [row.source for row in merged] == ["query", "query", "UniKP", "DLTKcat"]
    assert [row.provenance for row in merged] == [0, 7, 1, 2]
    assert [row.kcat_value for row in merged] == [1.0, 5.0, 2.0, 3.0]


def test_merge_keeps_duplicates_from_different_sources() -> None:
    query = [EnzymeRecord(substrate_name="Ethanol", smiles="CCO", kcat_value=2.0)]
    model_a = [_prediction("UniKP", "A", 1, 2.0)]

    merged = merge(query, model_a, [])

    assert len(merged) == 2
    assert merged[0].smiles == merged[1].smiles == "CCO"


def test_merge_with_nothing_is_empty() -> None:
    assert merge([], [], []) == []


def test_results_frame_labels_provenance() -> None:
    merged = merge(
        [EnzymeRecord(ec_number="1.1.1.1", kcat_value=1.0, provenance=5)],
        [_prediction("UniKP", "A", 1, 2.0)],
        [_prediction("DLTKcat", "B", 2, 3.0)],
    )

    frame = results_frame(merged)

    assert list(frame["source"]) == ["query", "UniKP", "DLTKcat"]
    assert list(frame["provenance_label"]) == ["other(5)", "UniKP", "DLTKcat"]
    assert list(frame["provenance"]) == [5, 1, 2]
