import asyncio

import httpx
import pytest

from fakes import ENZYME_API, FakeEnzymeBackend, RecordingTransport
from kcat_portal.core.errors import (
    AuthExpired,
    AuthForbidden,
    NetworkError,
    UpstreamError,
    ValidationError,
)
from kcat_portal.interfaces.schemas import Provenance, QueryFilter
from kcat_portal.services.query import QueryService
from kcat_portal.services.session import SessionStore


def _service(session: SessionStore, backend: FakeEnzymeBackend) -> QueryService:
    return QueryService(session, base_url=ENZYME_API, transport=backend.transport)


@pytest.mark.parametrize(
    "query",
    [
        QueryFilter(),
        QueryFilter(ec_number="", prot_id=""),
        QueryFilter(substrate_name="   ", substrate_smiles=""),
    ],
)
def test_empty_filter_is_rejected_without_network(
    query: QueryFilter, session: SessionStore, backend: FakeEnzymeBackend
) -> None:
    with pytest.raises(ValidationError):
        asyncio.run(_service(session, backend).search(query))
    assert backend.requests == []


def test_ec_number_search_formats_kcat(session: SessionStore) -> None:
    backend = FakeEnzymeBackend(rows=[{"ecNumber": "1.1.1.1", "protId": "P00330", "kcat": 12.5}])

    records = asyncio.run(_service(session, backend).search(QueryFilter(ec_number="1.1.1.1")))

    assert len(backend.requests) == 1
    assert len(records) == 1
    assert records[0].ec_number == "1.1.1.1"
    assert records[0].prot_id == "P00330"
    assert records[0].kcat_value == 12.5
    assert records[0].formatted_kcat == "12.5000"
    assert records[0].provenance == Provenance.EXPERIMENTAL


def test_search_sends_populated_params_and_bearer_token(
    session: SessionStore, backend: FakeEnzymeBackend
) -> None:
    query = QueryFilter(ec_number="1.1.1.1", prot_id="", substrate_name="ethanol", substrate_smiles=None)
    asyncio.run(_service(session, backend).search(query))

    request = backend.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/api/enzyme/findKcat"
    assert dict(request.url.params) == {"ecNumber": "1.1.1.1", "sub": "ethanol"}
    assert request.headers["Authorization"] == "Bearer token-123"


def test_search_reads_token_at_call_time(session: SessionStore, backend: FakeEnzymeBackend) -> None:
    service = _service(session, backend)
    session.clear()

    asyncio.run(service.search(QueryFilter(prot_id="P1")))

    assert backend.requests[0].headers["Authorization"] == ""


def test_search_preserves_backend_order_and_fields(session: SessionStore) -> None:
    rows = [
        {"ecNumber": "1.1.1.1", "protId": "P1", "kcat": 3.0, "formattedKcat": "3.00", "predicted": 0},
        {"ecNumber": "1.1.1.1", "protId": "P2", "kcat": 0.25, "predicted": 2, "sub": "ethanol", "smiles": "CCO"},
        {"ecNumber": "1.1.1.1", "protId": "P3", "kcat": 7, "predicted": 9},
    ]
    backend = FakeEnzymeBackend(rows=rows)

    records = asyncio.run(_service(session, backend).search(QueryFilter(ec_number="1.1.1.1")))

    assert [record.prot_id for record in records] == ["P1", "P2", "P3"]
    assert records[0].formatted_kcat == "3.00"
    assert records[1].formatted_kcat == "0.2500"
    assert records[1].substrate_name == "ethanol"
    assert records[1].smiles == "CCO"
    assert [record.provenance for record in records] == [0, 2, 9]


def test_zero_matches_is_an_empty_list(session: SessionStore, backend: FakeEnzymeBackend) -> None:
    records = asyncio.run(_service(session, backend).search(QueryFilter(ec_number="9.9.9.9")))
    assert records == []


def test_missing_records_key_is_an_empty_list(session: SessionStore) -> None:
    transport = RecordingTransport(lambda request: httpx.Response(200, json={}))
    service = QueryService(session, base_url=ENZYME_API, transport=transport)

    assert asyncio.run(service.search(QueryFilter(ec_number="1.1.1.1"))) == []


@pytest.mark.parametrize(
    "status, error_type",
    [(401, AuthExpired), (403, AuthForbidden), (500, UpstreamError)],
)
def test_status_errors_are_classified(
    status: int, error_type: type, session: SessionStore, backend: FakeEnzymeBackend
) -> None:
    backend.status_override = status

    with pytest.raises(error_type):
        asyncio.run(_service(session, backend).search(QueryFilter(ec_number="1.1.1.1")))


def test_upstream_error_uses_backend_message(session: SessionStore, backend: FakeEnzymeBackend) -> None:
    backend.status_override = 500
    backend.error_body = {"error": "database offline"}

    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(_service(session, backend).search(QueryFilter(ec_number="1.1.1.1")))

    assert excinfo.value.message == "database offline"
    assert excinfo.value.status_code == 500


def test_unreachable_backend_is_a_network_error(session: SessionStore) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    service = QueryService(session, base_url=ENZYME_API, transport=RecordingTransport(refuse))

    with pytest.raises(NetworkError):
        asyncio.run(service.search(QueryFilter(ec_number="1.1.1.1")))


def test_numeric_string_kcat_is_formatted_from_the_parsed_value(session: SessionStore) -> None:
    backend = FakeEnzymeBackend(rows=[{"ecNumber": "1.1.1.1", "kcat": "12.5"}])

    records = asyncio.run(_service(session, backend).search(QueryFilter(ec_number="1.1.1.1")))

    assert records[0].kcat_value == 12.5
    assert records[0].formatted_kcat == "12.5000"


@pytest.mark.parametrize(
    "row",
    [
        {"ecNumber": "1.1.1.1", "kcat": "n/a"},
        {"ecNumber": "1.1.1.1", "kcat": 1.0, "predicted": "abc"},
    ],
)
def test_malformed_row_fails_search_as_upstream_error(session: SessionStore, row: dict) -> None:
    backend = FakeEnzymeBackend(rows=[row])

    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(_service(session, backend).search(QueryFilter(ec_number="1.1.1.1")))

    assert excinfo.value.message == "An error occurred during the query"
    assert excinfo.value.status_code == 200


def test_non_mapping_record_fails_search_as_upstream_error(session: SessionStore) -> None:
    transport = RecordingTransport(lambda request: httpx.Response(200, json={"records": ["oops"]}))
    service = QueryService(session, base_url=ENZYME_API, transport=transport)

    with pytest.raises(UpstreamError):
        asyncio.run(service.search(QueryFilter(ec_number="1.1.1.1")))
