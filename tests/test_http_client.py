from __future__ import annotations

import pytest
import requests
import responses

from fakes import BASE_URL, make_config
from posdesk.exceptions import NotFoundError, PermissionDeniedError, ServerError, TransportError
from posdesk.http_client import HttpClient
from posdesk.tracing import TRACE_HEADER, TraceContext


def _client(**overrides) -> HttpClient:
    return HttpClient(make_config(**overrides), trace=TraceContext())


@responses.activate
def test_get_returns_json_and_sends_trace_header() -> None:
    responses.add(responses.GET, f"{BASE_URL}/rest/v1/products", json=[{"id": 1}], status=200)
    http = _client()

    data = http.request("GET", "/rest/v1/products", params={"select": "*"}, table="products", operation="list")

    assert data == [{"id": 1}]
    sent = responses.calls[0].request
    assert sent.headers[TRACE_HEADER] == http.trace.trace_id
    assert sent.headers["Accept"] == "application/json"
    assert http.last_call.ok is True
    assert http.last_call.table == "products"
    assert http.last_call.operation == "list"


@responses.activate
def test_response_request_id_becomes_trace() -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/rest/v1/products",
        json=[],
        status=200,
        headers={"sb-request-id": "backend-trace"},
    )
    http = _client()
    http.request("GET", "/rest/v1/products")
    assert http.trace.trace_id == "backend-trace"


@responses.activate
def test_empty_body_returns_none() -> None:
    responses.add(responses.DELETE, f"{BASE_URL}/rest/v1/products", body="", status=204)
    assert _client().request("DELETE", "/rest/v1/products", params={"id": "eq.1"}) is None


@responses.activate
def test_get_retries_server_errors() -> None:
    responses.add(responses.GET, f"{BASE_URL}/rest/v1/products", json={"message": "down"}, status=503)
    responses.add(responses.GET, f"{BASE_URL}/rest/v1/products", json=[], status=200)

    assert _client(retries=2).request("GET", "/rest/v1/products") == []
    assert len(responses.calls) == 2


@responses.activate
def test_mutations_are_not_retried() -> None:
    responses.add(responses.PATCH, f"{BASE_URL}/rest/v1/products", json={"message": "down"}, status=503)

    with pytest.raises(ServerError):
        _client(retries=3).request("PATCH", "/rest/v1/products", json_body={"stock": 1})
    assert len(responses.calls) == 1


@responses.activate
def test_transport_failure_raises_transport_error() -> None:
    responses.add(responses.GET, f"{BASE_URL}/rest/v1/products", body=requests.ConnectionError("refused"))
    http = _client(retries=1)

    with pytest.raises(TransportError) as excinfo:
        http.request("GET", "/rest/v1/products")

    assert excinfo.value.status_code == 0
    assert excinfo.value.code == "TRANSPORT_ERROR"
    assert len(responses.calls) == 2
    assert http.last_call.ok is False
    assert http.last_call.status_code == 0


@responses.activate
def test_error_payload_is_mapped() -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/rest/v1/products",
        json={"code": "PGRST116", "message": "no rows"},
        status=406,
    )
    with pytest.raises(NotFoundError) as excinfo:
        _client().request("GET", "/rest/v1/products")
    assert excinfo.value.code == "PGRST116"


@responses.activate
def test_non_json_error_body_is_wrapped() -> None:
    responses.add(responses.GET, f"{BASE_URL}/rest/v1/products", body="Bad Gateway", status=502)
    with pytest.raises(ServerError) as excinfo:
        _client().request("GET", "/rest/v1/products")
    assert excinfo.value.message == "Bad Gateway"


@responses.activate
def test_failed_call_is_recorded_with_status() -> None:
    responses.add(
        responses.PATCH,
        f"{BASE_URL}/rest/v1/products",
        json={"code": "42501", "message": "permission denied for table products"},
        status=403,
    )
    http = _client()
    with pytest.raises(PermissionDeniedError):
        http.request("PATCH", "/rest/v1/products", json_body={"stock": 0}, table="products", operation="update_stock")
    assert http.last_call.ok is False
    assert http.last_call.status_code == 403
