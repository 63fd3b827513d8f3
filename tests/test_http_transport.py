"""Tests for the HTTP (connection-oriented) transport."""

import pytest


@pytest.mark.asyncio
async def test_preflight(client):
    response = await client.request("OPTIONS", "/", content=b"anything at all")
    assert response.status_code == 204
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "POST, GET, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type"
    assert response.content == b""


@pytest.mark.asyncio
@pytest.mark.parametrize("verb", ["GET", "PUT", "DELETE", "PATCH"])
async def test_non_post_verbs_rejected_in_envelope(client, verb):
    response = await client.request(verb, "/")
    assert response.status_code == 200
    assert response.json() == {
        "error": {"code": -32600, "message": "Method not allowed"},
        "id": "method-not-allowed",
    }


@pytest.mark.asyncio
async def test_post_dispatches(client):
    response = await client.post("/", json={"method": "getSystemStatus", "id": 3})
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.headers["access-control-allow-origin"] == "*"
    body = response.json()
    assert body["id"] == 3
    assert body["result"]["status"] == "running"
    assert body["result"]["uptime"] > 0


@pytest.mark.asyncio
async def test_any_path_is_served(client):
    response = await client.post("/mcp/v1", json={"method": "getEvolutionStage", "id": "p"})
    assert response.json()["result"]["currentStage"] == "MVP"


@pytest.mark.asyncio
async def test_malformed_body(client):
    response = await client.post("/", content=b"{definitely not json")
    assert response.status_code == 200
    assert response.json() == {"error": {"code": -32700, "message": "Parse error"}, "id": "parse-error"}


@pytest.mark.asyncio
async def test_empty_body_is_parse_error(client):
    response = await client.post("/", content=b"")
    assert response.json()["error"]["code"] == -32700


@pytest.mark.asyncio
async def test_errors_keep_transport_status_ok(client):
    response = await client.post("/", json={"method": "deleteEverything", "id": 11})
    assert response.status_code == 200
    assert response.json() == {"error": {"code": -32601, "message": "Method not found"}, "id": 11}


@pytest.mark.asyncio
async def test_check_constraints_over_http(client, tcc_path, spec_path):
    response = await client.post("/", json={
        "method": "checkConstraints",
        "params": {"tccPath": str(tcc_path), "specPath": str(spec_path)},
        "id": 1,
    })
    result = response.json()["result"]
    assert len(result["constraints"]) == 2
    assert result["violations"] == []


@pytest.mark.asyncio
async def test_dispatcher_crash_becomes_internal_error(app, client):
    class _Broken:
        async def dispatch_raw(self, body):
            raise RuntimeError("boom")

    app.state.dispatcher = _Broken()
    response = await client.post("/", json={"method": "getSystemStatus", "id": 1})
    assert response.status_code == 200
    assert response.json() == {"error": {"code": -32603, "message": "Internal error"}, "id": "server-error"}


def test_bound_address_defaults_to_settings(app):
    from dsgs.config import settings

    assert (app.state.host, app.state.port) == (settings.host, settings.port)
