"""API integration tests — host lifecycle events over the HTTP bridge.

Uses the FastAPI ``TestClient`` with handlers built on an in-memory store
and a mocked verification service, so no network access is needed.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from badge_insights.api.app import create_app
from badge_insights.snap import LoggingHost, SnapHandlers

ADDR_A = "0x" + "A" * 40
ADDR_B = "0x" + "B" * 40

RULES = {
    "expectedBalances": [
        {"label": "Badge Holder", "assetOwnershipRequirements": {"$and": [{"badge": 1}]}},
    ]
}


@pytest.fixture()
def host():
    return LoggingHost()


@pytest.fixture()
def client(memory_store, make_service, make_verifier, host):
    """TestClient whose verifier approves every address except ADDR_B."""
    service = make_service(lambda address, requirements: address != ADDR_B)
    handlers = SnapHandlers(store=memory_store, verifier=make_verifier(service), host=host)
    with TestClient(create_app(handlers=handlers)) as c:
        yield c


class TestHealthEndpoint:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestInstallEndpoint:
    def test_install_shows_alert(self, client: TestClient, host) -> None:
        resp = client.post("/install")
        assert resp.status_code == 200
        assert len(host.alerts) == 1


class TestInsightEndpoints:
    def test_signature_without_rules(self, client: TestClient) -> None:
        body = {"signature": {"data": {"a": ADDR_A}}, "signatureOrigin": "https://dapp.test"}
        resp = client.post("/signature", json=body)
        assert resp.status_code == 200
        children = resp.json()["content"]["children"]
        assert children[0] == {"type": "heading", "value": "BitBadges Insights"}
        assert {"type": "address", "value": ADDR_A} in children

    def test_transaction_with_rules(self, client: TestClient) -> None:
        client.post("/rpc", json={"method": "set_expected", "params": RULES})
        resp = client.post("/transaction", json={"transaction": {"from": ADDR_A, "to": ADDR_B}, "chainId": "eip155:1"})
        assert resp.status_code == 200
        texts = [c["value"] for c in resp.json()["content"]["children"] if c["type"] == "text"]
        assert "Badge Holder - ✅ - Satisfied" in texts
        assert "Badge Holder - ❌ - Not satisfied" in texts
        assert texts.index("Badge Holder - ✅ - Satisfied") < texts.index("Badge Holder - ❌ - Not satisfied")

    def test_signature_requires_body(self, client: TestClient) -> None:
        resp = client.post("/signature", json={})
        assert resp.status_code == 422


class TestRpcEndpoint:
    def test_set_then_get(self, client: TestClient) -> None:
        resp = client.post("/rpc", json={"method": "set_expected", "params": RULES})
        assert resp.status_code == 200
        assert resp.json() == {"result": None}

        resp = client.post("/rpc", json={"method": "get_expected"})
        assert resp.json() == {"result": RULES}

    def test_unknown_method_is_an_error(self, client: TestClient) -> None:
        resp = client.post("/rpc", json={"method": "hello"})
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Method not found."

    def test_invalid_params(self, client: TestClient) -> None:
        resp = client.post("/rpc", json={"method": "set_expected", "params": ["not", "an", "object"]})
        assert resp.status_code == 422


class TestDefaultWiring:
    def test_app_builds_handlers_from_settings(self, monkeypatch) -> None:
        monkeypatch.setenv("INSIGHTS_STORE__BACKEND", "memory")
        with TestClient(create_app()) as c:
            resp = c.post("/rpc", json={"method": "get_expected"})
            assert resp.status_code == 200
            assert resp.json() == {"result": None}
            assert isinstance(c.app.state.handlers, SnapHandlers)
