"""Badge Insights test configuration — shared fixtures for unit and integration tests."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings LRU cache between tests."""
    from badge_insights.settings.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def sqlite_env(tmp_path, monkeypatch):
    """Point the SQLite state store at a temporary file."""
    db_path = tmp_path / "state.db"
    monkeypatch.setenv("INSIGHTS_STORE__BACKEND", "sqlite")
    monkeypatch.setenv("INSIGHTS_STORE__SQLITE_PATH", str(db_path))
    return db_path


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


@pytest.fixture()
def memory_store():
    from badge_insights.store import MemoryStateStore

    return MemoryStateStore()


@pytest.fixture()
def sql_store(tmp_path):
    """Create a disposable ``SqlStateStore`` backed by a temporary SQLite DB."""
    from badge_insights.store import SqlStateStore

    return SqlStateStore(db_path=tmp_path / "test_state.db")


# ---------------------------------------------------------------------------
# Mock verification service
# ---------------------------------------------------------------------------


class FakeVerificationService:
    """Records verification calls and answers from a callable.

    ``decide(address, requirements)`` returns either a bool (wrapped into
    ``{"success": ...}``), an ``httpx.Response``, or raises.
    """

    def __init__(self, decide: Callable[[str, Any], Any] | None = None) -> None:
        self.decide = decide or (lambda address, requirements: True)
        self.calls: list[dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        outcome = self.decide(body["address"], body["assetOwnershipRequirements"])
        if isinstance(outcome, httpx.Response):
            return outcome
        return httpx.Response(200, json={"success": bool(outcome)})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture()
def fake_service():
    return FakeVerificationService()


@pytest.fixture()
def make_service():
    """Return the ``FakeVerificationService`` class for tests needing a custom ``decide``."""
    return FakeVerificationService


@pytest.fixture()
def make_verifier():
    """Build an ``OwnershipVerifier`` bound to a ``FakeVerificationService``."""
    from badge_insights.verification import OwnershipVerifier

    def _make(service: FakeVerificationService, **kwargs: Any) -> OwnershipVerifier:
        kwargs.setdefault("endpoint_url", "https://verify.test/api")
        kwargs.setdefault("max_retries", 0)
        return OwnershipVerifier(client=service.client(), **kwargs)

    return _make


# ---------------------------------------------------------------------------
# Async backend
# ---------------------------------------------------------------------------


@pytest.fixture()
def anyio_backend():
    """The verifier and handlers are built on asyncio; run anyio tests there only."""
    return "asyncio"
