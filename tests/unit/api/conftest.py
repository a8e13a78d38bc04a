"""Fixtures for API unit tests: in-memory store and catalog, overridden dependencies, AsyncClient."""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from access_audit.application.audit_recorder import AuditEventRecorder
from access_audit.main import app
from access_audit.observability.metrics import MetricsCollector


@pytest.fixture
def api_metrics():
    return MetricsCollector()


@pytest.fixture
def api_recorder(memory_store, api_metrics, base_ts):
    return AuditEventRecorder(
        store=memory_store,
        logger=logging.getLogger("tests.recorder"),
        metrics=api_metrics,
        clock=lambda: base_ts + 3600,
    )


@pytest.fixture
def app_with_overrides(memory_store, catalog, api_recorder, api_metrics):
    """App with store, catalog, recorder and metrics overridden for testing."""
    from access_audit.api import dependencies

    app.dependency_overrides[dependencies.get_audit_store] = lambda: memory_store
    app.dependency_overrides[dependencies.get_resource_catalog] = lambda: catalog
    app.dependency_overrides[dependencies.get_recorder] = lambda: api_recorder
    app.dependency_overrides[dependencies.get_metrics] = lambda: api_metrics
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def seeded(memory_store, make_event, base_ts):
    await memory_store.append(make_event(timestamp=base_ts + 10, action=True, reason=102, actor_type="user", actor="alice", actor_id="u1", location="eu-west", resource_id=5))
    await memory_store.append(make_event(timestamp=base_ts + 20, action=False, reason=201, resource_id=7, location="us-east"))
    await memory_store.append(make_event(timestamp=base_ts + 30, action=True, reason=106, actor_type="apiKey", actor="ci-key", actor_id="k1", auth_type="password"))
    await memory_store.append(make_event(timestamp=base_ts + 40, action=True, reason=100, org_id="org-2", actor="eve"))
    return memory_store


@pytest.fixture
def day_params():
    return {"timeStart": "2026-01-01T00:00:00Z", "timeEnd": "2026-01-01T23:59:59Z"}
