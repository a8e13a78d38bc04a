"""Shared fixtures: event and decision factories, in-memory store and catalog."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from access_audit.application.resource_catalog import InMemoryResourceCatalog
from access_audit.domain.models.audit_event import AuditEvent, Decision, RequestContext
from access_audit.domain.models.query import ResourceRef, TimeRange
from access_audit.infrastructure.memory.audit_store_memory import InMemoryAuditStore

# 2026-01-01T00:00:00Z
BASE_TS = 1767225600


@pytest.fixture
def base_ts() -> int:
    return BASE_TS


@pytest.fixture
def day_range() -> TimeRange:
    return TimeRange(
        start=datetime(2026, 1, 1, tzinfo=timezone.utc),
        end=datetime(2026, 1, 1, 23, 59, 59, tzinfo=timezone.utc),
    )


@pytest.fixture
def make_event():
    def _make(**overrides) -> AuditEvent:
        values = dict(
            timestamp=BASE_TS,
            org_id="org-1",
            action=True,
            reason=100,
            original_request_url="https://app.example.com/",
            scheme="https",
            host="app.example.com",
            path="/",
            method="GET",
            tls=True,
        )
        values.update(overrides)
        return AuditEvent(**values)

    return _make


@pytest.fixture
def make_request():
    def _make(**overrides) -> RequestContext:
        values = dict(
            path="/dashboard",
            original_request_url="https://app.example.com/dashboard?x=1",
            scheme="https",
            host="app.example.com",
            method="GET",
            tls=True,
            request_ip="203.0.113.5:51820",
        )
        values.update(overrides)
        return RequestContext(**values)

    return _make


@pytest.fixture
def make_decision():
    def _make(**overrides) -> Decision:
        values = dict(action=True, reason=100, org_id="org-1")
        values.update(overrides)
        return Decision(**values)

    return _make


@pytest.fixture
def memory_store() -> InMemoryAuditStore:
    return InMemoryAuditStore()


@pytest.fixture
def catalog() -> InMemoryResourceCatalog:
    return InMemoryResourceCatalog(
        {
            5: ResourceRef(resource_id=5, name="Grafana", nice_id="grafana"),
            7: ResourceRef(resource_id=7, name="Wiki", nice_id="wiki"),
        }
    )


@pytest.fixture
def logger():
    return MagicMock()


@pytest.fixture
def all_time() -> TimeRange:
    return TimeRange(
        start=datetime(1970, 1, 1, tzinfo=timezone.utc),
        end=datetime(2100, 1, 1, tzinfo=timezone.utc),
    )
