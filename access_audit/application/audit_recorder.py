"""Audit event recorder: builds one immutable AuditEvent per gateway decision and appends it. Never raises."""

import asyncio
import json
import logging
import time
from typing import Any, Callable, Optional, Set

from access_audit.application.audit_store import AuditStore
from access_audit.domain.exceptions import DomainError
from access_audit.domain.models.audit_event import AuditEvent, Decision, RequestContext
from access_audit.domain.normalization import derive_auth_type, normalize_client_ip, resolve_actor
from access_audit.domain.validators.audit_validator import validate_reason_for_action
from access_audit.observability.metrics import MetricsCollector

METRIC_RECORDED = "audit_events_recorded"
METRIC_RECORD_FAILED = "audit_record_failures"
METRIC_REASON_MISMATCH = "audit_reason_action_mismatch"


def serialize_metadata(metadata: Any) -> Optional[str]:
    """Absent (None or empty mapping) stores as null, never "null" or "{}". Raises TypeError/ValueError."""
    if metadata is None:
        return None
    if isinstance(metadata, dict) and not metadata:
        return None
    return json.dumps(metadata)


class AuditEventRecorder:
    """
    Fire-and-forget audit recording for the request path.

    record() performs exactly one store append on success and zero on any failure.
    Failures are logged and swallowed. A reason/action mismatch is logged as an
    internal error and the event is still recorded.
    """

    def __init__(
        self,
        store: AuditStore,
        logger: logging.Logger,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._logger = logger
        self._metrics = metrics
        self._clock = clock
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def build_event(self, decision: Decision, request: RequestContext) -> AuditEvent:
        """Construct the full event in memory. Raises on metadata serialization failure."""
        actor = resolve_actor(decision.user, decision.api_key)
        return AuditEvent(
            timestamp=int(self._clock()),
            org_id=decision.org_id,
            action=decision.action,
            reason=int(decision.reason),
            resource_id=decision.resource_id,
            location=decision.location,
            actor_type=actor.actor_type if actor else None,
            actor=actor.display_name if actor else None,
            actor_id=actor.actor_id if actor else None,
            auth_type=derive_auth_type(decision.metadata),
            metadata=serialize_metadata(decision.metadata),
            original_request_url=request.original_request_url,
            scheme=request.scheme,
            host=request.host,
            path=request.path,
            method=request.method,
            tls=request.tls,
            ip=normalize_client_ip(request.request_ip),
        )

    def _check_reason(self, decision: Decision) -> None:
        try:
            validate_reason_for_action(decision.reason, decision.action)
        except DomainError as e:
            self._logger.error(
                "reason_action_mismatch",
                extra={
                    "org_id": decision.org_id,
                    "reason": decision.reason,
                    "action": decision.action,
                    "error": e.message,
                },
            )
            self._increment(METRIC_REASON_MISMATCH, decision.org_id)

    def _increment(self, name: str, org_id: Optional[str]) -> None:
        if self._metrics is not None:
            self._metrics.increment(name, org_id=org_id)

    async def record(self, decision: Decision, request: RequestContext) -> None:
        """Record one decision. Never raises to the caller."""
        try:
            self._check_reason(decision)
            event = self.build_event(decision, request)
            stored = await self._store.append(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._logger.error(
                "audit_record_failed",
                extra={
                    "org_id": decision.org_id,
                    "reason": decision.reason,
                    "action": decision.action,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            self._increment(METRIC_RECORD_FAILED, decision.org_id)
            return

        self._increment(METRIC_RECORDED, decision.org_id)
        self._logger.debug(
            "audit_event_recorded",
            extra={
                "org_id": stored.org_id,
                "audit_event_id": stored.id,
                "reason": stored.reason,
                "action": stored.action,
            },
        )

    def record_nowait(self, decision: Decision, request: RequestContext) -> asyncio.Task:
        """Schedule record() on the running loop; the caller does not await the write."""
        task = asyncio.get_running_loop().create_task(self.record(decision, request))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for all scheduled writes (e.g. at shutdown)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
