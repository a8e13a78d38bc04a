"""Gateway-facing router: POST /logs/access schedules one audit record per decision."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from access_audit.api.dependencies import get_recorder
from access_audit.application.audit_recorder import AuditEventRecorder
from access_audit.domain.models.audit_event import ApiKeyActor, Decision, RequestContext, UserActor
from access_audit.domain.schemas.audit_log import RecordAuditRequest

router = APIRouter()


def _to_decision(body: RecordAuditRequest) -> Decision:
    d = body.decision
    return Decision(
        action=d.action,
        reason=d.reason,
        resource_id=d.resourceId,
        org_id=d.orgId,
        location=d.location,
        user=UserActor(username=d.user.username, user_id=d.user.userId) if d.user else None,
        api_key=ApiKeyActor(api_key_id=d.apiKey.apiKeyId, name=d.apiKey.name) if d.apiKey else None,
        metadata=d.metadata,
    )


def _to_request_context(body: RecordAuditRequest) -> RequestContext:
    r = body.request
    return RequestContext(
        path=r.path,
        original_request_url=r.originalRequestURL,
        scheme=r.scheme,
        host=r.host,
        method=r.method,
        tls=r.tls,
        request_ip=r.requestIp,
        headers=r.headers,
        query=r.query,
    )


@router.post("/logs/access", status_code=202)
async def record_access_decision(
    body: RecordAuditRequest,
    recorder: Annotated[AuditEventRecorder, Depends(get_recorder)],
):
    """Accept a decision for recording. Always 202: recording failures never reach the gateway."""
    recorder.record_nowait(_to_decision(body), _to_request_context(body))
    return JSONResponse(status_code=202, content={"accepted": True})
