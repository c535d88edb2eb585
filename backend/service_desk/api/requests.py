# ruff: noqa: B008, TC001
from __future__ import annotations

from fastapi import APIRouter, Query, status

from service_desk.api.deps import AuthDep
from service_desk.db import SessionDep
from service_desk.models.enums import RequestStatus, RequestType
from service_desk.schemas.audit import AuditTrailResponse
from service_desk.schemas.request import (
    CreateRequestPayload,
    RequestDetailResponse,
    RequestListResponse,
    TransitionPayload,
    TransitionResponse,
)
from service_desk.services import request as request_service

requests_router = APIRouter(prefix="/requests", tags=["requests"])


@requests_router.post("", response_model=RequestDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: CreateRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestDetailResponse:
    """Submit an IT, car booking or onboarding request."""
    return await request_service.create_request(session, auth, payload)


@requests_router.get("", response_model=RequestListResponse)
async def list_requests(
    session: SessionDep,
    auth: AuthDep,
    request_type: RequestType | None = Query(default=None, alias="type"),
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    parent_request_id: int | None = Query(default=None),
    mine: bool = Query(default=False),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> RequestListResponse:
    """List requests visible to the caller."""
    return await request_service.list_requests(
        session, auth, request_type, status_filter, parent_request_id, mine, offset, limit
    )


@requests_router.get("/{request_id}", response_model=RequestDetailResponse)
async def get_request(
    request_id: int,
    session: SessionDep,
    auth: AuthDep,
) -> RequestDetailResponse:
    """Get a request with its detail record, parent and children."""
    return await request_service.get_request(session, auth, request_id)


@requests_router.patch("/{request_id}/status", response_model=TransitionResponse)
async def transition_request(
    request_id: int,
    payload: TransitionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> TransitionResponse:
    """Move a request to another step or status."""
    return await request_service.transition_request(session, auth, request_id, payload)


@requests_router.get("/{request_id}/audit", response_model=AuditTrailResponse)
async def get_audit_trail(
    request_id: int,
    session: SessionDep,
    auth: AuthDep,
) -> AuditTrailResponse:
    """Audit trail of a request, oldest first."""
    return await request_service.list_audit_entries(session, auth, request_id)
