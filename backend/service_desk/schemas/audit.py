# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class AuditEntryResponse(BaseModel):
    """One entry of a request's audit trail."""

    id: int
    request_id: int
    action_type: str
    from_status: str | None
    to_status: str | None
    actor_employee_id: int | None
    note: str | None
    created_at: datetime


class AuditTrailResponse(BaseModel):
    items: list[AuditEntryResponse]
    total: int
