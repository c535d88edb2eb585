from __future__ import annotations

from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field

from service_desk.models.base import IntegerBase


def _now_utc() -> datetime:
    return datetime.now(UTC)


class AuditEntry(IntegerBase, table=True):
    """Immutable record of a lifecycle-affecting action on a request."""

    __tablename__ = "audit_entry"

    request_id: int = Field(
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("service_request.id"), nullable=False, index=True),
    )
    action_type: str = Field(max_length=50)
    from_status: str | None = Field(default=None, max_length=50)
    to_status: str | None = Field(default=None, max_length=50)
    actor_employee_id: int | None = None
    note: str | None = None
    created_at: datetime = Field(
        default_factory=_now_utc,
        index=True,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
