from __future__ import annotations

from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field

from service_desk.models.base import IntegerBase, TimestampMixin
from service_desk.models.enums import RequestStatus


def _now_utc() -> datetime:
    return datetime.now(UTC)


class ServiceRequest(IntegerBase, TimestampMixin, table=True):
    """A workflow instance of any request type.

    ``current_step`` is the source of truth; ``status`` is its denormalized
    projection and is only written through the status normalizer.
    """

    __tablename__ = "service_request"
    __table_args__ = (
        sa.Index("ix_request_type_status", "type", "status"),
        sa.Index("ix_request_assigned_role", "assigned_role"),
    )

    type: str = Field(max_length=50, index=True)
    title: str = Field(default="", max_length=255)
    description: str = Field(default="")
    requester_name: str = Field(default="", max_length=255)
    department: str = Field(default="", max_length=255)
    status: str = Field(default=RequestStatus.PENDING, max_length=50, sa_column_kwargs={"server_default": "PENDING"})
    current_step: str = Field(max_length=50)
    assigned_role: str = Field(max_length=50)
    requester_employee_id: int = Field(index=True)
    assigned_employee_id: int | None = None
    parent_request_id: int | None = Field(
        default=None,
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("service_request.id"), nullable=True, index=True),
    )
    system_key: str | None = Field(default=None, max_length=50)
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )
