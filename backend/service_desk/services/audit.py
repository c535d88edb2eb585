from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col

from service_desk.models.audit import AuditEntry
from service_desk.schemas.audit import AuditEntryResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from service_desk.models.enums import AuditAction

logger = logging.getLogger(__name__)


def _build_audit_response(entry: AuditEntry) -> AuditEntryResponse:
    return AuditEntryResponse(
        id=entry.id,
        request_id=entry.request_id,
        action_type=entry.action_type,
        from_status=entry.from_status,
        to_status=entry.to_status,
        actor_employee_id=entry.actor_employee_id,
        note=entry.note,
        created_at=entry.created_at,
    )


async def record_action(
    session: AsyncSession,
    *,
    request_id: int,
    action_type: AuditAction,
    from_status: str | None,
    to_status: str | None,
    actor_employee_id: int | None,
    note: str | None = None,
) -> AuditEntry | None:
    """Append an audit entry in its own transaction.

    Call after the triggering operation has committed. A failed write is
    rolled back and logged; it never propagates to the caller.
    """
    entry = AuditEntry(
        request_id=request_id,
        action_type=action_type.value,
        from_status=from_status,
        to_status=to_status,
        actor_employee_id=actor_employee_id,
        note=note,
    )
    try:
        session.add(entry)
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.warning(
            "Failed to record %s audit entry for request %s (non-critical)",
            action_type.value,
            request_id,
            exc_info=True,
        )
        return None
    return entry


async def list_entries(session: AsyncSession, request_id: int) -> list[AuditEntryResponse]:
    """Audit trail of a request, oldest first."""
    result = await session.execute(
        select(AuditEntry)
        .where(col(AuditEntry.request_id) == request_id)
        .order_by(col(AuditEntry.created_at), col(AuditEntry.id))
    )
    return [_build_audit_response(entry) for entry in result.scalars().all()]
