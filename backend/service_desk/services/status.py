"""The only writer of ``ServiceRequest.status``.

``current_step`` is authoritative. Transitions go through :func:`apply_step`;
reads go through :func:`normalize_requests`, which heals any stored status
that drifted from its step. REJECTED and CANCELLED are never touched.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import and_, false, not_, or_
from sqlmodel import col

from service_desk.exceptions import ValidationError
from service_desk.models.enums import RequestStatus
from service_desk.models.request import ServiceRequest
from service_desk.services.workflow import ABSORBING_STEPS, WORKFLOWS, find_step

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql.elements import ColumnElement

    from service_desk.services.workflow import Step

logger = logging.getLogger(__name__)

_STICKY = frozenset({RequestStatus.REJECTED.value, RequestStatus.CANCELLED.value})


def apply_step(request: ServiceRequest, step_id: str) -> RequestStatus:
    """Move ``request`` to ``step_id`` and write the step's canonical status."""
    step = find_step(request.type, step_id)
    if step is None:
        msg = f"Unknown step '{step_id}' for {request.type} requests"
        raise ValidationError(msg)
    request.current_step = step.id
    request.status = step.status.value
    request.updated_at = datetime.now(UTC)
    return step.status


def canonical_status(request: ServiceRequest) -> RequestStatus | None:
    """Status the request should carry, or None when it must be left as is."""
    if request.status in _STICKY:
        return None
    step = find_step(request.type, request.current_step)
    if step is None:
        return None
    return step.status


def _steps_matching(predicate: Callable[[Step], bool]) -> ColumnElement[bool]:
    """Rows whose (type, current_step) pair is a catalog step satisfying ``predicate``."""
    pairs = []
    for request_type, workflow in WORKFLOWS.items():
        step_ids = [step.id for step in (*workflow.steps, *ABSORBING_STEPS) if predicate(step)]
        if step_ids:
            pairs.append(
                and_(col(ServiceRequest.type) == request_type.value, col(ServiceRequest.current_step).in_(step_ids))
            )
    return or_(false(), *pairs)


def canonical_status_clause(status: RequestStatus) -> ColumnElement[bool]:
    """SQL counterpart of :func:`canonical_status`: rows that read back as ``status``.

    Filters on what a read returns, not on the stored column, so drifted
    rows land under the status they will be normalized to.
    """
    stored_sticky = col(ServiceRequest.status).in_(_STICKY)
    by_step = _steps_matching(lambda step: step.status == status)
    if status.value in _STICKY:
        return or_(col(ServiceRequest.status) == status.value, and_(not_(stored_sticky), by_step))
    unknown_step = not_(_steps_matching(lambda step: True))
    return and_(
        not_(stored_sticky),
        or_(by_step, and_(unknown_step, col(ServiceRequest.status) == status.value)),
    )


def normalize_request(request: ServiceRequest) -> bool:
    """Correct a drifted status in memory. Returns True if it changed."""
    expected = canonical_status(request)
    if expected is None or request.status == expected.value:
        return False
    logger.info(
        "Normalizing request %s status %s -> %s (step %s)",
        request.id,
        request.status,
        expected.value,
        request.current_step,
    )
    request.status = expected.value
    request.updated_at = datetime.now(UTC)
    return True


async def normalize_requests(session: AsyncSession, requests: Iterable[ServiceRequest]) -> int:
    """Normalize loaded requests and commit, persisting any corrections.

    The commit also ends the read transaction, releasing the store lock.
    """
    changed = 0
    for request in requests:
        if normalize_request(request):
            changed += 1
    await session.commit()
    return changed
