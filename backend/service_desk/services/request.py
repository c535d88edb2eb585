from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col

from service_desk.db import retry_on_busy
from service_desk.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)
from service_desk.models.booking import CarBooking
from service_desk.models.detail import ITRequestDetail, OnboardingDetail
from service_desk.models.enums import AuditAction, RequestStatus, RequestType, Role
from service_desk.models.request import ServiceRequest
from service_desk.schemas.audit import AuditTrailResponse
from service_desk.schemas.request import (
    CarBookingPayload,
    CreationMetadata,
    ITDetailResponse,
    ITRequestPayload,
    OnboardingDetailResponse,
    OnboardingPayload,
    RequestDetailResponse,
    RequestListResponse,
    RequestResponse,
    TransitionResponse,
)
from service_desk.services import booking as booking_service
from service_desk.services.access import (
    DesiredChange,
    can_create,
    can_manage_fleet,
    can_transition,
    can_view,
    visibility_clause,
)
from service_desk.services.audit import list_entries, record_action
from service_desk.services.status import apply_step, canonical_status_clause, normalize_request, normalize_requests
from service_desk.services.workflow import (
    COMPLETED,
    COORDINATION_STEP,
    WORKFLOWS,
    Step,
    absorbing_step_for,
    find_step,
    initial_step,
    is_absorbing,
    it_assigned_role,
    next_step,
    onboarding_child_role,
    steps_for,
    system_display_name,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from service_desk.schemas.auth import AuthContext
    from service_desk.schemas.request import CreateRequestPayload, TransitionPayload
    from service_desk.schemas.vehicle import OverridePayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(request: ServiceRequest) -> RequestResponse:
    """Map a request model to its response schema."""
    return RequestResponse(
        id=request.id,
        type=RequestType(request.type),
        title=request.title,
        description=request.description,
        requester_name=request.requester_name,
        department=request.department,
        status=RequestStatus(request.status),
        current_step=request.current_step,
        assigned_role=request.assigned_role,
        requester_employee_id=request.requester_employee_id,
        assigned_employee_id=request.assigned_employee_id,
        parent_request_id=request.parent_request_id,
        system_key=request.system_key,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


def _build_it_detail_response(detail: ITRequestDetail) -> ITDetailResponse:
    return ITDetailResponse(
        category=detail.category,
        system_name=detail.system_name,
        impact=detail.impact,
        urgency=detail.urgency,
        asset_tag=detail.asset_tag,
    )


def _build_onboarding_detail_response(detail: OnboardingDetail) -> OnboardingDetailResponse:
    return OnboardingDetailResponse(
        employee_name=detail.employee_name,
        position=detail.position,
        department=detail.department,
        location=detail.location,
        start_date=detail.start_date,
        device_type=detail.device_type,
        vpn_required=detail.vpn_required,
        notes=detail.notes,
        email_needed=detail.email_needed,
        device_needed=detail.device_needed,
        systems_requested=list(detail.systems_requested or []),
    )


async def _get_request_or_404(session: AsyncSession, request_id: int) -> ServiceRequest:
    """Fetch a request by ID, bypassing stale identity-map state. Raises 404 if not found."""
    request = await session.get(ServiceRequest, request_id, populate_existing=True)
    if request is None:
        msg = "Request not found"
        raise NotFoundError(msg)
    return request


async def _load_children(session: AsyncSession, parent_id: int) -> list[ServiceRequest]:
    result = await session.execute(
        select(ServiceRequest)
        .where(col(ServiceRequest.parent_request_id) == parent_id)
        .order_by(col(ServiceRequest.id))
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def _build_detail_response(session: AsyncSession, request: ServiceRequest) -> RequestDetailResponse:
    """Attach the detail record and relatives, normalizing every status read."""
    request_type = RequestType(request.type)
    parent = None
    if request.parent_request_id is not None:
        parent = await session.get(ServiceRequest, request.parent_request_id, populate_existing=True)
    children = await _load_children(session, request.id) if request_type == RequestType.ONBOARDING else []

    it_detail = None
    onboarding_detail = None
    booking = None
    if request_type == RequestType.IT:
        detail = await session.get(ITRequestDetail, request.id)
        it_detail = _build_it_detail_response(detail) if detail is not None else None
    elif request_type == RequestType.ONBOARDING:
        detail = await session.get(OnboardingDetail, request.id)
        onboarding_detail = _build_onboarding_detail_response(detail) if detail is not None else None
    elif request_type == RequestType.CAR_BOOKING:
        booking = await booking_service.load_booking_detail(session, request.id)

    related = [request, *children] if parent is None else [request, parent, *children]
    await normalize_requests(session, related)

    return RequestDetailResponse(
        **_build_request_response(request).model_dump(),
        it_detail=it_detail,
        onboarding_detail=onboarding_detail,
        booking=booking,
        parent=_build_request_response(parent) if parent is not None else None,
        children=[_build_request_response(child) for child in children],
    )


def _new_request(
    auth: AuthContext,
    request_type: RequestType,
    *,
    title: str,
    requester_name: str,
    description: str = "",
    department: str = "",
    assigned_role: Role | None = None,
    system_key: str | None = None,
    parent_request_id: int | None = None,
) -> ServiceRequest:
    """Build an unsaved request positioned at its workflow's initial step."""
    step = initial_step(request_type)
    request = ServiceRequest(
        type=request_type.value,
        title=title,
        description=description,
        requester_name=requester_name,
        department=department,
        current_step=step.id,
        assigned_role=(assigned_role or WORKFLOWS[request_type].assigned_role).value,
        requester_employee_id=auth.employee_id,
        parent_request_id=parent_request_id,
        system_key=system_key,
    )
    apply_step(request, step.id)
    return request


def _reachable_steps(request: ServiceRequest) -> list[Step]:
    """Steps an ordinary transition may land on: the current one and the next."""
    current = find_step(request.type, request.current_step)
    following = next_step(request.type, request.current_step)
    return [step for step in (current, following) if step is not None]


def _resolve_target(
    request: ServiceRequest,
    status: RequestStatus | None,
    step_id: str | None,
    *,
    allow_skip: bool = False,
) -> Step:
    """Pick the step a transition lands on.

    An explicit status wins over the step: REJECTED and CANCELLED map to
    their absorbing steps, any other status to the reachable step carrying
    it. Without a status the named step is used. Unless ``allow_skip`` is
    set, only the current step, the next step or an absorbing step qualify.
    """
    if status is not None:
        absorbing = absorbing_step_for(status)
        if absorbing is not None:
            return absorbing
        candidates = list(steps_for(request.type)) if allow_skip else _reachable_steps(request)
        for step in candidates:
            if step.status == status:
                return step
        msg = f"Status {status.value} is not reachable from step {request.current_step}"
        raise ValidationError(msg)

    step = find_step(request.type, step_id)
    if step is None:
        msg = f"Unknown step '{step_id}' for {request.type} requests"
        raise ValidationError(msg)
    if allow_skip or is_absorbing(step.id) or step in _reachable_steps(request):
        return step
    msg = f"Cannot move from {request.current_step} to {step.id}; steps cannot be skipped"
    raise ValidationError(msg)


@dataclass(frozen=True)
class _ChildPlan:
    """One child request an onboarding submission asks for."""

    label: str
    type: RequestType
    title: str
    system_key: str | None = None


def _plan_children(payload: OnboardingPayload) -> list[_ChildPlan]:
    name = payload.employee_name
    plans: list[_ChildPlan] = []
    if payload.email_needed:
        plans.append(_ChildPlan("email", RequestType.ONBOARDING_EMAIL, f"Email Setup: {name}"))
    if payload.wants_device:
        device = payload.device_type or "Device"
        plans.append(_ChildPlan("device", RequestType.ONBOARDING_DEVICE, f"Device Setup: {device} for {name}"))
    for key in payload.systems_requested:
        plans.append(
            _ChildPlan(
                f"system:{key}",
                RequestType.ONBOARDING_SYSTEM,
                f"System Access: {system_display_name(key)} for {name}",
                system_key=key,
            )
        )
    return plans


async def _add_child(
    session: AsyncSession,
    auth: AuthContext,
    parent: ServiceRequest,
    plan: _ChildPlan,
) -> ServiceRequest:
    child = _new_request(
        auth,
        plan.type,
        title=plan.title,
        requester_name=parent.requester_name,
        department=parent.department,
        assigned_role=onboarding_child_role(plan.type, plan.system_key),
        system_key=plan.system_key,
        parent_request_id=parent.id,
    )
    session.add(child)
    await session.flush()
    return child


def _creation_message(created: int, requested: int) -> str:
    if created == requested:
        return f"Onboarding created with {created} child request(s)"
    return f"Onboarding created with {created}/{requested} child request(s)"


# ---------------------------------------------------------------------------
# Store units
#
# Each unit is one transaction, retried as a whole on lock contention.
# Audit writes and the parent cascade happen after these commit.
# ---------------------------------------------------------------------------


@retry_on_busy
async def _insert_it_request(session: AsyncSession, auth: AuthContext, payload: ITRequestPayload) -> ServiceRequest:
    request = _new_request(
        auth,
        RequestType.IT,
        title=payload.title,
        description=payload.description,
        requester_name=payload.requester_name,
        department=payload.department,
        assigned_role=it_assigned_role(payload.category, payload.system_key),
        system_key=payload.system_key,
    )
    session.add(request)
    await session.flush()

    system_name = payload.system_name
    if not system_name and payload.system_key:
        system_name = system_display_name(payload.system_key)
    session.add(
        ITRequestDetail(
            request_id=request.id,
            category=payload.category.value,
            system_name=system_name,
            impact=payload.impact,
            urgency=payload.urgency,
            asset_tag=payload.asset_tag,
        )
    )
    await session.commit()
    logger.info("Created IT request %s routed to %s", request.id, request.assigned_role)
    return request


@retry_on_busy
async def _insert_car_booking(session: AsyncSession, auth: AuthContext, payload: CarBookingPayload) -> ServiceRequest:
    vehicle = await booking_service.reserve_vehicle(session, payload.start_at, payload.end_at, payload.vehicle_id)

    request = _new_request(
        auth,
        RequestType.CAR_BOOKING,
        title=payload.title or f"Car Booking: {payload.destination}",
        description=payload.reason,
        requester_name=payload.requester_name,
        department=payload.department,
    )
    session.add(request)
    await session.flush()

    session.add(
        CarBooking(
            request_id=request.id,
            vehicle_id=vehicle.id,
            start_at=payload.start_at,
            end_at=payload.end_at,
            pickup_location=payload.pickup_location,
            destination=payload.destination,
            reason=payload.reason,
            passengers=payload.passengers,
        )
    )
    await session.commit()
    logger.info(
        "Booked vehicle %s for request %s (%s - %s)", vehicle.id, request.id, payload.start_at, payload.end_at
    )
    return request


@retry_on_busy
async def _insert_onboarding_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: OnboardingPayload,
) -> tuple[ServiceRequest, list[ServiceRequest], CreationMetadata]:
    """Create the parent, its detail and one child per requested item.

    Each child gets its own savepoint: a failed child is logged and reported
    in the metadata while the parent and its siblings are kept.
    """
    parent = _new_request(
        auth,
        RequestType.ONBOARDING,
        title=f"Onboarding: {payload.employee_name}",
        description=payload.notes,
        requester_name=payload.requester_name,
        department=payload.department,
        assigned_role=Role.IT_ADMIN,
    )
    session.add(parent)
    await session.flush()

    session.add(
        OnboardingDetail(
            request_id=parent.id,
            employee_name=payload.employee_name,
            position=payload.position,
            department=payload.department,
            location=payload.location,
            start_date=payload.start_date,
            device_type=payload.device_type,
            vpn_required=payload.vpn_required,
            notes=payload.notes,
            email_needed=payload.email_needed,
            device_needed=payload.wants_device,
            systems_requested=payload.systems_requested,
        )
    )
    await session.flush()

    plans = _plan_children(payload)
    children: list[ServiceRequest] = []
    failed: list[str] = []
    for plan in plans:
        try:
            async with session.begin_nested():
                child = await _add_child(session, auth, parent, plan)
        except SQLAlchemyError:
            logger.warning(
                "Failed to create %s child for onboarding request %s", plan.label, parent.id, exc_info=True
            )
            failed.append(plan.label)
            continue
        children.append(child)

    if children:
        apply_step(parent, COORDINATION_STEP)
    await session.commit()

    metadata = CreationMetadata(
        children_requested=len(plans),
        children_created=len(children),
        failed_children=failed,
        message=_creation_message(len(children), len(plans)),
    )
    logger.info("Onboarding request %s: %s", parent.id, metadata.message)
    return parent, children, metadata


@retry_on_busy
async def _apply_transition(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: TransitionPayload,
) -> tuple[ServiceRequest, str]:
    request = await _get_request_or_404(session, request_id)
    normalize_request(request)
    change = DesiredChange(step=payload.step, status=payload.status, note=payload.note)
    current = RequestStatus(request.status)

    if request.type == RequestType.CAR_BOOKING and change.is_cancellation:
        if current in (RequestStatus.COMPLETED, RequestStatus.CANCELLED):
            msg = "Cannot cancel a booking that is already cancelled or completed"
            raise ConflictError(msg)
        if not change.has_note:
            msg = "A cancellation reason is required"
            raise ValidationError(msg)

    decision = can_transition(auth, request, change)
    if not decision:
        raise AuthorizationError(decision.reason or "Access denied")

    if current.is_final:
        msg = f"Request is already {current.value} and cannot be updated"
        raise ConflictError(msg)

    target = _resolve_target(request, payload.status, payload.step)
    from_status = request.status
    apply_step(request, target.id)
    await session.commit()
    logger.info(
        "Request %s moved %s -> %s (step %s) by employee %s",
        request.id,
        from_status,
        request.status,
        request.current_step,
        auth.employee_id,
    )
    return request, from_status


@retry_on_busy
async def _settle_parent(
    session: AsyncSession,
    child_id: int,
    actor_employee_id: int | None,
) -> tuple[bool, RequestStatus | None]:
    """Complete the parent if every child is COMPLETED; return its status either way.

    Recomputed from the children on every call, so racing completions of
    the last children complete the parent exactly once.
    """
    child = await session.get(ServiceRequest, child_id, populate_existing=True)
    if child is None or child.parent_request_id is None:
        await session.commit()
        return False, None
    parent = await session.get(ServiceRequest, child.parent_request_id, populate_existing=True)
    if parent is None:
        await session.commit()
        return False, None

    result = await session.execute(
        select(ServiceRequest.status).where(col(ServiceRequest.parent_request_id) == parent.id)
    )
    statuses = list(result.scalars().all())
    should_complete = (
        bool(statuses)
        and all(status == RequestStatus.COMPLETED.value for status in statuses)
        and not RequestStatus(parent.status).is_final
    )
    parent_id = parent.id
    from_status = parent.status
    if should_complete:
        apply_step(parent, COMPLETED)
    parent_status = RequestStatus(parent.status)
    await session.commit()

    if should_complete:
        logger.info("Auto-completed onboarding request %s: all %d children completed", parent_id, len(statuses))
        await record_action(
            session,
            request_id=parent_id,
            action_type=AuditAction.AUTO_COMPLETE,
            from_status=from_status,
            to_status=parent_status.value,
            actor_employee_id=actor_employee_id,
            note="All child requests completed",
        )
    return should_complete, parent_status


@retry_on_busy
async def _read_parent_status(session: AsyncSession, parent_id: int) -> RequestStatus | None:
    parent = await session.get(ServiceRequest, parent_id, populate_existing=True)
    if parent is not None:
        normalize_request(parent)
    parent_status = RequestStatus(parent.status) if parent is not None else None
    await session.commit()
    return parent_status


@retry_on_busy
async def _apply_override(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: OverridePayload,
) -> tuple[ServiceRequest, str]:
    decision = can_manage_fleet(auth)
    if not decision:
        raise AuthorizationError(decision.reason or "Access denied")

    request = await _get_request_or_404(session, request_id)
    if request.type != RequestType.CAR_BOOKING:
        msg = "Only car booking requests can be overridden"
        raise ValidationError(msg)
    normalize_request(request)
    if RequestStatus(request.status).is_sticky:
        msg = f"Cannot override a {request.status.lower()} booking"
        raise ConflictError(msg)

    from_status = request.status
    changed = await booking_service.reschedule(
        session,
        request.id,
        vehicle_id=payload.vehicle_id,
        start_at=payload.start_at,
        end_at=payload.end_at,
    )
    if payload.status is not None or payload.step:
        target = _resolve_target(request, payload.status, payload.step, allow_skip=True)
        apply_step(request, target.id)
        changed = True
    if not changed:
        msg = "Override must change the vehicle, the time range or the status"
        raise ValidationError(msg)

    request.updated_at = datetime.now(UTC)
    await session.commit()
    logger.info("Fleet override of booking %s by employee %s", request.id, auth.employee_id)
    return request, from_status


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _require_create(auth: AuthContext, request_type: RequestType) -> None:
    decision = can_create(auth, request_type)
    if not decision:
        raise AuthorizationError(decision.reason or "Access denied")


async def _audit_created(session: AsyncSession, auth: AuthContext, created: list[ServiceRequest]) -> None:
    # Snapshot first: a failed audit write rolls back and expires loaded rows.
    entries = [(request.id, request.type, request.status) for request in created]
    for request_id, request_type, status in entries:
        await record_action(
            session,
            request_id=request_id,
            action_type=AuditAction.CREATE,
            from_status=None,
            to_status=status,
            actor_employee_id=auth.employee_id,
            note=f"{request_type} request created",
        )


async def create_it_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: ITRequestPayload,
) -> RequestDetailResponse:
    """Open an IT ticket routed to the admin role owning its category/system."""
    _require_create(auth, RequestType.IT)
    request = await _insert_it_request(session, auth, payload)
    request_id = request.id
    await _audit_created(session, auth, [request])
    return await get_request(session, auth, request_id)


async def create_car_booking(
    session: AsyncSession,
    auth: AuthContext,
    payload: CarBookingPayload,
) -> RequestDetailResponse:
    """Reserve a vehicle and open the booking in one transaction.

    Raises ConflictError when no (or not the selected) vehicle is free.
    """
    _require_create(auth, RequestType.CAR_BOOKING)
    request = await _insert_car_booking(session, auth, payload)
    request_id = request.id
    await _audit_created(session, auth, [request])
    return await get_request(session, auth, request_id)


async def create_onboarding_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: OnboardingPayload,
) -> RequestDetailResponse:
    """Create an onboarding parent and fan it out into child requests."""
    _require_create(auth, RequestType.ONBOARDING)
    parent, children, metadata = await _insert_onboarding_request(session, auth, payload)
    parent_id = parent.id
    await _audit_created(session, auth, [parent, *children])
    response = await get_request(session, auth, parent_id)
    response.metadata = metadata
    return response


async def create_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateRequestPayload,
) -> RequestDetailResponse:
    """Create a request of the payload's type."""
    if isinstance(payload, ITRequestPayload):
        return await create_it_request(session, auth, payload)
    if isinstance(payload, CarBookingPayload):
        return await create_car_booking(session, auth, payload)
    return await create_onboarding_request(session, auth, payload)


async def transition_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: TransitionPayload,
) -> TransitionResponse:
    """Move a request along its workflow.

    Flow:
    1. Load the request (404 if unknown).
    2. Booking cancellation pre-checks (already final, missing reason).
    3. Access policy.
    4. Reject requests already COMPLETED/REJECTED/CANCELLED.
    5. Resolve the target step and write it through the status normalizer.
    6. Commit, then audit.
    7. When an onboarding child reaches COMPLETED, re-evaluate the parent.
    """
    request, from_status = await _apply_transition(session, auth, request_id, payload)
    response = TransitionResponse(
        request=_build_request_response(request),
        parent_request_id=request.parent_request_id,
        message="Status updated successfully",
    )
    await record_action(
        session,
        request_id=response.request.id,
        action_type=AuditAction.STATUS_UPDATE,
        from_status=from_status,
        to_status=response.request.status.value,
        actor_employee_id=auth.employee_id,
        note=payload.note or f"Status updated to {response.request.status.value}",
    )
    if response.parent_request_id is None:
        return response

    if response.request.status != RequestStatus.COMPLETED:
        response.parent_status = await _read_parent_status(session, response.parent_request_id)
        return response

    try:
        completed, parent_status = await _settle_parent(session, response.request.id, auth.employee_id)
    except TransientStoreError:
        logger.warning("Parent check for request %s deferred: store busy", response.request.id, exc_info=True)
        return response
    response.parent_status = parent_status
    if completed:
        response.parent_auto_completed = True
        response.message = "Status updated successfully. Parent onboarding request has been auto-completed."
    return response


async def cascade_parent_completion(
    session: AsyncSession,
    child_id: int,
    actor_employee_id: int | None = None,
) -> bool:
    """Complete the child's parent if all its siblings are COMPLETED.

    Idempotent: returns True only for the call that completed the parent.
    """
    completed, _ = await _settle_parent(session, child_id, actor_employee_id)
    return completed


async def override_booking(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: OverridePayload,
) -> RequestDetailResponse:
    """Fleet override: move a booking and/or set its step without the no-skip rule."""
    request, from_status = await _apply_override(session, auth, request_id, payload)
    to_status = request.status
    await record_action(
        session,
        request_id=request_id,
        action_type=AuditAction.FLEET_OVERRIDE,
        from_status=from_status,
        to_status=to_status,
        actor_employee_id=auth.employee_id,
        note=payload.note or "Booking overridden by fleet",
    )
    return await get_request(session, auth, request_id)


@retry_on_busy
async def get_request(session: AsyncSession, auth: AuthContext, request_id: int) -> RequestDetailResponse:
    """Get a single request with detail, parent and children."""
    request = await _get_request_or_404(session, request_id)
    if not can_view(auth, request):
        msg = "You do not have access to this request"
        raise AuthorizationError(msg)
    return await _build_detail_response(session, request)


@retry_on_busy
async def list_requests(
    session: AsyncSession,
    auth: AuthContext,
    request_type: RequestType | None = None,
    status_filter: RequestStatus | None = None,
    parent_request_id: int | None = None,
    mine: bool = False,
    offset: int = 0,
    limit: int = 50,
) -> RequestListResponse:
    """List the requests visible to the caller, newest first."""
    query = select(ServiceRequest)
    clause = visibility_clause(auth)
    if clause is not None:
        query = query.where(clause)
    if mine:
        query = query.where(col(ServiceRequest.requester_employee_id) == auth.employee_id)
    if request_type is not None:
        query = query.where(col(ServiceRequest.type) == request_type.value)
    if status_filter is not None:
        query = query.where(canonical_status_clause(status_filter))
    if parent_request_id is not None:
        query = query.where(col(ServiceRequest.parent_request_id) == parent_request_id)

    count_result = await session.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar_one()

    result = await session.execute(
        query.order_by(col(ServiceRequest.id).desc())
        .offset(offset)
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    requests = list(result.scalars().all())
    await normalize_requests(session, requests)
    return RequestListResponse(items=[_build_request_response(r) for r in requests], total=total)


@retry_on_busy
async def list_audit_entries(session: AsyncSession, auth: AuthContext, request_id: int) -> AuditTrailResponse:
    """Audit trail of a request the caller can see."""
    request = await _get_request_or_404(session, request_id)
    if not can_view(auth, request):
        msg = "You do not have access to this request"
        raise AuthorizationError(msg)
    items = await list_entries(session, request_id)
    await session.commit()
    return AuditTrailResponse(items=items, total=len(items))
