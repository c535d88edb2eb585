"""Pure access decisions: who may create, view, transition and override requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import and_, or_
from sqlmodel import col

from service_desk.models.enums import RequestStatus, RequestType, Role
from service_desk.models.request import ServiceRequest
from service_desk.services.workflow import CANCELLED

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement

    from service_desk.schemas.auth import AuthContext

_FLEET_ROLES = frozenset({Role.FLEET_ADMIN, Role.SUPER_ADMIN})
_ONBOARDING_CREATORS = frozenset({Role.HR_ADMIN, Role.SUPER_ADMIN})
_IT_ADMIN_VISIBLE_TYPES = (
    RequestType.IT,
    RequestType.ONBOARDING,
    RequestType.ONBOARDING_EMAIL,
    RequestType.ONBOARDING_DEVICE,
    RequestType.ONBOARDING_SYSTEM,
)


@dataclass(frozen=True)
class DesiredChange:
    """What a caller asks a transition to do."""

    step: str | None = None
    status: RequestStatus | None = None
    note: str | None = None

    @property
    def is_cancellation(self) -> bool:
        return self.status == RequestStatus.CANCELLED or (self.status is None and self.step == CANCELLED)

    @property
    def has_note(self) -> bool:
        return bool(self.note and self.note.strip())


@dataclass(frozen=True)
class PolicyDecision:
    """Outcome of a policy check; falsy when denied."""

    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = PolicyDecision(allowed=True)


def deny(reason: str) -> PolicyDecision:
    return PolicyDecision(allowed=False, reason=reason)


def _is_system_admin(role: Role) -> bool:
    """Per-system and devices/email admins, i.e. every IT_* role except IT_ADMIN."""
    return role != Role.IT_ADMIN and role.value.startswith("IT_")


def can_transition(actor: AuthContext, request: ServiceRequest, change: DesiredChange) -> PolicyDecision:
    """Decide whether ``actor`` may apply ``change`` to ``request``.

    Rules are evaluated in order; the first that matches decides:

    1. SUPER_ADMIN may perform any transition.
    2. A requester may cancel their own car booking while it is neither
       COMPLETED nor CANCELLED, given a non-empty note.
    3. Onboarding parents are transitioned by IT_ADMIN only; HR_ADMIN views.
    4. Onboarding children are transitioned only by their assigned role.
    5. IT requests: IT_ADMIN or the assigned role.
    6. Car bookings: FLEET_ADMIN.
    7. Everything else is denied.
    """
    role = actor.role
    request_type = RequestType(request.type)

    if role == Role.SUPER_ADMIN:
        return ALLOW

    if (
        request_type == RequestType.CAR_BOOKING
        and change.is_cancellation
        and request.requester_employee_id == actor.employee_id
    ):
        if RequestStatus(request.status) in (RequestStatus.COMPLETED, RequestStatus.CANCELLED):
            return deny("Cannot cancel a booking that is already cancelled or completed")
        if not change.has_note:
            return deny("A cancellation reason is required")
        return ALLOW

    if request_type == RequestType.ONBOARDING:
        if role == Role.IT_ADMIN:
            return ALLOW
        if role == Role.HR_ADMIN:
            return deny("HR Admin can view but not edit onboarding requests. Only IT Admin can update.")
        return deny("You do not have permission to update this onboarding request")

    if request_type.is_onboarding_child:
        if role == request.assigned_role:
            return ALLOW
        return deny("You can only update requests assigned to your role")

    if request_type == RequestType.IT:
        if role in (Role.IT_ADMIN, request.assigned_role):
            return ALLOW
        return deny("Only IT Admin or assigned admin can update this IT request")

    if request_type == RequestType.CAR_BOOKING:
        if role == Role.FLEET_ADMIN:
            return ALLOW
        if change.is_cancellation:
            return deny("You can only cancel your own bookings")
        return deny("Only Fleet Admin can update car booking requests")

    return deny("No rule permits this transition")


def can_create(actor: AuthContext, request_type: RequestType) -> PolicyDecision:
    """Decide whether ``actor`` may open a new request of ``request_type``."""
    if request_type.is_onboarding_child:
        return deny("Onboarding child requests are created together with their parent")
    if request_type == RequestType.ONBOARDING and actor.role not in _ONBOARDING_CREATORS:
        return deny("Only HR Admin can submit onboarding requests")
    return ALLOW


def can_manage_fleet(actor: AuthContext) -> PolicyDecision:
    """Fleet overrides, schedule and vehicle registry."""
    if actor.role in _FLEET_ROLES:
        return ALLOW
    return deny("Access denied. Insufficient permissions.")


def can_view(actor: AuthContext, request: ServiceRequest) -> bool:
    """Whether a request is visible to ``actor``. Requesters always see their own."""
    role = actor.role
    if role == Role.SUPER_ADMIN or request.requester_employee_id == actor.employee_id:
        return True
    if role == Role.IT_ADMIN:
        return request.type in _IT_ADMIN_VISIBLE_TYPES
    if _is_system_admin(role):
        return request.assigned_role == role
    if role == Role.HR_ADMIN:
        return request.type == RequestType.ONBOARDING and request.parent_request_id is None
    if role == Role.FLEET_ADMIN:
        return request.type == RequestType.CAR_BOOKING
    return False


def visibility_clause(actor: AuthContext) -> ColumnElement[bool] | None:
    """SQL filter equivalent to :func:`can_view`; None means unrestricted."""
    role = actor.role
    own = col(ServiceRequest.requester_employee_id) == actor.employee_id
    if role == Role.SUPER_ADMIN:
        return None
    if role == Role.IT_ADMIN:
        scope = col(ServiceRequest.type).in_([t.value for t in _IT_ADMIN_VISIBLE_TYPES])
    elif _is_system_admin(role):
        scope = col(ServiceRequest.assigned_role) == role.value
    elif role == Role.HR_ADMIN:
        scope = and_(
            col(ServiceRequest.type) == RequestType.ONBOARDING.value,
            col(ServiceRequest.parent_request_id).is_(None),
        )
    elif role == Role.FLEET_ADMIN:
        scope = col(ServiceRequest.type) == RequestType.CAR_BOOKING.value
    else:
        return own
    return or_(own, scope)
