"""Static workflow catalog: request type -> ordered steps -> canonical status.

Every workflow follows the same shape, SUBMITTED -> type-specific steps ->
COMPLETED, and accepts the absorbing REJECTED and CANCELLED steps from any
non-final step. The table is fixed at import time.
"""

from __future__ import annotations

from dataclasses import dataclass

from service_desk.exceptions import IntegrityError
from service_desk.models.enums import DownstreamSystem, ITCategory, RequestStatus, RequestType, Role


@dataclass(frozen=True)
class Step:
    """One step of a workflow and the status it projects to."""

    id: str
    name: str
    description: str
    status: RequestStatus


@dataclass(frozen=True)
class Workflow:
    """Ordered steps for one request type."""

    type: RequestType
    steps: tuple[Step, ...]
    initial_step: str
    assigned_role: Role

    def index_of(self, step_id: str) -> int | None:
        for index, step in enumerate(self.steps):
            if step.id == step_id:
                return index
        return None


SUBMITTED = "SUBMITTED"
COMPLETED = "COMPLETED"
REJECTED = "REJECTED"
CANCELLED = "CANCELLED"
AUTO_BOOKED = "AUTO_BOOKED"
COORDINATION_STEP = "IT_COORDINATION"

_SUBMITTED = Step(SUBMITTED, "Submitted", "Request submitted by user", RequestStatus.PENDING)

ABSORBING_STEPS: tuple[Step, ...] = (
    Step(REJECTED, "Rejected", "Request rejected", RequestStatus.REJECTED),
    Step(CANCELLED, "Cancelled", "Request cancelled", RequestStatus.CANCELLED),
)


def _child_workflow(request_type: RequestType) -> Workflow:
    return Workflow(
        type=request_type,
        steps=(
            _SUBMITTED,
            Step("IN_PROGRESS", "In Progress", "Assigned admin working on setup", RequestStatus.IN_PROGRESS),
            Step(COMPLETED, "Completed", "Setup completed", RequestStatus.COMPLETED),
        ),
        initial_step=SUBMITTED,
        assigned_role=Role.IT_ADMIN,
    )


WORKFLOWS: dict[RequestType, Workflow] = {
    RequestType.CAR_BOOKING: Workflow(
        type=RequestType.CAR_BOOKING,
        steps=(
            _SUBMITTED,
            Step(AUTO_BOOKED, "Auto-Booked", "System automatically assigned vehicle", RequestStatus.BOOKED),
            Step("FLEET_REVIEW", "Fleet Review", "Fleet team reviewing booking", RequestStatus.APPROVED),
            Step(COMPLETED, "Completed", "Trip completed", RequestStatus.COMPLETED),
        ),
        # The vehicle is reserved at creation, so bookings enter already booked.
        initial_step=AUTO_BOOKED,
        assigned_role=Role.FLEET_ADMIN,
    ),
    RequestType.IT: Workflow(
        type=RequestType.IT,
        steps=(
            _SUBMITTED,
            Step("TRIAGE", "Triage", "IT admin reviewing and prioritizing", RequestStatus.APPROVED),
            Step("IN_PROGRESS", "In Progress", "IT team working on request", RequestStatus.IN_PROGRESS),
            Step(COMPLETED, "Completed", "Request resolved", RequestStatus.COMPLETED),
        ),
        initial_step=SUBMITTED,
        assigned_role=Role.IT_ADMIN,
    ),
    RequestType.ONBOARDING: Workflow(
        type=RequestType.ONBOARDING,
        steps=(
            _SUBMITTED,
            Step("HR_REVIEW", "HR Review", "HR team reviewing request", RequestStatus.APPROVED),
            Step(COORDINATION_STEP, "IT Coordination", "IT coordinating child requests", RequestStatus.IN_PROGRESS),
            Step(COMPLETED, "Completed", "Onboarding completed", RequestStatus.COMPLETED),
        ),
        initial_step=SUBMITTED,
        assigned_role=Role.IT_ADMIN,
    ),
    RequestType.ONBOARDING_EMAIL: _child_workflow(RequestType.ONBOARDING_EMAIL),
    RequestType.ONBOARDING_DEVICE: _child_workflow(RequestType.ONBOARDING_DEVICE),
    RequestType.ONBOARDING_SYSTEM: _child_workflow(RequestType.ONBOARDING_SYSTEM),
}


SYSTEM_ROLES: dict[DownstreamSystem, Role] = {
    DownstreamSystem.M365: Role.IT_M365_ADMIN,
    DownstreamSystem.POWER_BI: Role.IT_BI_ADMIN,
    DownstreamSystem.ACONEX: Role.IT_ACONEX_ADMIN,
    DownstreamSystem.AUTODESK: Role.IT_AUTODESK_ADMIN,
    DownstreamSystem.P6: Role.IT_P6_ADMIN,
    DownstreamSystem.RISK: Role.IT_RISK_ADMIN,
}

SYSTEM_NAMES: dict[DownstreamSystem, str] = {
    DownstreamSystem.M365: "Microsoft 365",
    DownstreamSystem.POWER_BI: "Power BI Pro",
    DownstreamSystem.ACONEX: "Aconex",
    DownstreamSystem.AUTODESK: "Autodesk",
    DownstreamSystem.P6: "Primavera P6",
    DownstreamSystem.RISK: "RiskHive",
}


def _as_request_type(request_type: RequestType | str) -> RequestType | None:
    try:
        return RequestType(request_type)
    except ValueError:
        return None


def get_workflow(request_type: RequestType | str) -> Workflow | None:
    """Return the workflow for a type, or None when the type has none."""
    resolved = _as_request_type(request_type)
    if resolved is None:
        return None
    return WORKFLOWS.get(resolved)


def steps_for(request_type: RequestType | str) -> tuple[Step, ...]:
    """Ordered steps of a type's workflow; empty for an unknown type."""
    workflow = get_workflow(request_type)
    return workflow.steps if workflow is not None else ()


def find_step(request_type: RequestType | str, step_id: str | None) -> Step | None:
    """Look up a step, including the absorbing REJECTED/CANCELLED steps."""
    workflow = get_workflow(request_type)
    if workflow is None or not step_id:
        return None
    for step in (*workflow.steps, *ABSORBING_STEPS):
        if step.id == step_id:
            return step
    return None


def next_step(request_type: RequestType | str, current_step_id: str) -> Step | None:
    """Step that follows ``current_step_id``, or None at the end or off-workflow."""
    workflow = get_workflow(request_type)
    if workflow is None:
        return None
    index = workflow.index_of(current_step_id)
    if index is None or index == len(workflow.steps) - 1:
        return None
    return workflow.steps[index + 1]


def status_for(request_type: RequestType | str, step_id: str | None) -> RequestStatus:
    """Canonical status of a step; PENDING when the step is unknown."""
    step = find_step(request_type, step_id)
    if step is None:
        return RequestStatus.PENDING
    return step.status


def initial_step(request_type: RequestType) -> Step:
    workflow = WORKFLOWS[request_type]
    step = find_step(request_type, workflow.initial_step)
    if step is None:
        msg = f"Workflow {request_type.value} starts at unknown step {workflow.initial_step}"
        raise IntegrityError(msg)
    return step


def is_absorbing(step_id: str) -> bool:
    return any(step.id == step_id for step in ABSORBING_STEPS)


def absorbing_step_for(status: RequestStatus) -> Step | None:
    for step in ABSORBING_STEPS:
        if step.status == status:
            return step
    return None


def it_assigned_role(category: ITCategory | str, system_key: str | None) -> Role:
    """Route an IT request to the admin role that owns it."""
    if category == ITCategory.DEVICES:
        return Role.IT_DEVICES_EMAIL_ADMIN
    if category in (ITCategory.ACCESS, ITCategory.SOFTWARE) and system_key:
        return system_role(system_key)
    return Role.IT_ADMIN


def system_role(system_key: str) -> Role:
    """Admin role for a downstream system; unmapped systems go to IT_ADMIN."""
    try:
        return SYSTEM_ROLES[DownstreamSystem(system_key)]
    except ValueError:
        return Role.IT_ADMIN


def system_display_name(system_key: str) -> str:
    try:
        return SYSTEM_NAMES[DownstreamSystem(system_key)]
    except ValueError:
        return system_key


def onboarding_child_role(child_type: RequestType, system_key: str | None = None) -> Role:
    """Role that works an onboarding child request of the given kind."""
    if child_type in (RequestType.ONBOARDING_EMAIL, RequestType.ONBOARDING_DEVICE):
        return Role.IT_DEVICES_EMAIL_ADMIN
    if child_type == RequestType.ONBOARDING_SYSTEM and system_key:
        return system_role(system_key)
    return Role.IT_ADMIN
