from __future__ import annotations

import pytest

from service_desk.exceptions import IntegrityError
from service_desk.models.enums import DownstreamSystem, ITCategory, RequestStatus, RequestType, Role
from service_desk.services.workflow import (
    ABSORBING_STEPS,
    WORKFLOWS,
    Workflow,
    absorbing_step_for,
    find_step,
    get_workflow,
    initial_step,
    it_assigned_role,
    next_step,
    onboarding_child_role,
    status_for,
    steps_for,
    system_display_name,
)

# ---------------------------------------------------------------------------
# Catalog shape
# ---------------------------------------------------------------------------


def test_every_request_type_has_a_workflow() -> None:
    assert set(WORKFLOWS) == set(RequestType)


@pytest.mark.parametrize("request_type", list(RequestType))
def test_workflows_start_submitted_and_end_completed(request_type: RequestType) -> None:
    steps = steps_for(request_type)
    assert steps[0].id == "SUBMITTED"
    assert steps[0].status == RequestStatus.PENDING
    assert steps[-1].id == "COMPLETED"
    assert steps[-1].status == RequestStatus.COMPLETED


def test_car_booking_steps() -> None:
    assert [(s.id, s.status) for s in steps_for(RequestType.CAR_BOOKING)] == [
        ("SUBMITTED", RequestStatus.PENDING),
        ("AUTO_BOOKED", RequestStatus.BOOKED),
        ("FLEET_REVIEW", RequestStatus.APPROVED),
        ("COMPLETED", RequestStatus.COMPLETED),
    ]


def test_it_steps() -> None:
    assert [s.id for s in steps_for(RequestType.IT)] == ["SUBMITTED", "TRIAGE", "IN_PROGRESS", "COMPLETED"]


def test_onboarding_has_coordination_step() -> None:
    step = find_step(RequestType.ONBOARDING, "IT_COORDINATION")
    assert step is not None
    assert step.status == RequestStatus.IN_PROGRESS


def test_initial_steps() -> None:
    assert initial_step(RequestType.CAR_BOOKING).id == "AUTO_BOOKED"
    assert initial_step(RequestType.IT).id == "SUBMITTED"
    assert initial_step(RequestType.ONBOARDING_SYSTEM).id == "SUBMITTED"


def test_initial_step_outside_workflow_is_an_integrity_error(monkeypatch: pytest.MonkeyPatch) -> None:
    broken = Workflow(type=RequestType.IT, steps=(), initial_step="TRIAGE", assigned_role=Role.IT_ADMIN)
    monkeypatch.setitem(WORKFLOWS, RequestType.IT, broken)
    with pytest.raises(IntegrityError, match="unknown step TRIAGE"):
        initial_step(RequestType.IT)


def test_unknown_type_has_no_workflow() -> None:
    assert get_workflow("PAYROLL") is None
    assert steps_for("PAYROLL") == ()


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def test_status_for_known_step() -> None:
    assert status_for(RequestType.IT, "TRIAGE") == RequestStatus.APPROVED


def test_status_for_unknown_step_is_pending() -> None:
    assert status_for(RequestType.IT, "NOWHERE") == RequestStatus.PENDING
    assert status_for(RequestType.IT, None) == RequestStatus.PENDING


def test_find_step_includes_absorbing_steps() -> None:
    for step in ABSORBING_STEPS:
        assert find_step(RequestType.IT, step.id) == step


def test_next_step() -> None:
    following = next_step(RequestType.IT, "TRIAGE")
    assert following is not None
    assert following.id == "IN_PROGRESS"


def test_next_step_at_end_or_off_workflow() -> None:
    assert next_step(RequestType.IT, "COMPLETED") is None
    assert next_step(RequestType.IT, "REJECTED") is None
    assert next_step(RequestType.IT, "NOWHERE") is None


def test_absorbing_step_for() -> None:
    rejected = absorbing_step_for(RequestStatus.REJECTED)
    assert rejected is not None
    assert rejected.id == "REJECTED"
    assert absorbing_step_for(RequestStatus.APPROVED) is None


# ---------------------------------------------------------------------------
# Role routing
# ---------------------------------------------------------------------------


def test_devices_category_routes_to_devices_admin() -> None:
    assert it_assigned_role(ITCategory.DEVICES, None) == Role.IT_DEVICES_EMAIL_ADMIN


@pytest.mark.parametrize(
    ("system", "role"),
    [
        (DownstreamSystem.M365, Role.IT_M365_ADMIN),
        (DownstreamSystem.POWER_BI, Role.IT_BI_ADMIN),
        (DownstreamSystem.ACONEX, Role.IT_ACONEX_ADMIN),
        (DownstreamSystem.AUTODESK, Role.IT_AUTODESK_ADMIN),
        (DownstreamSystem.P6, Role.IT_P6_ADMIN),
        (DownstreamSystem.RISK, Role.IT_RISK_ADMIN),
    ],
)
def test_access_requests_route_to_system_admin(system: DownstreamSystem, role: Role) -> None:
    assert it_assigned_role(ITCategory.ACCESS, system) == role
    assert it_assigned_role(ITCategory.SOFTWARE, system) == role


def test_support_and_systemless_requests_route_to_it_admin() -> None:
    assert it_assigned_role(ITCategory.SUPPORT, DownstreamSystem.M365) == Role.IT_ADMIN
    assert it_assigned_role(ITCategory.ACCESS, None) == Role.IT_ADMIN


def test_onboarding_child_roles() -> None:
    assert onboarding_child_role(RequestType.ONBOARDING_EMAIL) == Role.IT_DEVICES_EMAIL_ADMIN
    assert onboarding_child_role(RequestType.ONBOARDING_DEVICE) == Role.IT_DEVICES_EMAIL_ADMIN
    assert onboarding_child_role(RequestType.ONBOARDING_SYSTEM, "M365") == Role.IT_M365_ADMIN
    assert onboarding_child_role(RequestType.ONBOARDING_SYSTEM, "SAP") == Role.IT_ADMIN


def test_system_display_names() -> None:
    assert system_display_name("POWER_BI") == "Power BI Pro"
    assert system_display_name("SAP") == "SAP"
