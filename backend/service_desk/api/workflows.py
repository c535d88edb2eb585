from __future__ import annotations

from fastapi import APIRouter

from service_desk.schemas.workflow import StepResponse, WorkflowResponse
from service_desk.services.workflow import ABSORBING_STEPS, WORKFLOWS, Step

workflows_router = APIRouter(prefix="/workflows", tags=["workflows"])


def _build_step_response(step: Step) -> StepResponse:
    return StepResponse(id=step.id, name=step.name, description=step.description, status=step.status)


@workflows_router.get("", response_model=list[WorkflowResponse])
async def list_workflows() -> list[WorkflowResponse]:
    """The static workflow catalog, one entry per request type."""
    absorbing = [_build_step_response(step) for step in ABSORBING_STEPS]
    return [
        WorkflowResponse(
            type=workflow.type,
            initial_step=workflow.initial_step,
            assigned_role=workflow.assigned_role.value,
            steps=[_build_step_response(step) for step in workflow.steps],
            absorbing_steps=absorbing,
        )
        for workflow in WORKFLOWS.values()
    ]
