from __future__ import annotations

from pydantic import BaseModel

from service_desk.models.enums import RequestStatus, RequestType


class StepResponse(BaseModel):
    id: str
    name: str
    description: str
    status: RequestStatus


class WorkflowResponse(BaseModel):
    """A request type's workflow as published to clients."""

    type: RequestType
    initial_step: str
    assigned_role: str
    steps: list[StepResponse]
    absorbing_steps: list[StepResponse]
