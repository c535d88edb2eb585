# ruff: noqa: TC001, TC003
from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Annotated, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from service_desk.models.enums import DownstreamSystem, ITCategory, RequestStatus, RequestType

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------

RequiredText = Annotated[str, Field(min_length=1, max_length=255)]


def to_naive_utc(value: datetime) -> datetime:
    """Booking times are wall-clock; aware inputs are converted to UTC and made naive."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


class _Payload(BaseModel):
    # Whitespace-only strings fail min_length and are reported as missing.
    model_config = ConfigDict(str_strip_whitespace=True)


class ITRequestPayload(_Payload):
    """Request body for an IT ticket."""

    type: Literal["IT"]
    requester_name: RequiredText
    title: RequiredText
    category: ITCategory
    description: str = Field(min_length=1)
    department: str = Field(default="", max_length=255)
    system_key: DownstreamSystem | None = None
    system_name: str = Field(default="", max_length=255)
    impact: str = Field(default="Normal", max_length=50)
    urgency: str = Field(default="Normal", max_length=50)
    asset_tag: str = Field(default="", max_length=100)


class CarBookingPayload(_Payload):
    """Request body for a vehicle booking over [start_at, end_at)."""

    type: Literal["CAR_BOOKING"]
    requester_name: RequiredText
    start_at: datetime
    end_at: datetime
    reason: str = Field(min_length=1)
    destination: RequiredText
    department: str = Field(default="", max_length=255)
    pickup_location: str = Field(default="", max_length=255)
    passengers: int | None = Field(default=None, ge=1)
    vehicle_id: int | None = None
    title: str = Field(default="", max_length=255)

    @field_validator("start_at", "end_at")
    @classmethod
    def _naive_wall_clock(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def _validate_interval(self) -> Self:
        if self.end_at <= self.start_at:
            msg = "end_at must be after start_at"
            raise ValueError(msg)
        return self


class OnboardingPayload(_Payload):
    """Request body for a new-hire onboarding; fans out into child requests."""

    type: Literal["ONBOARDING"]
    requester_name: RequiredText
    employee_name: RequiredText
    position: RequiredText
    start_date: date
    department: str = Field(default="", max_length=255)
    location: str = Field(default="", max_length=255)
    device_type: str = Field(default="", max_length=100)
    vpn_required: bool = False
    notes: str = ""
    email_needed: bool = False
    device_needed: bool | None = Field(default=None, description="Defaults to true when device_type is given")
    systems_requested: list[str] = Field(default_factory=list)

    @field_validator("systems_requested")
    @classmethod
    def _drop_blank_systems(cls, value: list[str]) -> list[str]:
        return [key.strip() for key in value if key and key.strip()]

    @property
    def wants_device(self) -> bool:
        if self.device_needed is None:
            return bool(self.device_type)
        return self.device_needed


CreateRequestPayload = Annotated[
    ITRequestPayload | CarBookingPayload | OnboardingPayload,
    Field(discriminator="type"),
]


class TransitionPayload(_Payload):
    """Request body for a status transition. Either field may drive it."""

    step: str | None = Field(default=None, max_length=50)
    status: RequestStatus | None = None
    note: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _require_target(self) -> Self:
        if not self.step and self.status is None:
            msg = "Either step or status is required"
            raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RequestResponse(BaseModel):
    """Response schema for a single request."""

    id: int
    type: RequestType
    title: str
    description: str
    requester_name: str
    department: str
    status: RequestStatus
    current_step: str
    assigned_role: str
    requester_employee_id: int
    assigned_employee_id: int | None
    parent_request_id: int | None
    system_key: str | None
    created_at: datetime
    updated_at: datetime


class ITDetailResponse(BaseModel):
    category: str
    system_name: str
    impact: str
    urgency: str
    asset_tag: str


class OnboardingDetailResponse(BaseModel):
    employee_name: str
    position: str
    department: str
    location: str
    start_date: date
    device_type: str
    vpn_required: bool
    notes: str
    email_needed: bool
    device_needed: bool
    systems_requested: list[str]


class BookingDetailResponse(BaseModel):
    vehicle_id: int
    vehicle_name: str
    plate_number: str
    start_at: datetime
    end_at: datetime
    pickup_location: str
    destination: str
    reason: str
    passengers: int | None


class CreationMetadata(BaseModel):
    """Outcome of fanning an onboarding request out into child requests."""

    children_requested: int
    children_created: int
    failed_children: list[str] = Field(default_factory=list)
    message: str


class RequestDetailResponse(RequestResponse):
    """A request with its detail record and relatives attached."""

    it_detail: ITDetailResponse | None = None
    onboarding_detail: OnboardingDetailResponse | None = None
    booking: BookingDetailResponse | None = None
    parent: RequestResponse | None = None
    children: list[RequestResponse] = Field(default_factory=list)
    metadata: CreationMetadata | None = None


class TransitionResponse(BaseModel):
    """Result of a transition, including any parent auto-completion."""

    request: RequestResponse
    parent_request_id: int | None = None
    parent_status: RequestStatus | None = None
    parent_auto_completed: bool = False
    message: str = ""


class RequestListResponse(BaseModel):
    """Paginated list of requests."""

    items: list[RequestResponse]
    total: int
