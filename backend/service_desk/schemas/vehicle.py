# ruff: noqa: TC003
from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from service_desk.models.enums import RequestStatus, VehicleStatus
from service_desk.schemas.request import to_naive_utc

# ---------------------------------------------------------------------------
# Vehicle registry
# ---------------------------------------------------------------------------


class VehicleCreate(BaseModel):
    """Request body for registering a vehicle."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    plate_number: str = Field(min_length=1, max_length=50)
    plate_code: str = Field(default="", max_length=50)
    category: str = Field(default="", max_length=50)
    status: VehicleStatus = VehicleStatus.ACTIVE


class VehicleUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=255)
    plate_number: str | None = Field(default=None, min_length=1, max_length=50)
    plate_code: str | None = Field(default=None, max_length=50)
    category: str | None = Field(default=None, max_length=50)


class VehicleStatusUpdate(BaseModel):
    status: VehicleStatus


class VehicleResponse(BaseModel):
    id: int
    name: str
    plate_number: str
    plate_code: str
    category: str
    status: VehicleStatus


class VehicleListResponse(BaseModel):
    items: list[VehicleResponse]
    total: int


# ---------------------------------------------------------------------------
# Booking availability and schedule
# ---------------------------------------------------------------------------


class SlotResponse(BaseModel):
    """A fixed-width window on the booking grid."""

    start_at: datetime
    end_at: datetime
    available: bool
    available_vehicles: int


class AvailableSlotsResponse(BaseModel):
    day: date
    vehicle_id: int | None
    slots: list[SlotResponse]


class OverridePayload(BaseModel):
    """Fleet override of a booking's vehicle, interval or lifecycle position."""

    vehicle_id: int | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    step: str | None = Field(default=None, max_length=50)
    status: RequestStatus | None = None
    note: str | None = Field(default=None, max_length=1000)

    @field_validator("start_at", "end_at")
    @classmethod
    def _naive_wall_clock(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value) if value is not None else None


class ScheduleEntry(BaseModel):
    """A booking as shown on the fleet schedule."""

    request_id: int
    vehicle_id: int
    vehicle_name: str
    plate_number: str
    start_at: datetime
    end_at: datetime
    status: RequestStatus
    requester_name: str
    destination: str


class FleetScheduleResponse(BaseModel):
    items: list[ScheduleEntry]
    total: int
