from __future__ import annotations

from sqlmodel import Field

from service_desk.models.base import IntegerBase
from service_desk.models.enums import VehicleStatus


class Vehicle(IntegerBase, table=True):
    """A pool vehicle that car bookings reserve."""

    __tablename__ = "vehicle"

    name: str = Field(max_length=255)
    plate_number: str = Field(max_length=50)
    plate_code: str = Field(default="", max_length=50)
    category: str = Field(default="", max_length=50)
    status: str = Field(
        default=VehicleStatus.ACTIVE, max_length=20, index=True, sa_column_kwargs={"server_default": "ACTIVE"}
    )
