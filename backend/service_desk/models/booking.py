# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


class CarBooking(SQLModel, table=True):
    """Vehicle reservation over the half-open interval [start_at, end_at).

    Whether the reservation still blocks the vehicle is read from the owning
    request's status.
    """

    __tablename__ = "car_booking"
    __table_args__ = (sa.Index("ix_booking_vehicle_interval", "vehicle_id", "start_at", "end_at"),)

    request_id: int = Field(
        sa_column=sa.Column(
            sa.Integer, sa.ForeignKey("service_request.id", ondelete="CASCADE"), primary_key=True
        ),
    )
    vehicle_id: int = Field(
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("vehicle.id"), nullable=False, index=True),
    )
    start_at: datetime = Field(sa_type=sa.DateTime())  # ty: ignore[invalid-argument-type]
    end_at: datetime = Field(sa_type=sa.DateTime())  # ty: ignore[invalid-argument-type]
    pickup_location: str = Field(default="", max_length=255)
    destination: str = Field(default="", max_length=255)
    reason: str = ""
    passengers: int | None = None
