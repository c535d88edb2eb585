"""Vehicle availability over half-open intervals [start, end).

A booking blocks its vehicle unless the owning request is CANCELLED.
Callers that reserve a vehicle must run the lookup and the insert in the
same transaction; the engine's serialized writers make that atomic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import and_, exists, func, select
from sqlmodel import col

from service_desk.models.booking import CarBooking
from service_desk.models.enums import RequestStatus, VehicleStatus
from service_desk.models.request import ServiceRequest
from service_desk.models.vehicle import Vehicle

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql.elements import ColumnElement

SLOT_MINUTES = 30
WINDOW_START = time(6, 0)
WINDOW_END = time(22, 0)


@dataclass(frozen=True)
class Slot:
    start_at: datetime
    end_at: datetime
    available_vehicles: int

    @property
    def available(self) -> bool:
        return self.available_vehicles > 0


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open overlap: touching endpoints do not conflict."""
    return not (end_b <= start_a or start_b >= end_a)


def _blocking_booking(start: datetime, end: datetime, exclude_request_id: int | None) -> ColumnElement[bool]:
    """EXISTS clause for a live booking of the outer vehicle overlapping [start, end)."""
    clause = (
        select(CarBooking.request_id)
        .join(ServiceRequest, col(ServiceRequest.id) == col(CarBooking.request_id))
        .where(
            col(CarBooking.vehicle_id) == col(Vehicle.id),
            col(ServiceRequest.status) != RequestStatus.CANCELLED.value,
            col(CarBooking.start_at) < end,
            col(CarBooking.end_at) > start,
        )
    )
    if exclude_request_id is not None:
        clause = clause.where(col(CarBooking.request_id) != exclude_request_id)
    return exists(clause)


def _free_vehicles(
    start: datetime,
    end: datetime,
    vehicle_id: int | None,
    exclude_request_id: int | None,
) -> ColumnElement[bool]:
    conditions = [
        col(Vehicle.status) == VehicleStatus.ACTIVE.value,
        ~_blocking_booking(start, end, exclude_request_id),
    ]
    if vehicle_id is not None:
        conditions.append(col(Vehicle.id) == vehicle_id)
    return and_(*conditions)


async def find_available_vehicle(
    session: AsyncSession,
    start: datetime,
    end: datetime,
    vehicle_id: int | None = None,
    exclude_request_id: int | None = None,
) -> Vehicle | None:
    """Return an ACTIVE vehicle free over [start, end), or None.

    With ``vehicle_id`` only that vehicle is considered; otherwise the lowest
    id wins. ``exclude_request_id`` ignores a booking's own reservation when
    it is being moved.
    """
    result = await session.execute(
        select(Vehicle)
        .where(_free_vehicles(start, end, vehicle_id, exclude_request_id))
        .order_by(col(Vehicle.id))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def count_available_vehicles(
    session: AsyncSession,
    start: datetime,
    end: datetime,
    vehicle_id: int | None = None,
) -> int:
    result = await session.execute(
        select(func.count()).select_from(Vehicle).where(_free_vehicles(start, end, vehicle_id, None))
    )
    return result.scalar_one()


async def slot_grid(
    session: AsyncSession,
    day: date,
    vehicle_id: int | None = None,
    step_minutes: int = SLOT_MINUTES,
    window_start: time = WINDOW_START,
    window_end: time = WINDOW_END,
) -> list[Slot]:
    """Fixed-width slots across the booking window of ``day``."""
    step = timedelta(minutes=step_minutes)
    cursor = datetime.combine(day, window_start)
    closing = datetime.combine(day, window_end)
    slots: list[Slot] = []
    while cursor + step <= closing:
        free = await count_available_vehicles(session, cursor, cursor + step, vehicle_id)
        slots.append(Slot(start_at=cursor, end_at=cursor + step, available_vehicles=free))
        cursor += step
    return slots
