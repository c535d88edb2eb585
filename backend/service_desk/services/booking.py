# ruff: noqa: TC003
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from service_desk.db import retry_on_busy
from service_desk.exceptions import AuthorizationError, ConflictError, IntegrityError, NotFoundError, ValidationError
from service_desk.models.booking import CarBooking
from service_desk.models.enums import RequestStatus
from service_desk.models.request import ServiceRequest
from service_desk.models.vehicle import Vehicle
from service_desk.schemas.request import BookingDetailResponse
from service_desk.schemas.vehicle import FleetScheduleResponse, ScheduleEntry
from service_desk.services.access import can_manage_fleet
from service_desk.services.availability import find_available_vehicle
from service_desk.services.status import normalize_requests

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from service_desk.schemas.auth import AuthContext

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_booking_response(booking: CarBooking, vehicle: Vehicle) -> BookingDetailResponse:
    return BookingDetailResponse(
        vehicle_id=booking.vehicle_id,
        vehicle_name=vehicle.name,
        plate_number=vehicle.plate_number,
        start_at=booking.start_at,
        end_at=booking.end_at,
        pickup_location=booking.pickup_location,
        destination=booking.destination,
        reason=booking.reason,
        passengers=booking.passengers,
    )


async def _get_booking_or_fail(session: AsyncSession, request_id: int) -> CarBooking:
    """A CAR_BOOKING request without its booking row is a broken invariant."""
    booking = await session.get(CarBooking, request_id, populate_existing=True)
    if booking is None:
        msg = f"Car booking request {request_id} has no booking record"
        raise IntegrityError(msg)
    return booking


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def reserve_vehicle(
    session: AsyncSession,
    start_at: datetime,
    end_at: datetime,
    vehicle_id: int | None = None,
    exclude_request_id: int | None = None,
) -> Vehicle:
    """Resolve the vehicle a booking over [start_at, end_at) will hold.

    Must run in the transaction that writes the booking row.
    """
    if end_at <= start_at:
        msg = "end_at must be after start_at"
        raise ValidationError(msg)
    if vehicle_id is not None and await session.get(Vehicle, vehicle_id) is None:
        msg = "Vehicle not found"
        raise NotFoundError(msg)

    vehicle = await find_available_vehicle(
        session, start_at, end_at, vehicle_id=vehicle_id, exclude_request_id=exclude_request_id
    )
    if vehicle is None:
        if vehicle_id is not None:
            msg = "Selected vehicle is not available in this time range"
        else:
            msg = "No vehicles available in this time range"
        raise ConflictError(msg)
    return vehicle


async def load_booking_detail(session: AsyncSession, request_id: int) -> BookingDetailResponse:
    booking = await _get_booking_or_fail(session, request_id)
    vehicle = await session.get(Vehicle, booking.vehicle_id)
    if vehicle is None:
        msg = f"Booking {request_id} references missing vehicle {booking.vehicle_id}"
        raise IntegrityError(msg)
    return _build_booking_response(booking, vehicle)


async def reschedule(
    session: AsyncSession,
    request_id: int,
    *,
    vehicle_id: int | None = None,
    start_at: datetime | None = None,
    end_at: datetime | None = None,
) -> bool:
    """Move a booking to another vehicle and/or interval.

    Availability is re-checked against every other live booking. Returns
    True when the booking changed. The caller commits.
    """
    booking = await _get_booking_or_fail(session, request_id)
    new_vehicle_id = vehicle_id if vehicle_id is not None else booking.vehicle_id
    new_start = start_at if start_at is not None else booking.start_at
    new_end = end_at if end_at is not None else booking.end_at
    if (new_vehicle_id, new_start, new_end) == (booking.vehicle_id, booking.start_at, booking.end_at):
        return False

    vehicle = await reserve_vehicle(
        session, new_start, new_end, vehicle_id=new_vehicle_id, exclude_request_id=request_id
    )
    logger.info(
        "Rescheduling booking %s: vehicle %s -> %s, %s-%s -> %s-%s",
        request_id,
        booking.vehicle_id,
        vehicle.id,
        booking.start_at,
        booking.end_at,
        new_start,
        new_end,
    )
    booking.vehicle_id = vehicle.id
    booking.start_at = new_start
    booking.end_at = new_end
    return True


@retry_on_busy
async def fleet_schedule(
    session: AsyncSession,
    auth: AuthContext,
    start_at: datetime | None = None,
    end_at: datetime | None = None,
    vehicle_id: int | None = None,
    include_cancelled: bool = False,
) -> FleetScheduleResponse:
    """Bookings overlapping the window, with vehicle info, ordered by start."""
    decision = can_manage_fleet(auth)
    if not decision:
        raise AuthorizationError(decision.reason or "Access denied")

    query = (
        select(CarBooking, Vehicle, ServiceRequest)
        .join(Vehicle, col(Vehicle.id) == col(CarBooking.vehicle_id))
        .join(ServiceRequest, col(ServiceRequest.id) == col(CarBooking.request_id))
    )
    if start_at is not None:
        query = query.where(col(CarBooking.end_at) > start_at)
    if end_at is not None:
        query = query.where(col(CarBooking.start_at) < end_at)
    if vehicle_id is not None:
        query = query.where(col(CarBooking.vehicle_id) == vehicle_id)
    if not include_cancelled:
        query = query.where(col(ServiceRequest.status) != RequestStatus.CANCELLED.value)
    query = query.order_by(col(CarBooking.start_at), col(CarBooking.request_id))

    result = await session.execute(query)
    rows = result.all()
    await normalize_requests(session, [request for _, _, request in rows])
    items = [
        ScheduleEntry(
            request_id=booking.request_id,
            vehicle_id=vehicle.id,
            vehicle_name=vehicle.name,
            plate_number=vehicle.plate_number,
            start_at=booking.start_at,
            end_at=booking.end_at,
            status=RequestStatus(request.status),
            requester_name=request.requester_name,
            destination=booking.destination,
        )
        for booking, vehicle, request in rows
    ]
    return FleetScheduleResponse(items=items, total=len(items))
