from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from service_desk.db import retry_on_busy
from service_desk.exceptions import AuthorizationError, NotFoundError
from service_desk.models.enums import VehicleStatus
from service_desk.models.vehicle import Vehicle
from service_desk.schemas.vehicle import AvailableSlotsResponse, SlotResponse, VehicleListResponse, VehicleResponse
from service_desk.services.access import can_manage_fleet
from service_desk.services.availability import slot_grid

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from service_desk.schemas.auth import AuthContext
    from service_desk.schemas.vehicle import VehicleCreate, VehicleStatusUpdate, VehicleUpdate

logger = logging.getLogger(__name__)


def _build_vehicle_response(vehicle: Vehicle) -> VehicleResponse:
    return VehicleResponse(
        id=vehicle.id,
        name=vehicle.name,
        plate_number=vehicle.plate_number,
        plate_code=vehicle.plate_code,
        category=vehicle.category,
        status=VehicleStatus(vehicle.status),
    )


def _require_fleet(auth: AuthContext) -> None:
    decision = can_manage_fleet(auth)
    if not decision:
        raise AuthorizationError(decision.reason or "Access denied")


async def _get_vehicle_or_404(session: AsyncSession, vehicle_id: int) -> Vehicle:
    vehicle = await session.get(Vehicle, vehicle_id, populate_existing=True)
    if vehicle is None:
        msg = "Vehicle not found"
        raise NotFoundError(msg)
    return vehicle


@retry_on_busy
async def list_vehicles(session: AsyncSession, include_inactive: bool = False) -> VehicleListResponse:
    """Vehicles ordered by id; only ACTIVE ones unless ``include_inactive``."""
    query = select(Vehicle).order_by(col(Vehicle.id))
    if not include_inactive:
        query = query.where(col(Vehicle.status) == VehicleStatus.ACTIVE.value)
    result = await session.execute(query)
    vehicles = list(result.scalars().all())
    await session.commit()
    return VehicleListResponse(items=[_build_vehicle_response(v) for v in vehicles], total=len(vehicles))


async def list_all_vehicles(session: AsyncSession, auth: AuthContext) -> VehicleListResponse:
    _require_fleet(auth)
    return await list_vehicles(session, include_inactive=True)


@retry_on_busy
async def create_vehicle(session: AsyncSession, auth: AuthContext, payload: VehicleCreate) -> VehicleResponse:
    """Register a vehicle in the pool."""
    _require_fleet(auth)
    vehicle = Vehicle(
        name=payload.name,
        plate_number=payload.plate_number,
        plate_code=payload.plate_code,
        category=payload.category,
        status=payload.status.value,
    )
    session.add(vehicle)
    await session.commit()
    logger.info("Registered vehicle %s (%s)", vehicle.id, vehicle.plate_number)
    return _build_vehicle_response(vehicle)


@retry_on_busy
async def update_vehicle(
    session: AsyncSession,
    auth: AuthContext,
    vehicle_id: int,
    payload: VehicleUpdate,
) -> VehicleResponse:
    _require_fleet(auth)
    vehicle = await _get_vehicle_or_404(session, vehicle_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(vehicle, field, value)
    await session.commit()
    return _build_vehicle_response(vehicle)


@retry_on_busy
async def set_vehicle_status(
    session: AsyncSession,
    auth: AuthContext,
    vehicle_id: int,
    payload: VehicleStatusUpdate,
) -> VehicleResponse:
    """Activate or retire a vehicle.

    Existing bookings are kept; an INACTIVE vehicle only stops taking new ones.
    """
    _require_fleet(auth)
    vehicle = await _get_vehicle_or_404(session, vehicle_id)
    vehicle.status = payload.status.value
    await session.commit()
    logger.info("Vehicle %s is now %s", vehicle.id, vehicle.status)
    return _build_vehicle_response(vehicle)


@retry_on_busy
async def available_slots(
    session: AsyncSession,
    day: date,
    vehicle_id: int | None = None,
) -> AvailableSlotsResponse:
    """Half-hour booking slots of a day with the number of free vehicles in each."""
    if vehicle_id is not None:
        await _get_vehicle_or_404(session, vehicle_id)
    slots = await slot_grid(session, day, vehicle_id=vehicle_id)
    await session.commit()
    return AvailableSlotsResponse(
        day=day,
        vehicle_id=vehicle_id,
        slots=[
            SlotResponse(
                start_at=slot.start_at,
                end_at=slot.end_at,
                available=slot.available,
                available_vehicles=slot.available_vehicles,
            )
            for slot in slots
        ],
    )
