# ruff: noqa: B008, TC003
from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Query, status

from service_desk.api.deps import AuthDep
from service_desk.db import SessionDep
from service_desk.schemas.request import RequestDetailResponse, to_naive_utc
from service_desk.schemas.vehicle import (
    AvailableSlotsResponse,
    FleetScheduleResponse,
    OverridePayload,
    VehicleCreate,
    VehicleListResponse,
    VehicleResponse,
    VehicleStatusUpdate,
    VehicleUpdate,
)
from service_desk.services import booking as booking_service
from service_desk.services import request as request_service
from service_desk.services import vehicle as vehicle_service

vehicles_router = APIRouter(tags=["vehicles"])
bookings_router = APIRouter(tags=["car-bookings"])
admin_vehicles_router = APIRouter(prefix="/admin/vehicles", tags=["admin"])


# ---------------------------------------------------------------------------
# Bookable fleet
# ---------------------------------------------------------------------------


@vehicles_router.get("/vehicles", response_model=VehicleListResponse)
async def list_active_vehicles(session: SessionDep, _auth: AuthDep) -> VehicleListResponse:
    """Vehicles that can take new bookings."""
    return await vehicle_service.list_vehicles(session)


@bookings_router.get("/car-bookings/available-slots", response_model=AvailableSlotsResponse)
async def available_slots(
    session: SessionDep,
    _auth: AuthDep,
    day: date = Query(alias="date"),
    vehicle_id: int | None = Query(default=None, alias="vehicleId"),
) -> AvailableSlotsResponse:
    """Half-hour slots between 06:00 and 22:00 with free vehicle counts."""
    return await vehicle_service.available_slots(session, day, vehicle_id)


@bookings_router.patch("/car-bookings/{request_id}/override", response_model=RequestDetailResponse)
async def override_booking(
    request_id: int,
    payload: OverridePayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestDetailResponse:
    """Fleet override of vehicle, time range or lifecycle position."""
    return await request_service.override_booking(session, auth, request_id, payload)


@bookings_router.get("/fleet/schedule", response_model=FleetScheduleResponse)
async def fleet_schedule(
    session: SessionDep,
    auth: AuthDep,
    start_at: datetime | None = Query(default=None, alias="from"),
    end_at: datetime | None = Query(default=None, alias="to"),
    vehicle_id: int | None = Query(default=None, alias="vehicleId"),
    include_cancelled: bool = Query(default=False),
) -> FleetScheduleResponse:
    """Bookings in a window with vehicle details (fleet only)."""
    return await booking_service.fleet_schedule(
        session,
        auth,
        to_naive_utc(start_at) if start_at is not None else None,
        to_naive_utc(end_at) if end_at is not None else None,
        vehicle_id,
        include_cancelled,
    )


# ---------------------------------------------------------------------------
# Vehicle registry (fleet admin)
# ---------------------------------------------------------------------------


@admin_vehicles_router.get("", response_model=VehicleListResponse)
async def list_all_vehicles(session: SessionDep, auth: AuthDep) -> VehicleListResponse:
    """All vehicles, including inactive ones."""
    return await vehicle_service.list_all_vehicles(session, auth)


@admin_vehicles_router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(payload: VehicleCreate, session: SessionDep, auth: AuthDep) -> VehicleResponse:
    return await vehicle_service.create_vehicle(session, auth, payload)


@admin_vehicles_router.patch("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: int,
    payload: VehicleUpdate,
    session: SessionDep,
    auth: AuthDep,
) -> VehicleResponse:
    return await vehicle_service.update_vehicle(session, auth, vehicle_id, payload)


@admin_vehicles_router.patch("/{vehicle_id}/status", response_model=VehicleResponse)
async def set_vehicle_status(
    vehicle_id: int,
    payload: VehicleStatusUpdate,
    session: SessionDep,
    auth: AuthDep,
) -> VehicleResponse:
    """Activate or deactivate a vehicle."""
    return await vehicle_service.set_vehicle_status(session, auth, vehicle_id, payload)
