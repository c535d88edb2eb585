from fastapi import APIRouter

from service_desk.api.auth import auth_router
from service_desk.api.requests import requests_router
from service_desk.api.vehicles import admin_vehicles_router, bookings_router, vehicles_router
from service_desk.api.workflows import workflows_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(workflows_router)
api_router.include_router(requests_router)
api_router.include_router(vehicles_router)
api_router.include_router(bookings_router)
api_router.include_router(admin_vehicles_router)
