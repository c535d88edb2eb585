from sqlmodel import SQLModel

from service_desk.models.audit import AuditEntry
from service_desk.models.base import IntegerBase, TimestampMixin
from service_desk.models.booking import CarBooking
from service_desk.models.detail import ITRequestDetail, OnboardingDetail
from service_desk.models.enums import (
    AuditAction,
    DownstreamSystem,
    ITCategory,
    RequestStatus,
    RequestType,
    Role,
    VehicleStatus,
)
from service_desk.models.request import ServiceRequest
from service_desk.models.vehicle import Vehicle

__all__ = [
    "AuditAction",
    "AuditEntry",
    "CarBooking",
    "DownstreamSystem",
    "ITCategory",
    "ITRequestDetail",
    "IntegerBase",
    "OnboardingDetail",
    "RequestStatus",
    "RequestType",
    "Role",
    "SQLModel",
    "ServiceRequest",
    "TimestampMixin",
    "Vehicle",
    "VehicleStatus",
]
