from __future__ import annotations

import enum


class RequestType(enum.StrEnum):
    """Kind of service request; each has its own workflow."""

    IT = "IT"
    CAR_BOOKING = "CAR_BOOKING"
    ONBOARDING = "ONBOARDING"
    ONBOARDING_EMAIL = "ONBOARDING_EMAIL"
    ONBOARDING_DEVICE = "ONBOARDING_DEVICE"
    ONBOARDING_SYSTEM = "ONBOARDING_SYSTEM"

    @property
    def is_onboarding_child(self) -> bool:
        return self in _ONBOARDING_CHILD_TYPES


_ONBOARDING_CHILD_TYPES = frozenset(
    {RequestType.ONBOARDING_EMAIL, RequestType.ONBOARDING_DEVICE, RequestType.ONBOARDING_SYSTEM}
)


class RequestStatus(enum.StrEnum):
    """Canonical request status, projected from the workflow step."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    IN_PROGRESS = "IN_PROGRESS"
    BOOKED = "BOOKED"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @property
    def is_sticky(self) -> bool:
        """REJECTED and CANCELLED are never overwritten by normalization."""
        return self in (RequestStatus.REJECTED, RequestStatus.CANCELLED)

    @property
    def is_final(self) -> bool:
        """No ordinary transition leaves a final status."""
        return self in (RequestStatus.COMPLETED, RequestStatus.REJECTED, RequestStatus.CANCELLED)


class Role(enum.StrEnum):
    """Employee roles recognised by the access policy."""

    SUPER_ADMIN = "SUPER_ADMIN"
    IT_ADMIN = "IT_ADMIN"
    HR_ADMIN = "HR_ADMIN"
    FLEET_ADMIN = "FLEET_ADMIN"
    IT_M365_ADMIN = "IT_M365_ADMIN"
    IT_BI_ADMIN = "IT_BI_ADMIN"
    IT_ACONEX_ADMIN = "IT_ACONEX_ADMIN"
    IT_AUTODESK_ADMIN = "IT_AUTODESK_ADMIN"
    IT_P6_ADMIN = "IT_P6_ADMIN"
    IT_RISK_ADMIN = "IT_RISK_ADMIN"
    IT_DEVICES_EMAIL_ADMIN = "IT_DEVICES_EMAIL_ADMIN"
    EMPLOYEE = "EMPLOYEE"


class DownstreamSystem(enum.StrEnum):
    """Systems an IT or onboarding request can target."""

    M365 = "M365"
    POWER_BI = "POWER_BI"
    ACONEX = "ACONEX"
    AUTODESK = "AUTODESK"
    P6 = "P6"
    RISK = "RISK"


class ITCategory(enum.StrEnum):
    """Category of an IT request."""

    SUPPORT = "Support / Incident"
    DEVICES = "Devices & Materials"
    ACCESS = "Access & Permissions"
    SOFTWARE = "Software / License"


class VehicleStatus(enum.StrEnum):
    """Whether a vehicle can take new bookings."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit trail."""

    CREATE = "CREATE"
    STATUS_UPDATE = "STATUS_UPDATE"
    AUTO_COMPLETE = "AUTO_COMPLETE"
    FLEET_OVERRIDE = "FLEET_OVERRIDE"
