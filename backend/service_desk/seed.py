"""Seed data for development.

Run with:  python -m service_desk.seed
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from service_desk.config import get_settings
from service_desk.db import dispose_engine, get_session_factory
from service_desk.logging_config import setup_logging
from service_desk.models.enums import Role, VehicleStatus
from service_desk.models.vehicle import Vehicle
from service_desk.services.identity import EmployeeIdentity

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from service_desk.services.identity import InMemoryIdentityProvider

logger = logging.getLogger(__name__)

VEHICLES = [
    {"name": "Prado White", "plate_number": "M-1234", "plate_code": "M", "category": "SUV"},
    {"name": "Corolla Grey", "plate_number": "M-5678", "plate_code": "M", "category": "Sedan"},
    {"name": "Hilux Pickup", "plate_number": "M-9012", "plate_code": "M", "category": "Pickup"},
]

EMPLOYEES = [
    EmployeeIdentity(employee_id=1, email="admin@example.com", full_name="Super Admin", role=Role.SUPER_ADMIN),
    EmployeeIdentity(employee_id=2, email="it.admin@example.com", full_name="IT Admin", role=Role.IT_ADMIN),
    EmployeeIdentity(employee_id=3, email="hr.admin@example.com", full_name="HR Admin", role=Role.HR_ADMIN),
    EmployeeIdentity(employee_id=4, email="fleet.admin@example.com", full_name="Fleet Admin", role=Role.FLEET_ADMIN),
    EmployeeIdentity(
        employee_id=5, email="devices@example.com", full_name="Devices Admin", role=Role.IT_DEVICES_EMAIL_ADMIN
    ),
    EmployeeIdentity(employee_id=6, email="m365@example.com", full_name="M365 Admin", role=Role.IT_M365_ADMIN),
    EmployeeIdentity(
        employee_id=7,
        email="employee@example.com",
        full_name="Demo Employee",
        department="Engineering",
        role=Role.EMPLOYEE,
    ),
]


async def seed_vehicles(session: AsyncSession) -> int:
    """Insert the default fleet when no vehicle exists. Returns the number added."""
    result = await session.execute(select(func.count()).select_from(Vehicle))
    if result.scalar_one() > 0:
        await session.commit()
        return 0
    for vehicle in VEHICLES:
        session.add(Vehicle(**vehicle, status=VehicleStatus.ACTIVE.value))
    await session.commit()
    logger.info("Seeded %d vehicles", len(VEHICLES))
    return len(VEHICLES)


def seed_identities(provider: InMemoryIdentityProvider) -> dict[str, str]:
    """Load the demo employees and open one session each. Returns email -> token."""
    tokens: dict[str, str] = {}
    for employee in EMPLOYEES:
        provider.seed(employee)
        tokens[employee.email] = provider.issue_session(employee.employee_id).token
    return tokens


async def main() -> None:
    setup_logging(get_settings().log_level)
    factory = get_session_factory()
    async with factory() as session:
        added = await seed_vehicles(session)
    await dispose_engine()
    print(f"Seeded {added} vehicle(s)")


if __name__ == "__main__":
    asyncio.run(main())
