from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import col

from service_desk.db import build_engine, get_session
from service_desk.main import app
from service_desk.models import SQLModel, Vehicle
from service_desk.models.enums import Role
from service_desk.schemas.auth import AuthContext
from service_desk.seed import seed_vehicles
from service_desk.services.identity import (
    EmployeeIdentity,
    InMemoryIdentityProvider,
    get_identity_provider,
    set_identity_provider,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine

# name -> (employee_id, role)
EMPLOYEES: dict[str, tuple[int, Role]] = {
    "super": (1, Role.SUPER_ADMIN),
    "it": (2, Role.IT_ADMIN),
    "hr": (3, Role.HR_ADMIN),
    "fleet": (4, Role.FLEET_ADMIN),
    "devices": (5, Role.IT_DEVICES_EMAIL_ADMIN),
    "m365": (6, Role.IT_M365_ADMIN),
    "employee": (7, Role.EMPLOYEE),
    "other": (8, Role.EMPLOYEE),
    "bi": (9, Role.IT_BI_ADMIN),
}


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """A fresh file-backed SQLite database per test.

    A file (not :memory:) so that concurrent sessions see one database and
    contend for the same write lock.
    """
    _engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'service_desk.db'}")
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def vehicles(session_factory: async_sessionmaker[AsyncSession]) -> list[Vehicle]:
    """The three default vehicles, lowest id first."""
    async with session_factory() as session:
        await seed_vehicles(session)
        result = await session.execute(select(Vehicle).order_by(col(Vehicle.id)))
        seeded = list(result.scalars().all())
        await session.commit()
    return seeded


@pytest.fixture
def actors() -> dict[str, AuthContext]:
    """Auth contexts for service-level tests, keyed like EMPLOYEES."""
    return {
        name: AuthContext(employee_id=employee_id, role=role, full_name=name.title())
        for name, (employee_id, role) in EMPLOYEES.items()
    }


@pytest.fixture
def identity_provider() -> Iterator[InMemoryIdentityProvider]:
    provider = InMemoryIdentityProvider()
    for name, (employee_id, role) in EMPLOYEES.items():
        provider.seed(
            EmployeeIdentity(
                employee_id=employee_id,
                email=f"{name}@example.com",
                full_name=name.title(),
                role=role,
            )
        )
    previous = get_identity_provider()
    set_identity_provider(provider)
    yield provider
    set_identity_provider(previous)


@pytest.fixture
def tokens(identity_provider: InMemoryIdentityProvider) -> dict[str, dict[str, str]]:
    """Authorization headers per employee name."""
    return {
        name: {"Authorization": f"Bearer {identity_provider.issue_session(employee_id).token}"}
        for name, (employee_id, _) in EMPLOYEES.items()
    }


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    identity_provider: InMemoryIdentityProvider,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client whose sessions come from the per-test database."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
