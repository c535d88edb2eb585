from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError

from service_desk.db import is_transient_store_error, retry_on_busy
from service_desk.exceptions import ConflictError, TransientStoreError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def _locked() -> OperationalError:
    return OperationalError("UPDATE service_request", {}, sqlite3.OperationalError("database is locked"))


class _SerializationFailure(Exception):
    sqlstate = "40001"


# ---------------------------------------------------------------------------
# Transient error classification
# ---------------------------------------------------------------------------


def test_sqlite_lock_is_transient() -> None:
    assert is_transient_store_error(_locked())


def test_serialization_failure_is_transient() -> None:
    exc = OperationalError("UPDATE service_request", {}, _SerializationFailure("could not serialize"))
    assert is_transient_store_error(exc)


def test_constraint_violation_is_not_transient() -> None:
    exc = IntegrityError("INSERT INTO car_booking", {}, sqlite3.IntegrityError("UNIQUE constraint failed"))
    assert not is_transient_store_error(exc)
    assert not is_transient_store_error(ValueError("database is locked"))


# ---------------------------------------------------------------------------
# retry_on_busy
# ---------------------------------------------------------------------------


async def test_retries_until_success(db_session: AsyncSession) -> None:
    calls = 0

    @retry_on_busy
    async def _op(session: AsyncSession) -> str:
        nonlocal calls
        calls += 1
        if calls < 3:
            raise _locked()
        return "done"

    assert await _op(db_session) == "done"
    assert calls == 3


async def test_exhausted_retries_raise_transient_store_error(db_session: AsyncSession) -> None:
    calls = 0

    @retry_on_busy
    async def _op(session: AsyncSession) -> None:
        nonlocal calls
        calls += 1
        raise _locked()

    with pytest.raises(TransientStoreError) as exc_info:
        await _op(db_session)
    assert calls == 3
    assert exc_info.value.status_code == 503


async def test_non_transient_errors_are_not_retried(db_session: AsyncSession) -> None:
    calls = 0

    @retry_on_busy
    async def _op(session: AsyncSession) -> None:
        nonlocal calls
        calls += 1
        raise IntegrityError("INSERT INTO car_booking", {}, sqlite3.IntegrityError("constraint failed"))

    with pytest.raises(IntegrityError):
        await _op(db_session)
    assert calls == 1


async def test_domain_errors_pass_through(db_session: AsyncSession) -> None:
    calls = 0

    @retry_on_busy
    async def _op(session: AsyncSession) -> None:
        nonlocal calls
        calls += 1
        msg = "No vehicles available in this time range"
        raise ConflictError(msg)

    with pytest.raises(ConflictError):
        await _op(db_session)
    assert calls == 1


async def test_failed_unit_is_rolled_back(db_session: AsyncSession) -> None:
    @retry_on_busy
    async def _op(session: AsyncSession) -> None:
        await session.execute(
            text(
                "INSERT INTO vehicle (name, plate_number, plate_code, category, status) "
                "VALUES ('Spare', 'X-1', '', '', 'ACTIVE')"
            )
        )
        msg = "abort"
        raise ConflictError(msg)

    with pytest.raises(ConflictError):
        await _op(db_session)

    result = await db_session.execute(text("SELECT COUNT(*) FROM vehicle"))
    assert result.scalar_one() == 0
    await db_session.commit()
