from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from service_desk.config import get_settings
from service_desk.models.enums import Role


class EmployeeIdentity(BaseModel):
    """Employee metadata from the identity provider."""

    employee_id: int
    email: str
    full_name: str
    department: str = ""
    role: Role = Role.EMPLOYEE
    is_active: bool = True


@dataclass
class SessionRecord:
    """A bearer session; expiry is explicit state, checked on every resolve."""

    token: str
    employee_id: int
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


@runtime_checkable
class IdentityProvider(Protocol):
    """Interface for resolving bearer credentials to employees."""

    async def resolve(self, token: str) -> EmployeeIdentity | None:
        """Return the active employee behind a token, or None."""
        ...

    def refresh_session(self, token: str) -> SessionRecord | None:
        """Extend a live or recently expired session, or return None."""
        ...

    def revoke_session(self, token: str) -> bool:
        """End a session. Returns False if it did not exist."""
        ...


class InMemoryIdentityProvider:
    """In-memory employee directory and session store for development and tests."""

    def __init__(
        self,
        session_ttl: timedelta | None = None,
        refresh_grace: timedelta | None = None,
    ) -> None:
        settings = get_settings()
        self._employees: dict[int, EmployeeIdentity] = {}
        self._sessions: dict[str, SessionRecord] = {}
        self._session_ttl = session_ttl or timedelta(hours=settings.session_ttl_hours)
        self._refresh_grace = refresh_grace or timedelta(minutes=settings.session_refresh_grace_minutes)

    def seed(self, employee: EmployeeIdentity) -> None:
        """Seed an employee for testing."""
        self._employees[employee.employee_id] = employee

    def issue_session(self, employee_id: int, now: datetime | None = None) -> SessionRecord:
        """Start a session for a known employee."""
        if employee_id not in self._employees:
            msg = f"Unknown employee {employee_id}"
            raise KeyError(msg)
        now = now or datetime.now(UTC)
        record = SessionRecord(
            token=secrets.token_hex(32),
            employee_id=employee_id,
            issued_at=now,
            expires_at=now + self._session_ttl,
        )
        self._sessions[record.token] = record
        return record

    def refresh_session(self, token: str, now: datetime | None = None) -> SessionRecord | None:
        """Extend a session; expired sessions may be refreshed within the grace period."""
        now = now or datetime.now(UTC)
        record = self._sessions.get(token)
        if record is None:
            return None
        if record.is_expired(now) and now - record.expires_at >= self._refresh_grace:
            del self._sessions[token]
            return None
        record.expires_at = now + self._session_ttl
        return record

    def revoke_session(self, token: str) -> bool:
        return self._sessions.pop(token, None) is not None

    def purge_expired(self, now: datetime | None = None) -> int:
        """Drop sessions past expiry and grace. Returns the number removed."""
        now = now or datetime.now(UTC)
        stale = [
            token
            for token, record in self._sessions.items()
            if record.is_expired(now) and now - record.expires_at >= self._refresh_grace
        ]
        for token in stale:
            del self._sessions[token]
        return len(stale)

    async def resolve(self, token: str, now: datetime | None = None) -> EmployeeIdentity | None:
        """Return the active employee behind a token. Inactive counts as unknown."""
        now = now or datetime.now(UTC)
        record = self._sessions.get(token)
        if record is None or record.is_expired(now):
            return None
        employee = self._employees.get(record.employee_id)
        if employee is None or not employee.is_active:
            return None
        return employee


_identity_provider: IdentityProvider = InMemoryIdentityProvider()


def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency for the identity provider."""
    return _identity_provider


def set_identity_provider(provider: IdentityProvider) -> None:
    """Override the provider (for testing or production wiring)."""
    global _identity_provider
    _identity_provider = provider
