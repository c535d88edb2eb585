from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from service_desk.models.enums import Role


class AuthContext(BaseModel):
    """Authenticated actor resolved from a bearer token."""

    employee_id: int
    role: Role = Role.EMPLOYEE
    full_name: str = ""
    department: str = ""


class SessionResponse(BaseModel):
    """Expiry of the caller's session after a refresh."""

    expires_at: datetime
    message: str
