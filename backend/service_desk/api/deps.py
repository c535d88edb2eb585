# ruff: noqa: B008
from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from service_desk.exceptions import AuthenticationError
from service_desk.schemas.auth import AuthContext
from service_desk.services.identity import IdentityProvider, get_identity_provider

bearer_scheme = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Extract the bearer token; a missing header is a 401, not a 403."""
    if credentials is None or not credentials.credentials:
        msg = "Authentication required"
        raise AuthenticationError(msg)
    return credentials.credentials


TokenDep = Annotated[str, Depends(get_bearer_token)]


async def get_auth_context(
    token: TokenDep,
    provider: IdentityProvider = Depends(get_identity_provider),
) -> AuthContext:
    """Resolve the bearer token to the acting employee."""
    identity = await provider.resolve(token)
    if identity is None:
        msg = "Invalid or expired session"
        raise AuthenticationError(msg)
    return AuthContext(
        employee_id=identity.employee_id,
        role=identity.role,
        full_name=identity.full_name,
        department=identity.department,
    )


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]
