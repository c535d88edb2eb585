# ruff: noqa: B008
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from service_desk.api.deps import AuthDep, TokenDep
from service_desk.exceptions import AuthenticationError
from service_desk.schemas.auth import AuthContext, SessionResponse
from service_desk.services.identity import IdentityProvider, get_identity_provider

auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.get("/me", response_model=AuthContext)
async def me(auth: AuthDep) -> AuthContext:
    """Return the employee behind the bearer token."""
    return auth


@auth_router.post("/refresh", response_model=SessionResponse)
async def refresh(
    token: TokenDep,
    provider: IdentityProvider = Depends(get_identity_provider),
) -> SessionResponse:
    """Extend the session; allowed for a grace period after expiry."""
    record = provider.refresh_session(token)
    if record is None:
        msg = "Session expired. Please log in again."
        raise AuthenticationError(msg)
    return SessionResponse(expires_at=record.expires_at, message="Session refreshed")


@auth_router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: TokenDep,
    provider: IdentityProvider = Depends(get_identity_provider),
) -> None:
    """End the session. Logging out twice is not an error."""
    provider.revoke_session(token)
