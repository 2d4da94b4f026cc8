"""Login endpoints and session-token dependencies."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from nutrivision.api.models import LoginRequest
from nutrivision.domain.profile import UserProfile  # noqa: TC001
from nutrivision.services.sessions import UserSession  # noqa: TC001
from nutrivision.services.user_data import serialize_profile

if TYPE_CHECKING:
    from nutrivision.containers import AppContainer

router = APIRouter(prefix="/auth", tags=["auth"])


async def require_token(x_session_token: str | None = Header(default=None)) -> str:
    """Ensure requests include a session token."""
    if not x_session_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return x_session_token


async def require_session(
    request: Request, token: str = Depends(require_token)
) -> UserSession:
    """Resolve the session token to a live session."""
    container: AppContainer = request.app.state.container
    session = container.session_service.get(token)
    if session is None or not session.is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return session


@router.post("/login")
async def login(payload: LoginRequest, request: Request) -> dict[str, object]:
    """Log in, creating the profile on first use."""
    container: AppContainer = request.app.state.container
    token, session = container.session_service.login(
        payload.email.strip().lower(), payload.name.strip()
    )
    pending = request.app.state.pending_quizzes
    for stale in [key for key in pending if key not in container.session_service]:
        del pending[stale]
    return {"token": token, "profile": profile_payload(session.profile)}


@router.post("/logout")
async def logout(request: Request, token: str = Depends(require_token)) -> dict:
    """End the session; stored data is kept for the next login."""
    container: AppContainer = request.app.state.container
    request.app.state.pending_quizzes.pop(token, None)
    if not container.session_service.logout(token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return {"status": "ok"}


def profile_payload(profile: UserProfile) -> dict[str, object]:
    """Return the profile as a JSON-ready mapping."""
    payload = serialize_profile(profile)
    payload.pop("schema_version", None)
    return payload
