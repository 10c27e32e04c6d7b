from fastapi import Depends, Header, HTTPException, Request, status
from teamboard.core.security import decode_access_token
from teamboard.services import (
    Identity,
    ProjectService,
    ProjectViewState,
    SessionRegistry,
    TeamService,
    UserService,
)

async def get_current_identity(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Identity:
    """
    FastAPI dependency to get the current authenticated identity.

    This dependency extracts and validates the JWT token from either:
    1. Authorization header (Bearer token) - preferred method
    2. HttpOnly cookie (accessToken) - fallback method

    Raises:
        HTTPException (401): If no token is provided (AUTH_REQUIRED)
        HTTPException (401): If token is invalid or expired (AUTH_INVALID_TOKEN)
    """
    token = None
    # 1) Prioritize Authorization: Bearer xxx
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    # 2) Secondly HttpOnly Cookie: accessToken
    if not token:
        token = request.cookies.get("accessToken")

    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_REQUIRED")

    try:
        payload = decode_access_token(token)
        user_id: str = payload["sub"]
    except Exception:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_INVALID_TOKEN")
    return Identity(id=user_id, email=payload.get("email"), expires_at=payload.get("exp"))

def _wired(request: Request, name: str):
    """
    Fetch a component placed on app.state by teamboard.main.wire_services().
    A missing component is a composition defect, not a request error.
    """
    component = getattr(request.app.state, name, None)
    if component is None:
        raise RuntimeError(f"{name} is not configured; call wire_services(app) at startup")
    return component

def get_project_service(request: Request) -> ProjectService:
    return _wired(request, "project_service")

def get_team_service(request: Request) -> TeamService:
    return _wired(request, "team_service")

def get_user_service(request: Request) -> UserService:
    return _wired(request, "user_service")

def get_sessions(request: Request) -> SessionRegistry:
    return _wired(request, "sessions")

async def get_project_view(
    identity: Identity = Depends(get_current_identity),
    sessions: SessionRegistry = Depends(get_sessions),
) -> ProjectViewState:
    """
    The caller's per-session project view. Opened on login; opened here as
    well when a still-valid token outlives a server restart. Opening also
    closes other sessions whose token expired or that went idle.
    """
    return await sessions.open(identity.id, identity.email, expires_at=identity.expires_at)
