# teamboard/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from teamboard.api.v1.deps import get_current_identity, get_sessions, get_user_service
from teamboard.core.security import create_access_token, decode_access_token, hash_password, verify_password
from teamboard.models.user import User
from teamboard.schemas.auth import LoginRequest, RegisterIn
from teamboard.services import Identity, SessionRegistry, UserService

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register")
async def register(body: RegisterIn, users: UserService = Depends(get_user_service)):
    """
    Register a new user account.

    The password is hashed before storage. Username and email must be unique.

    Returns:
        dict: Success response with the new profile, or error response:
            - success: bool
            - data: profile (id, username, email, ...) if success
            - error: dict with error code and message if failure

    Error codes:
        - BAD_REQUEST: Missing username, email or password
        - USERNAME_EXISTS: Username already taken
        - EMAIL_EXISTS: Email already registered
    """
    # Basic validation, avoid pydantic error becoming 500
    if not body.username or not body.password or not body.email:
        return {"success": False, "error": {"code": "BAD_REQUEST", "message": "username/email/password required"}}
    # Check duplicates
    if await User.get_or_none(username=body.username):
        return {"success": False, "error": {"code": "USERNAME_EXISTS", "message": "Username already exists"}}
    if await User.get_or_none(email=body.email):
        return {"success": False, "error": {"code": "EMAIL_EXISTS", "message": "Email already registered"}}
    profile = await users.create({
        "username": body.username,
        "email": body.email,
        "password_hash": hash_password(body.password),
    })
    return {"success": True, "data": profile.model_dump(mode="json")}

@router.post("/login")
async def login(
    payload: LoginRequest,
    response: Response,
    sessions: SessionRegistry = Depends(get_sessions),
):
    """
    Authenticate user, create access token and open the user's session.

    The token is returned in the body and also set as an HttpOnly cookie.
    Opening the session loads the user's visible project list.

    Raises:
        HTTPException (401): If credentials are invalid
    """
    user = await User.get_or_none(username=payload.username)
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail={"code": "AUTH_INVALID_CREDENTIALS", "message": "Incorrect username or password"})
    token = create_access_token(str(user.id), user.email)
    response.set_cookie("accessToken", token, httponly=True, secure=False, samesite="lax")
    await sessions.open(str(user.id), user.email, expires_at=decode_access_token(token)["exp"])
    return {"success": True, "data": {"user": {"id": str(user.id), "username": user.username, "email": user.email},
                                      "accessToken": token}}

@router.get("/me")
async def me(
    identity: Identity = Depends(get_current_identity),
    users: UserService = Depends(get_user_service),
):
    """
    Get the profile of the current authenticated identity.

    Raises:
        HTTPException (401): If user is not authenticated
        HTTPException (404): If the identity has no profile record
    """
    profile = await users.get_current(identity)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="NOT_FOUND")
    return {"success": True, "data": profile.model_dump(mode="json")}

@router.post("/logout")
async def logout(
    response: Response,
    identity: Identity = Depends(get_current_identity),
    sessions: SessionRegistry = Depends(get_sessions),
):
    """
    Sign the identity out: closes its session (the view state drops its
    change subscription) and clears the access token cookie.

    Note:
        The JWT itself stays valid until it expires.
    """
    await sessions.close(identity.id)
    response.delete_cookie("accessToken")
    return {"success": True}
