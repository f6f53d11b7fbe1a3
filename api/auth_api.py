from typing import Annotated, Optional
from fastapi import APIRouter, Cookie, Depends, Response, status
from fastapi.security import HTTPAuthorizationCredentials

from core.auth import ACCESS_COOKIE, REFRESH_COOKIE, bearer_scheme, clear_session_cookies, set_session_cookies
from core.depends import AsyncDBSession, resolve_access_token
from core.exceptions import Unauthenticated
from schemas.user_schema import AuthResponse, MessageResponse, UserCredentials, UserResponse
from services.identity_service import identity_service as IdentityService


router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    session: AsyncDBSession,
    user_data: UserCredentials,
    response: Response
):
    """Register a username/password identity and start a session."""
    user = await IdentityService.register(session, user_data.username, user_data.password)

    access_token, refresh_token = IdentityService.issue_tokens(user)
    set_session_cookies(response, access_token, refresh_token)

    return AuthResponse(message="Signup successful", user=user)


@router.post("/login", response_model=AuthResponse)
async def login(
    session: AsyncDBSession,
    credentials: UserCredentials,
    response: Response
):
    user = await IdentityService.authenticate(session, credentials.username, credentials.password)

    access_token, refresh_token = IdentityService.issue_tokens(user)
    set_session_cookies(response, access_token, refresh_token)

    return AuthResponse(message="Login successful", user=user)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    clear_session_cookies(response)
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    session: AsyncDBSession,
    response: Response,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    access_token: Annotated[Optional[str], Cookie(alias=ACCESS_COOKIE)] = None,
    refresh_token: Annotated[Optional[str], Cookie(alias=REFRESH_COOKIE)] = None,
):
    """Current user; renews both session cookies when only the refresh token is still valid."""
    if access_token or credentials is not None:
        try:
            user = await resolve_access_token(session, access_token, credentials)
            return UserResponse(user=user)
        except Unauthenticated:
            if not refresh_token:
                raise

    if not refresh_token:
        raise Unauthenticated("Not authenticated")

    try:
        user, new_access_token, new_refresh_token = await IdentityService.refresh(session, refresh_token)
    except Unauthenticated:
        raise Unauthenticated("Session expired") from None

    set_session_cookies(response, new_access_token, new_refresh_token)
    return UserResponse(user=user)
