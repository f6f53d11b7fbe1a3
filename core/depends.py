from typing import Annotated, AsyncGenerator, List, Optional
from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing_extensions import TypeAlias

from core.async_engine import AsyncSessionLocal
from core.auth import ACCESS_COOKIE, bearer_scheme
from core.exceptions import Unauthenticated
from schemas.user_schema import AuthUser
from services.catalog_service import IGDBClient, catalog_client
from services.identity_service import identity_service as IdentityService


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session

AsyncDBSession: TypeAlias = Annotated[AsyncSession, Depends(get_session)]


def _candidate_tokens(
    cookie_token: Optional[str],
    credentials: Optional[HTTPAuthorizationCredentials],
) -> List[str]:
    """Access tokens to try, cookie first, then the Bearer header."""
    tokens = []
    if cookie_token:
        tokens.append(cookie_token)
    if credentials is not None and credentials.credentials and credentials.credentials not in tokens:
        tokens.append(credentials.credentials)
    return tokens


async def resolve_access_token(
    session: AsyncSession,
    cookie_token: Optional[str],
    credentials: Optional[HTTPAuthorizationCredentials],
) -> AuthUser:
    """Identity of the first presented access token that verifies.

    A stale cookie does not shadow a valid Bearer token sent with it.
    """
    tokens = _candidate_tokens(cookie_token, credentials)
    if not tokens:
        raise Unauthenticated()

    error = None
    for token in tokens:
        try:
            return await IdentityService.verify(session, token)
        except Unauthenticated as e:
            error = e
    raise error


async def get_current_user(
    session: AsyncDBSession,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    access_token: Annotated[Optional[str], Cookie(alias=ACCESS_COOKIE)] = None,
) -> AuthUser:
    return await resolve_access_token(session, access_token, credentials)

AuthenticatedUser: TypeAlias = Annotated[AuthUser, Depends(get_current_user)]


async def get_optional_user(
    session: AsyncDBSession,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    access_token: Annotated[Optional[str], Cookie(alias=ACCESS_COOKIE)] = None,
) -> Optional[AuthUser]:
    try:
        return await resolve_access_token(session, access_token, credentials)
    except Unauthenticated:
        return None

OptionalUser: TypeAlias = Annotated[Optional[AuthUser], Depends(get_optional_user)]


def get_catalog() -> IGDBClient:
    return catalog_client

CatalogClient: TypeAlias = Annotated[IGDBClient, Depends(get_catalog)]
