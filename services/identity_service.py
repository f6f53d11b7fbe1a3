import logging
import re
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from core.exceptions import (
    DuplicateUsername,
    InvalidCredential,
    InvalidLogin,
    InvalidUsername,
    Unauthenticated,
    UpstreamUnavailable,
    ValidationError,
)
from crud.user_crud import user_crud as UserCrud
from schemas.user_schema import AuthUser

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,20}$")
MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class IdentityService:
    """Username/password identities with signed access and refresh tokens."""

    async def register(self, session: AsyncSession, username: Optional[str], password: Optional[str]) -> AuthUser:
        if not username or not password:
            raise ValidationError("Username and password are required")

        username = username.strip()
        if not USERNAME_PATTERN.match(username):
            raise InvalidUsername()
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidCredential()
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise InvalidCredential(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        try:
            existing_user = await UserCrud.get_user_by_username(session, username)
            if existing_user:
                raise DuplicateUsername()

            user = await UserCrud.create_user(session, username, get_password_hash(password))
            await session.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent signup with the same name
            await session.rollback()
            raise DuplicateUsername() from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Failed to create user {username!r}: {e}")
            raise UpstreamUnavailable("Failed to create user") from e

        logger.info(f"Registered user {user.id} ({user.username})")
        return AuthUser(id=user.id, username=user.username)

    async def authenticate(self, session: AsyncSession, username: Optional[str], password: Optional[str]) -> AuthUser:
        if not username or not password:
            raise ValidationError("Username and password are required")

        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise InvalidLogin()

        user = await UserCrud.get_user_by_username(session, username.strip())
        if user is None or not verify_password(password, user.hashed_password):
            raise InvalidLogin()
        return AuthUser(id=user.id, username=user.username)

    async def verify(self, session: AsyncSession, token: Optional[str]) -> AuthUser:
        return await self._resolve(session, token, ACCESS_TOKEN_TYPE)

    async def refresh(self, session: AsyncSession, refresh_token: Optional[str]) -> Tuple[AuthUser, str, str]:
        """Exchange a refresh token for the identity and a new token pair."""
        user = await self._resolve(session, refresh_token, REFRESH_TOKEN_TYPE)
        access_token, new_refresh_token = self.issue_tokens(user)
        return user, access_token, new_refresh_token

    def issue_tokens(self, user: AuthUser) -> Tuple[str, str]:
        subject = str(user.id)
        return create_access_token(subject), create_refresh_token(subject)

    async def _resolve(self, session: AsyncSession, token: Optional[str], token_type: str) -> AuthUser:
        if not token or not token.strip():
            raise Unauthenticated()

        subject = decode_token(token, token_type)
        if subject is None:
            raise Unauthenticated("Invalid or expired session")
        try:
            user_id = UUID(subject)
        except ValueError:
            raise Unauthenticated("Invalid or expired session") from None

        user = await UserCrud.get_user_by_id(session, user_id)
        if user is None:
            raise Unauthenticated("Invalid or expired session")
        return AuthUser(id=user.id, username=user.username)


identity_service = IdentityService()
