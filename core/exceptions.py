from typing import Optional

from starlette import status


class AppError(Exception):
    """Base error carrying the HTTP status and the reason shown to the caller."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class MalformedIdentifier(ValidationError):
    default_detail = "Invalid identifier format"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class AuthError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Authentication failed"


class InvalidLogin(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid username or password"


class DuplicateUsername(AuthError):
    default_detail = "Username is already taken"


class InvalidUsername(AuthError):
    default_detail = "Username must be 3-20 characters of letters, digits or underscores"


class InvalidCredential(AuthError):
    default_detail = "Password must be at least 6 characters"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"


class UpstreamUnavailable(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Upstream service unavailable"


class CatalogUnavailable(UpstreamUnavailable):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Game catalog unavailable"


class Internal(AppError):
    pass
