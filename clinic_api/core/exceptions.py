"""
Error kinds surfaced by the API.

Each kind carries its own status code; ``clinic_api.main`` renders all of
them as ``{"message": ...}``.
"""
from fastapi import HTTPException, status


class ClinicError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal Server Error"

    def __init__(self, detail: str = None, headers: dict = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class ValidationError(ClinicError):
    """Malformed input or identifier."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class AuthenticationError(ClinicError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"

    def __init__(self, detail: str = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(ClinicError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not authorized"


class NotFoundError(ClinicError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class ConflictError(ClinicError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource conflict"


class TooManyRequestsError(ClinicError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Too many requests"


class ServiceUnavailableError(ClinicError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Database connection error"


# Upper bound of the 32-bit integer primary keys
MAX_IDENTIFIER = 2**31 - 1


def parse_identifier(value, label: str = "ID") -> int:
    """Validate a path identifier and return it as an integer."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {label}")
    if isinstance(value, int):
        candidate = value
    else:
        text = str(value).strip()
        if not (text.isascii() and text.isdigit()):
            raise ValidationError(f"Invalid {label}")
        candidate = int(text)
    if candidate <= 0 or candidate > MAX_IDENTIFIER:
        raise ValidationError(f"Invalid {label}")
    return candidate
