from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional, List
import logging

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.exceptions import AuthenticationError, AuthorizationError, TooManyRequestsError
from ..core.security import security, verify_token, UserRole, TokenPayload
from ..models.user import User
from ..services.access_policy import Caller
from ..services.subject_resolver import RouteShape, resolve_subject

logger = logging.getLogger(__name__)

async def get_current_user_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Not authorized, no token")

    token_payload = verify_token(credentials.credentials)
    if not token_payload:
        raise AuthenticationError("Not authorized, token failed")

    if token_payload.token_type != "access":
        raise AuthenticationError("Invalid token type")

    return token_payload

def get_current_user(
    token_payload: TokenPayload = Depends(get_current_user_token),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from database."""
    if not token_payload.sub or not token_payload.sub.isdigit():
        raise AuthenticationError("Invalid token payload")

    user = db.query(User).filter(User.id == int(token_payload.sub)).first()
    if not user:
        raise AuthenticationError("User not found")

    if not user.is_approved:
        raise AuthenticationError("Account pending approval")

    return user

def get_current_caller(
    current_user: User = Depends(get_current_user)
) -> Caller:
    return Caller.from_user(current_user)

# Role-based access control dependencies
def require_role(allowed_roles: List[UserRole]):
    """Create a dependency that requires specific user roles."""
    def role_checker(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                f"Access denied. Required roles: {[role.value for role in allowed_roles]}"
            )
        return current_user

    return role_checker

get_admin_user = require_role([UserRole.ADMIN])
get_doctor_user = require_role([UserRole.DOCTOR])
get_doctor_or_admin_user = require_role([UserRole.DOCTOR, UserRole.ADMIN])
get_patient_user = require_role([UserRole.PATIENT])

def patient_subject(shape: RouteShape):
    """Tag a route with its shape and resolve the patient it targets."""
    def resolver(
        request: Request,
        caller: Caller = Depends(get_current_caller),
        db: Session = Depends(get_db)
    ) -> int:
        return resolve_subject(caller, request.path_params, shape, db)

    return resolver

# Rate limiting dependency
def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic rate limiting for authentication endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{request.url.path}:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, 3600, 1)
        return

    if int(current_requests) >= settings.RATE_LIMIT_PER_HOUR:
        logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
        raise TooManyRequestsError("Too many requests. Please try again later.")
    redis_client.incr(key)
