from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import TokenPayload
from ...api.deps import get_current_user, get_current_user_token, rate_limit_check
from ...services.auth_service import AuthService
from ...schemas.auth import (
    UserLogin, UserRegister, TokenResponse, UserResponse,
    ProfileUpdate, ChangePassword
)
from ...schemas.common import MessageResponse
from ...models.user import User

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Register a new user. Doctors and pharmacists wait for admin approval."""
    auth_service = AuthService(db)
    return auth_service.register_user(user_data)

@router.post("/login", response_model=TokenResponse)
def login(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Authenticate user and return an access token."""
    auth_service = AuthService(db)
    return auth_service.authenticate_user(login_data)

@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return current_user

@router.put("/profile", response_model=UserResponse)
def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update the caller's own profile."""
    auth_service = AuthService(db)
    return auth_service.update_profile(current_user, profile_data)

@router.post("/change-password", response_model=MessageResponse)
def change_password(
    password_data: ChangePassword,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change user password."""
    AuthService(db).change_password(current_user, password_data)
    return {"message": "Password changed successfully"}

@router.post("/verify-token")
def verify_token_endpoint(
    token_payload: TokenPayload = Depends(get_current_user_token)
):
    """Verify if token is valid."""
    return {
        "valid": True,
        "user_id": token_payload.sub,
        "email": token_payload.email,
        "role": token_payload.role,
        "expires": token_payload.exp
    }
