from sqlalchemy.orm import Session
import logging

from ..models.user import User
from ..core.exceptions import AuthenticationError, ConflictError, ValidationError
from ..core.security import (
    verify_password, get_password_hash, create_user_token, UserRole
)
from ..schemas.auth import (
    UserLogin, UserRegister, TokenResponse, UserResponse,
    ProfileUpdate, ChangePassword
)

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register_user(self, user_data: UserRegister) -> User:
        """Register a new user. Patients are approved immediately."""
        existing_user = self.db.query(User).filter(
            User.email == user_data.email
        ).first()

        if existing_user:
            raise ConflictError("User already exists")

        role = UserRole(user_data.role)
        new_user = User(
            name=user_data.name.strip(),
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            role=role,
            is_approved=role == UserRole.PATIENT,
            specialization=user_data.specialization,
            license_id=user_data.license_id,
            phone=user_data.phone,
            address=user_data.address,
            date_of_birth=user_data.date_of_birth,
            gender=user_data.gender,
        )

        self.db.add(new_user)
        self.db.commit()
        self.db.refresh(new_user)

        logger.info(f"Registered {role.value} account {new_user.id}")
        return new_user

    def authenticate_user(self, login_data: UserLogin) -> TokenResponse:
        """Authenticate user and return an access token."""
        user = self.db.query(User).filter(
            User.email == login_data.email
        ).first()

        if not user or not verify_password(login_data.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        if not user.is_approved:
            raise AuthenticationError("Account pending approval. Please contact administrator.")

        return self.issue_token(user)

    def issue_token(self, user: User) -> TokenResponse:
        token = create_user_token(user.id, user.email, user.role)
        return TokenResponse(
            access_token=token.access_token,
            token_type=token.token_type,
            expires_in=token.expires_in,
            user=UserResponse.model_validate(user)
        )

    def update_profile(self, user: User, profile_data: ProfileUpdate) -> User:
        """Apply the fields the caller actually sent to their own account."""
        changes = profile_data.model_dump(exclude_unset=True)

        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
            taken = self.db.query(User).filter(
                User.email == changes["email"],
                User.id != user.id
            ).first()
            if taken:
                raise ConflictError("Email already registered")

        for field, value in changes.items():
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)
        return user

    def change_password(self, user: User, password_data: ChangePassword) -> None:
        if not verify_password(password_data.current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")

        user.password_hash = get_password_hash(password_data.new_password)
        self.db.commit()
        logger.info(f"Password changed for account {user.id}")
