"""
Password account lifecycle: registration, verification codes, login and
password reset. Emails are normalized to lowercase before every lookup.
"""
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from be4real.core.errors import (
    ConflictError, ForbiddenError, InvalidInputError, NotFoundError, UnauthenticatedError
)
from be4real.core.security import (
    create_access_token, generate_verification_code, get_password_hash, verify_password
)
from be4real.modules.auth.schemas.auth import RegisterRequest, ResetPasswordRequest
from be4real.modules.user_management.models.user import User
from be4real.modules.user_management.services.user import get_user_by_email, get_user_by_username

logger = logging.getLogger("be4real")

def register_user(db: Session, user_in: RegisterRequest) -> User:
    """Create a new, unverified password user"""
    if get_user_by_email(db, user_in.email):
        raise ConflictError("Email already exists")
    if get_user_by_username(db, user_in.username):
        raise ConflictError("Username already exists")

    user = User(
        id=str(uuid.uuid4()),
        login_method="password",
        username=user_in.username,
        email=user_in.email,
        hashed_password=get_password_hash(user_in.password),
        is_verified=False,
        verification_code=None,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration
        db.rollback()
        raise ConflictError("Email or username already exists")

    db.refresh(user)
    logger.info(f"Registered user {user.id} ({user.username})")
    return user

def _issue_code(db: Session, user: User) -> str:
    code = generate_verification_code()
    user.verification_code = code
    db.commit()
    # No mail delivery yet, the code goes to the log
    logger.info(f"Verification code for {user.email}: {code}")
    return code

def send_verification_code(db: Session, email: str) -> str:
    """Issue a fresh verification code to an unverified user"""
    user = get_user_by_email(db, email)
    if not user or user.is_verified:
        raise InvalidInputError("User not found or already verified")
    return _issue_code(db, user)

def request_password_reset(db: Session, email: str) -> str:
    """Issue a code that can be exchanged for a new password"""
    user = get_user_by_email(db, email)
    if not user:
        raise NotFoundError("User not found")
    if user.login_method != "password":
        raise ForbiddenError("Incorrect login method for user")
    return _issue_code(db, user)

def verify_user(db: Session, email: str, code: str) -> str:
    """Mark the user verified and return an access token"""
    user = get_user_by_email(db, email)
    if not user:
        raise NotFoundError("User not found")

    if not user.verification_code or user.verification_code != code:
        raise UnauthenticatedError("Invalid code")

    user.is_verified = True
    user.verification_code = None
    db.commit()

    logger.info(f"User {user.id} verified")
    return create_access_token(user.id)

def authenticate(db: Session, email: str, password: str) -> str:
    """Check credentials and return an access token"""
    user = get_user_by_email(db, email)
    if not user:
        raise UnauthenticatedError("Invalid email or password")

    if user.login_method != "password":
        raise ForbiddenError("Incorrect login method for user")

    if not verify_password(password, user.hashed_password or ""):
        raise UnauthenticatedError("Invalid email or password")

    if not user.is_verified:
        raise ForbiddenError("User requires verification")

    return create_access_token(user.id)

def reset_password(db: Session, reset_in: ResetPasswordRequest) -> None:
    """Replace the password hash when email and code match, clearing the code"""
    updated = (
        db.query(User)
        .filter(
            User.email == reset_in.email,
            User.verification_code == reset_in.code,
        )
        .update(
            {
                User.hashed_password: get_password_hash(reset_in.new_password),
                User.verification_code: None,
            },
            synchronize_session=False,
        )
    )
    if not updated:
        db.rollback()
        raise InvalidInputError("User not found or incorrect verification code")

    db.commit()
    logger.info(f"Password reset for {reset_in.email}")
