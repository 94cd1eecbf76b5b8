"""Authentication router for password accounts"""
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from be4real.core.responses import Envelope, success
from be4real.db.session import get_db
from be4real.modules.auth.schemas.auth import (
    EmailRequest, LoginRequest, RegisterRequest, ResetPasswordRequest, Token, VerifyRequest
)
from be4real.modules.auth.services.auth import (
    authenticate, register_user, request_password_reset, reset_password,
    send_verification_code, verify_user
)
from be4real.modules.user_management.schemas.user import UserPublic

router = APIRouter()

@router.post("/register", response_model=Envelope[UserPublic])
def register(
    *,
    db: Session = Depends(get_db),
    user_in: RegisterRequest,
) -> Any:
    """Create an unverified account; a verification code must be requested next"""
    user = register_user(db, user_in)
    return success("User created", UserPublic.model_validate(user))

@router.post("/send-verification", response_model=Envelope[None])
def send_verification(
    *,
    db: Session = Depends(get_db),
    request_in: EmailRequest,
) -> Any:
    """Issue a new verification code to an unverified account"""
    send_verification_code(db, request_in.email)
    return success("New verification code sent")

@router.post("/verify", response_model=Envelope[Token])
def verify(
    *,
    db: Session = Depends(get_db),
    verify_in: VerifyRequest,
) -> Any:
    """Verify an account with its code and log the user in"""
    token = verify_user(db, verify_in.email, verify_in.code)
    return success("User verified", Token(access_token=token))

@router.post("/login", response_model=Envelope[Token])
def login(
    *,
    db: Session = Depends(get_db),
    login_in: LoginRequest,
) -> Any:
    """Exchange email and password for an access token"""
    token = authenticate(db, login_in.email, login_in.password)
    return success("Log in successful", Token(access_token=token))

@router.post("/forgot-password", response_model=Envelope[None])
def forgot_password(
    *,
    db: Session = Depends(get_db),
    request_in: EmailRequest,
) -> Any:
    """Issue a code for resetting the password"""
    request_password_reset(db, request_in.email)
    return success("Password reset code sent")

@router.post("/reset-password", response_model=Envelope[None])
def reset(
    *,
    db: Session = Depends(get_db),
    reset_in: ResetPasswordRequest,
) -> Any:
    """Set a new password using a code from forgot-password"""
    reset_password(db, reset_in)
    return success("Password reset")
