from pydantic import BaseModel, EmailStr, Field, field_validator

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

def _normalize_email(email: str) -> str:
    """Normalize email to lowercase."""
    return email.strip().lower() if isinstance(email, str) else email

def _strip(value: str) -> str:
    return value.strip() if isinstance(value, str) else value

class EmailRequest(BaseModel):
    email: EmailStr

    normalize_email = field_validator("email", mode="before")(_normalize_email)

class RegisterRequest(EmailRequest):
    username: str = Field(..., min_length=3, max_length=32)
    password: str = Field(..., min_length=8, max_length=256)

    strip_fields = field_validator("username", "password", mode="before")(_strip)

class LoginRequest(EmailRequest):
    password: str = Field(..., min_length=8, max_length=256)

    strip_fields = field_validator("password", mode="before")(_strip)

class VerifyRequest(EmailRequest):
    code: str = Field(..., min_length=6, max_length=6)

    strip_fields = field_validator("code", mode="before")(_strip)

class ResetPasswordRequest(VerifyRequest):
    new_password: str = Field(..., min_length=8, max_length=256)

    strip_new_password = field_validator("new_password", mode="before")(_strip)
