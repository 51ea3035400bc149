from typing import Optional

from pydantic import Field, field_validator

from domain.entities.base import DocumentModel, InputModel
from domain.schemas.user import UserResponse


class RegisterRequest(InputModel):
    """Schema for buyer registration"""
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Login email")
    password: str = Field(..., min_length=6, description="Plain password, hashed before storage")
    company_name: Optional[str] = None
    vat_id: Optional[str] = None

    @field_validator("name")
    def validate_name(cls, value):
        if not value or not value.strip():
            raise ValueError("Name must be a non-empty string")
        return value.strip()

    @field_validator("email")
    def validate_email(cls, value):
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("Invalid email format")
        return value


class LoginRequest(InputModel):
    email: str
    password: str

    @field_validator("email")
    def normalize_email(cls, value):
        return value.strip().lower()


class AuthResponse(DocumentModel):
    token: str = Field(..., description="Bearer access token")
    user: UserResponse
