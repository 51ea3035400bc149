# domain/schemas/contact.py
from typing import Optional

from pydantic import Field, field_validator

from domain.entities.base import InputModel
from domain.entities.contact_message import ContactStatus


class ContactCreate(InputModel):
    name: str
    email: str
    company: str = ""
    message: str
    source: str = "website"
    hp: Optional[str] = Field(None, description="Honeypot; humans leave it empty")
    hcaptcha_token: Optional[str] = Field(None, description="hCaptcha response token from the widget")

    @field_validator("name", "message")
    def validate_required(cls, value):
        if not value or not value.strip():
            raise ValueError("Field must be a non-empty string")
        return value.strip()

    @field_validator("email")
    def validate_email(cls, value):
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("Invalid email format")
        return value


class ContactStatusUpdate(InputModel):
    status: ContactStatus
