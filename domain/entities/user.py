# domain/entities/user.py
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from domain.entities.base import Document


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(Document):
    name: str = Field(..., description="Display name of the user")
    email: str = Field(..., description="Login email, stored lowercase")
    password_hash: str = Field(..., description="bcrypt hash of the password")
    role: Role = Field(Role.USER, description="Role of the user (user/admin)")
    company_name: Optional[str] = Field(None, description="Company the buyer represents")
    vat_id: Optional[str] = Field(None, description="VAT identification number")

    @field_validator("email")
    def validate_email(cls, value):
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("Email must contain '@'")
        return value


class Actor(BaseModel):
    """The caller of an operation as resolved by the identity layer."""
    id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_user(cls, user: Dict[str, Any]) -> "Actor":
        return cls(id=str(user.get("_id") or user.get("id")), role=user.get("role") or Role.USER)
