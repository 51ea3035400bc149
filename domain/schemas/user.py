# domain/schemas/user.py
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from domain.entities.base import DocumentModel


class UserResponse(DocumentModel):
    id: str = Field(..., description="Unique identifier of the user as a string")
    name: str = Field(..., description="Display name of the user")
    email: str = Field(..., description="Login email of the user")
    role: str = Field(..., description="Role of the user (user/admin)")
    company_name: Optional[str] = None
    vat_id: Optional[str] = None
    created_at: Optional[datetime] = Field(None, description="Creation time (UTC)")
    updated_at: Optional[datetime] = Field(None, description="Last update time (UTC)")

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "UserResponse":
        """Build the public view of a user, never exposing the password hash."""
        return cls(
            id=str(document["_id"]),
            name=document.get("name", ""),
            email=document.get("email", ""),
            role=document.get("role", "user"),
            company_name=document.get("companyName"),
            vat_id=document.get("vatId"),
            created_at=document.get("createdAt"),
            updated_at=document.get("updatedAt"),
        )
