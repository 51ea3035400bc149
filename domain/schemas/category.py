# domain/schemas/category.py
from typing import Optional

from pydantic import Field, field_validator

from domain.entities.base import InputModel


class CategoryCreate(InputModel):
    name: str = Field(..., description="Name of the category")
    slug: Optional[str] = Field(None, description="URL slug; derived from the name when omitted")
    description: Optional[str] = None
    image: Optional[str] = None
    order: int = Field(0, description="Sort position in listings")

    @field_validator("name")
    def validate_name(cls, value):
        if not value or not value.strip():
            raise ValueError("Name must be a non-empty string")
        return value.strip()


class CategoryUpdate(InputModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    order: Optional[int] = None

    @field_validator("name")
    def validate_name(cls, value):
        if value is not None and not value.strip():
            raise ValueError("Name must be a non-empty string if provided")
        return value.strip() if value is not None else value
