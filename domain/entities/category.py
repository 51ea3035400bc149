# domain/entities/category.py
from typing import Optional

from pydantic import Field, field_validator

from domain.entities.base import Document


class Category(Document):
    """Entity representing a product category in the catalog."""
    name: str = Field(..., description="Name of the category")
    slug: str = Field(..., description="Unique URL slug of the category")
    description: Optional[str] = Field(None, description="Optional description of the category")
    image: Optional[str] = Field(None, description="Image URL of the category")
    order: int = Field(0, description="Sort position in listings")

    @field_validator("name")
    def validate_name(cls, value):
        """Ensure name is a non-empty string."""
        if not value or not isinstance(value, str) or not value.strip():
            raise ValueError("Name must be a non-empty string")
        return value.strip()
