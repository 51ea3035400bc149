# domain/schemas/quote.py
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from domain.entities.base import InputModel
from domain.entities.quote import ProductQuote, QuoteStatus


class QuoteCreate(InputModel):
    name: str
    email: str
    phone: Optional[str] = None
    country: Optional[str] = None
    product_id: str = Field(..., description="Product the quote is requested for")

    @field_validator("name", "product_id")
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


class QuoteStatusUpdate(InputModel):
    status: QuoteStatus


class ProductSummary(BaseModel):
    id: str
    name: Optional[str] = None
    slug: Optional[str] = None


class QuoteResponse(ProductQuote):
    product: Optional[ProductSummary] = None
