# domain/schemas/product.py
from typing import List, Optional

from pydantic import Field, field_validator

from domain.entities.base import InputModel
from domain.entities.product import DeliveryDetails, Dimensions, Packaging, PortDetails
from domain.schemas.order import PriceRangeInput


class ProductCreate(InputModel):
    name: str = Field(..., description="Name of the product")
    slug: Optional[str] = Field(None, description="URL slug; derived from the name when omitted")
    category: Optional[str] = None
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    unit: str = "per kg"
    price_range: PriceRangeInput = Field(default_factory=PriceRangeInput)
    origin_country: Optional[str] = None
    dimensions: Optional[Dimensions] = None
    packaging: Optional[Packaging] = None
    port_details: Optional[PortDetails] = None
    delivery_details: Optional[DeliveryDetails] = None
    certifications: List[str] = Field(default_factory=list)

    @field_validator("name")
    def validate_name(cls, value):
        if not value or not value.strip():
            raise ValueError("Name must be a non-empty string")
        return value.strip()


class ProductUpdate(InputModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    images: Optional[List[str]] = None
    unit: Optional[str] = None
    price_range: Optional[PriceRangeInput] = None
    origin_country: Optional[str] = None
    dimensions: Optional[Dimensions] = None
    packaging: Optional[Packaging] = None
    port_details: Optional[PortDetails] = None
    delivery_details: Optional[DeliveryDetails] = None
    certifications: Optional[List[str]] = None

    @field_validator("name")
    def validate_name(cls, value):
        if value is not None and not value.strip():
            raise ValueError("Name must be a non-empty string if provided")
        return value.strip() if value is not None else value
