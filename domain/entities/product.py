# domain/entities/product.py
from typing import List, Optional

from pydantic import Field, field_validator

from domain.entities.base import Document, DocumentModel
from domain.entities.order import PriceRange


class Dimensions(DocumentModel):
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    unit: str = "cm"


class Packaging(DocumentModel):
    type: Optional[str] = None
    units_per_pack: Optional[int] = None
    weight_per_pack: Optional[float] = None
    weight_unit: str = "kg"
    details: Optional[str] = None


class PortDetails(DocumentModel):
    origin: Optional[str] = None
    destination: Optional[str] = None


class DeliveryDetails(DocumentModel):
    incoterms: Optional[str] = None
    lead_time_days: Optional[int] = None
    notes: Optional[str] = None


class Product(Document):
    """Entity representing a catalog product with a negotiable price range."""
    name: str = Field(..., description="Name of the product")
    slug: str = Field(..., description="Unique URL slug")
    category: Optional[str] = Field(None, description="Category name")
    description: Optional[str] = Field(None, description="Product description")
    images: List[str] = Field(default_factory=list, description="Image URLs")
    unit: str = Field("per kg", description="Unit the price range refers to")
    price_range: PriceRange = Field(..., description="Indicative unit price range")
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
