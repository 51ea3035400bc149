# domain/schemas/inquiry.py
from typing import List, Optional

from pydantic import Field, field_validator

from domain.entities.inquiry import Inquiry
from domain.entities.base import InputModel
from domain.schemas.order import ItemReference, OwnerSummary


class InquiryItemInput(InputModel):
    product_id: str = Field(..., description="Catalog product ID")
    quantity: int = Field(..., ge=1)
    unit: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("product_id")
    def validate_product_id(cls, value):
        if not value or not value.strip():
            raise ValueError("productId must be a non-empty string")
        return value.strip()


class InquiryCreate(InputModel):
    items: List[InquiryItemInput] = Field(default_factory=list)
    note: Optional[str] = None


class InquiryMessageCreate(InputModel):
    body: str = ""
    price_proposal: Optional[float] = Field(None, ge=0)


class AgreementInput(ItemReference):
    price: float = Field(..., ge=0)


class InquiryAgree(InputModel):
    agreements: List[AgreementInput] = Field(default_factory=list)


class InquiryResponse(Inquiry):
    user: Optional[OwnerSummary] = None
