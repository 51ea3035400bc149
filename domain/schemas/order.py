# domain/schemas/order.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from domain.entities.base import DocumentModel, InputModel
from domain.entities.order import Order, ShipmentPhase


class ItemReference(InputModel):
    """Addresses one line item by position or by its stable identifier."""
    index: Optional[int] = Field(None, ge=0, description="Position of the item in the order")
    item_id: Optional[str] = Field(None, description="Stable identifier of the item")

    @model_validator(mode="after")
    def check_reference(self):
        if (self.index is None) == (self.item_id is None):
            raise ValueError("Exactly one of index or itemId must be provided")
        return self


class PriceRangeInput(InputModel):
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None


class OrderItemInput(InputModel):
    name: str = Field(..., description="Display name of the product")
    qty: int = Field(1, description="Quantity; missing or below one becomes one")
    unit: Optional[str] = None
    price_range: Optional[PriceRangeInput] = None
    image: Optional[str] = None
    product_id: Optional[str] = None

    @model_validator(mode="before")
    def accept_cart_id(cls, data):
        # cart lines carry the product reference as "id"
        if isinstance(data, dict) and "id" in data:
            data = dict(data)
            product_id = data.pop("id")
            data.setdefault("productId", product_id)
        return data

    @field_validator("name")
    def validate_name(cls, value):
        if not value or not value.strip():
            raise ValueError("Item name must be a non-empty string")
        return value.strip()

    @field_validator("qty", mode="before")
    def default_blank_qty(cls, value):
        if value is None or value == "":
            return 1
        return value

    @field_validator("qty")
    def clamp_qty(cls, value):
        return max(value, 1)


class OrderCreate(InputModel):
    items: List[OrderItemInput] = Field(default_factory=list)
    note: Optional[str] = None


class PriceProposalInput(ItemReference):
    price: float = Field(..., ge=0, description="Proposed unit price")


class MessageCreate(InputModel):
    body: str = Field("", description="Message text")
    price_proposal: List[PriceProposalInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_content(self):
        if not self.body.strip() and not self.price_proposal:
            raise ValueError("A message needs a body or a price proposal")
        return self


class ProposalItemInput(ItemReference):
    unit_price: Optional[float] = Field(None, ge=0)
    qty: Optional[int] = Field(None, ge=1)


class ProposalCreate(InputModel):
    items: List[ProposalItemInput] = Field(default_factory=list)
    note: str = ""


class ShipmentUpdate(InputModel):
    phase: Optional[ShipmentPhase] = None
    note: Optional[str] = None
    tracking_id: Optional[str] = None
    eta: Optional[datetime] = None


class OwnerSummary(DocumentModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


class OrderResponse(Order):
    user: Optional[OwnerSummary] = Field(None, description="Owner resolved to display fields")
