# module confpay.orders.models
"""Modèles (lecture seule) des commandes transmises par le système d'inscription."""
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class LineItem(BaseModel):
    id: str
    name: str
    description: str = ""
    price: Decimal
    quantity: int = Field(ge=0)

    @field_validator("id", mode="before")
    def _coerce_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("description", mode="before")
    def _none_to_empty(cls, v):
        return v or ""


class Order(BaseModel):
    id: str
    payment_token: str
    items: List[LineItem] = Field(default_factory=list)
    total: Decimal
    currency: Optional[str] = None

    @field_validator("id", mode="before")
    def _coerce_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("currency", mode="before")
    def _upper_currency(cls, v):
        return (v or "").strip().upper() or None
