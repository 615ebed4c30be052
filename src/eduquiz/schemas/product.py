"""Pydantic schemas for the reward catalogue."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductCreate(BaseModel):
    """Incoming payload for adding a product."""

    product_name: str = Field(..., min_length=1, max_length=200)
    original_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(None, max_length=100)
    is_active: bool = True


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    product_name: str
    original_price: Decimal
    category: Optional[str]
    is_active: bool
    created_at: datetime


class ProductList(BaseModel):
    products: List[ProductRead]
    count: int
