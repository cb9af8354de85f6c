# storecart/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


# camelCase on the wire, snake_case in Python
class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# quantities land in an INTEGER column
MAX_QUANTITY = 2_147_483_647


# 🛒 Request bodies
class CartCreateRequest(CamelModel):
    user_id: str = Field(..., min_length=1)


class CartAddRequest(CamelModel):
    user_id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    # matches the Numeric(10, 2) line price column
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    image: Optional[str] = ""
    category: Optional[str] = ""


class ProductRefRequest(CamelModel):
    product_id: str = Field(..., min_length=1)


class QuantityUpdateRequest(CamelModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., le=MAX_QUANTITY)


# 📦 Responses
class CartLineOut(CamelModel):
    product_id: str
    name: str
    price: float
    quantity: int
    image: str = ""
    category: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CartOut(CamelModel):
    id: int
    user_id: str
    items: List[CartLineOut]
    total_amount: float
    total_items: int
    formatted_total: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CartSummary(CamelModel):
    total_items: int
    total_amount: float
    item_count: int
    is_empty: bool


class CartData(CamelModel):
    cart: CartOut
    summary: CartSummary
    formatted_total: str
    is_empty: Optional[bool] = None


class CartItemsData(CamelModel):
    items: List[CartLineOut]
    item_count: int


class CartSummaryData(CamelModel):
    summary: CartSummary
    formatted_total: str
