from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from services.product_service.schemas import ProductResponse
from shared.responses import Money


class CartItemCreate(BaseModel):
    product_id: int = Field(gt=0)
    quantity: int = Field(default=1, gt=0)


class CartItemUpdate(BaseModel):
    quantity: int = Field(gt=0)


class CartLine(BaseModel):
    """What checkout needs from a cart row."""
    product_id: int
    quantity: int


class CartItemResponse(BaseModel):
    id: int
    product_id: int
    quantity: int
    product: Optional[ProductResponse] = None

    class Config:
        from_attributes = True


class CartItemData(BaseModel):
    item: CartItemResponse


class CartResponse(BaseModel):
    items: List[CartItemResponse]
    subtotal: Money = Decimal("0.00")
    item_count: int = 0


class MessageData(BaseModel):
    message: str
