from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from shared.responses import Money


class Address(BaseModel):
    street: str = Field(min_length=5)
    city: str = Field(min_length=2)
    state: str = Field(min_length=2)
    zip_code: str = Field(min_length=5)
    country: str = Field(min_length=2)


class OrderCreate(BaseModel):
    shipping_address: Address
    billing_address: Address
    payment_method: str = Field(min_length=1, max_length=50)
    notes: Optional[str] = None


class StatusUpdate(BaseModel):
    status: str = Field(pattern="^(pending|processing|shipped|delivered|cancelled)$")


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    name: str
    price: Money
    quantity: int

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    user_id: int
    status: str
    subtotal: Money
    tax: Money
    shipping: Money
    total: Money
    shipping_address: Address
    billing_address: Address
    payment_method: str
    payment_status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemResponse] = []

    class Config:
        from_attributes = True


class OrderData(BaseModel):
    order: OrderResponse


class OrderUser(BaseModel):
    email: str
    first_name: str
    last_name: str

    class Config:
        from_attributes = True


class AdminOrderResponse(OrderResponse):
    user: Optional[OrderUser] = None
