from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from services.order_service.schemas import OrderResponse


class PaymentDetails(BaseModel):
    card_number: Optional[str] = None
    expiry_month: Optional[str] = None
    expiry_year: Optional[str] = None
    cvv: Optional[str] = None
    paypal_email: Optional[EmailStr] = None


class PaymentCreate(BaseModel):
    order_id: int = Field(gt=0)
    payment_details: Optional[PaymentDetails] = None


class PaymentResponse(BaseModel):
    success: bool = True
    transaction_id: str
    order: OrderResponse


class PaymentMethod(BaseModel):
    id: str
    name: str
    description: str
    icon: str


class PaymentMethodsData(BaseModel):
    methods: List[PaymentMethod]
