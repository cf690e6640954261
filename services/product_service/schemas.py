from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from shared.responses import Money


class ProductCreate(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    stock: int = Field(ge=0)


class StockUpdate(BaseModel):
    quantity: int = Field(gt=0)


class ProductResponse(BaseModel):
    id: int
    name: str
    price: Money
    stock: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductData(BaseModel):
    product: ProductResponse


class ProductListData(BaseModel):
    products: List[ProductResponse]
