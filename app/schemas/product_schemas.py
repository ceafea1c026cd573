from pydantic import BaseModel, ConfigDict, field_serializer
from typing import Optional, List
from decimal import Decimal
from datetime import datetime


class ProductCreateRequest(BaseModel):
    name: str
    description: str
    price: Decimal
    categories: List[str]


class ProductUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    categories: Optional[List[str]] = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str]
    price: Decimal
    categories: List[str]
    created_at: datetime
    updated_at: datetime

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    total_count: int
    page: int
    limit: int


class HealthResponse(BaseModel):
    status: str
    timestamp: str
