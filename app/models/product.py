from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, Index, Numeric, Text, func
from sqlalchemy.dialects.postgresql import ARRAY
import pydantic
from pydantic import BaseModel, ConfigDict, StringConstraints, field_validator, model_validator
from typing import Annotated, List, Optional
from datetime import datetime
from decimal import Decimal


ProductName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
CategoryLabel = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Price = Annotated[Decimal, pydantic.Field(ge=0, max_digits=10, decimal_places=2)]


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    categories: List[str] = Field(sa_column=Column(ARRAY(Text), nullable=False))
    created_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), nullable=False),
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), nullable=False),
    )


Index("idx_products_categories", Product.__table__.c.categories, postgresql_using="gin")
Index("idx_products_name", func.to_tsvector("english", Product.__table__.c.name), postgresql_using="gin")
Index("idx_products_description", func.to_tsvector("english", Product.__table__.c.description), postgresql_using="gin")


class ProductCreate(BaseModel):
    name: ProductName
    description: str
    price: Price
    categories: Annotated[List[CategoryLabel], pydantic.Field(min_length=1)]


class ProductUpdate(BaseModel):
    """Partial update: only fields present in the payload are written."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[ProductName] = None
    description: Optional[str] = None
    price: Optional[Price] = None
    categories: Optional[Annotated[List[CategoryLabel], pydantic.Field(min_length=1)]] = None

    @model_validator(mode="after")
    def check_fields(self) -> "ProductUpdate":
        if not self.model_fields_set:
            raise ValueError("no fields to update")
        for field in self.model_fields_set:
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ProductFilter(BaseModel):
    category: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    search: Optional[str] = None

    @field_validator("category", "search")
    @classmethod
    def blank_as_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class PaginationParams(BaseModel):
    page: int = pydantic.Field(ge=1)
    limit: int = pydantic.Field(ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
