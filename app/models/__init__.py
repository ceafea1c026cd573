# Import all models for easy access
from .product import (
    Product, ProductCreate, ProductUpdate, ProductFilter, PaginationParams
)

__all__ = [
    "Product", "ProductCreate", "ProductUpdate", "ProductFilter", "PaginationParams",
]
