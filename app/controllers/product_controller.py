from typing import Optional, Tuple
from decimal import Decimal
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import get_async_session
from app.models.product import ProductFilter
from app.schemas.product_schemas import (
    ProductCreateRequest,
    ProductListResponse,
    ProductResponse,
    ProductUpdateRequest,
)
from app.services.product_service import ProductService, get_product_service
import structlog

logger = structlog.get_logger()

router = APIRouter(prefix="/products", tags=["Products"])

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def resolve_pagination(page: int, limit: int) -> Tuple[int, int]:
    """Out-of-range values fall back to the defaults instead of failing the request."""
    if page < 1:
        page = DEFAULT_PAGE
    if limit < 1 or limit > MAX_LIMIT:
        limit = DEFAULT_LIMIT
    return page, limit


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProductResponse)
async def create_product(
    product_in: ProductCreateRequest,
    db: AsyncSession = Depends(get_async_session),
    service: ProductService = Depends(get_product_service),
):
    """Create a new product"""
    product = await service.create_product(db, product_in)
    return ProductResponse.model_validate(product)


@router.get("", response_model=ProductListResponse)
async def list_products(
    category_id: Optional[str] = Query(None, description="Case-insensitive category substring"),
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    search: Optional[str] = None,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    db: AsyncSession = Depends(get_async_session),
    service: ProductService = Depends(get_product_service),
):
    """List products matching every supplied filter, most recent first"""
    product_filter = ProductFilter(
        category=category_id,
        min_price=min_price,
        max_price=max_price,
        search=search,
    )
    page, limit = resolve_pagination(page, limit)
    products, total_count = await service.list_products(db, product_filter, page, limit)
    return ProductListResponse(
        products=[ProductResponse.model_validate(product) for product in products],
        total_count=total_count,
        page=page,
        limit=limit,
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_async_session),
    service: ProductService = Depends(get_product_service),
):
    product = await service.get_product(db, product_id)
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def update_product(
    product_id: int,
    product_in: ProductUpdateRequest,
    db: AsyncSession = Depends(get_async_session),
    service: ProductService = Depends(get_product_service),
):
    """Partially update a product; fields missing from the body are left unchanged"""
    await service.update_product(db, product_id, product_in)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_async_session),
    service: ProductService = Depends(get_product_service),
):
    await service.delete_product(db, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
