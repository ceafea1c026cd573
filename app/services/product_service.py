from typing import Any, List, Tuple, Type, TypeVar
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import InvalidInputError, NotFoundError
from app.dao.product_dao import ProductDAO, product_dao
from app.models.product import (
    Product, ProductCreate, ProductUpdate, ProductFilter, PaginationParams
)
import structlog

logger = structlog.get_logger()

InputType = TypeVar("InputType", bound=BaseModel)


def validate_input(model: Type[InputType], payload: Any) -> InputType:
    """Validates a decoded payload against the constraints declared on ``model``."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in error["loc"]) or "body", "message": error["msg"]}
            for error in e.errors()
        ]
        logger.warning("Input validation failed", model=model.__name__, errors=errors)
        raise InvalidInputError("invalid input", {"errors": errors}) from e


class ProductService:
    def __init__(self, product_dao: ProductDAO):
        self.product_dao = product_dao

    async def create_product(self, db: AsyncSession, product_in: Any) -> Product:
        product_create = validate_input(ProductCreate, product_in)
        product = await self.product_dao.create(db, obj_in=product_create.model_dump())
        logger.info("Product created successfully", product_id=product.id)
        return product

    async def get_product(self, db: AsyncSession, product_id: int) -> Product:
        try:
            return await self.product_dao.get_by_id(db, product_id)
        except NotFoundError:
            logger.warning("Product not found", product_id=product_id)
            raise

    async def list_products(
        self, db: AsyncSession, product_filter: ProductFilter, page: int, limit: int
    ) -> Tuple[List[Product], int]:
        pagination = validate_input(PaginationParams, {"page": page, "limit": limit})
        products, total_count = await self.product_dao.list(db, product_filter, pagination)
        logger.info(
            "Retrieved products",
            count=len(products),
            total_count=total_count,
            page=pagination.page,
            limit=pagination.limit,
        )
        return products, total_count

    async def update_product(self, db: AsyncSession, product_id: int, product_in: Any) -> None:
        product_update = validate_input(ProductUpdate, product_in)
        try:
            await self.product_dao.update(db, id=product_id, values=product_update.changes())
        except NotFoundError:
            logger.warning("Product not found for update", product_id=product_id)
            raise
        logger.info("Product updated successfully", product_id=product_id)

    async def delete_product(self, db: AsyncSession, product_id: int) -> None:
        try:
            await self.product_dao.delete(db, id=product_id)
        except NotFoundError:
            logger.warning("Product not found for delete", product_id=product_id)
            raise
        logger.info("Product deleted successfully", product_id=product_id)


product_service = ProductService(product_dao)


def get_product_service() -> ProductService:
    return product_service
