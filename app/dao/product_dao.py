from typing import List, Tuple
from sqlmodel import select
from sqlalchemy import func, literal, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import StorageError
from app.dao.base_dao import BaseDAO
from app.models.product import Product, ProductFilter, PaginationParams
import structlog

logger = structlog.get_logger()

TEXT_SEARCH_CONFIG = "english"
LIKE_ESCAPE = "/"


def escape_like(term: str) -> str:
    """Makes ``%`` and ``_`` in user input match literally."""
    for char in (LIKE_ESCAPE, "%", "_"):
        term = term.replace(char, LIKE_ESCAPE + char)
    return term


def filter_conditions(product_filter: ProductFilter) -> List:
    """Collects one predicate per supplied filter field, combined with AND by the caller."""
    conditions = []

    if product_filter.category:
        category = func.unnest(Product.categories).column_valued("category")
        conditions.append(
            select(literal(1))
            .where(category.ilike(f"%{escape_like(product_filter.category)}%", escape=LIKE_ESCAPE))
            .exists()
        )
    if product_filter.min_price is not None:
        conditions.append(Product.price >= product_filter.min_price)
    if product_filter.max_price is not None:
        conditions.append(Product.price <= product_filter.max_price)
    if product_filter.search:
        query = func.plainto_tsquery(TEXT_SEARCH_CONFIG, product_filter.search)
        conditions.append(
            or_(
                func.to_tsvector(TEXT_SEARCH_CONFIG, Product.name).op("@@")(query),
                func.to_tsvector(TEXT_SEARCH_CONFIG, Product.description).op("@@")(query),
            )
        )

    return conditions


class ProductDAO(BaseDAO[Product]):
    def __init__(self):
        super().__init__(Product)

    def list_statement(self, conditions: List, pagination: PaginationParams):
        return (
            select(Product)
            .where(*conditions)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
        )

    def count_statement(self, conditions: List):
        return select(func.count()).select_from(Product).where(*conditions)

    async def list(
        self, db: AsyncSession, product_filter: ProductFilter, pagination: PaginationParams
    ) -> Tuple[List[Product], int]:
        """Returns one page of matching products plus the count of all matching rows."""
        conditions = filter_conditions(product_filter)
        try:
            result = await db.execute(self.list_statement(conditions, pagination))
            products = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Error listing products", error=str(e))
            raise StorageError("error listing products") from e

        try:
            result = await db.execute(self.count_statement(conditions))
            total_count = result.scalar_one()
        except SQLAlchemyError as e:
            logger.error("Error counting products", error=str(e))
            raise StorageError("error counting products") from e

        return products, total_count


product_dao = ProductDAO()
