from typing import Any, Dict, Generic, TypeVar, Type
from sqlmodel import SQLModel, select
from sqlalchemy import delete, func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import NotFoundError, StorageError
import structlog

logger = structlog.get_logger()

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseDAO(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model
        self.name = model.__name__.lower()

    def not_found(self, id: Any) -> NotFoundError:
        return NotFoundError(f"{self.name} not found", {"id": id})

    async def create(self, db: AsyncSession, *, obj_in: Dict[str, Any]) -> ModelType:
        try:
            db_obj = self.model(**obj_in)
            db.add(db_obj)
            await db.commit()
            # Loads the server-generated id and timestamps
            await db.refresh(db_obj)
            logger.info(f"Created {self.model.__name__}", id=db_obj.id)
            return db_obj
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error creating {self.model.__name__}", error=str(e))
            raise StorageError(f"error creating {self.name}") from e

    async def get_by_id(self, db: AsyncSession, id: Any) -> ModelType:
        try:
            result = await db.execute(select(self.model).where(self.model.id == id))
            db_obj = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self.model.__name__} by id", id=id, error=str(e))
            raise StorageError(f"error getting {self.name}") from e
        if db_obj is None:
            raise self.not_found(id)
        return db_obj

    def update_statement(self, id: Any, values: Dict[str, Any]):
        values = dict(values)
        if "updated_at" in self.model.__table__.c:
            values["updated_at"] = func.now()
        return (
            update(self.model)
            .where(self.model.id == id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

    async def update(self, db: AsyncSession, *, id: Any, values: Dict[str, Any]) -> None:
        """Writes only the given columns, raises NotFoundError when no row matched."""
        try:
            result = await db.execute(self.update_statement(id, values))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error updating {self.model.__name__}", id=id, error=str(e))
            raise StorageError(f"error updating {self.name}") from e
        if result.rowcount == 0:
            raise self.not_found(id)
        logger.info(f"Updated {self.model.__name__}", id=id, fields=sorted(values))

    async def delete(self, db: AsyncSession, *, id: Any) -> None:
        try:
            result = await db.execute(delete(self.model).where(self.model.id == id))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error deleting {self.model.__name__}", id=id, error=str(e))
            raise StorageError(f"error deleting {self.name}") from e
        if result.rowcount == 0:
            raise self.not_found(id)
        logger.info(f"Deleted {self.model.__name__}", id=id)
