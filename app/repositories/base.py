"""
Base repository class with common CRUD operations using async SQLAlchemy.
Provides generic database operations that can be extended by specific repositories.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from app.database import Base
from typing import TypeVar, Generic, Optional, Dict, Any, Type, Iterable
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.
    Single-record writes commit; the *_pending helpers never commit so a
    service can group several steps into one transaction.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create and commit a new record.

        Args:
            obj_in: Dictionary of field values for the new record

        Returns:
            Created model instance
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        """Get a record by its ID, or None."""
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        obj = result.scalar_one_or_none()

        if obj is None:
            logger.debug(f"{self.model.__name__} with id {id} not found")

        return obj

    async def exists(self, id: uuid.UUID) -> bool:
        query = select(func.count(self.model.id)).where(self.model.id == id)
        result = await self.db.execute(query)
        return (result.scalar() or 0) > 0

    async def delete_by_ids_pending(self, ids: Iterable[uuid.UUID]) -> int:
        """
        Delete the records with the given IDs without committing.

        The caller owns the transaction and must commit or roll back.

        Returns:
            Number of rows deleted
        """
        id_list = list(ids)
        if not id_list:
            return 0

        stmt = (
            delete(self.model)
            .where(self.model.id.in_(id_list))
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        logger.debug(f"Deleted {result.rowcount} {self.model.__name__} records (pending commit)")
        return result.rowcount
