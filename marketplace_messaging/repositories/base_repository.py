from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from marketplace_messaging.database import Base

ModelType = TypeVar("ModelType", bound=Base)
PydanticType = TypeVar("PydanticType", bound=BaseModel)


class BaseRepository(Generic[ModelType, PydanticType]):
    """Generic base repository with common CRUD operations.

    Repositories only flush. Committing is left to the service that owns the
    unit of work, so several writes can land in one transaction.
    """

    def __init__(self, db: AsyncSession, model_class: Any):
        self.db = db
        self.model_class = model_class

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """Get a single record by ID."""
        query = select(self.model_class).where(self.model_class.id == id)  # type: ignore
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def add(self, db_model: ModelType) -> ModelType:
        """Stage a new record and flush it so defaults and ids are populated."""
        self.db.add(db_model)
        await self.db.flush()
        return db_model

    def _to_pydantic(self, db_model: ModelType) -> PydanticType:
        """Convert SQLAlchemy model to Pydantic model.

        This should be overridden in subclasses for specific conversion logic.
        """
        raise NotImplementedError
