from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_messaging.models.api.users import UserSummary
from marketplace_messaging.models.db.user_model import UserModel
from marketplace_messaging.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[UserModel, UserSummary]):
    """Read access to users owned by the identity provider."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, UserModel)

    def to_summary(self, db_model: Optional[Any]) -> Optional[UserSummary]:
        return self._to_pydantic(db_model) if db_model is not None else None

    def _to_pydantic(self, db_model: Any) -> UserSummary:
        """Convert SQLAlchemy UserModel to its public UserSummary."""
        return UserSummary(
            id=db_model.id,
            first_name=db_model.first_name,
            last_name=db_model.last_name,
            avatar=db_model.avatar,
        )
