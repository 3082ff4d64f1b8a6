from typing import Any, Iterable, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from marketplace_messaging.models.api.users import UserSummary
from marketplace_messaging.models.db.participant_model import ParticipantModel
from marketplace_messaging.repositories.base_repository import BaseRepository


class ParticipantRepository(BaseRepository[ParticipantModel, UserSummary]):
    """Repository for conversation membership."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ParticipantModel)

    async def is_participant(self, conversation_id: UUID, user_id: UUID) -> bool:
        query = select(self.model_class.id).where(
            self.model_class.conversation_id == conversation_id,
            self.model_class.user_id == user_id,
        )
        result = await self.db.execute(query)
        return result.first() is not None

    def other_participant(
        self, participants: Iterable[ParticipantModel], viewer_id: UUID
    ) -> Optional[UserSummary]:
        """Public identity of the first participant who is not the viewer.

        Returns None rather than failing when no such user can be resolved.
        """
        for participant in participants:
            if participant.user_id != viewer_id and participant.user is not None:
                return self._to_pydantic(participant)
        return None

    def _to_pydantic(self, db_model: Any) -> UserSummary:
        """Convert a ParticipantModel to the public identity of its user."""
        user = db_model.user
        return UserSummary(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            avatar=user.avatar,
        )
