from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from marketplace_messaging.models.api.conversations import ConversationResponse
from marketplace_messaging.models.db.conversation_model import (
    ConversationModel,
    make_pair_key,
)
from marketplace_messaging.models.db.participant_model import ParticipantModel
from marketplace_messaging.repositories.base_repository import BaseRepository


class ConversationRepository(BaseRepository[ConversationModel, ConversationResponse]):
    """Repository for conversation operations.

    Conversation rows are returned as models: the API shape depends on who is
    looking, so conversion happens in the feed service.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db, ConversationModel)

    def _with_participants(self, query):  # type: ignore[no-untyped-def]
        # Rows already in the session are repopulated too, so participant users
        # are always loaded and never lazy loaded later
        return query.options(
            selectinload(self.model_class.participants).selectinload(
                ParticipantModel.user
            )
        ).execution_options(populate_existing=True)

    def _for_participant(self, user_id: UUID):  # type: ignore[no-untyped-def]
        return self.model_class.participants.any(ParticipantModel.user_id == user_id)

    async def get_by_id(self, id: UUID) -> Optional[ConversationModel]:
        """Get a conversation by ID with participants and their users loaded."""
        query = self._with_participants(
            select(self.model_class).where(self.model_class.id == id)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_for_participant(
        self, conversation_id: UUID, user_id: UUID
    ) -> Optional[ConversationModel]:
        """Get a conversation only if ``user_id`` is one of its participants."""
        query = self._with_participants(
            select(self.model_class).where(
                self.model_class.id == conversation_id,
                self._for_participant(user_id),
            )
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_participants(
        self, user_ids: Sequence[UUID]
    ) -> Optional[ConversationModel]:
        """Find the conversation whose participant set is exactly ``user_ids``.

        Conversations with an extra member, or with only some of the users,
        do not match.
        """
        wanted = list(set(user_ids))
        matching_ids = (
            select(ParticipantModel.conversation_id)
            .group_by(ParticipantModel.conversation_id)
            .having(func.count(ParticipantModel.id) == len(wanted))
            .having(
                func.sum(case((ParticipantModel.user_id.in_(wanted), 1), else_=0))
                == len(wanted)
            )
        )
        query = self._with_participants(
            select(self.model_class)
            .where(self.model_class.id.in_(matching_ids))
            .order_by(self.model_class.created_at)
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.scalars().first()

    async def create_for_pair(
        self, first_user_id: UUID, second_user_id: UUID
    ) -> ConversationModel:
        """Create a two-party conversation with empty summary fields.

        Raises ``IntegrityError`` on flush if the pair already has one.
        """
        conversation = ConversationModel(
            pair_key=make_pair_key(first_user_id, second_user_id),
            last_message=None,
            last_message_at=None,
            participants=[
                ParticipantModel(user_id=first_user_id),
                ParticipantModel(user_id=second_user_id),
            ],
        )
        await self.add(conversation)
        return await self.get_by_id(conversation.id)  # type: ignore[return-value]

    async def update_summary(
        self, conversation: ConversationModel, content: str, sent_at: datetime
    ) -> ConversationModel:
        """Record the latest message on the conversation row."""
        conversation.last_message = content
        conversation.last_message_at = sent_at
        conversation.updated_at = sent_at
        await self.db.flush()
        return conversation

    async def list_for_participant(
        self, user_id: UUID, limit: int = 20, offset: int = 0
    ) -> List[ConversationModel]:
        """Conversations of ``user_id``, most recently active first.

        Conversations without messages sort last, newest first among them.
        """
        query = self._with_participants(
            select(self.model_class)
            .where(self._for_participant(user_id))
            .order_by(
                self.model_class.last_message_at.desc().nulls_last(),
                self.model_class.created_at.desc(),
                self.model_class.id.desc(),
            )
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_for_participant(self, user_id: UUID) -> int:
        query = (
            select(func.count())
            .select_from(self.model_class)
            .where(self._for_participant(user_id))
        )
        result = await self.db.execute(query)
        return result.scalar_one()
