from typing import List, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_messaging.exceptions import ConversationNotFoundError
from marketplace_messaging.models.api.conversations import (
    ConversationListResponse,
    ConversationResponse,
)
from marketplace_messaging.models.api.pagination import (
    DEFAULT_CONVERSATION_PAGE_SIZE,
    Pagination,
    page_offset,
)
from marketplace_messaging.models.db.conversation_model import ConversationModel
from marketplace_messaging.repositories.conversation_repository import (
    ConversationRepository,
)
from marketplace_messaging.repositories.message_repository import MessageRepository
from marketplace_messaging.repositories.participant_repository import (
    ParticipantRepository,
)
from marketplace_messaging.repositories.user_repository import UserRepository
from marketplace_messaging.services.paging import validate_paging


class ConversationFeed:
    """Read-only listing of a viewer's conversations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.conversation_repo = ConversationRepository(db)
        self.message_repo = MessageRepository(db)
        self.participant_repo = ParticipantRepository(db)
        self.user_repo = UserRepository(db)

    async def list_conversations(
        self,
        viewer_id: UUID,
        page: int = 1,
        limit: int = DEFAULT_CONVERSATION_PAGE_SIZE,
    ) -> ConversationListResponse:
        """
        List the viewer's conversations, most recently active first:

        1. Count and fetch the requested page
        2. Attach the other participant, unread count and last sender
        """
        validate_paging(page, limit)

        total_count = await self.conversation_repo.count_for_participant(viewer_id)
        conversations = await self.conversation_repo.list_for_participant(
            viewer_id, limit=limit, offset=page_offset(page, limit)
        )
        items = await self._build_items(conversations, viewer_id)

        return ConversationListResponse(
            conversations=items,
            pagination=Pagination.build(page, limit, total_count),
        )

    async def get_conversation(
        self, viewer_id: UUID, conversation_id: UUID
    ) -> ConversationResponse:
        conversation = await self.conversation_repo.get_for_participant(
            conversation_id, viewer_id
        )
        if conversation is None:
            raise ConversationNotFoundError()
        items = await self._build_items([conversation], viewer_id)
        return items[0]

    async def _build_items(
        self, conversations: Sequence[ConversationModel], viewer_id: UUID
    ) -> List[ConversationResponse]:
        conversation_ids = [conversation.id for conversation in conversations]
        unread_counts = await self.message_repo.unread_counts(conversation_ids, viewer_id)
        last_senders = await self.message_repo.latest_senders(conversation_ids)

        return [
            ConversationResponse(
                id=conversation.id,
                last_message=conversation.last_message,
                last_message_at=conversation.last_message_at,
                unread_count=unread_counts.get(conversation.id, 0),
                participant=self.participant_repo.other_participant(
                    conversation.participants, viewer_id
                ),
                last_message_sender=self.user_repo.to_summary(
                    last_senders.get(conversation.id)
                ),
                created_at=conversation.created_at,
                updated_at=conversation.updated_at,
            )
            for conversation in conversations
        ]
