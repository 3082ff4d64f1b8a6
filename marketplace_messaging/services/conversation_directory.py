import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_messaging.exceptions import (
    ConversationNotFoundError,
    MessageValidationError,
    RecipientNotFoundError,
    UnknownViewerError,
)
from marketplace_messaging.models.db.conversation_model import ConversationModel
from marketplace_messaging.repositories.conversation_repository import (
    ConversationRepository,
)
from marketplace_messaging.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class ConversationDirectory:
    """Finds or creates the two-party conversation a viewer posts into."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.conversation_repo = ConversationRepository(db)
        self.user_repo = UserRepository(db)

    async def resolve_conversation(
        self,
        viewer_id: UUID,
        recipient_id: UUID,
        conversation_id: Optional[UUID] = None,
    ) -> ConversationModel:
        """
        Resolve the conversation for a send:
        1. An explicit conversation id must belong to the viewer
        2. Otherwise reuse the conversation with exactly {viewer, recipient}
        3. Otherwise create it

        Creation is flushed but not committed; the caller's commit makes it
        durable together with the first message.
        """
        if conversation_id is not None:
            return await self.get_participant_conversation(viewer_id, conversation_id)

        if recipient_id == viewer_id:
            raise MessageValidationError(
                "Cannot start a conversation with yourself",
                [
                    {
                        "loc": ["body", "recipientId"],
                        "msg": "Recipient must be a different user",
                    }
                ],
            )

        conversation = await self.conversation_repo.get_by_participants(
            [viewer_id, recipient_id]
        )
        if conversation is not None:
            return conversation

        if await self.user_repo.get_by_id(viewer_id) is None:
            raise UnknownViewerError()
        if await self.user_repo.get_by_id(recipient_id) is None:
            raise RecipientNotFoundError()

        return await self._create_conversation(viewer_id, recipient_id)

    async def get_participant_conversation(
        self, viewer_id: UUID, conversation_id: UUID
    ) -> ConversationModel:
        """Fetch a conversation the viewer takes part in.

        Missing conversations and conversations of other users raise the
        same error.
        """
        conversation = await self.conversation_repo.get_for_participant(
            conversation_id, viewer_id
        )
        if conversation is None:
            raise ConversationNotFoundError()
        return conversation

    async def _create_conversation(
        self, viewer_id: UUID, recipient_id: UUID
    ) -> ConversationModel:
        try:
            conversation = await self.conversation_repo.create_for_pair(
                viewer_id, recipient_id
            )
        except IntegrityError:
            # A concurrent send created the pair first; use that one
            await self.db.rollback()
            conversation = await self.conversation_repo.get_by_participants(
                [viewer_id, recipient_id]
            )
            if conversation is None:
                raise
            logger.info(
                "Reusing conversation %s created concurrently for %s and %s",
                conversation.id,
                viewer_id,
                recipient_id,
            )
            return conversation

        logger.info(
            "Created conversation %s between %s and %s",
            conversation.id,
            viewer_id,
            recipient_id,
        )
        return conversation
