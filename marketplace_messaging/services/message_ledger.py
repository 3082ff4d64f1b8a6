import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_messaging.exceptions import (
    MessageNotFoundError,
    MessageValidationError,
    NotParticipantError,
)
from marketplace_messaging.models.api.messages import (
    AttachmentSchema,
    MessageListResponse,
    MessageResponse,
)
from marketplace_messaging.models.api.pagination import (
    DEFAULT_MESSAGE_PAGE_SIZE,
    Pagination,
    page_offset,
)
from marketplace_messaging.models.db.conversation_model import ConversationModel
from marketplace_messaging.models.db.timestamps import utcnow
from marketplace_messaging.repositories.conversation_repository import (
    ConversationRepository,
)
from marketplace_messaging.repositories.message_repository import MessageRepository
from marketplace_messaging.repositories.participant_repository import (
    ParticipantRepository,
)
from marketplace_messaging.services.paging import validate_paging

logger = logging.getLogger(__name__)


class MessageLedger:
    """Append-only message log per conversation, with read tracking."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.message_repo = MessageRepository(db)
        self.conversation_repo = ConversationRepository(db)
        self.participant_repo = ParticipantRepository(db)

    async def post_message(
        self,
        conversation: ConversationModel,
        sender_id: UUID,
        content: str,
        attachments: Optional[List[AttachmentSchema]] = None,
    ) -> MessageResponse:
        """
        Append a message to a conversation:
        1. Validate content and sender membership
        2. Insert the message unread
        3. Update the conversation's last-message summary
        4. Commit both in one transaction
        """
        if not content:
            raise MessageValidationError(
                "Message content is required",
                [{"loc": ["body", "content"], "msg": "Message content is required"}],
            )
        if not await self.participant_repo.is_participant(conversation.id, sender_id):
            raise NotParticipantError()

        sent_at = utcnow()
        try:
            message = await self.message_repo.create_message(
                conversation_id=conversation.id,
                sender_id=sender_id,
                content=content,
                attachments=[attachment.model_dump() for attachment in attachments or []],
                created_at=sent_at,
            )
            await self.conversation_repo.update_summary(conversation, content, sent_at)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Message %s posted to conversation %s by %s",
            message.id,
            conversation.id,
            sender_id,
        )
        return self.message_repo.to_response(message)

    async def list_messages(
        self,
        conversation: ConversationModel,
        viewer_id: UUID,
        page: int = 1,
        limit: int = DEFAULT_MESSAGE_PAGE_SIZE,
    ) -> MessageListResponse:
        """
        Return one page of a conversation, oldest message first.

        Pages are counted from the newest message backwards. Viewing any page
        marks every unread message from the other participant as read, not
        only the ones on the page; the returned messages show their state
        from before that mark.
        """
        validate_paging(page, limit)
        if not await self.participant_repo.is_participant(conversation.id, viewer_id):
            raise NotParticipantError()

        total_count = await self.message_repo.count_by_conversation(conversation.id)
        newest_first = await self.message_repo.get_page(
            conversation.id, limit=limit, offset=page_offset(page, limit)
        )
        messages = [self.message_repo.to_response(m) for m in reversed(newest_first)]

        try:
            marked = await self.message_repo.mark_conversation_read(
                conversation.id, viewer_id, utcnow()
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        if marked:
            logger.debug(
                "Marked %d messages read in conversation %s for %s",
                marked,
                conversation.id,
                viewer_id,
            )

        return MessageListResponse(
            messages=messages,
            pagination=Pagination.build(page, limit, total_count),
        )

    async def mark_message_read(
        self, viewer_id: UUID, message_id: UUID
    ) -> MessageResponse:
        """Read receipt for a single message.

        Only the recipient changes read state, and only from unread to read.
        """
        message = await self.message_repo.get_by_id(message_id)
        if message is None or not await self.participant_repo.is_participant(
            message.conversation_id, viewer_id
        ):
            raise MessageNotFoundError()

        if message.sender_id != viewer_id and message.read_at is None:
            try:
                await self.message_repo.mark_read(message, utcnow())
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise
            logger.debug("Message %s marked read by %s", message.id, viewer_id)

        return self.message_repo.to_response(message)

    async def unread_total(self, viewer_id: UUID) -> int:
        """Unread messages for the viewer across all conversations."""
        return await self.message_repo.unread_total(viewer_id)
