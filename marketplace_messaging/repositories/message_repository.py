from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from marketplace_messaging.models.api.messages import AttachmentSchema, MessageResponse
from marketplace_messaging.models.api.users import UserSummary
from marketplace_messaging.models.db.message_model import MessageModel
from marketplace_messaging.models.db.participant_model import ParticipantModel
from marketplace_messaging.models.db.user_model import UserModel
from marketplace_messaging.repositories.base_repository import BaseRepository


class MessageRepository(BaseRepository[MessageModel, MessageResponse]):
    """Repository for message operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, MessageModel)

    def _unread_for(self, viewer_id: UUID):  # type: ignore[no-untyped-def]
        """Messages the viewer has not read: sent by someone else, no read_at."""
        return (self.model_class.sender_id != viewer_id) & (
            self.model_class.read_at.is_(None)
        )

    async def get_by_id(self, id: UUID) -> Optional[MessageModel]:
        query = (
            select(self.model_class)
            .where(self.model_class.id == id)
            .options(selectinload(self.model_class.sender))
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def create_message(
        self,
        conversation_id: UUID,
        sender_id: UUID,
        content: str,
        attachments: List[Dict[str, Any]],
        created_at: datetime,
    ) -> MessageModel:
        """Insert an unread message and load its sender."""
        message = MessageModel(
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
            attachments=attachments,
            created_at=created_at,
            read_at=None,
        )
        await self.add(message)
        await self.db.refresh(message, ["sender"])
        return message

    async def get_page(
        self, conversation_id: UUID, limit: int, offset: int
    ) -> List[MessageModel]:
        """Messages of a conversation, newest first, with senders loaded."""
        query = (
            select(self.model_class)
            .where(self.model_class.conversation_id == conversation_id)
            .options(selectinload(self.model_class.sender))
            .order_by(self.model_class.created_at.desc(), self.model_class.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_by_conversation(self, conversation_id: UUID) -> int:
        query = select(func.count(self.model_class.id)).where(
            self.model_class.conversation_id == conversation_id
        )
        result = await self.db.execute(query)
        return result.scalar_one()

    async def mark_conversation_read(
        self, conversation_id: UUID, viewer_id: UUID, read_at: datetime
    ) -> int:
        """Mark every unread message from the other side as read.

        Returns the number of messages that changed state.
        """
        statement = (
            update(self.model_class)
            .where(
                self.model_class.conversation_id == conversation_id,
                self._unread_for(viewer_id),
            )
            .values(read_at=read_at)
        )
        result = await self.db.execute(statement)
        return result.rowcount or 0

    async def mark_read(self, message: MessageModel, read_at: datetime) -> MessageModel:
        """Set read_at once. A message that is already read keeps its timestamp."""
        statement = (
            update(self.model_class)
            .where(self.model_class.id == message.id, self.model_class.read_at.is_(None))
            .values(read_at=read_at)
        )
        await self.db.execute(statement)
        await self.db.refresh(message, ["read_at"])
        return message

    async def unread_counts(
        self, conversation_ids: Sequence[UUID], viewer_id: UUID
    ) -> Dict[UUID, int]:
        """Unread counts per conversation for the viewer. Missing ids mean 0."""
        if not conversation_ids:
            return {}
        query = (
            select(self.model_class.conversation_id, func.count(self.model_class.id))
            .where(
                self.model_class.conversation_id.in_(conversation_ids),
                self._unread_for(viewer_id),
            )
            .group_by(self.model_class.conversation_id)
        )
        result = await self.db.execute(query)
        return {conversation_id: count for conversation_id, count in result.all()}

    async def unread_total(self, viewer_id: UUID) -> int:
        """Unread messages across every conversation the viewer belongs to."""
        query = (
            select(func.count(self.model_class.id))
            .select_from(self.model_class)
            .join(
                ParticipantModel,
                (ParticipantModel.conversation_id == self.model_class.conversation_id)
                & (ParticipantModel.user_id == viewer_id),
            )
            .where(self._unread_for(viewer_id))
        )
        result = await self.db.execute(query)
        return result.scalar_one()

    async def latest_senders(
        self, conversation_ids: Sequence[UUID]
    ) -> Dict[UUID, UserModel]:
        """Author of the newest message in each conversation."""
        if not conversation_ids:
            return {}
        ranked = (
            select(
                self.model_class.conversation_id.label("conversation_id"),
                self.model_class.sender_id.label("sender_id"),
                func.row_number()
                .over(
                    partition_by=self.model_class.conversation_id,
                    order_by=(
                        self.model_class.created_at.desc(),
                        self.model_class.id.desc(),
                    ),
                )
                .label("position"),
            )
            .where(self.model_class.conversation_id.in_(conversation_ids))
            .subquery()
        )
        query = (
            select(ranked.c.conversation_id, UserModel)
            .join(UserModel, UserModel.id == ranked.c.sender_id)
            .where(ranked.c.position == 1)
        )
        result = await self.db.execute(query)
        return {conversation_id: user for conversation_id, user in result.all()}

    def _to_pydantic(self, db_model: Any) -> MessageResponse:
        """Convert SQLAlchemy MessageModel to Pydantic MessageResponse."""
        sender = db_model.sender
        return MessageResponse(
            id=db_model.id,
            conversation_id=db_model.conversation_id,
            sender_id=db_model.sender_id,
            content=db_model.content,
            attachments=[
                AttachmentSchema.model_validate(attachment)
                for attachment in db_model.attachments or []
            ],
            created_at=db_model.created_at,
            read_at=db_model.read_at,
            sender=(
                UserSummary(
                    id=sender.id,
                    first_name=sender.first_name,
                    last_name=sender.last_name,
                    avatar=sender.avatar,
                )
                if sender is not None
                else None
            ),
        )

    def to_response(self, db_model: MessageModel) -> MessageResponse:
        return self._to_pydantic(db_model)
