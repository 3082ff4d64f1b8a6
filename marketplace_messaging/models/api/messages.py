from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from .base import ApiModel
from .pagination import Pagination
from .users import UserSummary

MAX_ATTACHMENT_SIZE = 10 * 1024 * 1024  # 10 MiB
MAX_ATTACHMENTS = 10


class AttachmentSchema(ApiModel):
    """Descriptor of a file already uploaded elsewhere."""

    url: str = Field(..., min_length=1, description="Where the file can be fetched")
    name: str = Field(..., min_length=1, description="Original file name")
    type: str = Field(..., min_length=1, description="MIME type")
    size: int = Field(..., ge=0, le=MAX_ATTACHMENT_SIZE, description="Size in bytes")


class SendMessageRequest(ApiModel):
    """Request model for sending a message."""

    conversation_id: Optional[UUID] = Field(
        default=None, description="Existing conversation to post into"
    )
    recipient_id: UUID = Field(..., description="User receiving the message")
    content: str = Field(..., min_length=1, description="Message text")
    attachments: List[AttachmentSchema] = Field(
        default_factory=list, max_length=MAX_ATTACHMENTS
    )


class MessageResponse(ApiModel):
    """Response model for message data."""

    id: UUID
    conversation_id: UUID
    sender_id: UUID
    content: str
    attachments: List[AttachmentSchema]
    created_at: datetime
    read_at: Optional[datetime]
    sender: Optional[UserSummary] = None


class SendMessageResponse(ApiModel):
    message: MessageResponse


class MessageListResponse(ApiModel):
    """One page of a conversation, oldest message first."""

    messages: List[MessageResponse]
    pagination: Pagination
