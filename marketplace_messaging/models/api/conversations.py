from datetime import datetime
from typing import List, Optional
from uuid import UUID

from .base import ApiModel
from .pagination import Pagination
from .users import UserSummary


class ConversationResponse(ApiModel):
    """A conversation as seen by one of its participants."""

    id: UUID
    last_message: Optional[str]
    last_message_at: Optional[datetime]
    unread_count: int
    participant: Optional[UserSummary]  # The other participant
    last_message_sender: Optional[UserSummary]
    created_at: datetime
    updated_at: datetime


class ConversationListResponse(ApiModel):
    conversations: List[ConversationResponse]
    pagination: Pagination


class UnreadCountResponse(ApiModel):
    unread_count: int
