# API models for request/response contracts
from .conversations import (
    ConversationListResponse,
    ConversationResponse,
    UnreadCountResponse,
)
from .messages import (
    AttachmentSchema,
    MessageListResponse,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
)
from .pagination import Pagination
from .users import UserSummary

__all__ = [
    "AttachmentSchema",
    "SendMessageRequest",
    "SendMessageResponse",
    "MessageResponse",
    "MessageListResponse",
    "ConversationResponse",
    "ConversationListResponse",
    "UnreadCountResponse",
    "Pagination",
    "UserSummary",
]
