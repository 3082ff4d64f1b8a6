# Export all models
from .api import (
    AttachmentSchema,
    ConversationListResponse,
    ConversationResponse,
    MessageListResponse,
    MessageResponse,
    Pagination,
    SendMessageRequest,
    SendMessageResponse,
    UnreadCountResponse,
    UserSummary,
)
from .db import (
    ConversationModel,
    MessageModel,
    ParticipantModel,
    UserModel,
)

__all__ = [
    # API models
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
    # DB models
    "ConversationModel",
    "MessageModel",
    "ParticipantModel",
    "UserModel",
]
