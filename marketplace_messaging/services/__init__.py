# Business logic for the messaging core
from .conversation_directory import ConversationDirectory
from .conversation_feed import ConversationFeed
from .message_ledger import MessageLedger

__all__ = ["ConversationDirectory", "ConversationFeed", "MessageLedger"]
