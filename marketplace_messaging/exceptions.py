from typing import Any, Dict, List, Optional


class MessagingError(Exception):
    """Base class for errors raised by the messaging services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MessageValidationError(MessagingError):
    """A request field is missing or malformed. Nothing was written."""

    status_code = 400

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.details = details or []


class ConversationNotFoundError(MessagingError):
    """The conversation does not exist, or the viewer is not part of it."""

    status_code = 404

    def __init__(self, message: str = "Conversation not found"):
        super().__init__(message)


class NotParticipantError(ConversationNotFoundError):
    """The user is not one of the conversation's participants.

    Reported to clients exactly like a missing conversation.
    """


class RecipientNotFoundError(MessagingError):
    status_code = 404

    def __init__(self, message: str = "Recipient not found"):
        super().__init__(message)


class MessageNotFoundError(MessagingError):
    status_code = 404

    def __init__(self, message: str = "Message not found"):
        super().__init__(message)


class UnknownViewerError(MessagingError):
    """The identity header names a user this service has no record of."""

    status_code = 401

    def __init__(self, message: str = "Unknown user"):
        super().__init__(message)
