import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_messaging.auth import get_viewer_id
from marketplace_messaging.database import get_db
from marketplace_messaging.exceptions import MessagingError
from marketplace_messaging.models.api.messages import (
    MessageListResponse,
    SendMessageRequest,
    SendMessageResponse,
)
from marketplace_messaging.models.api.pagination import (
    DEFAULT_MESSAGE_PAGE_SIZE,
    MAX_PAGE_SIZE,
)
from marketplace_messaging.routers.errors import to_http_exception
from marketplace_messaging.services.conversation_directory import (
    ConversationDirectory,
)
from marketplace_messaging.services.message_ledger import MessageLedger

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=SendMessageResponse, status_code=201)
async def send_message(
    request: SendMessageRequest,
    viewer_id: UUID = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
) -> SendMessageResponse:
    """
    Send a message.

    Posts into ``conversationId`` when given, otherwise into the viewer's
    conversation with ``recipientId``, creating it on first contact.
    """
    try:
        conversation = await ConversationDirectory(db).resolve_conversation(
            viewer_id,
            recipient_id=request.recipient_id,
            conversation_id=request.conversation_id,
        )
        message = await MessageLedger(db).post_message(
            conversation, viewer_id, request.content, request.attachments
        )
        return SendMessageResponse(message=message)
    except MessagingError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Message sending failed for %s", viewer_id)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("", response_model=MessageListResponse)
async def list_messages(
    conversation_id: UUID = Query(..., alias="conversationId"),
    page: int = Query(1, description="Page number, 1 is the newest page", ge=1),
    limit: int = Query(
        DEFAULT_MESSAGE_PAGE_SIZE,
        description="Messages per page",
        ge=1,
        le=MAX_PAGE_SIZE,
    ),
    viewer_id: UUID = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
) -> MessageListResponse:
    """
    Get one page of a conversation, oldest message first.

    Opening the conversation marks every unread message from the other
    participant as read.
    """
    try:
        conversation = await ConversationDirectory(db).get_participant_conversation(
            viewer_id, conversation_id
        )
        return await MessageLedger(db).list_messages(
            conversation, viewer_id, page=page, limit=limit
        )
    except MessagingError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Messages fetch failed for conversation %s", conversation_id)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{message_id}/read", response_model=SendMessageResponse)
async def mark_message_read(
    message_id: UUID,
    viewer_id: UUID = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
) -> SendMessageResponse:
    """Mark a single received message as read."""
    try:
        message = await MessageLedger(db).mark_message_read(viewer_id, message_id)
        return SendMessageResponse(message=message)
    except MessagingError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Marking message %s read failed", message_id)
        raise HTTPException(status_code=500, detail="Internal server error")
