import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_messaging.auth import get_viewer_id
from marketplace_messaging.database import get_db
from marketplace_messaging.exceptions import MessagingError
from marketplace_messaging.models.api.conversations import (
    ConversationListResponse,
    ConversationResponse,
    UnreadCountResponse,
)
from marketplace_messaging.models.api.pagination import (
    DEFAULT_CONVERSATION_PAGE_SIZE,
    MAX_PAGE_SIZE,
)
from marketplace_messaging.routers.errors import to_http_exception
from marketplace_messaging.services.conversation_feed import ConversationFeed
from marketplace_messaging.services.message_ledger import MessageLedger

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    page: int = Query(1, description="Page number", ge=1),
    limit: int = Query(
        DEFAULT_CONVERSATION_PAGE_SIZE,
        description="Conversations per page",
        ge=1,
        le=MAX_PAGE_SIZE,
    ),
    viewer_id: UUID = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
) -> ConversationListResponse:
    """
    List the viewer's conversations, most recently active first.

    Query parameters:
    - page: Page number (default: 1)
    - limit: Conversations per page (default: 20, max: 100)
    """
    try:
        service = ConversationFeed(db)
        return await service.list_conversations(viewer_id, page=page, limit=limit)
    except MessagingError as e:
        raise to_http_exception(e)
    except Exception:
        logger.exception("Conversations fetch failed for %s", viewer_id)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    viewer_id: UUID = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
) -> UnreadCountResponse:
    """Total unread messages across the viewer's conversations."""
    try:
        service = MessageLedger(db)
        return UnreadCountResponse(unread_count=await service.unread_total(viewer_id))
    except Exception:
        logger.exception("Unread count failed for %s", viewer_id)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: UUID,
    viewer_id: UUID = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
) -> ConversationResponse:
    """
    Get a single conversation as the viewer sees it.

    Path parameters:
    - conversation_id: UUID of the conversation
    """
    try:
        service = ConversationFeed(db)
        return await service.get_conversation(viewer_id, conversation_id)
    except MessagingError as e:
        raise to_http_exception(e)
    except Exception:
        logger.exception("Conversation fetch failed for %s", conversation_id)
        raise HTTPException(status_code=500, detail="Internal server error")
