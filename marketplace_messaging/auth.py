"""Viewer identity supplied by the upstream identity provider."""

from typing import Optional
from uuid import UUID

from fastapi import Header, HTTPException

VIEWER_HEADER = "X-User-Id"


async def get_viewer_id(
    x_user_id: Optional[str] = Header(
        default=None,
        alias=VIEWER_HEADER,
        description="Authenticated user id set by the identity provider",
    ),
) -> UUID:
    """Dependency resolving the authenticated viewer, 401 when absent."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Unauthorized")
