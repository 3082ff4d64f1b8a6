from typing import Optional
from uuid import UUID

from .base import ApiModel


class UserSummary(ApiModel):
    """Public identity of a user, as shown next to messages and conversations."""

    id: UUID
    first_name: str
    last_name: str
    avatar: Optional[str] = None
