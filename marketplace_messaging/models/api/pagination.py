import math

from .base import ApiModel

DEFAULT_MESSAGE_PAGE_SIZE = 50
DEFAULT_CONVERSATION_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class Pagination(ApiModel):
    """Pagination block returned alongside every paged listing."""

    page: int
    limit: int
    total_count: int
    total_pages: int
    has_more: bool

    @classmethod
    def build(cls, page: int, limit: int, total_count: int) -> "Pagination":
        total_pages = math.ceil(total_count / limit)
        return cls(
            page=page,
            limit=limit,
            total_count=total_count,
            total_pages=total_pages,
            has_more=page < total_pages,
        )


def page_offset(page: int, limit: int) -> int:
    """Rows to skip before the first row of ``page`` (1-based)."""
    return (page - 1) * limit
