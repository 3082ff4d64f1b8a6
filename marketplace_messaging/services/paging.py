from marketplace_messaging.exceptions import MessageValidationError
from marketplace_messaging.models.api.pagination import MAX_PAGE_SIZE


def validate_paging(page: int, limit: int) -> None:
    """Reject page numbers below 1 and page sizes outside 1..MAX_PAGE_SIZE."""
    details = []
    if page < 1:
        details.append({"loc": ["query", "page"], "msg": "Page must be at least 1"})
    if limit < 1 or limit > MAX_PAGE_SIZE:
        details.append(
            {
                "loc": ["query", "limit"],
                "msg": f"Limit must be between 1 and {MAX_PAGE_SIZE}",
            }
        )
    if details:
        raise MessageValidationError("Invalid pagination parameters", details)
