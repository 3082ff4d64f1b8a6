from fastapi import HTTPException

from marketplace_messaging.exceptions import MessageValidationError, MessagingError


def to_http_exception(error: MessagingError) -> HTTPException:
    """Translate a service error into the response the client sees."""
    if isinstance(error, MessageValidationError):
        return HTTPException(
            status_code=error.status_code,
            detail={"error": error.message, "details": error.details},
        )
    return HTTPException(status_code=error.status_code, detail=error.message)
