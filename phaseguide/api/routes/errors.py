"""Map domain errors to HTTP responses."""

import logging

from fastapi import HTTPException

from phaseguide.domain.errors import (
    ConfigurationError,
    ConversationNotFoundError,
    ResetNotConfirmedError,
)

logger = logging.getLogger(__name__)


def to_http_error(exc: Exception, action: str) -> HTTPException:
    """HTTPException for exc. Unexpected errors are logged with traceback."""
    if isinstance(exc, (ConfigurationError, ResetNotConfirmedError)):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, ConversationNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    logger.error("Failed to %s", action, exc_info=exc)
    return HTTPException(status_code=500, detail=f"Failed to {action}")
