"""
Domain exception to HTTP error mapping
"""
from fastapi import HTTPException, status
from loguru import logger

from core.exceptions import (
    AuthorizationException,
    CollaboratorUnavailableException,
    DomainException,
    InvalidStatusTransitionException,
    ResourceNotFoundException,
    ValidationException,
)


def to_http_exception(error: DomainException, action: str) -> HTTPException:
    """Translate a domain error raised while performing `action`"""
    if isinstance(error, ResourceNotFoundException):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, AuthorizationException):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to access this posting")
    if isinstance(error, (ValidationException, InvalidStatusTransitionException)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, CollaboratorUnavailableException):
        logger.error(f"{action} failed: {error}")
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{error.collaborator} service temporarily unavailable",
        )

    logger.error(f"{action} failed: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


def internal_error(error: Exception, action: str) -> HTTPException:
    logger.exception(f"Unexpected error while trying to {action}: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )
