"""Mapping from service exceptions to HTTP responses."""

from fastapi import HTTPException, status

from .exceptions import (
    GameStatsServiceError,
    ServiceException,
    StoreUnavailableError,
    ValidationError,
)


def to_http_exception(error: ServiceException) -> HTTPException:
    """Translate a service exception into the matching HTTPException.

    - ``ValidationError`` → 400 with the failing field
    - ``GameStatsServiceError`` → 422
    - ``StoreUnavailableError`` → 503
    - anything else → 500
    """
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": error.message, "field": error.field},
        )
    if isinstance(error, GameStatsServiceError):
        return HTTPException(
            status_code=422,
            detail={"error": error.message},
        )
    if isinstance(error, StoreUnavailableError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Record store unavailable"},
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "Internal server error"},
    )
