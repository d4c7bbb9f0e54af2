"""FastAPI exception handlers for room-planner exceptions."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from roomplan.exceptions import (
    ConfigurationError,
    EntityNotFoundError,
    LayoutImportError,
    PlacementRejectedError,
    RoomPlannerError,
    StorageError,
    ValidationError,
)


def status_for(exc: RoomPlannerError) -> int:
    if isinstance(exc, (ConfigurationError, ValidationError, LayoutImportError)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, EntityNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, PlacementRejectedError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, StorageError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def room_planner_exception_handler(request: Request, exc: RoomPlannerError) -> JSONResponse:
    """Map room-planner exceptions to JSON error responses."""
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Room planner exception: {type} - {message}",
        type=type(exc).__name__,
        message=exc.message,
        details=exc.details,
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )
