"""Custom exception hierarchy for the room planner."""

from __future__ import annotations


class RoomPlannerError(Exception):
    """Base exception for all room-planner errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(RoomPlannerError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(RoomPlannerError):
    """Raised when user-supplied values are rejected (scale, template, zero-length line)."""
    pass


class EntityNotFoundError(RoomPlannerError):
    """Base class for lookups of unknown entity ids."""
    pass


class LineNotFoundError(EntityNotFoundError):
    """Raised when a line id does not exist in the layout."""
    pass


class FurnitureNotFoundError(EntityNotFoundError):
    """Raised when a furniture instance id does not exist in the layout."""
    pass


class TemplateNotFoundError(EntityNotFoundError):
    """Raised when a furniture template id does not exist in the layout."""
    pass


class PlacementRejectedError(RoomPlannerError):
    """Raised when overlap prevention blocks a line or furniture placement."""
    pass


class StorageError(RoomPlannerError):
    """Raised when the storage backend fails."""
    pass


class LayoutImportError(RoomPlannerError):
    """Raised when an imported layout is not parseable JSON."""
    pass
