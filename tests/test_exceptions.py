"""Tests for custom exception hierarchy."""

import pytest

from roomplan.exceptions import (
    ConfigurationError,
    EntityNotFoundError,
    FurnitureNotFoundError,
    LayoutImportError,
    LineNotFoundError,
    PlacementRejectedError,
    RoomPlannerError,
    StorageError,
    TemplateNotFoundError,
    ValidationError,
)


def test_room_planner_error_base():
    """Test base RoomPlannerError."""
    error = RoomPlannerError("Test error", {"key": "value"})
    assert str(error) == "Test error"
    assert error.message == "Test error"
    assert error.details == {"key": "value"}


def test_details_default_to_empty_dict():
    assert RoomPlannerError("no details").details == {}


def test_configuration_error():
    """Test ConfigurationError."""
    error = ConfigurationError("Config missing", {"path": "config/default.yaml"})
    assert isinstance(error, RoomPlannerError)
    assert error.message == "Config missing"


def test_validation_error():
    error = ValidationError("Please enter a valid positive number", {"inches_per_cell": "-1"})
    assert isinstance(error, RoomPlannerError)
    assert error.details == {"inches_per_cell": "-1"}


@pytest.mark.parametrize("cls", [LineNotFoundError, FurnitureNotFoundError, TemplateNotFoundError])
def test_not_found_errors(cls):
    error = cls("missing", {"id": "x"})
    assert isinstance(error, EntityNotFoundError)
    assert isinstance(error, RoomPlannerError)


def test_exception_inheritance():
    """Test exception inheritance hierarchy."""
    assert issubclass(ConfigurationError, RoomPlannerError)
    assert issubclass(ValidationError, RoomPlannerError)
    assert issubclass(EntityNotFoundError, RoomPlannerError)
    assert issubclass(PlacementRejectedError, RoomPlannerError)
    assert issubclass(StorageError, RoomPlannerError)
    assert issubclass(LayoutImportError, RoomPlannerError)
    assert not issubclass(PlacementRejectedError, ValidationError)
