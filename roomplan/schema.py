"""Layout data model shared by the geometry core, the editor and the codec.

Persisted entities keep the camelCase keys of the exported JSON
(``templateId``, ``gridScale``, ``exportedAt``).
"""

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from roomplan.exceptions import ValidationError
from roomplan.geometry.contract import (
    DEFAULT_CELL_SIZE,
    DEFAULT_INCHES_PER_CELL,
    DEFAULT_SNAP_DISTANCE,
    LAYOUT_VERSION,
    MAX_INCHES_PER_CELL,
    MIN_INCHES_PER_CELL,
)


class Point(BaseModel):
    """2D point. Screen, world and grid-cell values share this shape."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class LineType(str, Enum):
    """Kinds of drawn segments."""
    WALL = "wall"
    DOOR = "door"
    WINDOW = "window"


class Line(BaseModel):
    """Wall, door or window segment in world (canvas pixel) coordinates."""
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str
    start: Point
    end: Point
    type: LineType = LineType.WALL
    thickness: float = Field(4.0, gt=0.0)
    color: str = "#000000"


class FurnitureTemplate(BaseModel):
    """Reusable rectangular footprint, dimensions in inches."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    width: float = Field(..., gt=0.0, description="Width in inches")
    height: float = Field(..., gt=0.0, description="Height in inches")
    color: str = "#3498db"
    category: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("template name must not be blank")
        return value


Rotation = Literal[0, 90, 180, 270]


class FurnitureInstance(BaseModel):
    """Placed furniture. ``position`` is the top-left corner in grid cells."""
    model_config = ConfigDict(frozen=True)

    id: str
    templateId: str = Field(..., description="Weak reference to a FurnitureTemplate id")
    position: Point
    rotation: Rotation = 0


class Bounds(BaseModel):
    """Axis-aligned rectangle in grid-cell units, anchored at its top-left corner."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float


def validate_grid_scale(inches_per_cell: float) -> float:
    """Check a scale chosen at the scale-selection step (1 to 120 inches per cell)."""
    value = float(inches_per_cell)
    if value != value or value <= 0:
        raise ValidationError(
            "Please enter a valid positive number",
            {"inches_per_cell": str(inches_per_cell)},
        )
    if value < MIN_INCHES_PER_CELL or value > MAX_INCHES_PER_CELL:
        raise ValidationError(
            f"Please enter a value between {MIN_INCHES_PER_CELL:g} and {MAX_INCHES_PER_CELL:g} inches",
            {"inches_per_cell": str(inches_per_cell)},
        )
    return value


class GridConfig(BaseModel):
    """
    Grid and snapping configuration for one editing session.

    Read, never mutated, by the geometry core. Use :meth:`with_scale` or
    ``model_copy(update=...)`` to derive a changed configuration.
    """
    model_config = ConfigDict(frozen=True)

    cell_size: float = Field(DEFAULT_CELL_SIZE, gt=0.0, description="Pixels per grid cell")
    inches_per_cell: float = Field(DEFAULT_INCHES_PER_CELL, gt=0.0, description="Real-world inches per cell")
    grid_aligned_mode: bool = False
    snap_to_endpoints: bool = True
    snap_to_grid: bool = True
    snap_distance: float = Field(DEFAULT_SNAP_DISTANCE, ge=0.0, description="Snap radius in pixels")
    prevent_overlapping: bool = False

    def with_scale(self, inches_per_cell: float) -> "GridConfig":
        return self.model_copy(update={"inches_per_cell": validate_grid_scale(inches_per_cell)})


class LayoutSnapshot(BaseModel):
    """Exported layout document."""
    lines: List[Line] = Field(default_factory=list)
    furniture: List[FurnitureInstance] = Field(default_factory=list)
    templates: List[FurnitureTemplate] = Field(default_factory=list)
    gridScale: Optional[float] = None
    version: str = LAYOUT_VERSION
    exportedAt: str


__all__ = [
    "Bounds",
    "FurnitureInstance",
    "FurnitureTemplate",
    "GridConfig",
    "LayoutSnapshot",
    "Line",
    "LineType",
    "Point",
    "Rotation",
    "validate_grid_scale",
]
