from __future__ import annotations

from pydantic import BaseModel, Field

from roomplan.geometry.contract import (
    DEFAULT_TEMPLATE_COLOR,
    DEFAULT_TEMPLATE_HEIGHT_IN,
    DEFAULT_TEMPLATE_WIDTH_IN,
)
from roomplan.schema import LineType, Point, Rotation


class LineCreate(BaseModel):
    start: Point
    end: Point
    type: LineType = LineType.WALL


class LineUpdate(BaseModel):
    start: Point | None = None
    end: Point | None = None
    type: LineType | None = None
    lengthInches: float | None = Field(default=None, gt=0.0, description="New length, keeping the start point")


class TemplateCreate(BaseModel):
    name: str
    width: float = Field(DEFAULT_TEMPLATE_WIDTH_IN, description="Width in inches")
    height: float = Field(DEFAULT_TEMPLATE_HEIGHT_IN, description="Height in inches")
    color: str = DEFAULT_TEMPLATE_COLOR
    category: str | None = None


class FurnitureCreate(BaseModel):
    templateId: str
    position: Point
    rotation: Rotation = 0


class FurnitureMove(BaseModel):
    position: Point


class ScaleUpdate(BaseModel):
    inchesPerCell: float


class SnapRequest(BaseModel):
    point: Point
    anchor: Point | None = None


class SnapResponse(BaseModel):
    point: Point
    snappedToEndpoint: bool = False


class ImportResponse(BaseModel):
    imported: bool


class DeleteTemplateResponse(BaseModel):
    id: str
    removedFurniture: int
