"""Furniture footprints in grid-cell space."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from roomplan.geometry.grid import inches_to_cells
from roomplan.schema import Bounds, FurnitureInstance, FurnitureTemplate, Point, Rotation


def get_furniture_bounds(
    furniture: FurnitureInstance,
    template: FurnitureTemplate,
    inches_per_cell: float,
) -> Bounds:
    """
    Footprint of a placed instance in grid cells.

    90 and 270 degrees swap width and height; 180 keeps them (visual flip only).
    """
    width = inches_to_cells(template.width, inches_per_cell)
    height = inches_to_cells(template.height, inches_per_cell)
    if furniture.rotation in (90, 270):
        width, height = height, width
    return Bounds(x=furniture.position.x, y=furniture.position.y, width=width, height=height)


def check_furniture_collision(
    f1: FurnitureInstance,
    t1: FurnitureTemplate,
    f2: FurnitureInstance,
    t2: FurnitureTemplate,
    inches_per_cell: float,
) -> bool:
    """AABB overlap. Shared edges are not a collision."""
    b1 = get_furniture_bounds(f1, t1, inches_per_cell)
    b2 = get_furniture_bounds(f2, t2, inches_per_cell)
    return not (
        b1.x + b1.width <= b2.x
        or b2.x + b2.width <= b1.x
        or b1.y + b1.height <= b2.y
        or b2.y + b2.height <= b1.y
    )


def is_point_in_furniture(
    point: Point,
    furniture: FurnitureInstance,
    template: FurnitureTemplate,
    inches_per_cell: float,
) -> bool:
    """Half-open containment: min edges inclusive, max edges exclusive."""
    b = get_furniture_bounds(furniture, template, inches_per_cell)
    return b.x <= point.x < b.x + b.width and b.y <= point.y < b.y + b.height


def rotate(rotation: Rotation) -> Rotation:
    return (rotation + 90) % 360  # type: ignore[return-value]


def find_furniture_at_point(
    point: Point,
    furniture: Iterable[FurnitureInstance],
    templates: Mapping[str, FurnitureTemplate],
    inches_per_cell: float,
) -> Optional[FurnitureInstance]:
    """First instance in input order containing ``point``; dangling instances are skipped."""
    for item in furniture:
        template = templates.get(item.templateId)
        if template is not None and is_point_in_furniture(point, item, template, inches_per_cell):
            return item
    return None


def find_collision(
    candidate: FurnitureInstance,
    template: FurnitureTemplate,
    furniture: Iterable[FurnitureInstance],
    templates: Mapping[str, FurnitureTemplate],
    inches_per_cell: float,
) -> Optional[FurnitureInstance]:
    """First other instance overlapping ``candidate``, ignoring itself and dangling instances."""
    for item in furniture:
        if item.id == candidate.id:
            continue
        other = templates.get(item.templateId)
        if other is None:
            continue
        if check_furniture_collision(candidate, template, item, other, inches_per_cell):
            return item
    return None


__all__ = [
    "check_furniture_collision",
    "find_collision",
    "find_furniture_at_point",
    "get_furniture_bounds",
    "is_point_in_furniture",
    "rotate",
]
