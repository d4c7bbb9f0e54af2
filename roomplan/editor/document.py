"""Entity collections of one layout and the rules for changing them."""

from __future__ import annotations

import math
from typing import Callable, Iterable, List, Optional, Tuple
from uuid import uuid4

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from roomplan.exceptions import (
    FurnitureNotFoundError,
    LineNotFoundError,
    PlacementRejectedError,
    TemplateNotFoundError,
    ValidationError,
)
from roomplan.geometry.contract import DEFAULT_TEMPLATE_COLOR, LINE_DEFAULTS
from roomplan.geometry.furniture import find_collision, rotate
from roomplan.geometry.grid import calculate_line_length, inches_to_cells
from roomplan.geometry.lines import check_line_intersection
from roomplan.persistence import LayoutStore
from roomplan.schema import (
    FurnitureInstance,
    FurnitureTemplate,
    GridConfig,
    Line,
    LineType,
    Point,
    Rotation,
)


def _default_id() -> str:
    return str(uuid4())


class LayoutDocument:
    """
    Lines, furniture templates and furniture instances of one layout.

    Entities are immutable models; every change replaces the stored value.
    Ids come from ``id_factory`` so callers control id generation.
    """

    def __init__(
        self,
        config: GridConfig | None = None,
        *,
        id_factory: Callable[[], str] | None = None,
        lines: Iterable[Line] = (),
        furniture: Iterable[FurnitureInstance] = (),
        templates: Iterable[FurnitureTemplate] = (),
    ) -> None:
        self.config = config or GridConfig()
        self.id_factory = id_factory or _default_id
        self.lines: List[Line] = list(lines)
        self.furniture: List[FurnitureInstance] = list(furniture)
        self.templates: List[FurnitureTemplate] = list(templates)

    # ------------------------------------------------------------------ config

    def set_scale(self, inches_per_cell: float) -> GridConfig:
        self.config = self.config.with_scale(inches_per_cell)
        logger.info("Grid scale set to {scale} inches per cell", scale=self.config.inches_per_cell)
        return self.config

    # ------------------------------------------------------------------- lines

    def get_line(self, line_id: str) -> Line:
        for line in self.lines:
            if line.id == line_id:
                return line
        raise LineNotFoundError(f"Line {line_id} not found", {"line_id": line_id})

    def _replace_line(self, updated: Line) -> Line:
        self.lines = [updated if line.id == updated.id else line for line in self.lines]
        return updated

    def add_line(
        self,
        start: Point,
        end: Point,
        line_type: LineType | str = LineType.WALL,
    ) -> Line:
        """
        Commit a new segment with the thickness and colour of its type.

        Raises:
            ValidationError: If start and end coincide.
            PlacementRejectedError: If overlap prevention is on and the segment
                touches or crosses an existing line.
        """
        if start == end:
            raise ValidationError("Line must have nonzero length")
        kind = LineType(line_type)
        defaults = LINE_DEFAULTS[kind.value]
        line = Line(
            id=self.id_factory(),
            start=start,
            end=end,
            type=kind,
            thickness=defaults["thickness"],
            color=defaults["color"],
        )
        if self.config.prevent_overlapping and check_line_intersection(line, self.lines):
            raise PlacementRejectedError("Line intersects an existing line", {"line_id": line.id})
        self.lines.append(line)
        logger.debug("Added {kind} line {line_id}", kind=kind.value, line_id=line.id)
        return line

    def update_line(
        self,
        line_id: str,
        *,
        start: Point | None = None,
        end: Point | None = None,
        line_type: LineType | str | None = None,
    ) -> Line:
        line = self.get_line(line_id)
        changes: dict = {}
        if start is not None:
            changes["start"] = start
        if end is not None:
            changes["end"] = end
        if line_type is not None:
            kind = LineType(line_type)
            changes.update(type=kind.value, **LINE_DEFAULTS[kind.value])
        updated = line.model_copy(update=changes)
        if updated.start == updated.end:
            raise ValidationError("Line must have nonzero length", {"line_id": line_id})
        return self._replace_line(updated)

    def line_length(self, line_id: str) -> float:
        """Length of a line in inches."""
        line = self.get_line(line_id)
        return calculate_line_length(line.start, line.end, self.config.cell_size, self.config.inches_per_cell)

    def set_line_length(self, line_id: str, inches: float) -> Line:
        """Keep the start point and move the end along the line's direction."""
        if not inches > 0:
            raise ValidationError("Length must be a positive number", {"inches": str(inches)})
        line = self.get_line(line_id)
        dx = line.end.x - line.start.x
        dy = line.end.y - line.start.y
        current = math.hypot(dx, dy)
        if current == 0:
            raise ValidationError("Cannot resize a zero-length line", {"line_id": line_id})
        pixels = inches_to_cells(inches, self.config.inches_per_cell) * self.config.cell_size
        scale = pixels / current
        end = Point(x=line.start.x + dx * scale, y=line.start.y + dy * scale)
        return self._replace_line(line.model_copy(update={"end": end}))

    def delete_line(self, line_id: str) -> None:
        self.get_line(line_id)
        self.lines = [line for line in self.lines if line.id != line_id]

    # --------------------------------------------------------------- templates

    @property
    def templates_by_id(self) -> dict[str, FurnitureTemplate]:
        return {template.id: template for template in self.templates}

    def get_template(self, template_id: str) -> FurnitureTemplate:
        template = self.templates_by_id.get(template_id)
        if template is None:
            raise TemplateNotFoundError(f"Template {template_id} not found", {"template_id": template_id})
        return template

    def add_template(
        self,
        name: str,
        width: float,
        height: float,
        color: str = DEFAULT_TEMPLATE_COLOR,
        category: str | None = None,
    ) -> FurnitureTemplate:
        try:
            template = FurnitureTemplate(
                id=self.id_factory(),
                name=name,
                width=width,
                height=height,
                color=color,
                category=category or None,
            )
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid furniture template",
                {err["loc"][0] if err["loc"] else "template": err["msg"] for err in exc.errors()},
            ) from exc
        self.templates.append(template)
        return template

    def delete_template(self, template_id: str) -> int:
        """Remove a template and every instance placed from it; returns the instance count removed."""
        self.get_template(template_id)
        self.templates = [t for t in self.templates if t.id != template_id]
        before = len(self.furniture)
        self.furniture = [f for f in self.furniture if f.templateId != template_id]
        removed = before - len(self.furniture)
        if removed:
            logger.info("Deleted {count} instances of template {template_id}", count=removed, template_id=template_id)
        return removed

    # --------------------------------------------------------------- furniture

    def get_furniture(self, furniture_id: str) -> FurnitureInstance:
        for item in self.furniture:
            if item.id == furniture_id:
                return item
        raise FurnitureNotFoundError(f"Furniture {furniture_id} not found", {"furniture_id": furniture_id})

    def resolved_furniture(self) -> List[Tuple[FurnitureInstance, FurnitureTemplate]]:
        """Instances paired with their templates; dangling references are left out."""
        templates = self.templates_by_id
        return [(item, templates[item.templateId]) for item in self.furniture if item.templateId in templates]

    def find_collision(self, candidate: FurnitureInstance) -> Optional[FurnitureInstance]:
        template = self.templates_by_id.get(candidate.templateId)
        if template is None:
            return None
        return find_collision(candidate, template, self.furniture, self.templates_by_id, self.config.inches_per_cell)

    def _check_placement(self, candidate: FurnitureInstance) -> None:
        if not self.config.prevent_overlapping:
            return
        other = self.find_collision(candidate)
        if other is not None:
            raise PlacementRejectedError(
                "Furniture overlaps existing furniture",
                {"furniture_id": candidate.id, "collides_with": other.id},
            )

    def _replace_furniture(self, updated: FurnitureInstance) -> FurnitureInstance:
        self.furniture = [updated if item.id == updated.id else item for item in self.furniture]
        return updated

    def place_furniture(self, template_id: str, position: Point, rotation: Rotation = 0) -> FurnitureInstance:
        self.get_template(template_id)
        instance = FurnitureInstance(
            id=self.id_factory(),
            templateId=template_id,
            position=position,
            rotation=rotation,
        )
        self._check_placement(instance)
        self.furniture.append(instance)
        return instance

    def move_furniture(self, furniture_id: str, position: Point) -> FurnitureInstance:
        moved = self.get_furniture(furniture_id).model_copy(update={"position": position})
        self._check_placement(moved)
        return self._replace_furniture(moved)

    def rotate_furniture(self, furniture_id: str) -> FurnitureInstance:
        item = self.get_furniture(furniture_id)
        rotated = item.model_copy(update={"rotation": rotate(item.rotation)})
        self._check_placement(rotated)
        return self._replace_furniture(rotated)

    def delete_furniture(self, furniture_id: str) -> None:
        self.get_furniture(furniture_id)
        self.furniture = [item for item in self.furniture if item.id != furniture_id]

    # ------------------------------------------------------------- persistence

    def clear(self) -> None:
        """Remove all lines and placed furniture; templates are kept."""
        self.lines = []
        self.furniture = []

    @classmethod
    def load(
        cls,
        store: LayoutStore,
        config: GridConfig | None = None,
        *,
        id_factory: Callable[[], str] | None = None,
    ) -> "LayoutDocument":
        config = config or GridConfig()
        scale = store.load_grid_scale()
        if scale is not None:
            config = config.with_scale(scale)
        return cls(
            config,
            id_factory=id_factory,
            lines=store.load_lines(),
            furniture=store.load_furniture(),
            templates=store.load_templates(),
        )

    def save(self, store: LayoutStore) -> bool:
        results = [
            store.save_lines(self.lines),
            store.save_furniture(self.furniture),
            store.save_templates(self.templates),
            store.save_grid_scale(self.config.inches_per_cell),
        ]
        return all(results)


__all__ = ["LayoutDocument"]
