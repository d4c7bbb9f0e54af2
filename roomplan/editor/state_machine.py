"""Interaction state machine driven by toolkit-independent input events.

The editor turns pointer, wheel and key events into snapped points and
document mutations. States and transitions::

    IDLE --down (draw mode)--------------> DRAWING -----------up--> IDLE (commit line)
    IDLE --down near selected endpoint---> DRAGGING_ENDPOINT --up--> IDLE (commit endpoint)
    IDLE --down on furniture-------------> DRAGGING_FURNITURE -up--> IDLE (commit position)
    IDLE --down (middle button / Space)--> PANNING ------------up--> IDLE

Pointer-leave and Escape abandon the current gesture without committing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from loguru import logger

from roomplan.editor.document import LayoutDocument
from roomplan.exceptions import PlacementRejectedError, RoomPlannerError
from roomplan.geometry.contract import ENDPOINT_GRAB_RADIUS, LINE_HIT_THRESHOLD
from roomplan.geometry.furniture import find_furniture_at_point
from roomplan.geometry.grid import Viewport, canvas_to_cells, canvas_to_grid, zoom_step
from roomplan.geometry.lines import Endpoint, find_endpoint_at_point, find_line_at_point
from roomplan.geometry.snap import resolve_point
from roomplan.schema import FurnitureInstance, Line, LineType, Point

MIDDLE_BUTTON = 1


class EditorMode(str, Enum):
    DRAW = "draw"
    SELECT = "select"
    FURNITURE = "furniture"


class InteractionState(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    DRAGGING_ENDPOINT = "dragging_endpoint"
    DRAGGING_FURNITURE = "dragging_furniture"
    PANNING = "panning"


@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float
    button: int = 0


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float


@dataclass(frozen=True)
class PointerUp:
    pass


@dataclass(frozen=True)
class PointerLeave:
    pass


@dataclass(frozen=True)
class Wheel:
    x: float
    y: float
    delta_y: float


@dataclass(frozen=True)
class KeyDown:
    key: str


@dataclass(frozen=True)
class KeyUp:
    key: str


InputEvent = Union[PointerDown, PointerMove, PointerUp, PointerLeave, Wheel, KeyDown, KeyUp]
Committed = Union[Line, FurnitureInstance, None]


class LayoutEditor:
    """Single-gesture editor over a :class:`LayoutDocument`.

    ``handle`` returns the entity committed by the event, if any. A rejected
    commit (overlap prevention) leaves the document unchanged and is kept in
    ``last_error``.
    """

    def __init__(
        self,
        document: LayoutDocument,
        *,
        mode: EditorMode = EditorMode.DRAW,
        viewport: Viewport | None = None,
        line_type: LineType = LineType.WALL,
    ) -> None:
        self.document = document
        self.mode = mode
        self.viewport = viewport or Viewport()
        self.line_type = line_type
        self.state = InteractionState.IDLE

        self.selected_line_id: Optional[str] = None
        self.selected_furniture_id: Optional[str] = None
        self.selected_template_id: Optional[str] = None
        self.last_error: Optional[RoomPlannerError] = None

        # gesture state
        self.anchor: Optional[Point] = None
        self.preview: Optional[Point] = None
        self.furniture_preview: Optional[Point] = None
        self._dragged_endpoint: Optional[Endpoint] = None
        self._drag_offset: Optional[Point] = None
        self._pan_last: Optional[Point] = None
        self._space_pressed = False

        self._handlers: dict[type, Callable[..., Committed]] = {
            PointerDown: self._on_pointer_down,
            PointerMove: self._on_pointer_move,
            PointerUp: self._on_pointer_up,
            PointerLeave: self._on_pointer_leave,
            Wheel: self._on_wheel,
            KeyDown: self._on_key_down,
            KeyUp: self._on_key_up,
        }

    # ------------------------------------------------------------------ public

    def handle(self, event: InputEvent) -> Committed:
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported input event: {event!r}")
        return handler(event)

    def set_mode(self, mode: EditorMode) -> None:
        self.cancel()
        self.mode = mode

    def cancel(self) -> None:
        """Abandon the current gesture."""
        if self.state is not InteractionState.IDLE:
            logger.debug("Abandoning {state} gesture", state=self.state.value)
        self.state = InteractionState.IDLE
        self.anchor = None
        self.preview = None
        self.furniture_preview = None
        self._dragged_endpoint = None
        self._drag_offset = None
        self._pan_last = None

    @property
    def preview_segment(self) -> Optional[tuple[Point, Point]]:
        """In-progress segment while drawing or dragging an endpoint."""
        if self.state in (InteractionState.DRAWING, InteractionState.DRAGGING_ENDPOINT):
            if self.anchor is not None and self.preview is not None:
                return self.anchor, self.preview
        return None

    # ----------------------------------------------------------------- helpers

    def _world(self, x: float, y: float) -> Point:
        return self.viewport.screen_to_world(Point(x=x, y=y))

    def _placement_cells(self, world: Point) -> Point:
        """Cell position used for placing/dragging furniture."""
        config = self.document.config
        if config.grid_aligned_mode:
            return canvas_to_grid(world, config.cell_size)
        return canvas_to_cells(world, config.cell_size)

    def _snap_lines(self) -> list[Line]:
        if self.state is InteractionState.DRAGGING_ENDPOINT and self.selected_line_id is not None:
            return [line for line in self.document.lines if line.id != self.selected_line_id]
        return self.document.lines

    def _resolve(self, world: Point, anchor: Optional[Point] = None) -> Point:
        return resolve_point(world, self.document.config, self._snap_lines(), anchor)

    def _selected_line(self) -> Optional[Line]:
        if self.selected_line_id is None:
            return None
        for line in self.document.lines:
            if line.id == self.selected_line_id:
                return line
        return None

    # ---------------------------------------------------------------- handlers

    def _on_pointer_down(self, event: PointerDown) -> Committed:
        if self.state is not InteractionState.IDLE:
            return None
        if self._space_pressed or event.button == MIDDLE_BUTTON:
            self.state = InteractionState.PANNING
            self._pan_last = Point(x=event.x, y=event.y)
            return None

        world = self._world(event.x, event.y)
        config = self.document.config

        if self.mode in (EditorMode.SELECT, EditorMode.FURNITURE):
            hit = find_furniture_at_point(
                canvas_to_cells(world, config.cell_size),
                self.document.furniture,
                self.document.templates_by_id,
                config.inches_per_cell,
            )
            if hit is not None:
                cells = self._placement_cells(world)
                self.selected_furniture_id = hit.id
                self.selected_line_id = None
                self.state = InteractionState.DRAGGING_FURNITURE
                self._drag_offset = Point(x=cells.x - hit.position.x, y=cells.y - hit.position.y)
                self.furniture_preview = hit.position
                return None

        if self.mode is EditorMode.FURNITURE:
            return self._place_selected_template(world)

        if self.mode is EditorMode.SELECT:
            selected = self._selected_line()
            if selected is not None:
                endpoint = find_endpoint_at_point(world, selected, ENDPOINT_GRAB_RADIUS / self.viewport.zoom)
                if endpoint is not None:
                    self.state = InteractionState.DRAGGING_ENDPOINT
                    self._dragged_endpoint = endpoint
                    self.anchor = selected.end if endpoint == "start" else selected.start
                    self.preview = self._resolve(world, self.anchor)
                    return None
            clicked = find_line_at_point(world, self.document.lines, LINE_HIT_THRESHOLD)
            self.selected_line_id = clicked.id if clicked is not None else None
            self.selected_furniture_id = None
            return None

        self.state = InteractionState.DRAWING
        self.anchor = self._resolve(world)
        self.preview = self.anchor
        return None

    def _place_selected_template(self, world: Point) -> Committed:
        if self.selected_template_id is None:
            return None
        try:
            placed = self.document.place_furniture(self.selected_template_id, self._placement_cells(world))
        except RoomPlannerError as exc:
            self._reject(exc)
            return None
        self.selected_furniture_id = placed.id
        self.last_error = None
        return placed

    def _on_pointer_move(self, event: PointerMove) -> Committed:
        if self.state is InteractionState.PANNING and self._pan_last is not None:
            self.viewport = self.viewport.pan(event.x - self._pan_last.x, event.y - self._pan_last.y)
            self._pan_last = Point(x=event.x, y=event.y)
            return None

        world = self._world(event.x, event.y)

        if self.state is InteractionState.DRAGGING_FURNITURE and self._drag_offset is not None:
            cells = self._placement_cells(world)
            position = Point(x=cells.x - self._drag_offset.x, y=cells.y - self._drag_offset.y)
            item = self.document.get_furniture(self.selected_furniture_id)
            candidate = item.model_copy(update={"position": position})
            if self.document.config.prevent_overlapping and self.document.find_collision(candidate) is not None:
                return None
            self.furniture_preview = position
            return None

        if self.state in (InteractionState.DRAWING, InteractionState.DRAGGING_ENDPOINT):
            self.preview = self._resolve(world, self.anchor)
        return None

    def _on_pointer_up(self, event: PointerUp) -> Committed:
        state = self.state
        committed: Committed = None
        try:
            if state is InteractionState.DRAGGING_FURNITURE:
                committed = self._commit_furniture_drag()
            elif state is InteractionState.DRAGGING_ENDPOINT:
                committed = self._commit_endpoint_drag()
            elif state is InteractionState.DRAWING:
                committed = self._commit_drawing()
        except PlacementRejectedError as exc:
            self._reject(exc)
        finally:
            self.cancel()
        return committed

    def _commit_furniture_drag(self) -> Committed:
        if self.selected_furniture_id is None or self.furniture_preview is None:
            return None
        current = self.document.get_furniture(self.selected_furniture_id)
        if current.position == self.furniture_preview:
            return None
        return self.document.move_furniture(self.selected_furniture_id, self.furniture_preview)

    def _commit_endpoint_drag(self) -> Committed:
        if self.selected_line_id is None or self.anchor is None or self.preview is None:
            return None
        if self.preview == self.anchor:
            return None
        if self._dragged_endpoint == "start":
            return self.document.update_line(self.selected_line_id, start=self.preview, end=self.anchor)
        return self.document.update_line(self.selected_line_id, start=self.anchor, end=self.preview)

    def _commit_drawing(self) -> Committed:
        if self.anchor is None or self.preview is None or self.anchor == self.preview:
            return None
        line = self.document.add_line(self.anchor, self.preview, self.line_type)
        self.last_error = None
        return line

    def _reject(self, exc: RoomPlannerError) -> None:
        self.last_error = exc
        logger.warning("Edit rejected: {message}", message=exc.message)

    def _on_pointer_leave(self, event: PointerLeave) -> Committed:
        self.cancel()
        return None

    def _on_wheel(self, event: Wheel) -> Committed:
        self.viewport = self.viewport.zoom_at(Point(x=event.x, y=event.y), zoom_step(event.delta_y))
        return None

    def _on_key_down(self, event: KeyDown) -> Committed:
        key = event.key
        if key == " ":
            self._space_pressed = True
        elif key == "Escape":
            self.cancel()
        elif self.state is not InteractionState.IDLE:
            return None
        elif key in ("Delete", "Backspace"):
            self._drop_stale_selection()
            self._delete_selection()
        elif key in ("r", "R"):
            self._drop_stale_selection()
            if self.selected_furniture_id is None:
                return None
            try:
                return self.document.rotate_furniture(self.selected_furniture_id)
            except PlacementRejectedError as exc:
                self._reject(exc)
        return None

    def _on_key_up(self, event: KeyUp) -> Committed:
        if event.key == " ":
            self._space_pressed = False
        return None

    def _drop_stale_selection(self) -> None:
        """Forget selected ids that the document no longer holds (cascade delete, clear, import)."""
        if self.selected_furniture_id is not None and all(
            item.id != self.selected_furniture_id for item in self.document.furniture
        ):
            self.selected_furniture_id = None
        if self.selected_line_id is not None and self._selected_line() is None:
            self.selected_line_id = None

    def _delete_selection(self) -> None:
        if self.selected_furniture_id is not None:
            self.document.delete_furniture(self.selected_furniture_id)
            self.selected_furniture_id = None
        elif self.selected_line_id is not None:
            self.document.delete_line(self.selected_line_id)
            self.selected_line_id = None


__all__ = [
    "EditorMode",
    "InputEvent",
    "InteractionState",
    "KeyDown",
    "KeyUp",
    "LayoutEditor",
    "PointerDown",
    "PointerLeave",
    "PointerMove",
    "PointerUp",
    "Wheel",
]
