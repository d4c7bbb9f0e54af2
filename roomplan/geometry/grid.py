"""Coordinate spaces: screen <-> world (canvas pixels) <-> grid cells <-> inches."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from roomplan.geometry.contract import MAX_ZOOM, MIN_ZOOM, ZOOM_IN_FACTOR, ZOOM_OUT_FACTOR
from roomplan.schema import Point


def _round_half_away(value: float) -> float:
    magnitude = abs(value)
    whole = math.floor(magnitude)
    # compare the fraction directly; floor(x + 0.5) rounds 0.49999999999999994 up
    if magnitude - whole >= 0.5:
        whole += 1
    return math.copysign(whole, value)


def snap_to_grid(point: Point, cell_size: float) -> Point:
    """Snap a point to the nearest grid intersection."""
    return Point(
        x=_round_half_away(point.x / cell_size) * cell_size,
        y=_round_half_away(point.y / cell_size) * cell_size,
    )


def canvas_to_grid(point: Point, cell_size: float) -> Point:
    """Return the integer cell a canvas point falls into (floor, not round)."""
    return Point(x=math.floor(point.x / cell_size), y=math.floor(point.y / cell_size))


def canvas_to_cells(point: Point, cell_size: float) -> Point:
    """Fractional grid-cell coordinates of a canvas point."""
    return Point(x=point.x / cell_size, y=point.y / cell_size)


def grid_to_canvas(point: Point, cell_size: float) -> Point:
    return Point(x=point.x * cell_size, y=point.y * cell_size)


def is_grid_aligned(start: Point, end: Point) -> bool:
    """True for horizontal, vertical and zero-length segments."""
    return start.x == end.x or start.y == end.y


def distance(p1: Point, p2: Point) -> float:
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def cells_to_inches(cells: float, inches_per_cell: float) -> float:
    return cells * inches_per_cell


def inches_to_cells(inches: float, inches_per_cell: float) -> float:
    return inches / inches_per_cell


def calculate_line_length(start: Point, end: Point, cell_size: float, inches_per_cell: float) -> float:
    """Real-world length of a segment in inches."""
    pixels = distance(start, end)
    return cells_to_inches(pixels / cell_size, inches_per_cell)


@dataclass(frozen=True)
class Viewport:
    """
    Pan/zoom state of the canvas.

    ``world = (screen - offset) / zoom`` and ``screen = world * zoom + offset``.
    Every operation returns a new viewport.
    """

    offset: Point = field(default_factory=lambda: Point(x=0.0, y=0.0))
    zoom: float = 1.0

    def screen_to_world(self, screen: Point) -> Point:
        return Point(
            x=(screen.x - self.offset.x) / self.zoom,
            y=(screen.y - self.offset.y) / self.zoom,
        )

    def world_to_screen(self, world: Point) -> Point:
        return Point(
            x=world.x * self.zoom + self.offset.x,
            y=world.y * self.zoom + self.offset.y,
        )

    def pan(self, dx: float, dy: float) -> "Viewport":
        return Viewport(offset=Point(x=self.offset.x + dx, y=self.offset.y + dy), zoom=self.zoom)

    def zoom_at(self, screen: Point, factor: float) -> "Viewport":
        """
        Multiply the zoom by ``factor`` (clamped to [MIN_ZOOM, MAX_ZOOM]) keeping
        the world point under ``screen`` fixed on screen.
        """
        new_zoom = clamp_zoom(self.zoom * factor)
        world_before = self.screen_to_world(screen)
        # world position under the cursor with the new zoom but the old offset
        world_after = Point(
            x=(screen.x - self.offset.x) / new_zoom,
            y=(screen.y - self.offset.y) / new_zoom,
        )
        offset = Point(
            x=self.offset.x + (world_after.x - world_before.x) * new_zoom,
            y=self.offset.y + (world_after.y - world_before.y) * new_zoom,
        )
        return Viewport(offset=offset, zoom=new_zoom)


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def zoom_step(delta_y: float) -> float:
    """Zoom factor for one wheel event: scrolling down zooms out."""
    return ZOOM_OUT_FACTOR if delta_y > 0 else ZOOM_IN_FACTOR


__all__ = [
    "Viewport",
    "calculate_line_length",
    "canvas_to_cells",
    "canvas_to_grid",
    "cells_to_inches",
    "clamp_zoom",
    "distance",
    "grid_to_canvas",
    "inches_to_cells",
    "is_grid_aligned",
    "snap_to_grid",
    "zoom_step",
]
