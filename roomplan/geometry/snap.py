"""Snapping policy: where a drawn or dragged point lands."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from roomplan.geometry.grid import distance, snap_to_grid
from roomplan.schema import GridConfig, Line, Point


def find_nearest_endpoint(point: Point, lines: Iterable[Line], snap_distance: float) -> Optional[Point]:
    """
    Closest line endpoint strictly nearer than ``snap_distance``.

    Candidates are scanned start-then-end per line in input order; on equal
    distances the first one seen is kept.
    """
    nearest: Optional[Point] = None
    best = snap_distance
    for line in lines:
        for candidate in (line.start, line.end):
            d = distance(point, candidate)
            if d < best:
                best = d
                nearest = candidate
    return nearest


def snap_to_grid_if_close(point: Point, cell_size: float, snap_distance: float) -> Point:
    """
    Snap to the nearest grid intersection when it is within ``snap_distance``;
    otherwise snap each axis to its nearest grid line independently.
    """
    snapped = snap_to_grid(point, cell_size)
    if distance(point, snapped) <= snap_distance:
        return snapped

    x = snapped.x if abs(snapped.x - point.x) <= snap_distance else point.x
    y = snapped.y if abs(snapped.y - point.y) <= snap_distance else point.y
    return Point(x=x, y=y)


def smart_snap(
    point: Point,
    lines: Sequence[Line],
    cell_size: float,
    snap_to_endpoints: bool,
    snap_to_grid_flag: bool,
    snap_distance: float,
) -> Point:
    """Endpoint snap wins over grid snap; with both disabled the point is returned unchanged."""
    if snap_to_endpoints:
        endpoint = find_nearest_endpoint(point, lines, snap_distance)
        if endpoint is not None:
            return endpoint
    if snap_to_grid_flag:
        return snap_to_grid_if_close(point, cell_size, snap_distance)
    return point


def constrain_to_axis(point: Point, anchor: Point) -> Point:
    """
    Keep the dominant axis of ``point - anchor`` and pin the other to the anchor.

    Equal deltas resolve to a vertical segment.
    """
    dx = abs(point.x - anchor.x)
    dy = abs(point.y - anchor.y)
    if dx > dy:
        return Point(x=point.x, y=anchor.y)
    return Point(x=anchor.x, y=point.y)


def resolve_point(
    point: Point,
    config: GridConfig,
    lines: Sequence[Line],
    anchor: Optional[Point] = None,
) -> Point:
    """
    Apply the editor's snapping rules to a world point.

    Grid-aligned mode always snaps to the grid and, given an anchor, forces an
    axis-aligned segment. Otherwise :func:`smart_snap` applies.
    """
    if config.grid_aligned_mode:
        snapped = snap_to_grid(point, config.cell_size)
        if anchor is not None:
            snapped = constrain_to_axis(snapped, anchor)
        return snapped
    return smart_snap(
        point,
        lines,
        config.cell_size,
        config.snap_to_endpoints,
        config.snap_to_grid,
        config.snap_distance,
    )


__all__ = [
    "constrain_to_axis",
    "find_nearest_endpoint",
    "resolve_point",
    "smart_snap",
    "snap_to_grid_if_close",
]
