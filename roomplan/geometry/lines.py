"""Segment distance, hit testing and segment/segment intersection."""

from __future__ import annotations

import math
from typing import Iterable, Literal, Optional, Sequence

from roomplan.geometry.contract import (
    COLLINEAR_EPSILON,
    ENDPOINT_HIT_THRESHOLD,
    LINE_HIT_THRESHOLD,
    PARALLEL_EPSILON,
)
from roomplan.geometry.grid import distance
from roomplan.schema import Line, Point

Endpoint = Literal["start", "end"]


def distance_to_line(point: Point, line: Line) -> float:
    """
    Distance from ``point`` to the segment ``line`` (not the infinite line).

    The projection parameter is clamped to [0, 1]; a zero-length segment
    degenerates to the distance to its start point.
    """
    start, end = line.start, line.end
    dx = end.x - start.x
    dy = end.y - start.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return distance(point, start)

    t = ((point.x - start.x) * dx + (point.y - start.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(point.x - (start.x + t * dx), point.y - (start.y + t * dy))


def find_line_at_point(
    point: Point,
    lines: Iterable[Line],
    threshold: float = LINE_HIT_THRESHOLD,
) -> Optional[Line]:
    """Return the first line (input order, not the nearest) within ``threshold``."""
    for line in lines:
        if distance_to_line(point, line) <= threshold:
            return line
    return None


def find_endpoint_at_point(
    point: Point,
    line: Line,
    threshold: float = ENDPOINT_HIT_THRESHOLD,
) -> Optional[Endpoint]:
    """Which endpoint of ``line`` is within ``threshold``; start wins ties."""
    if distance(point, line.start) <= threshold:
        return "start"
    if distance(point, line.end) <= threshold:
        return "end"
    return None


def _cross(ax: float, ay: float, bx: float, by: float) -> float:
    return ax * by - ay * bx


def _collinear_overlap(line1: Line, line2: Line) -> bool:
    """Overlap test for parallel segments; False unless they share a supporting line."""
    p1, p2 = line1.start, line1.end
    q1, q2 = line2.start, line2.end
    dx, dy = p2.x - p1.x, p2.y - p1.y

    if abs(_cross(dx, dy, q1.x - p1.x, q1.y - p1.y)) >= COLLINEAR_EPSILON:
        return False
    if abs(_cross(dx, dy, q2.x - p1.x, q2.y - p1.y)) >= COLLINEAR_EPSILON:
        return False

    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return False

    def project(p: Point) -> float:
        return ((p.x - p1.x) * dx + (p.y - p1.y) * dy) / length_sq

    a1, a2 = project(p1), project(p2)
    b1, b2 = project(q1), project(q2)
    min1, max1 = min(a1, a2), max(a1, a2)
    min2, max2 = min(b1, b2), max(b1, b2)
    return max1 >= min2 and max2 >= min1


def do_lines_intersect(line1: Line, line2: Line) -> bool:
    """
    Segment intersection via the determinant method.

    Touching at an endpoint counts as intersecting. Parallel segments
    (``|denom| < PARALLEL_EPSILON``) intersect only when collinear and their
    projected intervals overlap.
    """
    p, r_end = line1.start, line1.end
    q, s_end = line2.start, line2.end
    rx, ry = r_end.x - p.x, r_end.y - p.y
    sx, sy = s_end.x - q.x, s_end.y - q.y

    denom = _cross(rx, ry, sx, sy)
    if abs(denom) < PARALLEL_EPSILON:
        return _collinear_overlap(line1, line2)

    qpx, qpy = q.x - p.x, q.y - p.y
    t = _cross(qpx, qpy, sx, sy) / denom
    u = _cross(qpx, qpy, rx, ry) / denom
    return 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0


def check_line_intersection(new_line: Line, existing_lines: Sequence[Line]) -> bool:
    return any(do_lines_intersect(new_line, line) for line in existing_lines)


__all__ = [
    "Endpoint",
    "check_line_intersection",
    "distance_to_line",
    "do_lines_intersect",
    "find_endpoint_at_point",
    "find_line_at_point",
]
