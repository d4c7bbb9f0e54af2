from __future__ import annotations

"""
Geometry Contract

Single source of truth for thresholds, tolerances, and defaults used by the
geometry core and the editor. Modules import from here instead of hardcoding.
"""

# Lengths are canvas pixels unless noted; inch constants end with _IN

# Intersection tests
PARALLEL_EPSILON = 1e-10  # |denominator| below this means parallel or collinear
COLLINEAR_EPSILON = 1e-10  # |cross-product area| below this means collinear

# Hit testing
LINE_HIT_THRESHOLD = 10.0  # px, find_line_at_point default
ENDPOINT_HIT_THRESHOLD = 10.0  # px, find_endpoint_at_point default
ENDPOINT_GRAB_RADIUS = 15.0  # screen px, divided by zoom before use

# Grid
DEFAULT_CELL_SIZE = 20.0  # px per grid square
DEFAULT_INCHES_PER_CELL = 12.0  # 1 foot per square
DEFAULT_SNAP_DISTANCE = 10.0  # px
MIN_INCHES_PER_CELL = 1.0
MAX_INCHES_PER_CELL = 120.0

# Viewport
MIN_ZOOM = 0.1
MAX_ZOOM = 5.0
ZOOM_IN_FACTOR = 1.1
ZOOM_OUT_FACTOR = 0.9

# Furniture
DEFAULT_TEMPLATE_WIDTH_IN = 24.0
DEFAULT_TEMPLATE_HEIGHT_IN = 18.0
DEFAULT_TEMPLATE_COLOR = "#3498db"

# Lines: thickness (px) and stroke colour per line type
LINE_DEFAULTS: dict[str, dict[str, float | str]] = {
    "wall": {"thickness": 4.0, "color": "#000000"},
    "door": {"thickness": 2.0, "color": "#8B4513"},
    "window": {"thickness": 2.0, "color": "#4169E1"},
}

# Persistence
LAYOUT_VERSION = "1.0"
