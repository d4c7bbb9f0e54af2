"""Room layout editor core: geometry, snapping, editing and persistence."""

__version__ = "0.1.0"
