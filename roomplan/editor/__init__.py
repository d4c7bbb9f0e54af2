"""Layout document and interaction state machine."""

from roomplan.editor.document import LayoutDocument
from roomplan.editor.state_machine import (
    EditorMode,
    InteractionState,
    KeyDown,
    KeyUp,
    LayoutEditor,
    PointerDown,
    PointerLeave,
    PointerMove,
    PointerUp,
    Wheel,
)

__all__ = [
    "EditorMode",
    "InteractionState",
    "KeyDown",
    "KeyUp",
    "LayoutDocument",
    "LayoutEditor",
    "PointerDown",
    "PointerLeave",
    "PointerMove",
    "PointerUp",
    "Wheel",
]
