"""Input sources feeding the scan processor."""

from scan_engine.input.capture import (
    FieldInputSource,
    HardwareInputCapture,
    InputSource,
    KeyEvent,
)

__all__ = [
    "FieldInputSource",
    "HardwareInputCapture",
    "InputSource",
    "KeyEvent",
]
