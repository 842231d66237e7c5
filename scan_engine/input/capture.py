"""Input capture: turn raw scanner keystrokes or manual field entries into submitted identifiers."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)

TERMINATORS = frozenset({"\n", "\r", "Enter"})
DEFAULT_MIN_LENGTH = 2

SubmissionListener = Callable[[str], None]


@dataclass(frozen=True)
class KeyEvent:
    """
    One keystroke. editable_target marks keys aimed at a text field; those belong
    to the field, not to the scanner buffer.
    """

    key: str
    editable_target: bool = False

    @property
    def is_terminator(self) -> bool:
        return self.key in TERMINATORS

    @property
    def is_printable(self) -> bool:
        return len(self.key) == 1 and self.key.isprintable()


class InputSource(Protocol):
    """Anything that produces submitted identifier strings."""

    def subscribe(self, listener: SubmissionListener) -> None:
        ...


class _ListenerMixin:
    def __init__(self) -> None:
        self._listeners: List[SubmissionListener] = []

    def subscribe(self, listener: SubmissionListener) -> None:
        self._listeners.append(listener)

    def _emit(self, identifier: str) -> str:
        for listener in self._listeners:
            listener(identifier)
        return identifier


class HardwareInputCapture(_ListenerMixin):
    """
    Raw device stream (handheld or Wi-Fi scanner acting as a keyboard).
    Buffers printable keys until a terminator; emits only buffers longer than min_length.
    One instance per process.
    """

    def __init__(self, min_length: int = DEFAULT_MIN_LENGTH) -> None:
        super().__init__()
        self._min_length = min_length
        self._buffer: List[str] = []

    @property
    def buffer(self) -> str:
        return "".join(self._buffer)

    def on_key(self, event: KeyEvent) -> Optional[str]:
        """Feed one key. Returns the submitted identifier when a terminator completes one."""
        if event.editable_target:
            return None
        if event.is_terminator:
            text = self.buffer
            self._buffer.clear()
            if len(text) > self._min_length:
                logger.debug("scan_captured", extra={"length": len(text)})
                return self._emit(text)
            if text:
                logger.debug("scan_noise_discarded", extra={"length": len(text)})
            return None
        if event.is_printable:
            self._buffer.append(event.key)
        return None

    def feed(self, keys: str, *, editable_target: bool = False) -> List[str]:
        """Feed a burst of characters; returns every identifier it completed."""
        out: List[str] = []
        for key in keys:
            submitted = self.on_key(KeyEvent(key=key, editable_target=editable_target))
            if submitted is not None:
                out.append(submitted)
        return out

    def reset(self) -> None:
        self._buffer.clear()


class FieldInputSource(_ListenerMixin):
    """Structured text field (manual search box, camera decoder result). Whole value per submit."""

    def submit(self, text: str) -> Optional[str]:
        value = (text or "").strip()
        if not value:
            return None
        return self._emit(value)
