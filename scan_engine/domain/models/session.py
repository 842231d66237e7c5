"""Transient scan session state. Never persisted."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ScanMode(str, Enum):
    """How a resolved scan is handled."""

    AUTO_RUN = "AUTO_RUN"
    INTERACTIVE = "INTERACTIVE"


class SessionState(str, Enum):
    """Processor lifecycle. Anything other than IDLE_LISTENING holds the lock."""

    IDLE_LISTENING = "IDLE_LISTENING"
    RESOLVING = "RESOLVING"
    AUTO_APPLYING = "AUTO_APPLYING"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    APPLYING = "APPLYING"
    COOLDOWN = "COOLDOWN"


@dataclass(frozen=True)
class Operator:
    """Who is scanning."""

    id: str
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.id


@dataclass(frozen=True)
class ScanSession:
    """One resolution-to-confirmation cycle."""

    raw_input: str
    resolved_machine_id: str
    mode: ScanMode
    operator: Operator
    opened_at: float
