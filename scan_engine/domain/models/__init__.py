"""Domain models. Pure business entities."""

from scan_engine.domain.models.machine import (
    SLOT_NAMES,
    UNSERVICEABLE,
    ActivityStatus,
    HealthStatus,
    Machine,
    MachineField,
    ScanSlot,
    ScanSlots,
    health_from_label,
)
from scan_engine.domain.models.session import (
    Operator,
    ScanMode,
    ScanSession,
    SessionState,
)

__all__ = [
    "SLOT_NAMES",
    "UNSERVICEABLE",
    "ActivityStatus",
    "HealthStatus",
    "Machine",
    "MachineField",
    "Operator",
    "ScanMode",
    "ScanSession",
    "ScanSlot",
    "ScanSlots",
    "SessionState",
    "health_from_label",
]
