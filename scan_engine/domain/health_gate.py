"""Health gate: which field changes are permitted for a machine's current health. Pure functions."""

from dataclasses import dataclass
from typing import Optional, Union

from scan_engine.domain.exceptions import DomainValidationError, HealthBlockedError
from scan_engine.domain.models.machine import (
    UNSERVICEABLE,
    ActivityStatus,
    HealthStatus,
    MachineField,
)

UNSERVICEABLE_REASON = "machine unserviceable"


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    reason: Optional[str] = None


ALLOW = GateDecision(allowed=True)


def coerce_value(
    field: MachineField, value: Union[str, ActivityStatus, HealthStatus]
) -> Union[ActivityStatus, HealthStatus]:
    """Parse a requested value for the given field. Raises DomainValidationError if invalid."""
    enum_type = ActivityStatus if field == MachineField.STATUS else HealthStatus
    try:
        return enum_type(value)
    except ValueError as e:
        raise DomainValidationError(
            f"Invalid value {value!r} for {field.value}"
        ) from e


def can_transition(
    current: HealthStatus,
    requested_field: MachineField,
    requested_value: Union[str, ActivityStatus, HealthStatus],
) -> GateDecision:
    """
    RUNNING is blocked while health is BREAKDOWN or REMOVED.
    Health corrections and every other activity value are always allowed.
    """
    value = coerce_value(requested_field, requested_value)
    if (
        requested_field == MachineField.STATUS
        and value == ActivityStatus.RUNNING
        and current in UNSERVICEABLE
    ):
        return GateDecision(allowed=False, reason=UNSERVICEABLE_REASON)
    return ALLOW


def check_transition(
    machine_id: str,
    current: HealthStatus,
    requested_field: MachineField,
    requested_value: Union[str, ActivityStatus, HealthStatus],
) -> None:
    """Raise HealthBlockedError if can_transition blocks."""
    decision = can_transition(current, requested_field, requested_value)
    if not decision.allowed:
        raise HealthBlockedError(machine_id, current.value, decision.reason or UNSERVICEABLE_REASON)
