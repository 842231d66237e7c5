"""Domain layer: machine models, identifier resolution, scan slots, health gate. Pure business logic only."""

from scan_engine.domain.exceptions import (
    DomainError,
    DomainValidationError,
    EmptyIdentifierError,
    HealthBlockedError,
    MachineNotFoundError,
)
from scan_engine.domain.health_gate import GateDecision, can_transition, check_transition
from scan_engine.domain.resolver import resolve
from scan_engine.domain.scan_slots import record_activity

__all__ = [
    "DomainError",
    "DomainValidationError",
    "EmptyIdentifierError",
    "GateDecision",
    "HealthBlockedError",
    "MachineNotFoundError",
    "can_transition",
    "check_transition",
    "record_activity",
    "resolve",
]
