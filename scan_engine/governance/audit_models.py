"""Immutable audit record model. Domain-level immutability."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class AuditRecord:
    """
    Immutable audit record: when, which machine, who, what action, new value.
    """

    timestamp: datetime
    machine_id: str
    operator_id: str
    operator_name: str
    action: str
    field: str
    new_value: str
    correlation_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation for JSON logging."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "machine_id": self.machine_id,
            "operator_id": self.operator_id,
            "operator_name": self.operator_name,
            "action": self.action,
            "field": self.field,
            "new_value": self.new_value,
            "correlation_id": self.correlation_id,
        }
