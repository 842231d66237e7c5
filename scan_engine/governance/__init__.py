"""Governance: append-only audit trail. No FastAPI."""

from scan_engine.governance.audit_logger import AuditLogger
from scan_engine.governance.audit_models import AuditRecord
from scan_engine.governance.exceptions import AuditWriteFailedError, GovernanceError

__all__ = [
    "AuditLogger",
    "AuditRecord",
    "AuditWriteFailedError",
    "GovernanceError",
]
