"""Audit repository protocol. Governance layer depends on this; infrastructure implements it."""

from typing import List, Protocol

from scan_engine.governance.audit_models import AuditRecord


class AuditRepository(Protocol):
    """Protocol for persisting immutable audit records. Append-only."""

    async def save(self, record: AuditRecord) -> None:
        """Persist an immutable audit record. Must not allow mutation."""
        ...

    async def list_recent(self, limit: int = 100) -> List[AuditRecord]:
        """Newest first."""
        ...
