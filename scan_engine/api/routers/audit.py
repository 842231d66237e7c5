"""Audit trail router: read-only view of recorded machine changes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from scan_engine.api.dependencies import get_audit_logger
from scan_engine.governance.audit_logger import AuditLogger

router = APIRouter()


@router.get("/")
async def list_audit_records(
    audit_logger: Annotated[AuditLogger, Depends(get_audit_logger)],
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
):
    """Newest first."""
    return [record.to_dict() for record in await audit_logger.recent(limit=limit)]
