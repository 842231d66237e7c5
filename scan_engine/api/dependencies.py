"""FastAPI dependency injection: stores, audit logger, process-wide scan processor and input capture."""

import logging
from typing import Annotated

from fastapi import Depends, Request

from scan_engine.application.fleet_service import FleetService
from scan_engine.application.machine_registry import MachineRegistry
from scan_engine.application.scan_context import ScanContext
from scan_engine.application.scan_processor import ScanEventProcessor
from scan_engine.application.terminal_settings import TerminalSettingsStore
from scan_engine.config.settings import get_settings
from scan_engine.domain.models.session import Operator
from scan_engine.governance.audit_logger import AuditLogger
from scan_engine.governance.audit_repository import AuditRepository
from scan_engine.infrastructure.database.audit_repository_db import DbAuditRepository
from scan_engine.infrastructure.database.machine_registry_db import DbMachineRegistry
from scan_engine.infrastructure.database.session import AsyncSessionLocal
from scan_engine.infrastructure.database.terminal_settings_db import DbTerminalSettingsStore
from scan_engine.input.capture import HardwareInputCapture
from scan_engine.observability.metrics import MetricsCollector

_metrics: MetricsCollector | None = None
_capture: HardwareInputCapture | None = None
_processor: ScanEventProcessor | None = None


def get_metrics() -> MetricsCollector:
    """Return singleton metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector(enabled=get_settings().enable_metrics)
    return _metrics


def get_input_capture() -> HardwareInputCapture:
    """Return the single process-wide keystroke capture."""
    global _capture
    if _capture is None:
        _capture = HardwareInputCapture(min_length=get_settings().min_scan_length)
    return _capture


def get_machine_registry() -> MachineRegistry:
    return DbMachineRegistry(AsyncSessionLocal)


def get_audit_repository() -> AuditRepository:
    return DbAuditRepository(AsyncSessionLocal)


def get_terminal_settings() -> TerminalSettingsStore:
    return DbTerminalSettingsStore(AsyncSessionLocal, default_auto_run=get_settings().default_auto_run)


def get_scan_processor(
    registry: Annotated[MachineRegistry, Depends(get_machine_registry)],
    audit_repository: Annotated[AuditRepository, Depends(get_audit_repository)],
    settings_store: Annotated[TerminalSettingsStore, Depends(get_terminal_settings)],
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
) -> ScanEventProcessor:
    """Return singleton processor; its ScanContext is the one lock for the whole process."""
    global _processor
    if _processor is None:
        settings = get_settings()
        _processor = ScanEventProcessor(
            registry=registry,
            audit_logger=AuditLogger(repository=audit_repository),
            settings_store=settings_store,
            logger=logging.getLogger("scan_engine.scan"),
            context=ScanContext(
                cooldown_seconds=settings.scan_cooldown_seconds,
                confirmation_timeout_seconds=settings.confirmation_timeout_seconds,
            ),
            metrics=metrics,
        )
    return _processor


def get_fleet_service(
    registry: Annotated[MachineRegistry, Depends(get_machine_registry)],
    audit_repository: Annotated[AuditRepository, Depends(get_audit_repository)],
) -> FleetService:
    return FleetService(
        registry=registry,
        audit_logger=AuditLogger(repository=audit_repository),
        logger=logging.getLogger("scan_engine.fleet"),
    )


def reset_singletons() -> None:
    """Drop process-wide instances (tests)."""
    global _metrics, _capture, _processor
    _metrics = None
    _capture = None
    _processor = None


def get_operator(request: Request) -> Operator:
    """Operator from request.state (set by middleware)."""
    return Operator(id=request.state.operator_id, name=request.state.operator_name)


def get_correlation_id(request: Request) -> str:
    """Extract correlation_id from request.state (set by middleware)."""
    return getattr(request.state, "correlation_id", "") or ""


def get_audit_logger(
    audit_repository: Annotated[AuditRepository, Depends(get_audit_repository)],
) -> AuditLogger:
    return AuditLogger(repository=audit_repository)
