# Application layer: services that orchestrate domain and infrastructure.

from scan_engine.application.exceptions import (
    ApplicationError,
    NoActiveSessionError,
    StoreWriteFailedError,
)
from scan_engine.application.fleet_service import FleetService
from scan_engine.application.machine_registry import MachineRegistry
from scan_engine.application.scan_context import ScanContext
from scan_engine.application.scan_processor import ScanEventProcessor, ScanOutcome, ScanResult
from scan_engine.application.terminal_settings import TerminalSettingsStore

__all__ = [
    "ApplicationError",
    "FleetService",
    "MachineRegistry",
    "NoActiveSessionError",
    "ScanContext",
    "ScanEventProcessor",
    "ScanOutcome",
    "ScanResult",
    "StoreWriteFailedError",
    "TerminalSettingsStore",
]
