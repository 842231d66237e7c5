"""Domain schemas. Request/response and validation."""

from scan_engine.domain.schemas.scan import (
    AutoRunRequest,
    ConfirmActivityRequest,
    ConfirmHealthRequest,
    KeystrokeRequest,
    MachineCreateRequest,
    MachineImportRequest,
    MachineResponse,
    ScanSubmitRequest,
)

__all__ = [
    "AutoRunRequest",
    "ConfirmActivityRequest",
    "ConfirmHealthRequest",
    "KeystrokeRequest",
    "MachineCreateRequest",
    "MachineImportRequest",
    "MachineResponse",
    "ScanSubmitRequest",
]
