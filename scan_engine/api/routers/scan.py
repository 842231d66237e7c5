"""Scan API router: submit identifiers, feed keystrokes, resolve confirmations, observe state."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from scan_engine.api.dependencies import (
    get_correlation_id,
    get_input_capture,
    get_operator,
    get_scan_processor,
)
from scan_engine.application.scan_processor import ScanEventProcessor, ScanOutcome, ScanResult
from scan_engine.domain.models.session import Operator
from scan_engine.domain.schemas.scan import (
    ConfirmActivityRequest,
    ConfirmHealthRequest,
    KeystrokeRequest,
    ScanSubmitRequest,
)
from scan_engine.input.capture import HardwareInputCapture

router = APIRouter()


def _outcome_response(outcome: ScanOutcome) -> JSONResponse:
    status_code = 404 if outcome.result == ScanResult.NOT_FOUND else 200
    return JSONResponse(status_code=status_code, content=outcome.to_dict())


@router.post("/submit")
async def submit_scan(
    body: ScanSubmitRequest,
    operator: Annotated[Operator, Depends(get_operator)],
    correlation_id: Annotated[str, Depends(get_correlation_id)],
    processor: Annotated[ScanEventProcessor, Depends(get_scan_processor)],
):
    """Submit one identifier (manual entry or camera decode)."""
    outcome = await processor.submit(
        body.raw, body.mode, operator=operator, correlation_id=correlation_id
    )
    return _outcome_response(outcome)


@router.post("/keystrokes")
async def feed_keystrokes(
    body: KeystrokeRequest,
    operator: Annotated[Operator, Depends(get_operator)],
    correlation_id: Annotated[str, Depends(get_correlation_id)],
    processor: Annotated[ScanEventProcessor, Depends(get_scan_processor)],
    capture: Annotated[HardwareInputCapture, Depends(get_input_capture)],
):
    """Feed raw scanner keystrokes; every completed identifier is submitted in order."""
    outcomes = []
    for raw in capture.feed(body.keys, editable_target=body.editable_target):
        outcome = await processor.submit(
            raw, body.mode, operator=operator, correlation_id=correlation_id
        )
        outcomes.append(outcome.to_dict())
    return {"outcomes": outcomes, "buffered": len(capture.buffer)}


@router.post("/confirm/activity")
async def confirm_activity(
    body: ConfirmActivityRequest,
    correlation_id: Annotated[str, Depends(get_correlation_id)],
    processor: Annotated[ScanEventProcessor, Depends(get_scan_processor)],
):
    outcome = await processor.confirm_activity(body.value, correlation_id=correlation_id)
    return outcome.to_dict()


@router.post("/confirm/health")
async def confirm_health(
    body: ConfirmHealthRequest,
    correlation_id: Annotated[str, Depends(get_correlation_id)],
    processor: Annotated[ScanEventProcessor, Depends(get_scan_processor)],
):
    outcome = await processor.confirm_health(body.value, correlation_id=correlation_id)
    return outcome.to_dict()


@router.post("/ignore")
async def ignore_scan(
    processor: Annotated[ScanEventProcessor, Depends(get_scan_processor)],
):
    return processor.ignore().to_dict()


@router.get("/state")
async def scan_state(
    processor: Annotated[ScanEventProcessor, Depends(get_scan_processor)],
):
    """Processing flag, session state, last error/warning for UI feedback."""
    return processor.snapshot()
