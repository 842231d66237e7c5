"""Terminal settings router: the persisted auto-run switch."""

from typing import Annotated

from fastapi import APIRouter, Depends

from scan_engine.api.dependencies import get_terminal_settings
from scan_engine.application.terminal_settings import TerminalSettingsStore
from scan_engine.domain.schemas.scan import AutoRunRequest

router = APIRouter()


@router.get("/auto-run")
async def get_auto_run(
    store: Annotated[TerminalSettingsStore, Depends(get_terminal_settings)],
):
    return {"enabled": await store.get_auto_run()}


@router.put("/auto-run")
async def set_auto_run(
    body: AutoRunRequest,
    store: Annotated[TerminalSettingsStore, Depends(get_terminal_settings)],
):
    await store.set_auto_run(body.enabled)
    return {"enabled": body.enabled}
