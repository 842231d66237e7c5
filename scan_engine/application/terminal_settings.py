"""Persisted terminal configuration protocol (the auto-run switch)."""

from typing import Protocol


class TerminalSettingsStore(Protocol):
    async def get_auto_run(self) -> bool:
        ...

    async def set_auto_run(self, enabled: bool) -> None:
        ...
