"""DB-backed terminal settings (auto-run switch)."""

from sqlalchemy.ext.asyncio import async_sessionmaker

from scan_engine.infrastructure.database.models import TerminalSettingRow

AUTO_RUN_KEY = "auto_run"


class DbTerminalSettingsStore:
    """Implements TerminalSettingsStore protocol. Falls back to the configured default until set."""

    def __init__(self, session_factory: async_sessionmaker, default_auto_run: bool = False) -> None:
        self._session_factory = session_factory
        self._default_auto_run = default_auto_run

    async def get_auto_run(self) -> bool:
        async with self._session_factory() as session:
            row = await session.get(TerminalSettingRow, AUTO_RUN_KEY)
            if row is None:
                return self._default_auto_run
            return row.value == "true"

    async def set_auto_run(self, enabled: bool) -> None:
        async with self._session_factory() as session:
            row = await session.get(TerminalSettingRow, AUTO_RUN_KEY)
            value = "true" if enabled else "false"
            if row is None:
                session.add(TerminalSettingRow(key=AUTO_RUN_KEY, value=value))
            else:
                row.value = value
            await session.commit()
