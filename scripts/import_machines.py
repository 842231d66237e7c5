# scripts/import_machines.py
"""Merge machines from a spreadsheet export (CSV) into the registry. Scan history is kept."""

import sys
from pathlib import Path

# Ensure project root is on the path when running this script directly
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio
import csv
import logging

from scan_engine.application.fleet_service import FleetService
from scan_engine.config.logging import configure_logging
from scan_engine.config.settings import get_settings
from scan_engine.governance.audit_logger import AuditLogger
from scan_engine.infrastructure.database.audit_repository_db import DbAuditRepository
from scan_engine.infrastructure.database.machine_registry_db import DbMachineRegistry
from scan_engine.infrastructure.database.session import AsyncSessionLocal, init_models


async def main(csv_path: str) -> None:
    configure_logging(get_settings().log_level)
    await init_models()
    with open(csv_path, newline="", encoding="utf-8-sig") as fh:
        rows = list(csv.DictReader(fh))
    fleet = FleetService(
        registry=DbMachineRegistry(AsyncSessionLocal),
        audit_logger=AuditLogger(repository=DbAuditRepository(AsyncSessionLocal)),
        logger=logging.getLogger("scan_engine.import"),
    )
    summary = await fleet.import_machines(rows)
    print(f"Imported {summary.imported} machines, skipped {summary.skipped} rows")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python scripts/import_machines.py <machines.csv>")
        sys.exit(2)
    asyncio.run(main(sys.argv[1]))
