# scripts/init_db.py
import sys
from pathlib import Path

# Ensure project root is on the path when running this script directly
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio

from sqlalchemy import text

from scan_engine.infrastructure.database.session import engine, init_models


async def run():
    await init_models()
    async with engine.begin() as conn:
        result = await conn.execute(text("SELECT COUNT(*) FROM machines"))
        print("DB ready, machines:", result.scalar())

asyncio.run(run())
