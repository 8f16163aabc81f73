#!/usr/bin/env python3

# scripts/reconcile_history.py
#  to run the script, run the following command:
#  python scripts/reconcile_history.py

"""
History Reconciliation Report
Lists history rows whose prescription never reached the version they promise.
Read-only: rows are reported for manual review, never deleted.
"""
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

import app.model_registry  # noqa: F401
from app.database.connection import AsyncSessionLocal, engine
from app.prescription_engine.history_ledger import find_orphaned_history

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def main() -> int:
    async with AsyncSessionLocal() as db:
        orphans = await find_orphaned_history(db)

    await engine.dispose()

    if not orphans:
        logger.info("✅ History ledger is consistent with prescription versions")
        return 0

    print("=======================================================================")
    for row in orphans:
        print(
            f"⚠️  {row.id}: prescription={row.prescription_id} "
            f"version_number={row.version_number} edited_by={row.edited_by} at {row.edited_at}"
        )
    print("=======================================================================")
    logger.warning(f"Found {len(orphans)} orphaned history rows")
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
