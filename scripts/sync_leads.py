#!/usr/bin/env python3
"""Run one Google Sheets reconcile sweep from the command line.

Usage:
    python scripts/sync_leads.py
    python scripts/sync_leads.py --batch-size 50

Pushes leads that have no sheet row yet, oldest first, and prints the summary
as JSON. Exits with status 1 when the sweep could not run at all (e.g. Google
Sheets is not configured). Suitable for a cron entry.

Requires:
    DATABASE_URL, JWT_SECRET_KEY, GOOGLE_SHEETS_ID and a sheet credential
    (environment variables or .env)
"""

import argparse
import asyncio
import os
import sys

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from app.core.config import settings  # noqa: E402
from app.core.database import async_session, engine  # noqa: E402
from app.services.lead_service import LeadStore  # noqa: E402
from app.services.sheets import SheetsClient  # noqa: E402
from app.services.sheets_sync import SyncCoordinator  # noqa: E402


async def run(batch_size: int) -> int:
    coordinator = SyncCoordinator(LeadStore(async_session), SheetsClient.from_settings(settings))
    try:
        summary = await coordinator.reconcile(batch_size)
    finally:
        await engine.dispose()

    print(summary.model_dump_json(indent=2))
    return 0 if summary.success else 1


def main():
    parser = argparse.ArgumentParser(description="Sync unsynced leads to Google Sheets")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.SHEETS_SYNC_BATCH_SIZE,
        help="Maximum number of leads to push in this run",
    )
    args = parser.parse_args()

    if args.batch_size < 1:
        print("ERROR: --batch-size must be at least 1")
        sys.exit(2)

    sys.exit(asyncio.run(run(args.batch_size)))


if __name__ == "__main__":
    main()
