#!/usr/bin/env python3
"""Run the moments sweep once, outside the scheduler.

Usage:
    uv run python scripts/run_moments_sweep.py
    uv run python scripts/run_moments_sweep.py --household <household_id>
"""

import argparse
import asyncio
import logging
import sys

from src.core import db_client
from src.modules.moments.service import generate_moments_tasks, run_moments_automation


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


async def main(household_id: str | None) -> int:
    """Run the sweep and report what it created.

    Returns:
        Process exit code (1 if any household failed)
    """
    await db_client.init_db()
    try:
        if household_id:
            created = await generate_moments_tasks(household_id=household_id)
            logger.info("Created %d task(s) for household %s", created, household_id)
            return 0

        summary = await run_moments_automation()
        logger.info(
            "Processed %d household(s), created %d task(s), %d failed",
            summary.households_processed,
            summary.tasks_created,
            summary.households_failed,
        )
        for failure in summary.failures:
            logger.error("  %s: %s", failure.household_id, failure.error)
        return 1 if summary.households_failed else 0
    finally:
        await db_client.close_connection()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create reminder tasks for upcoming important dates.")
    parser.add_argument("--household", help="Only process this household ID")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.household)))
