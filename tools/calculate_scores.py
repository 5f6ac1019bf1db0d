"""Resolve pick results and recompute league scoreboards from the command line.

Same work as POST /api/admin/recompute-scores, for cron hosts that talk to
MongoDB directly.

Usage:
    python -m tools.calculate_scores
    python -m tools.calculate_scores --results-only
    python -m tools.calculate_scores --verbose
"""

import argparse
import asyncio
import logging
import sys

sys.path.insert(0, "backend")

import app.database as _db
from app.middleware.logging import setup_logging
from app.services import scoring_service


async def run(results_only: bool) -> None:
    await _db.connect_db()
    try:
        if results_only:
            updated = await scoring_service.update_pick_results()
            print(f"pick results updated: {updated}")
            return
        summary = await scoring_service.run_scoring_calculation()
        print(
            f"picks updated: {summary['picks_updated']}, "
            f"memberships updated: {summary['memberships_updated']}, "
            f"took {summary['execution_time']}s"
        )
    finally:
        await _db.close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description="Resolve pick results and recompute points/strikes.")
    parser.add_argument("--results-only", action="store_true", help="Only resolve pick results.")
    parser.add_argument("--verbose", action="store_true", help="Log every pick and membership update.")
    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    asyncio.run(run(args.results_only))


if __name__ == "__main__":
    main()
