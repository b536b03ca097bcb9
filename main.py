import sys
import asyncio
import argparse
import json
from typing import List, Optional

# --- Settings/Logging ---
from wolverine_tracker.logging.setup import setup_logging
from wolverine_tracker.config.settings import settings

setup_logging()

from loguru import logger

from wolverine_tracker.models.matchup import ScanResult
from wolverine_tracker.presentation.console import render_result
from wolverine_tracker.scrapers.espn_scraper import EspnScraper
from wolverine_tracker.tracking.pipeline import PeriodicScanner, run_pipeline


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=f"Show {settings.target_college_name} players in live NFL games."
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help=f"Rescan every {settings.refresh_interval_seconds:g}s until interrupted.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the scan result as JSON instead of tables.",
    )
    return parser.parse_args(argv)


def emit(result: ScanResult, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        render_result(result)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)
    logger.info(f"Starting Wolverine Tracker ({settings.target_college_name})")

    async with EspnScraper() as scraper:
        if args.watch:
            scanner = PeriodicScanner(scraper, lambda result: emit(result, args.json))
            try:
                await scanner.run_forever()
            finally:
                await scanner.stop()
            return 0

        state = await run_pipeline(scraper)
        emit(state.result, args.json)
        return 0 if state.result.ok else 1


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)
