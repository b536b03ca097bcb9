import asyncio
import dataclasses
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Union

from loguru import logger

from wolverine_tracker.config.settings import AppSettings, settings
from wolverine_tracker.models.matchup import ScanResult
from wolverine_tracker.models.team import TeamDirectory
from wolverine_tracker.normalization.normalizer import Normalizer
from wolverine_tracker.scrapers.base_scraper import ScraperError
from wolverine_tracker.scrapers.espn_scraper import EspnScraper
from wolverine_tracker.utils.cache import TTLCache, is_fresh

from .affiliation import CollegeMatcher
from .aggregator import build_matchups
from .live_games import scan_live_games
from .team_directory import load_teams

FETCH_ERROR_MESSAGE = "Failed to load NFL data. Please try again later."


@dataclass
class PipelineState:
    """Everything carried from one run to the next.

    The team directory is reused while fresh; roster and affiliation memos
    are time-boxed per team/athlete id.
    """

    roster_cache: TTLCache
    affiliation_cache: TTLCache
    directory: Optional[TeamDirectory] = None
    directory_loaded_at: Optional[float] = None
    result: Optional[ScanResult] = None
    runs: int = 0

    @classmethod
    def from_settings(cls, app_settings: Optional[AppSettings] = None) -> "PipelineState":
        app_settings = app_settings or settings
        return cls(
            roster_cache=TTLCache(app_settings.roster_cache_ttl_seconds),
            affiliation_cache=TTLCache(app_settings.affiliation_cache_ttl_seconds),
        )


async def run_pipeline(
    scraper: EspnScraper,
    state: Optional[PipelineState] = None,
    *,
    app_settings: Optional[AppSettings] = None,
    matcher: Optional[CollegeMatcher] = None,
    clock: Callable[[], float] = time.monotonic,
) -> PipelineState:
    """Runs one scan and returns the updated state; ``state.result`` holds the outcome.

    Only a failure of the team directory or the scoreboard fails the run, and
    then ``result.error`` is set with no partial matchups.
    """
    app_settings = app_settings or settings
    state = state or PipelineState.from_settings(app_settings)
    matcher = matcher or CollegeMatcher.from_settings(app_settings)
    normalizer = Normalizer()
    result = ScanResult()
    logger.info(f"Starting scan #{state.runs + 1} for {app_settings.target_college_name} players...")

    directory = state.directory
    directory_loaded_at = state.directory_loaded_at
    reuse_directory = directory is not None and is_fresh(
        directory_loaded_at, app_settings.team_cache_ttl_seconds, clock()
    )

    try:
        if reuse_directory:
            logger.debug("Reusing cached team directory.")
            games = await scan_live_games(scraper, normalizer)
        else:
            # Both requests finish before either error is raised
            outcomes = await asyncio.gather(
                load_teams(scraper, normalizer),
                scan_live_games(scraper, normalizer),
                return_exceptions=True,
            )
            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    raise outcome
            directory, games = outcomes
            directory_loaded_at = clock()
    except ScraperError as e:
        logger.error(f"Scan aborted, top-level NFL data unavailable: {e}")
        result.error = FETCH_ERROR_MESSAGE
    else:
        result.live_games = games
        if games:
            result.matchups = await build_matchups(
                scraper,
                games,
                directory,
                matcher,
                normalizer=normalizer,
                max_concurrency=app_settings.max_concurrency,
                roster_cache=state.roster_cache,
                affiliation_cache=state.affiliation_cache,
            )

    result.finished_at = datetime.now(timezone.utc)
    if result.ok:
        logger.success(
            f"Scan finished: {len(result.live_games)} live games, "
            f"{len(result.matchups)} matchups, {len(result.all_players)} players."
        )
    return dataclasses.replace(
        state,
        directory=directory,
        directory_loaded_at=directory_loaded_at,
        result=result,
        runs=state.runs + 1,
    )


ResultCallback = Callable[[ScanResult], Union[Awaitable[None], None]]


class PeriodicScanner:
    """Re-runs the pipeline on a fixed interval.

    A run still in flight when the next tick fires is stale: it is cancelled
    and never reported.
    """

    def __init__(
        self,
        scraper: EspnScraper,
        on_result: ResultCallback,
        *,
        interval_seconds: Optional[float] = None,
        state: Optional[PipelineState] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        self.scraper = scraper
        self.on_result = on_result
        self.app_settings = app_settings or settings
        self.interval_seconds = interval_seconds or self.app_settings.refresh_interval_seconds
        self.state = state or PipelineState.from_settings(self.app_settings)
        self._current: Optional[asyncio.Task] = None
        self._stopped = asyncio.Event()

    async def _run_once(self) -> None:
        try:
            self.state = await run_pipeline(
                self.scraper, self.state, app_settings=self.app_settings
            )
            outcome = self.on_result(self.state.result)
            if asyncio.iscoroutine(outcome):
                await outcome
        except Exception:
            logger.exception("Unexpected error during scheduled scan")

    async def _cancel_current(self) -> None:
        task = self._current
        if task is None or task.done() or task is asyncio.current_task():
            return
        logger.warning("Previous scan still running; cancelling it.")
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            # Propagate when this task is the one being cancelled
            current = asyncio.current_task()
            if not task.cancelled() or (current is not None and current.cancelling()):
                raise

    async def run_forever(self, max_runs: Optional[int] = None) -> None:
        """Starts a scan every interval until ``stop()`` or ``max_runs`` scans started."""
        started = 0
        self._stopped.clear()
        while not self._stopped.is_set():
            await self._cancel_current()
            self._current = asyncio.create_task(self._run_once())
            started += 1
            if max_runs is not None and started >= max_runs:
                await self._current
                return
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
        await self._cancel_current()

    async def stop(self) -> None:
        self._stopped.set()
        await self._cancel_current()
