from typing import Iterable, List, Optional

from loguru import logger

from wolverine_tracker.models.game import Game
from wolverine_tracker.normalization.normalizer import Normalizer
from wolverine_tracker.scrapers.espn_scraper import EspnScraper


def filter_live_games(games: Iterable[Game]) -> List[Game]:
    """Keeps in-progress, halftime, end-of-period and delayed games, in order."""
    return [game for game in games if game.status.is_live]


async def scan_live_games(
    scraper: EspnScraper, normalizer: Optional[Normalizer] = None
) -> List[Game]:
    """Returns the games currently being played; an empty list is a normal outcome.

    Raises:
        NetworkError: the scoreboard is unreachable or answered non-2xx.
        MalformedPayloadError: the scoreboard payload is not the expected shape.
    """
    normalizer = normalizer or Normalizer()
    logger.info("Checking scoreboard for live games...")
    payload = await scraper.fetch_scoreboard()
    games = normalizer.normalize_scoreboard(payload)
    live = filter_live_games(games)
    if live:
        logger.success(
            f"{len(live)} of {len(games)} scoreboard games are live: "
            f"{', '.join(g.short_name or g.name for g in live)}"
        )
    else:
        logger.info(f"No live games right now ({len(games)} on the scoreboard).")
    return live
