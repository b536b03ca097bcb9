from typing import Optional

from loguru import logger

from wolverine_tracker.models.team import TeamDirectory
from wolverine_tracker.normalization.normalizer import Normalizer
from wolverine_tracker.scrapers.espn_scraper import EspnScraper


async def load_teams(
    scraper: EspnScraper, normalizer: Optional[Normalizer] = None
) -> TeamDirectory:
    """Fetches the league's team list.

    Raises:
        NetworkError: the teams endpoint is unreachable or answered non-2xx.
        MalformedPayloadError: the payload is not the expected structure.
    """
    normalizer = normalizer or Normalizer()
    logger.info("Loading NFL team directory...")
    payload = await scraper.fetch_teams()
    directory = TeamDirectory(normalizer.normalize_teams(payload))
    if not len(directory):
        logger.warning("Team directory loaded but contains no teams.")
    else:
        logger.success(f"Loaded {len(directory)} teams.")
    return directory
