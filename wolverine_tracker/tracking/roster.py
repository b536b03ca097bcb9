from typing import List, Optional, Union

from loguru import logger

from wolverine_tracker.models.player import RosterEntry
from wolverine_tracker.normalization.normalizer import Normalizer
from wolverine_tracker.scrapers.base_scraper import ScraperError
from wolverine_tracker.scrapers.espn_scraper import EspnScraper
from wolverine_tracker.utils.cache import TTLCache


async def _primary_roster(
    scraper: EspnScraper, team_id: str, normalizer: Normalizer
) -> List[RosterEntry]:
    try:
        payload = await scraper.fetch_roster(team_id)
    except ScraperError as e:
        logger.debug(f"Roster endpoint failed for team {team_id}: {e}")
        return []
    return normalizer.normalize_roster(
        normalizer.flatten_athlete_groups(payload.get("athletes"))
    )


async def _fallback_roster(
    scraper: EspnScraper, team_id: str, normalizer: Normalizer
) -> List[RosterEntry]:
    try:
        payload = await scraper.fetch_team_with_roster(team_id)
    except ScraperError as e:
        logger.debug(f"Team-with-roster endpoint failed for team {team_id}: {e}")
        return []
    team = payload.get("team") if isinstance(payload.get("team"), dict) else {}
    roster = team.get("roster") if isinstance(team.get("roster"), dict) else {}
    return normalizer.normalize_roster(
        normalizer.flatten_athlete_groups(roster.get("athletes"))
    )


async def resolve_roster(
    scraper: EspnScraper,
    team_id: Union[str, int],
    normalizer: Optional[Normalizer] = None,
    cache: Optional[TTLCache] = None,
) -> List[RosterEntry]:
    """Players on a team's roster, in roster order.

    Tries the roster endpoint, then the team endpoint with the roster enabled.
    Failures are absorbed: a team with no reachable roster yields [].
    """
    team_id = str(team_id)
    normalizer = normalizer or Normalizer()

    if cache is not None and team_id in cache:
        return cache.get(team_id)

    roster = await _primary_roster(scraper, team_id, normalizer)
    if not roster:
        logger.debug(f"No athletes from roster endpoint for team {team_id}, trying fallback")
        roster = await _fallback_roster(scraper, team_id, normalizer)

    if not roster:
        logger.warning(f"No roster available for team {team_id}; skipping its players.")
        return []

    logger.debug(f"Resolved {len(roster)} athletes for team {team_id}")
    if cache is not None:
        cache.set(team_id, roster)
    return roster
