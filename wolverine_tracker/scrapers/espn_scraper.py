# wolverine_tracker/scrapers/espn_scraper.py

from typing import Any, Dict, Optional, Union

import httpx
from loguru import logger

from wolverine_tracker.config.settings import settings
from .base_scraper import BaseScraper

TeamId = Union[str, int]


class EspnScraper(BaseScraper):
    """Client for the public ESPN NFL site and core APIs.

    Every fetch returns the decoded JSON object untouched; shaping it into
    models is the normalizer's job.
    """

    source: str = "ESPN"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        site_api_base: Optional[str] = None,
        core_api_base: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(client, **kwargs)
        self.site_api_base = (site_api_base or settings.espn_site_api_base).rstrip("/")
        self.core_api_base = (core_api_base or settings.espn_core_api_base).rstrip("/")
        logger.debug(f"EspnScraper initialized for {self.site_api_base}")

    async def fetch_teams(self) -> Dict[str, Any]:
        return await self._get_json(f"{self.site_api_base}/teams")

    async def fetch_scoreboard(self) -> Dict[str, Any]:
        return await self._get_json(f"{self.site_api_base}/scoreboard")

    async def fetch_roster(self, team_id: TeamId) -> Dict[str, Any]:
        return await self._get_json(f"{self.site_api_base}/teams/{team_id}/roster")

    async def fetch_team_with_roster(self, team_id: TeamId) -> Dict[str, Any]:
        return await self._get_json(
            f"{self.site_api_base}/teams/{team_id}", params={"enable": "roster"}
        )

    async def fetch_athlete(self, athlete_id: TeamId) -> Dict[str, Any]:
        return await self._get_json(f"{self.core_api_base}/athletes/{athlete_id}")

    async def fetch_resource(self, ref: str) -> Dict[str, Any]:
        """Dereferences a ``$ref`` link from a core API payload."""
        return await self._get_json(ref)
