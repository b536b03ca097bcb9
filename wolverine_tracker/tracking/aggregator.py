import asyncio
from typing import List, Optional

from loguru import logger

from wolverine_tracker.config.settings import settings
from wolverine_tracker.models.game import Competitor, Game
from wolverine_tracker.models.matchup import GameMatchup, TeamInGame
from wolverine_tracker.models.player import Player, RosterEntry
from wolverine_tracker.models.team import Team, TeamDirectory
from wolverine_tracker.normalization.normalizer import Normalizer
from wolverine_tracker.scrapers.espn_scraper import EspnScraper
from wolverine_tracker.utils.cache import TTLCache

from .affiliation import CollegeMatcher, resolve_affiliation
from .roster import resolve_roster


def resolve_team(competitor: Competitor, directory: TeamDirectory) -> Team:
    """Directory team for a competitor, or one built from its inline fields."""
    team = directory.get(competitor.team_id)
    if team is not None:
        return team
    logger.warning(
        f"Team {competitor.team_id} ({competitor.display_name}) not in the team "
        "directory; using scoreboard details."
    )
    return Team(
        team_id=competitor.team_id or "",
        display_name=competitor.display_name or competitor.abbreviation or "Unknown",
        abbreviation=competitor.abbreviation,
    )


class MatchupAggregator:
    """Builds per-game groupings of players who attended the tracked college.

    Roster and biography lookups run concurrently, bounded by a semaphore.
    Results are assembled in scoreboard, competitor and roster order no matter
    which lookup finishes first.
    """

    def __init__(
        self,
        scraper: EspnScraper,
        matcher: CollegeMatcher,
        *,
        normalizer: Optional[Normalizer] = None,
        max_concurrency: Optional[int] = None,
        roster_cache: Optional[TTLCache] = None,
        affiliation_cache: Optional[TTLCache] = None,
    ):
        self.scraper = scraper
        self.matcher = matcher
        self.normalizer = normalizer or Normalizer()
        self.roster_cache = roster_cache
        self.affiliation_cache = affiliation_cache
        self._semaphore = asyncio.Semaphore(max_concurrency or settings.max_concurrency)

    async def build(self, games: List[Game], directory: TeamDirectory) -> List[GameMatchup]:
        candidates = await asyncio.gather(
            *(self._build_matchup(game, directory) for game in games)
        )
        matchups = [m for m in candidates if m.total_matched > 0]
        logger.info(
            f"{len(matchups)} of {len(games)} live games have "
            f"{self.matcher.core_token.title()} players."
        )
        return matchups

    async def _build_matchup(self, game: Game, directory: TeamDirectory) -> GameMatchup:
        teams = [resolve_team(c, directory) for c in game.competitors]
        sides = await asyncio.gather(*(self._team_in_game(team) for team in teams))
        return GameMatchup(game=game, teams=list(sides))

    async def _team_in_game(self, team: Team) -> TeamInGame:
        if not team.team_id:
            return TeamInGame(team=team)
        try:
            players = await self._matched_players(team)
        except Exception:
            logger.exception(f"Unexpected error checking players for {team.display_name}")
            players = []
        return TeamInGame(team=team, players=players)

    async def _matched_players(self, team: Team) -> List[Player]:
        async with self._semaphore:
            roster = await resolve_roster(
                self.scraper, team.team_id, self.normalizer, self.roster_cache
            )
        colleges = await asyncio.gather(*(self._affiliation(entry) for entry in roster))

        matched: List[Player] = []
        for entry, college in zip(roster, colleges):
            if self.matcher.matches(college):
                logger.info(f"Found {entry.display_name} ({college}) on {team.display_name}")
                matched.append(
                    Player.from_roster_entry(entry, college, team.team_id, team.display_name)
                )
        return matched

    async def _affiliation(self, entry: RosterEntry) -> Optional[str]:
        if entry.college.name:
            return entry.college.name
        async with self._semaphore:
            return await resolve_affiliation(
                self.scraper, entry, cache=self.affiliation_cache
            )


async def build_matchups(
    scraper: EspnScraper,
    games: List[Game],
    directory: TeamDirectory,
    matcher: Optional[CollegeMatcher] = None,
    **kwargs,
) -> List[GameMatchup]:
    """Matchups for the given live games, keeping only games with at least one match."""
    aggregator = MatchupAggregator(
        scraper, matcher or CollegeMatcher.from_settings(), **kwargs
    )
    return await aggregator.build(games, directory)
