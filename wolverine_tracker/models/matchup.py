from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .game import Game
from .player import Player
from .team import Team


class TeamInGame(BaseModel):
    """A team's side of one game and the matched players found on its roster."""

    model_config = ConfigDict(frozen=True)

    team: Team
    players: List[Player] = []


class GameMatchup(BaseModel):
    """A live game paired with the matched players on each side."""

    model_config = ConfigDict(frozen=True)

    game: Game
    teams: List[TeamInGame]

    @computed_field  # type: ignore[misc]
    @property
    def players(self) -> List[Player]:
        return [player for side in self.teams for player in side.players]

    @computed_field  # type: ignore[misc]
    @property
    def total_matched(self) -> int:
        return sum(len(side.players) for side in self.teams)


class ScanResult(BaseModel):
    """Outcome of one pipeline run, handed to the presentation layer."""

    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    live_games: List[Game] = []
    matchups: List[GameMatchup] = []
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def has_live_games(self) -> bool:
        return bool(self.live_games)

    @property
    def all_players(self) -> List[Player]:
        return [player for matchup in self.matchups for player in matchup.players]
