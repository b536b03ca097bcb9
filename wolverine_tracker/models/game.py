from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, computed_field

from .enums import GameState, LIVE_STATES


class GameStatus(BaseModel):
    """Playing state of a game plus ESPN's free-text description."""

    model_config = ConfigDict(frozen=True)

    state: GameState = GameState.UNKNOWN
    description: str = ""
    detail: Optional[str] = None  # e.g. "10:32 - 2nd Quarter"
    short_detail: Optional[str] = None
    period: Optional[int] = None
    display_clock: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.state in LIVE_STATES


class Competitor(BaseModel):
    """One side of a game as listed on the scoreboard."""

    model_config = ConfigDict(frozen=True)

    team_id: Optional[str] = None
    display_name: str = ""
    abbreviation: str = ""
    home_away: Optional[str] = None
    score: Optional[str] = None


class Game(BaseModel):
    """Represents a single scoreboard event."""

    model_config = ConfigDict(frozen=True)

    game_id: str
    name: str
    short_name: str = ""
    status: GameStatus
    competitors: List[Competitor] = []
    start_time_utc: Optional[datetime] = None

    @computed_field  # type: ignore[misc]
    @property
    def description(self) -> str:
        """A human-readable description of the game."""
        status = self.status.short_detail or self.status.description or "In Progress"
        return f"{self.short_name or self.name} ({status})"
