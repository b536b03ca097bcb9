# wolverine_tracker/models/team.py
from typing import Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class Team(BaseModel):
    """Represents an NFL team from the ESPN team directory."""

    model_config = ConfigDict(frozen=True)

    team_id: str
    display_name: str
    abbreviation: str
    location: Optional[str] = None
    nickname: Optional[str] = None
    logo_url: Optional[str] = None


class TeamDirectory:
    """Lookup of teams keyed by their string-normalized ESPN id."""

    def __init__(self, teams: List[Team]):
        self._teams = list(teams)
        self._by_id: Dict[str, Team] = {team.team_id: team for team in self._teams}

    def get(self, team_id: Union[str, int, None]) -> Optional[Team]:
        if team_id is None:
            return None
        return self._by_id.get(str(team_id))

    def __contains__(self, team_id: object) -> bool:
        return team_id is not None and str(team_id) in self._by_id

    def __iter__(self) -> Iterator[Team]:
        return iter(self._teams)

    def __len__(self) -> int:
        return len(self._teams)
