from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field

from wolverine_tracker.config.settings import settings

from .enums import CollegeKind

UNKNOWN = "unknown"


class CollegeField(BaseModel):
    """College as carried by an ESPN payload: absent, an inline name, or a $ref."""

    model_config = ConfigDict(frozen=True)

    kind: CollegeKind = CollegeKind.ABSENT
    name: Optional[str] = None
    ref: Optional[str] = None

    @classmethod
    def absent(cls) -> "CollegeField":
        return cls()

    @classmethod
    def inline(cls, name: str) -> "CollegeField":
        return cls(kind=CollegeKind.INLINE, name=name)

    @classmethod
    def reference(cls, ref: str) -> "CollegeField":
        return cls(kind=CollegeKind.REFERENCE, ref=ref)


class RosterEntry(BaseModel):
    """A player as read from a roster, before affiliation is resolved."""

    model_config = ConfigDict(frozen=True)

    athlete_id: str
    display_name: str
    jersey: str = UNKNOWN
    position: str = UNKNOWN
    college: CollegeField = CollegeField()


class Player(BaseModel):
    """A rostered player whose college matched the tracked institution."""

    model_config = ConfigDict(frozen=True)

    athlete_id: str
    display_name: str
    jersey: str = UNKNOWN
    position: str = UNKNOWN
    college: str
    team_id: str
    team_name: str

    @computed_field  # type: ignore[misc]
    @property
    def photo_url(self) -> str:
        return settings.headshot_url_template.format(athlete_id=self.athlete_id)

    @classmethod
    def from_roster_entry(
        cls, entry: RosterEntry, college: str, team_id: str, team_name: str
    ) -> "Player":
        return cls(
            athlete_id=entry.athlete_id,
            display_name=entry.display_name,
            jersey=entry.jersey,
            position=entry.position,
            college=college,
            team_id=team_id,
            team_name=team_name,
        )
