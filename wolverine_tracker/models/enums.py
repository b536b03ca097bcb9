from enum import Enum


class GameState(str, Enum):
    """ESPN ``status.type.name`` values for a scoreboard event."""

    SCHEDULED = "STATUS_SCHEDULED"
    IN_PROGRESS = "STATUS_IN_PROGRESS"
    HALFTIME = "STATUS_HALFTIME"
    END_PERIOD = "STATUS_END_PERIOD"
    DELAYED = "STATUS_DELAYED"
    FINAL = "STATUS_FINAL"
    POSTPONED = "STATUS_POSTPONED"
    CANCELED = "STATUS_CANCELED"
    UNKNOWN = "STATUS_UNKNOWN"

    @classmethod
    def parse(cls, raw: str | None) -> "GameState":
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


# States considered "currently playing"
LIVE_STATES = frozenset(
    {
        GameState.IN_PROGRESS,
        GameState.HALFTIME,
        GameState.END_PERIOD,
        GameState.DELAYED,
    }
)


class CollegeKind(str, Enum):
    ABSENT = "ABSENT"
    INLINE = "INLINE"
    REFERENCE = "REFERENCE"
