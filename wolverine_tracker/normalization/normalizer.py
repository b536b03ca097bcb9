from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from wolverine_tracker.config.settings import settings
from wolverine_tracker.models.enums import GameState
from wolverine_tracker.models.game import Competitor, Game, GameStatus
from wolverine_tracker.models.player import UNKNOWN, CollegeField, RosterEntry
from wolverine_tracker.models.team import Team
from wolverine_tracker.scrapers.base_scraper import MalformedPayloadError


class NormalizationError(MalformedPayloadError):
    """Custom exception for payloads that cannot be shaped into models."""

    pass


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def college_name(raw: Any) -> Optional[str]:
    """Name of an inline college object (``name`` first, then ``displayName``)."""
    if not isinstance(raw, dict):
        return None
    return _text(raw.get("name")) or _text(raw.get("displayName"))


def parse_college(raw: Any) -> CollegeField:
    """Classifies an ESPN ``college`` value as absent, inline or a reference."""
    if isinstance(raw, str):
        name = _text(raw)
        return CollegeField.inline(name) if name else CollegeField.absent()
    if isinstance(raw, dict):
        name = college_name(raw)
        if name:
            return CollegeField.inline(name)
        ref = _text(raw.get("$ref"))
        if ref:
            return CollegeField.reference(ref)
    return CollegeField.absent()


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Parses ESPN's ``2024-09-08T17:00Z`` style dates into aware UTC datetimes."""
    text = _text(raw)
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable event date: {text!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class Normalizer:
    """Shapes raw ESPN payloads into Team, Game and RosterEntry models."""

    # --- Team directory ---

    def normalize_teams(self, payload: Dict[str, Any]) -> List[Team]:
        """Extracts teams from ``sports[0].leagues[0].teams[*].team``."""
        try:
            raw_teams = payload["sports"][0]["leagues"][0]["teams"]
        except (KeyError, IndexError, TypeError) as e:
            raise NormalizationError(
                "Team directory payload has no sports[0].leagues[0].teams list"
            ) from e
        if not isinstance(raw_teams, list):
            raise NormalizationError("Team directory 'teams' is not a list")

        teams: List[Team] = []
        for entry in raw_teams:
            raw_team = entry.get("team", entry) if isinstance(entry, dict) else None
            team = self.normalize_team(raw_team)
            if team is None:
                logger.warning(f"Skipping team directory entry without an id: {entry!r}")
                continue
            teams.append(team)
        return teams

    def normalize_team(self, raw: Any) -> Optional[Team]:
        if not isinstance(raw, dict) or _text(raw.get("id")) is None:
            return None
        abbreviation = _text(raw.get("abbreviation")) or ""
        return Team(
            team_id=_text(raw.get("id")),
            display_name=_text(raw.get("displayName"))
            or _text(raw.get("name"))
            or abbreviation,
            abbreviation=abbreviation,
            location=_text(raw.get("location")),
            nickname=_text(raw.get("nickname")) or _text(raw.get("name")),
            logo_url=self._logo_url(raw, abbreviation),
        )

    def _logo_url(self, raw: Dict[str, Any], abbreviation: str) -> Optional[str]:
        logos = raw.get("logos")
        if isinstance(logos, list) and logos and isinstance(logos[0], dict):
            href = _text(logos[0].get("href"))
            if href:
                return href
        if not abbreviation:
            return None
        return settings.team_logo_url_template.format(abbreviation=abbreviation.lower())

    # --- Scoreboard ---

    def normalize_scoreboard(self, payload: Dict[str, Any]) -> List[Game]:
        """All scoreboard events as Games, in scoreboard order."""
        events = payload.get("events")
        if events is None:
            return []
        if not isinstance(events, list):
            raise NormalizationError("Scoreboard 'events' is not a list")

        games: List[Game] = []
        for event in events:
            game = self.normalize_event(event)
            if game is not None:
                games.append(game)
        return games

    def normalize_event(self, event: Any) -> Optional[Game]:
        if not isinstance(event, dict) or _text(event.get("id")) is None:
            logger.warning("Skipping scoreboard event without an id")
            return None
        competitions = event.get("competitions")
        if (
            not isinstance(competitions, list)
            or not competitions
            or not isinstance(competitions[0], dict)
        ):
            logger.warning(f"Skipping event {event.get('id')} without a competition")
            return None
        raw_competitors = competitions[0].get("competitors") or []

        return Game(
            game_id=_text(event.get("id")),
            name=_text(event.get("name")) or "",
            short_name=_text(event.get("shortName")) or "",
            status=self.normalize_status(event.get("status")),
            competitors=[
                self.normalize_competitor(c)
                for c in raw_competitors
                if isinstance(c, dict)
            ],
            start_time_utc=parse_timestamp(event.get("date")),
        )

    def normalize_status(self, raw: Any) -> GameStatus:
        if not isinstance(raw, dict):
            return GameStatus()
        status_type = raw.get("type") if isinstance(raw.get("type"), dict) else {}
        period = raw.get("period")
        return GameStatus(
            state=GameState.parse(status_type.get("name")),
            description=_text(status_type.get("description")) or "",
            detail=_text(status_type.get("detail")),
            short_detail=_text(status_type.get("shortDetail")),
            period=period if isinstance(period, int) else None,
            display_clock=_text(raw.get("displayClock")),
        )

    def normalize_competitor(self, raw: Dict[str, Any]) -> Competitor:
        """A competitor either embeds a ``team`` object or acts as one."""
        team = raw.get("team") if isinstance(raw.get("team"), dict) else {}
        return Competitor(
            team_id=_text(team.get("id")) or _text(raw.get("id")),
            display_name=_text(team.get("displayName"))
            or _text(raw.get("displayName"))
            or "",
            abbreviation=_text(team.get("abbreviation"))
            or _text(raw.get("abbreviation"))
            or "",
            home_away=_text(raw.get("homeAway")),
            score=_text(raw.get("score")) if not isinstance(raw.get("score"), dict) else None,
        )

    # --- Rosters ---

    def flatten_athlete_groups(self, groups: Any) -> List[Dict[str, Any]]:
        """Flattens ``[{"position": "offense", "items": [...]}, ...]`` in order."""
        if not isinstance(groups, list):
            return []
        athletes: List[Dict[str, Any]] = []
        for group in groups:
            if not isinstance(group, dict):
                continue
            items = group.get("items")
            if isinstance(items, list):
                athletes.extend(item for item in items if isinstance(item, dict))
        return athletes

    def normalize_roster(self, raw_athletes: Iterable[Dict[str, Any]]) -> List[RosterEntry]:
        entries: List[RosterEntry] = []
        for raw in raw_athletes:
            entry = self.normalize_roster_entry(raw)
            if entry is not None:
                entries.append(entry)
        return entries

    def normalize_roster_entry(self, raw: Dict[str, Any]) -> Optional[RosterEntry]:
        athlete_id = _text(raw.get("id"))
        if athlete_id is None:
            logger.debug(f"Skipping roster athlete without an id: {raw.get('displayName')}")
            return None
        position = raw.get("position") if isinstance(raw.get("position"), dict) else {}
        return RosterEntry(
            athlete_id=athlete_id,
            display_name=_text(raw.get("displayName")) or _text(raw.get("fullName")) or "",
            jersey=_text(raw.get("jersey")) or UNKNOWN,
            position=_text(position.get("abbreviation")) or UNKNOWN,
            college=parse_college(raw.get("college")),
        )
