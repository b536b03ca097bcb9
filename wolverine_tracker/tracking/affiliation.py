from typing import Iterable, Optional, Tuple

from loguru import logger

from wolverine_tracker.config.settings import AppSettings, settings
from wolverine_tracker.models.enums import CollegeKind
from wolverine_tracker.models.player import CollegeField, RosterEntry
from wolverine_tracker.normalization.normalizer import college_name, parse_college
from wolverine_tracker.scrapers.base_scraper import ScraperError
from wolverine_tracker.scrapers.espn_scraper import EspnScraper
from wolverine_tracker.utils.cache import TTLCache


class CollegeMatcher:
    """Decides whether a college name is the tracked institution.

    A name matches when, lower-cased, it contains the core token and none of
    the excluded variants ("michigan" but not "michigan state").
    """

    def __init__(self, core_token: str, excluded_variants: Iterable[str] = ()):
        core_token = core_token.strip().lower()
        if not core_token:
            raise ValueError("core_token must not be empty")
        self.core_token = core_token
        self.excluded_variants: Tuple[str, ...] = tuple(
            v.strip().lower() for v in excluded_variants if v and v.strip()
        )

    @classmethod
    def from_settings(cls, app_settings: Optional[AppSettings] = None) -> "CollegeMatcher":
        app_settings = app_settings or settings
        return cls(
            app_settings.target_college_token, app_settings.excluded_college_variants
        )

    def matches(self, college: Optional[str]) -> bool:
        if not college or not isinstance(college, str):
            return False
        lowered = college.lower()
        if self.core_token not in lowered:
            return False
        return not any(variant in lowered for variant in self.excluded_variants)

    def __repr__(self) -> str:
        return (
            f"CollegeMatcher(core_token={self.core_token!r}, "
            f"excluded_variants={list(self.excluded_variants)!r})"
        )


async def _dereference(scraper: EspnScraper, ref: str) -> Optional[str]:
    try:
        payload = await scraper.fetch_resource(ref)
    except ScraperError as e:
        logger.debug(f"Could not dereference college {ref}: {e}")
        return None
    return college_name(payload)


async def _college_from_field(
    scraper: EspnScraper, field: CollegeField
) -> Optional[str]:
    if field.kind == CollegeKind.INLINE:
        return field.name
    if field.kind == CollegeKind.REFERENCE and field.ref:
        return await _dereference(scraper, field.ref)
    return None


async def _college_from_biography(
    scraper: EspnScraper, athlete_id: str
) -> Optional[str]:
    try:
        biography = await scraper.fetch_athlete(athlete_id)
    except ScraperError as e:
        logger.debug(f"Biography lookup failed for athlete {athlete_id}: {e}")
        return None
    return await _college_from_field(scraper, parse_college(biography.get("college")))


async def resolve_affiliation(
    scraper: EspnScraper,
    player: RosterEntry,
    roster_college: Optional[CollegeField] = None,
    cache: Optional[TTLCache] = None,
) -> Optional[str]:
    """College a player attended, or None when it cannot be determined.

    The roster's own college field wins; otherwise the athlete biography is
    fetched and its college (a name, inline object or ``$ref``) resolved.
    Lookup failures count as "no college", they never propagate.
    """
    field = roster_college if roster_college is not None else player.college

    if field.kind == CollegeKind.INLINE:
        return field.name

    if cache is not None and player.athlete_id in cache:
        return cache.get(player.athlete_id)

    college = await _college_from_field(scraper, field)
    if not college:
        college = await _college_from_biography(scraper, player.athlete_id)

    # Misses are not memoized so a transient failure is retried next run
    if cache is not None and college:
        cache.set(player.athlete_id, college)
    return college
