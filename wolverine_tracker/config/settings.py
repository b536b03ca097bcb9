import logging
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # ESPN Endpoints
    espn_site_api_base: str = Field(
        "https://site.api.espn.com/apis/site/v2/sports/football/nfl",
        description="Base URL for the ESPN site API (teams, scoreboard, rosters).",
    )
    espn_core_api_base: str = Field(
        "https://sports.core.api.espn.com/v2/sports/football/leagues/nfl",
        description="Base URL for the ESPN core API (athlete biographies).",
    )
    headshot_url_template: str = Field(
        "https://a.espncdn.com/i/headshots/nfl/players/full/{athlete_id}.png",
        description="CDN template for player photos.",
    )
    team_logo_url_template: str = Field(
        "https://a.espncdn.com/i/teamlogos/nfl/500/{abbreviation}.png",
        description="CDN template for team logos (abbreviation is lower-cased).",
    )

    # College Matching
    target_college_token: str = Field(
        "michigan", description="Core name token a college must contain to match."
    )
    target_college_name: str = Field(
        "Michigan", description="Display name of the tracked college."
    )
    excluded_college_variants: List[str] = Field(
        default_factory=lambda: [
            "michigan state",
            "michigan tech",
            "western michigan",
            "eastern michigan",
            "central michigan",
        ],
        description="Colleges that embed the core token but are not the target.",
    )

    # HTTP Behaviour
    request_timeout_seconds: float = Field(
        8.0, gt=0, description="Per-request timeout in seconds."
    )
    max_request_attempts: int = Field(
        3, ge=1, description="Total attempts for a request on transient failures."
    )
    max_concurrency: int = Field(
        8, ge=1, description="Maximum in-flight roster/biography lookups."
    )

    # Scheduling & Caching
    refresh_interval_seconds: float = Field(
        300, gt=0, description="Seconds between scans in watch mode."
    )
    team_cache_ttl_seconds: float = Field(
        24 * 60 * 60, ge=0, description="How long a loaded team directory is reused."
    )
    affiliation_cache_ttl_seconds: float = Field(
        24 * 60 * 60, ge=0, description="How long a resolved college is reused."
    )
    roster_cache_ttl_seconds: float = Field(
        60 * 60, ge=0, description="How long a resolved roster is reused."
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
