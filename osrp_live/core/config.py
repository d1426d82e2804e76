"""Application configuration using Pydantic Settings"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

MAX_PAGE_BUDGET = 100

MATCH_PRECEDENCES = ("category_gate", "whitelist_override")


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Twitch app credentials (optional: missing values disable the Twitch source)
    twitch_client_id: str = Field(default="", description="Twitch application Client ID")
    twitch_secret: str = Field(default="", description="Twitch application secret")

    # Catalog scan
    twitch_max_pages: int = Field(default=25, description="Page budget per scan")
    twitch_language: str = Field(default="", description="Upstream language filter, e.g. 'fr'")
    twitch_game_ids: str = Field(default="", description="Comma-separated category ids")
    twitch_whitelist: str = Field(default="", description="Comma-separated always-shown logins")

    # Match policy
    match_precedence: str = Field(
        default="category_gate", description="category_gate or whitelist_override"
    )
    title_match_enabled: bool = Field(default=True, description="Apply the title pattern rule")

    request_timeout: float = Field(default=10.0, description="Upstream request timeout in seconds")

    # Server
    cors_allow_origins: str = Field(default="*", description="Comma-separated CORS origins")
    log_level: str = Field(default="INFO", description="Logging level")
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, description="Server port")

    @field_validator("twitch_max_pages")
    @classmethod
    def clamp_page_budget(cls, v: int) -> int:
        """Keep the page budget within 0..MAX_PAGE_BUDGET"""
        if v < 0:
            return 0
        if v > MAX_PAGE_BUDGET:
            logger.warning(f"TWITCH_MAX_PAGES={v} exceeds {MAX_PAGE_BUDGET}, clamping")
            return MAX_PAGE_BUDGET
        return v

    @field_validator("twitch_language")
    @classmethod
    def normalize_language(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("match_precedence")
    @classmethod
    def validate_match_precedence(cls, v: str) -> str:
        v_lower = v.strip().lower()
        if v_lower not in MATCH_PRECEDENCES:
            logger.warning(f"Invalid match precedence '{v}', defaulting to category_gate")
            return "category_gate"
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @property
    def game_ids(self) -> list[str]:
        return _split_csv(self.twitch_game_ids)

    @property
    def whitelist(self) -> list[str]:
        return [login.lower() for login in _split_csv(self.twitch_whitelist)]

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS allowed origins"""
        return _split_csv(self.cors_allow_origins) or ["*"]

    @property
    def has_twitch_credentials(self) -> bool:
        return bool(self.twitch_client_id and self.twitch_secret)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
