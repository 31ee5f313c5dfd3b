"""Environment-driven settings for the change-control service."""

from __future__ import annotations

from datetime import tzinfo
from functools import lru_cache

from dateutil import tz
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from change_control.domain.models import DEFAULT_ADVANCE_MARGIN_SEC


class Settings(BaseSettings):
    """Settings loaded from ``CHANGE_CONTROL_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="CHANGE_CONTROL_", env_ignore_empty=True)

    advance_margin_sec: int = Field(default=DEFAULT_ADVANCE_MARGIN_SEC, ge=0)
    floating_tz: str = "UTC"
    log_level: str = "INFO"

    @property
    def floating_tzinfo(self) -> tzinfo:
        """Zone applied to floating and date-only calendar values."""
        zone = tz.gettz(self.floating_tz)
        if zone is None:
            raise ValueError(f"Unknown time zone: {self.floating_tz!r}")
        return zone


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
