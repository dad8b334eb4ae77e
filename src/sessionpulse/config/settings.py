# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Configuration for session tracking.

Loads from environment variables with the SESSIONPULSE_ prefix (and an
optional .env file). The tracker treats an instance as read-only.

Example:
    SESSIONPULSE_RELEASE_STAGE=staging
    SESSIONPULSE_NOTIFY_RELEASE_STAGES='["production", "staging"]'
    SESSIONPULSE_AUTO_CAPTURE_SESSIONS=true
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import lru_cache

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigSessionTracking(BaseSettings):
    """Settings consumed by the session tracker and its collaborators."""

    model_config = SettingsConfigDict(
        env_prefix="SESSIONPULSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        description="Project API key sent with every session payload",
    )

    # Session start policy
    auto_capture_sessions: bool = Field(
        default=False,
        description="Accept sessions started by lifecycle instrumentation",
    )
    release_stage: str = Field(
        default="production",
        min_length=1,
        description="Deployment stage of the running application",
    )
    notify_release_stages: frozenset[str] | None = Field(
        default=None,
        description="Allow-list of release stages that report sessions (None = all)",
    )
    app_version: str | None = Field(default=None)

    # Delivery
    sessions_endpoint: HttpUrl = Field(
        default="http://localhost:9000/sessions",
        description="Absolute http(s) URL that receives session payloads",
    )
    delivery_timeout_seconds: float = Field(default=5.0, ge=0.1, le=120.0)
    flush_interval_seconds: float = Field(
        default=60.0,
        gt=0.0,
        le=3600.0,
        description="Period of the background completed-minute flush",
    )

    @field_validator("notify_release_stages", mode="before")
    @classmethod
    def split_release_stages(cls, v: object) -> object:
        if v is None:
            return None
        if isinstance(v, str):
            return frozenset(s.strip() for s in v.split(",") if s.strip())
        if isinstance(v, Iterable):
            return frozenset(v)
        return v

    def should_track_release_stage(self) -> bool:
        """Return True when the current release stage may report sessions."""
        if self.notify_release_stages is None:
            return True
        return self.release_stage in self.notify_release_stages


@lru_cache(maxsize=1)
def get_settings() -> ConfigSessionTracking:
    """Return the process-wide settings instance, created on first call.

    Use `clear_settings_cache()` in test fixtures to force a fresh read of
    the environment.
    """
    return ConfigSessionTracking()


def clear_settings_cache() -> None:
    """Drop the cached settings so the next `get_settings()` re-reads env."""
    get_settings.cache_clear()


__all__: list[str] = [
    "ConfigSessionTracking",
    "clear_settings_cache",
    "get_settings",
]
