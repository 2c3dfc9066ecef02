"""Application settings via Pydantic BaseSettings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from diffshot.constants import (
    COMPARE_QUALITY,
    DEFAULT_COLOR_TOLERANCE,
    DEFAULT_DEVICE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_THRESHOLD,
    SNAPSHOT_QUALITY,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DIFFSHOT_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # CLI defaults
    output_dir: str = DEFAULT_OUTPUT_DIR
    default_device: str = DEFAULT_DEVICE
    default_threshold: float = Field(default=DEFAULT_THRESHOLD, ge=0, le=100)

    # Capture
    retry_delay_ms: int = Field(default=DEFAULT_RETRY_DELAY_MS, ge=0)
    compare_quality: int = Field(default=COMPARE_QUALITY, ge=1, le=100)
    snapshot_quality: int = Field(default=SNAPSHOT_QUALITY, ge=1, le=100)
    ignore_https_errors: bool = True
    clear_local_storage: bool = True

    # Diff
    color_tolerance: int = Field(default=DEFAULT_COLOR_TOLERANCE, ge=0, le=255)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
