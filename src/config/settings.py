# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for store, delegation, feature and logging settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Task store ===
    store_backend: Literal["json", "sqlite", "redis", "memory"] = "json"
    store_root: Path = Path("~/.doctasks/store")
    store_redis_url: str = ""

    # === Delegation ===
    delegation_timeout_s: float = 600.0
    verify_timeout_s: float = 30.0
    context_url: str = "offscreen.html"
    context_reason: str = "DOM_SCRAPING"

    # === Job features ===
    chunking_enabled: bool = True
    chunking_gemini_enabled: bool = True
    toc_enabled: bool = True

    # === Startup ===
    resume_on_startup: bool = True

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("delegation_timeout_s", "verify_timeout_s")
    @classmethod
    def validate_positive_timeout(cls, v: float) -> float:  # noqa: N805
        """Timeouts bound every await on the execution context."""
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.verify_timeout_s > self.delegation_timeout_s:
            errors.append(
                "VERIFY_TIMEOUT_S must not exceed DELEGATION_TIMEOUT_S"
            )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or embedding).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
