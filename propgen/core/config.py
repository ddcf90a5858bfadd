"""Application configuration settings."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def _find_env_file() -> str | None:
    """Find .env file in the working directory, if any."""
    path = Path(".env")
    if path.exists():
        return str(path)
    return None  # No .env file found, use env vars only


class Settings(BaseSettings):
    """Trial defaults loaded from PROPGEN_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PROPGEN_",
        env_file=_find_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Trials
    trial_count: int = Field(default=100, ge=1)
    verbose_trace: bool = False

    # Reproducibility
    seed: int | None = None
    derandomize: bool = False

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @model_validator(mode="after")
    def warn_on_ineffective_settings(self) -> "Settings":
        """Log warnings for option combinations that have no effect."""
        warnings: list[str] = []

        if self.seed is not None and self.derandomize:
            warnings.append(
                "PROPGEN_SEED is ignored when PROPGEN_DERANDOMIZE is enabled."
            )

        if self.verbose_trace and self.log_level not in ("DEBUG", "INFO"):
            warnings.append(
                f"PROPGEN_VERBOSE_TRACE has no visible effect at log level {self.log_level}."
            )

        for warning in warnings:
            logger.warning(f"⚠️  CONFIG WARNING: {warning}")

        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
