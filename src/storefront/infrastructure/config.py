"""Runtime settings, read from ``STOREFRONT_*`` environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.application.create_order import DeductionFailurePolicy

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

ENV_PREFIX = "STOREFRONT_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ConfigError(ValueError):
    """An environment variable holds a value the service cannot use."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, frozen=True, extra="ignore")

    data_dir: Path = DEFAULT_DATA_DIR
    ops_email: str | None = None
    deduction_policy: DeductionFailurePolicy = DeductionFailurePolicy.FLAG_FOR_REVIEW
    notify_workers: int = Field(default=2, ge=1)
    log_level: str = "WARNING"

    @field_validator("data_dir", mode="before")
    @classmethod
    def default_when_blank(cls, value):
        if isinstance(value, str) and not value.strip():
            return DEFAULT_DATA_DIR
        return value

    @field_validator("ops_email", mode="before")
    @classmethod
    def none_when_blank(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("deduction_policy", mode="before")
    @classmethod
    def normalize_policy(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def check_log_level(cls, value):
        level = str(value).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {list(LOG_LEVELS)}")
        return level

    @classmethod
    def from_env(cls) -> Settings:
        """Read the environment, turning validation failures into ``ConfigError``."""
        try:
            return cls()
        except ValidationError as exc:
            problems = "; ".join(
                f"{ENV_PREFIX}{str(error['loc'][0]).upper()}: {error['msg']}"
                for error in exc.errors()
            )
            raise ConfigError(problems) from None
