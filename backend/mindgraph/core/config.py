"""Engine settings and configuration."""

import random
from datetime import timezone, tzinfo
from typing import Literal
from zoneinfo import ZoneInfo

from pydantic import Field, field_validator  # type: ignore
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    ENV: Literal["dev", "staging", "prod", "test"] = Field(default="dev")
    PROJECT_NAME: str = Field(default="MindGraph Revision Engine")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(default=True)

    # Scheduler defaults (per-graph settings override these)
    DEFAULT_PRESET: Literal["gentle", "balanced", "intensive"] = Field(default="balanced")
    DEFAULT_PROPAGATION_DEPTH: int = Field(default=2)
    DEFAULT_HORIZON_DAYS: int = Field(default=14)
    DEFAULT_WEAK_THRESHOLD: float = Field(default=0.4)
    JITTER_ENABLED: bool = Field(default=True)
    JITTER_SEED: int | None = Field(default=None)  # None = non-deterministic jitter

    # Timezone used to bucket due dates into calendar days
    USER_TZ: str = Field(default="UTC")

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        """Upper-case the log level so 'debug' and 'DEBUG' behave the same."""
        return value.strip().upper()

    def __init__(self, **kwargs):
        """Validate settings on initialization."""
        super().__init__(**kwargs)
        # Reproducible schedules are a test/dev concern; production jitter must stay random
        if self.ENV == "prod" and self.JITTER_SEED is not None:
            raise ValueError("JITTER_SEED must not be set in production")


# Global settings instance
settings = Settings()


def default_graph_settings():
    """
    Build per-graph scheduler settings from the process-wide defaults.

    Returns:
        GraphSettings using DEFAULT_PRESET and the other DEFAULT_* values
    """
    from mindgraph.learning_engine.contracts import GraphSettings

    return GraphSettings.from_preset(
        settings.DEFAULT_PRESET,
        propagation_depth=settings.DEFAULT_PROPAGATION_DEPTH,
        horizon_days=settings.DEFAULT_HORIZON_DAYS,
        weak_threshold=settings.DEFAULT_WEAK_THRESHOLD,
        jitter_enabled=settings.JITTER_ENABLED,
    )


def make_rng(seed: int | None = None) -> random.Random:
    """
    Create the random source used for interval jitter.

    Args:
        seed: Explicit seed; falls back to JITTER_SEED, then to OS entropy

    Returns:
        Random instance
    """
    if seed is None:
        seed = settings.JITTER_SEED
    return random.Random(seed)


def user_timezone() -> tzinfo:
    """Timezone used to turn due timestamps into calendar days."""
    if settings.USER_TZ.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(settings.USER_TZ)
