"""Analysis configuration model using pydantic-settings."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalysisConfig(BaseSettings):
    """Goal analysis configuration loaded from environment variables and .env file.

    Every field has a default; environment variables use the ``GOAL_ANALYSIS_``
    prefix (e.g. ``GOAL_ANALYSIS_DEBOUNCE_INTERVAL=0.3``).
    """

    model_config = SettingsConfigDict(
        env_prefix="GOAL_ANALYSIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debounce_interval: float = 0.5
    min_text_length: int = 3
    max_suggested_chips: int = 3
    min_confidence_threshold: float = 0.5
    max_fuzzy_distance: int = 2
    min_keyword_length: int = 2
    cache_capacity: int = 100
    cache_ttl: float = 300.0
    enable_fuzzy_matching: bool = True
    context_length: int = 30
    history_limit: int = 20
    update_queue_size: int = 100
    readiness_threshold: float = 0.7
    disclosure_text_length_thresholds: tuple[int, int] = (50, 100)
    disclosure_selection_thresholds: tuple[int, int] = (2, 4)
    log_level: str = "INFO"

    @field_validator("debounce_interval", "cache_ttl")
    @classmethod
    def validate_non_negative_seconds(cls, value: float) -> float:
        """Durations must be non-negative."""
        if value < 0:
            msg = "durations must be >= 0"
            raise ValueError(msg)
        return value

    @field_validator("min_text_length", "min_keyword_length", "max_fuzzy_distance", "context_length")
    @classmethod
    def validate_non_negative_int(cls, value: int) -> int:
        """Lengths and distances must be non-negative."""
        if value < 0:
            msg = "lengths and distances must be >= 0"
            raise ValueError(msg)
        return value

    @field_validator("max_suggested_chips", "cache_capacity", "history_limit", "update_queue_size")
    @classmethod
    def validate_positive_int(cls, value: int) -> int:
        """Capacities must be at least 1."""
        if value < 1:
            msg = "capacities must be >= 1"
            raise ValueError(msg)
        return value

    @field_validator("min_confidence_threshold", "readiness_threshold")
    @classmethod
    def validate_threshold(cls, value: float) -> float:
        """Thresholds must be between 0.0 and 1.0."""
        if value < 0.0 or value > 1.0:
            msg = "thresholds must be between 0.0 and 1.0"
            raise ValueError(msg)
        return value

    @field_validator("disclosure_text_length_thresholds", "disclosure_selection_thresholds")
    @classmethod
    def validate_disclosure_steps(cls, value: tuple[int, int]) -> tuple[int, int]:
        """Disclosure steps must be non-negative and ascending."""
        first, second = value
        if first < 0 or second < first:
            msg = "disclosure thresholds must be non-negative and ascending"
            raise ValueError(msg)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Log level must be a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            msg = f"log_level must be one of {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return upper_value
