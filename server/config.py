"""Configuration management for Neusicgen.

Loads and validates environment variables using Pydantic settings.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NeusicgenConfig(BaseSettings):
    """Neusicgen configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Server settings
    env: Literal["development", "production", "test"] = Field(
        default="development", alias="NEUSICGEN_ENV"
    )
    host: str = Field(default="0.0.0.0", alias="NEUSICGEN_HOST")
    port: int = Field(default=8000, alias="NEUSICGEN_PORT", ge=1024, le=65535)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", alias="NEUSICGEN_LOG_LEVEL"
    )

    # Generation
    generation_delay_min_ms: float = Field(
        default=2000.0, alias="NEUSICGEN_DELAY_MIN_MS", ge=0.0
    )
    generation_delay_max_ms: float = Field(
        default=4000.0, alias="NEUSICGEN_DELAY_MAX_MS", ge=0.0
    )

    # Playback
    sample_rate: int = Field(default=44100, alias="NEUSICGEN_SAMPLE_RATE", ge=8000, le=192000)
    playback_time_scale: float = Field(default=2.0, gt=0.0, le=10.0)
    attack_ms: float = Field(default=10.0, ge=0.0, le=1000.0)
    hold_fraction: float = Field(default=0.5, ge=0.0, lt=1.0)
    peak_gain: float = Field(default=0.1, gt=0.0, le=1.0)

    # Export
    export_dir: Path = Field(default=Path("exports"), alias="NEUSICGEN_EXPORT_DIR")

    @model_validator(mode="after")
    def validate_delay_range(self) -> "NeusicgenConfig":
        """Validate that the generation delay bounds are ordered."""
        if self.generation_delay_min_ms > self.generation_delay_max_ms:
            raise ValueError(
                f"Generation delay min ({self.generation_delay_min_ms}ms) "
                f"exceeds max ({self.generation_delay_max_ms}ms)"
            )
        return self

    @property
    def generation_delay_range_ms(self) -> tuple[float, float]:
        return (self.generation_delay_min_ms, self.generation_delay_max_ms)


# Singleton configuration instance
_config: NeusicgenConfig | None = None


def get_config() -> NeusicgenConfig:
    """Get the global configuration instance.

    Returns:
        NeusicgenConfig: Configuration singleton
    """
    global _config
    if _config is None:
        _config = NeusicgenConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config
    _config = None
