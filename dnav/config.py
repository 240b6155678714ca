"""Configuration management for D-NAV intake.

Loads configuration from:
1. dnav.yaml in current directory
2. ~/.config/dnav/dnav.yaml
3. Environment variables (DNAV_* prefix)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class QualityConfig(BaseModel):
    """Extractability thresholds for the quality classifier."""

    min_chars: int = 200
    min_tokens: int = 40
    min_avg_line_length: float = 42.0
    max_newline_density: float = 0.06


class ScoringConfig(BaseModel):
    """Acceptance floors per quality tier and strict/broad mode."""

    tier_floors: dict[str, int] = Field(
        default_factory=lambda: {"A": 20, "B": 30, "C": 45},
        description="Minimum decision score for acceptance, keyed by quality tier",
    )
    strict: bool = Field(
        default=False,
        description="Strict mode: conditional bonus drops to 2 and chunks without "
        "commitment language need a score of 45",
    )


class DedupConfig(BaseModel):
    """Deduplication settings."""

    similarity_threshold: float = 0.85
    merge_across_documents: bool = False


class GovernorConfig(BaseModel):
    """Processing loop limits."""

    max_processing_seconds: float = 40.0
    memory_pressure_threshold: float = 0.82
    max_pages_per_document: int = Field(
        default=30,
        description="Pages read per document; 0 disables the cap",
    )
    repeated_line_ratio: float = 0.3


class ExportConfig(BaseModel):
    """Export defaults."""

    format: str = "csv"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Path | None = None


class Config(BaseSettings):
    """Main configuration for D-NAV intake."""

    model_config = SettingsConfigDict(
        env_prefix="DNAV_",
        env_nested_delimiter="__",
    )

    quality: QualityConfig = Field(default_factory=QualityConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    governor: GovernorConfig = Field(default_factory=GovernorConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def find_config_file() -> Path | None:
    """Find the configuration file.

    Searches in order:
    1. ./dnav.yaml
    2. ~/.config/dnav/dnav.yaml
    """
    locations = [
        Path.cwd() / "dnav.yaml",
        Path.home() / ".config" / "dnav" / "dnav.yaml",
    ]

    for path in locations:
        if path.exists():
            return path

    return None


def load_config() -> Config:
    """Load configuration from file and environment.

    Returns:
        Config: The loaded configuration.
    """
    config_data: dict[str, Any] = {}

    config_file = find_config_file()
    if config_file:
        with open(config_file) as f:
            config_data = yaml.safe_load(f) or {}

    # Short aliases for the settings people actually tweak
    env_overrides = {
        "DNAV_MAX_PROCESSING_SECONDS": ("governor", "max_processing_seconds"),
        "DNAV_MERGE_ACROSS_DOCUMENTS": ("dedup", "merge_across_documents"),
        "DNAV_STRICT": ("scoring", "strict"),
        "DNAV_LOG_LEVEL": ("logging", "level"),
    }

    for env_var, path in env_overrides.items():
        value = os.environ.get(env_var)
        if value:
            section, key = path
            if section not in config_data:
                config_data[section] = {}
            config_data[section][key] = value

    return Config(**config_data)


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config: The configuration instance.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
