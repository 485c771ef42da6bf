"""Application settings and configuration."""

import os
from pathlib import Path
from typing import Optional

import tomli
import yaml  # type: ignore[import-untyped]
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "ZPOOL_INFLUXDB_"


class Settings(BaseSettings):
    """Exporter settings with environment variable and file support."""

    # Logging
    log_level: str = Field(default="WARNING", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional rotating log file")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, description="Log file rotation size")
    log_backup_count: int = Field(default=3, description="Number of rotated log files to keep")

    # Output format
    support_uint64: bool = Field(
        default=True,
        description=(
            "Emit integer fields as unsigned 64-bit ('u' suffix). When false, values are "
            "masked to the signed range and emitted with the 'i' suffix"
        ),
    )
    include_trim: bool = Field(
        default=True, description="Include trim latency and size histogram series"
    )

    # Sampling
    execd: bool = Field(
        default=False, description="Resident mode: sample once per line read from stdin"
    )
    no_histograms: bool = Field(
        default=False, description="Skip latency/size histograms and per-vdev queue stats"
    )
    sum_histogram_buckets: bool = Field(
        default=False, description="Emit cumulative histogram buckets instead of per-bucket counts"
    )
    pool_name: Optional[str] = Field(default=None, description="Only report this pool")
    max_tree_depth: int = Field(default=64, description="Maximum vdev tree depth to descend")

    # Pool source
    source_file: Optional[Path] = Field(
        default=None, description="Pool configuration document (JSON or YAML)"
    )
    source_command: Optional[str] = Field(
        default=None, description="Command printing a pool configuration document on stdout"
    )
    source_timeout_seconds: float = Field(
        default=30.0, description="Timeout for one run of the source command"
    )

    # File paths
    config_file: Optional[Path] = Field(
        default=None, description="Path to configuration file (YAML/TOML)"
    )

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_max_bytes", "log_backup_count")
    @classmethod
    def validate_log_rotation(cls, v: int) -> int:
        """Validate log rotation values are not negative."""
        if v < 0:
            raise ValueError(f"log rotation settings must not be negative, got {v}")
        return v

    @field_validator("max_tree_depth")
    @classmethod
    def validate_max_tree_depth(cls, v: int) -> int:
        """Validate the tree depth bound is reasonable."""
        if not (1 <= v <= 1024):
            raise ValueError(f"max_tree_depth must be between 1 and 1024, got {v}")
        return v

    @field_validator("source_timeout_seconds")
    @classmethod
    def validate_source_timeout(cls, v: float) -> float:
        """Validate source command timeout is positive."""
        if v <= 0:
            raise ValueError(f"source_timeout_seconds must be positive, got {v}")
        return v

    @field_validator("pool_name")
    @classmethod
    def validate_pool_name(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty pool filter as no filter."""
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_cross_fields(self) -> "Settings":
        """Validate cross-field dependencies."""
        if self.source_file is not None and self.source_command:
            raise ValueError(
                "source_file and source_command are mutually exclusive; configure only one"
            )
        return self

    @classmethod
    def from_file(cls, config_path: Path) -> "Settings":
        """Load settings from a YAML or TOML file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        suffix = config_path.suffix.lower()
        if suffix == ".yaml" or suffix == ".yml":
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    config_data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ValueError(f"Error parsing YAML file: {exc}") from exc
        elif suffix == ".toml":
            try:
                with open(config_path, "rb") as f:
                    config_data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ValueError(f"Error parsing TOML file: {exc}") from exc
        else:
            raise ValueError(f"Unsupported configuration file format: {suffix}")

        if config_data is not None and not isinstance(config_data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")

        # Override with environment variables
        env_overrides = {}
        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX):
                config_key = key.replace(ENV_PREFIX, "", 1).lower()
                env_overrides[config_key] = value

        config_data = dict(config_data or {})
        config_data.update(env_overrides)
        config_data["config_file"] = config_path
        return cls(**config_data)  # type: ignore[arg-type]


# Module-level settings cache (singleton pattern)
_settings: Optional[Settings] = None


def get_settings(config_file: Optional[Path] = None) -> Settings:
    """Get or create the global settings instance.

    Settings files are never looked up implicitly: only an explicit
    ``config_file`` is read, and it always reloads the settings.
    """
    global _settings  # noqa: PLW0603
    if config_file is not None:
        _settings = Settings.from_file(config_file)
    elif _settings is None:
        _settings = Settings()

    assert _settings is not None, "Settings should be initialized"
    return _settings


def reset_settings() -> None:
    """Drop the cached settings instance."""
    global _settings  # noqa: PLW0603
    _settings = None
