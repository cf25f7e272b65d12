"""Configuration management for pgxn-meta using Pydantic models."""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import DEFAULT_SPEC_VERSION, KNOWN_SPECS

CONFIG_FILE_NAME = ".pgxn-meta.json"


class ValidationConfig(BaseModel):
    """Validation configuration section."""
    default_spec_version: str = Field(alias="defaultSpecVersion", default=DEFAULT_SPEC_VERSION)
    strict_spec_url: bool = Field(alias="strictSpecUrl", default=False)

    @field_validator("default_spec_version")
    @classmethod
    def validate_default_spec_version(cls, v):
        if v not in KNOWN_SPECS:
            raise ValueError(f"default_spec_version must be one of {sorted(KNOWN_SPECS)}, got: {v}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class MetaConfig(BaseModel):
    """Complete pgxn-meta configuration model."""
    validation: ValidationConfig = Field(default_factory=ValidationConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> MetaConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .pgxn-meta.json

    Returns:
        MetaConfig: Loaded and validated configuration

    Raises:
        ValueError: If the file holds invalid JSON or an invalid configuration
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return MetaConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")
    else:
        return create_default_config()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .pgxn-meta.json by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None


def create_default_config() -> MetaConfig:
    """Create the zero-config defaults."""
    return MetaConfig()
