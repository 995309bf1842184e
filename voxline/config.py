"""
voxline.config - YAML config loading, CLI override merging, validation.

Server and CLI settings come from an optional voxline.yaml; command-line
options take precedence over file values.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from voxline.exceptions import ConfigError
from voxline.languages import from_code
from voxline.models import DEFAULT_MODEL, MODEL_SIZES

CONFIG_FILENAME = "voxline.yaml"


class VoxlineConfig(BaseModel):
    """Resolved Voxline settings."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    model: str = DEFAULT_MODEL
    model_path: Path | None = None
    device: str = "auto"
    compute_type: str = "default"
    cpu_threads: int = Field(default=0, ge=0)

    language: str | None = None
    upload_dir: Path | None = None

    @field_validator("device")
    @classmethod
    def validate_device(cls, v: str) -> str:
        valid = {"auto", "cpu", "cuda"}
        if v not in valid:
            raise ValueError(f"device must be one of: {valid}")
        return v

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        if v not in MODEL_SIZES and not Path(v).expanduser().exists():
            raise ValueError(f"model must be one of {MODEL_SIZES} or an existing directory")
        return v

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return from_code(v).value

    @property
    def model_source(self) -> str:
        """What to load: an explicit model path wins over the model size."""
        return str(self.model_path) if self.model_path else self.model


def merge_config(file_config: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge CLI overrides into file config. Overrides that are None are ignored."""
    merged = dict(file_config)
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value
    return merged


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file into a dict.

    Raises:
        ConfigError: If the file is missing or not a YAML mapping
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping of settings")
    return raw


def load_config(path: Path | None = None, **overrides: Any) -> VoxlineConfig:
    """Load and validate configuration.

    Args:
        path: Config file; when None, ./voxline.yaml is used if present
        **overrides: Values from the command line

    Returns:
        Validated VoxlineConfig

    Raises:
        ConfigError: If the file or any value is invalid
    """
    if path is None:
        default = Path.cwd() / CONFIG_FILENAME
        raw = read_config_file(default) if default.exists() else {}
    else:
        raw = read_config_file(path)

    try:
        return VoxlineConfig(**merge_config(raw, overrides))
    except ValidationError as e:
        raise ConfigError(str(e)) from e
