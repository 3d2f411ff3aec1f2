"""
Settings for the tome-sync pipeline.

Settings resolve in three layers, later ones winning:

  1. Defaults on ``SyncSettings``
  2. An optional YAML file (``tome_sync.yaml`` unless a path is given)
  3. ``TOME_SYNC_<FIELD>`` environment variables (a ``.env`` file is honored)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .importers.characters.schema import (
    ACTOR_TYPE,
    DEFAULT_MOVEMENT_UNITS,
    DEFAULT_MOVEMENT_WALK,
    IMPORT_SOURCE,
    PLACEHOLDER_NAME,
)

logger = logging.getLogger("tome-sync")

ENV_PREFIX = "TOME_SYNC_"
DEFAULT_CONFIG_FILE = "tome_sync.yaml"


class SyncSettings(BaseModel):
    """Configuration for importing characters and reconciling folders."""

    actor_type: str = Field(default=ACTOR_TYPE, description="Document type of created actors")
    folder_kind: str = Field(default="Actor", description="Folder type holding actors")
    import_folder: str = Field(default="Tome", description="Staging folder imports land in")
    target_folder: str = Field(default="NPCs", description="Canonical folder unique actors move to")
    include_subfolders: bool = Field(default=False, description="Treat subfolder members as folder members when moving")
    image_base: str = Field(default="assets/images/dnd/characters", description="Fixed asset root for probed images")
    slug_separator: str = Field(default="-", description="Separator used when slugifying names for image lookup")
    placeholder_name: str = Field(default=PLACEHOLDER_NAME, description="Name used for records without one")
    movement_walk: int = Field(default=DEFAULT_MOVEMENT_WALK, ge=0)
    movement_units: str = DEFAULT_MOVEMENT_UNITS
    import_source: str = IMPORT_SOURCE
    world_path: Path | None = Field(default=None, description="World snapshot the server operates on")
    data_root: Path | None = Field(default=None, description="Local directory image paths are relative to")
    data_url: str | None = Field(default=None, description="Base URL of the host data server; probes images over HTTP when set")
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _valid_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("slug_separator")
    @classmethod
    def _valid_separator(cls, value: str) -> str:
        if not value or any(c.isalnum() for c in value):
            raise ValueError("slug_separator must be non-empty and non-alphanumeric")
        return value


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in SyncSettings.model_fields:
        value = os.getenv(ENV_PREFIX + name.upper())
        if value is not None:
            overrides[name] = value
    return overrides


def load_settings(config_path: str | Path | None = None) -> SyncSettings:
    """Load settings from defaults, an optional YAML file and the environment.

    Args:
        config_path: YAML file to read. When omitted, ``tome_sync.yaml`` in the
            working directory is used if present.

    Returns:
        Validated SyncSettings.

    Raises:
        ValueError: If the YAML file is malformed or a value fails validation.
    """
    load_dotenv()

    data: dict[str, Any] = {}
    path = Path(config_path) if config_path else Path(os.getenv(ENV_PREFIX + "CONFIG", DEFAULT_CONFIG_FILE))
    if path.is_file():
        try:
            with open(path, "r", encoding="utf-8") as fh:
                loaded = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid settings file {path}: {e}") from None
        if not isinstance(loaded, dict):
            raise ValueError(f"Settings file {path} must contain a mapping")
        data.update(loaded)
        logger.debug(f"Loaded settings from {path}")
    elif config_path:
        raise ValueError(f"Settings file not found: {path}")

    data.update(_env_overrides())
    return SyncSettings.model_validate(data)
