"""
Settings loader for SkillPath.

Settings come from three layers, later layers winning:
- Defaults on the Settings model
- An optional YAML file
- SKILLPATH_* environment variables (a .env file is honoured)
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from skillpath.errors import ValidationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "SKILLPATH_"

DEFAULT_DATA_DIR = Path.home() / ".skillpath"


class Settings(BaseModel):
    db_path: Path = DEFAULT_DATA_DIR / "skillpath.db"
    content_dir: Path = Path("content")
    lesson_xp: int = Field(default=10, ge=0)        # fixed award per lesson
    level_xp_step: int = Field(default=50, gt=0)    # threshold = level * step
    lesson_gems: int = Field(default=5, ge=0)
    leaderboard_limit: int = Field(default=10, gt=0)
    weekly_window_days: int = Field(default=7, gt=0)
    busy_timeout: float = Field(default=5.0, gt=0)  # seconds to wait on a locked db


def _env_overrides() -> dict[str, Any]:
    """Collect SKILLPATH_* variables that match a Settings field."""
    overrides = {}
    for name in Settings.model_fields:
        value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None and value != "":
            overrides[name] = value
    return overrides


def load_settings(path: Optional[Path] = None, env_file: Optional[Path] = None) -> Settings:
    """
    Load settings from YAML and environment.

    Args:
        path: Optional YAML settings file
        env_file: Optional .env file (default: search from the working directory)

    Returns:
        Validated Settings

    Raises:
        FileNotFoundError: If path is given but doesn't exist
        ValidationError: If a value fails validation
    """
    load_dotenv(env_file)

    data: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValidationError(f"Settings file must contain a mapping: {path}")
        data.update(loaded)

    data.update(_env_overrides())

    try:
        settings = Settings(**data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid settings: {e}") from e

    logger.debug(f"Loaded settings: db={settings.db_path}, content={settings.content_dir}")
    return settings
