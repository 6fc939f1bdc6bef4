"""Configuration for the todo CLI.

Holds the static version record, resolves the user's home directory
from the environment, and manages the registry of initialized stores in
``<HOME>/.todo/config.json``.
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from todocli import __release_date__, __version__
from todocli.errors import NoHomeError, StorageDecodeError, StorageIOError

logger = logging.getLogger(__name__)

VERSION = __version__
RELEASE_DATE = __release_date__

# Directory under <HOME> holding the global stores and the config file
GLOBAL_DIR_NAME = ".todo"
CONFIG_FILE_NAME = "config.json"

# Checked in order; the first set value wins
HOME_ENV_VARS = ("HOME", "USERPROFILE")


def get_home_dir() -> Path:
    """Get the user's home directory from the environment."""
    for var in HOME_ENV_VARS:
        if value := os.environ.get(var):
            return Path(value)
    raise NoHomeError(f"unable to get user home directory: none of {', '.join(HOME_ENV_VARS)} is set")


def get_global_dir(create: bool = True) -> Path:
    """Get ``<HOME>/.todo``, creating it (mode 0755) if requested."""
    todo_dir = get_home_dir() / GLOBAL_DIR_NAME
    if create:
        try:
            todo_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"unable to create todo directory: {e}") from e
    return todo_dir


def get_config_path() -> Path:
    return get_global_dir(create=False) / CONFIG_FILE_NAME


class TodoConfig(BaseModel):
    """Registry of store files that have been initialized.

    Attributes:
        paths: Absolute paths of every store file created so far
    """

    model_config = ConfigDict(extra="ignore")

    paths: List[str] = Field(default_factory=list)


def load_config(config_path: Optional[Path] = None) -> Optional[TodoConfig]:
    """Load the config registry, returning None if it doesn't exist."""
    config_path = config_path or get_config_path()
    if not config_path.exists():
        return None
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise StorageIOError(f"{e}", context="reading config") from e
    if not text.strip():
        return TodoConfig()
    try:
        return TodoConfig.model_validate_json(text)
    except ValidationError as e:
        raise StorageDecodeError(f"{config_path}: {e}", context="parsing config") from e


def save_config(config: TodoConfig, config_path: Optional[Path] = None) -> None:
    config_path = config_path or get_config_path()
    config_path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
    temp_path = config_path.with_suffix(".tmp")
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(config.model_dump(), f, indent=2)
        os.replace(temp_path, config_path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


def register_store(store_path: Path) -> None:
    """Record a newly created store file in the config registry.

    The registry is informational only, so failures are logged and
    never interrupt the command that created the store.
    """
    try:
        config_path = get_config_path()
        config = load_config(config_path) or TodoConfig()
        path = str(store_path.resolve())
        if path in config.paths:
            return
        config.paths.append(path)
        save_config(config, config_path)
        logger.debug("Registered store %s in %s", path, config_path)
    except (NoHomeError, StorageDecodeError, StorageIOError, OSError) as e:
        logger.warning("Could not register store %s: %s", store_path, e)
