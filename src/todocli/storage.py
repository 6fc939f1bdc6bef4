"""File-backed task stores.

A store is a JSON array of task objects on disk. There are two kinds of
store (live and archive) in two scopes (local and global):

    local  live     ./.todos.json
    local  archive  ./.todos.archive.json
    global live     <HOME>/.todo/todos.json
    global archive  <HOME>/.todo/todos.archive.json

A missing or zero-length file means an empty list. Loading a missing
store creates it as an empty file. Saves overwrite the whole file.
"""

import json
import logging
import os
from enum import Enum
from pathlib import Path

from todocli.config import get_global_dir, register_store
from todocli.errors import StorageDecodeError, StorageEncodeError, StorageIOError
from todocli.utils import TaskList

logger = logging.getLogger(__name__)

FILE_MODE = 0o644


class Scope(str, Enum):
    """Where a store lives."""

    LOCAL = "local"  # Current working directory
    GLOBAL = "global"  # User home


class Kind(str, Enum):
    """Which list a store holds."""

    LIVE = "live"  # Active tasks
    ARCHIVE = "archive"  # Set-aside tasks


LOCAL_FILENAMES = {
    Kind.LIVE: ".todos.json",
    Kind.ARCHIVE: ".todos.archive.json",
}

GLOBAL_FILENAMES = {
    Kind.LIVE: "todos.json",
    Kind.ARCHIVE: "todos.archive.json",
}


# =============================================================================
# Store Locator
# =============================================================================


def get_store_path(scope: Scope, kind: Kind) -> Path:
    """Resolve the file path for a (scope, kind) pair.

    For the global scope the ``<HOME>/.todo`` directory is created on
    demand.
    """
    if scope == Scope.LOCAL:
        path = Path(LOCAL_FILENAMES[kind])
    else:
        path = get_global_dir(create=True) / GLOBAL_FILENAMES[kind]
    logger.debug("Resolved %s %s store: %s", scope.value, kind.value, path)
    return path


def get_storage_path(is_global: bool) -> Path:
    return get_store_path(Scope.GLOBAL if is_global else Scope.LOCAL, Kind.LIVE)


def get_archive_path(is_global: bool) -> Path:
    return get_store_path(Scope.GLOBAL if is_global else Scope.LOCAL, Kind.ARCHIVE)


def get_effective_storage_path(is_global: bool, is_archive: bool) -> Path:
    """Get the archive path when ``is_archive`` is set, else the live path."""
    if is_archive:
        return get_archive_path(is_global)
    return get_storage_path(is_global)


# =============================================================================
# Storage
# =============================================================================


class Storage:
    """JSON codec for a single store file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"Storage({str(self.path)!r})"

    def load(self) -> TaskList:
        """Load the task list, creating an empty file if it is missing."""
        if not self.path.exists():
            try:
                self.path.touch(mode=FILE_MODE)
            except OSError as e:
                raise StorageIOError(f"error creating file: {e}") from e
            logger.debug("Created empty store %s", self.path)
            register_store(self.path)
            return TaskList()

        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageIOError(f"error reading file: {e}") from e

        if not content.strip():
            return TaskList()

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageDecodeError(f"error unmarshaling JSON data from {self.path}: {e}") from e

        todo_list = TaskList.from_list(data)
        logger.debug("Loaded %d task(s) from %s", len(todo_list), self.path)
        return todo_list

    def save(self, todo_list: TaskList) -> None:
        """Overwrite the store with the given list.

        Writes to a temporary sibling file and renames it into place.
        """
        try:
            content = json.dumps(todo_list.to_list(), indent=2, ensure_ascii=False) + "\n"
        except (TypeError, ValueError) as e:
            raise StorageEncodeError(f"error marshaling data to JSON: {e}") from e

        temp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(content)
            os.chmod(temp_path, FILE_MODE)
            os.replace(temp_path, self.path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise StorageIOError(f"error writing file: {e}") from e
        logger.debug("Saved %d task(s) to %s", len(todo_list), self.path)


def open_store(path: Path) -> tuple[TaskList, Storage]:
    """Load the list stored at ``path`` along with its storage."""
    storage = Storage(path)
    return storage.load(), storage
