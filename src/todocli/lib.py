"""Core business logic for the todocli package.

This module contains the command operations that sit between
the CLI layer (cli.py) and the data structures (utils.py, storage.py).

Architecture:
- cli.py: Click commands, output formatting, user interaction
- lib.py: Argument validation, store selection, load/mutate/save
- utils.py: Task and TaskList data structures
- storage.py: Store locator and JSON file codec

Every operation validates its arguments before touching the filesystem.
Operations that move tasks between stores (archive, cleanup) save the
archive first and the live store second, so a failure in between leaves
the moved tasks in both stores rather than losing them.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Sequence

from todocli.errors import InputError, TodoError
from todocli.storage import (
    Storage,
    get_archive_path,
    get_effective_storage_path,
    get_storage_path,
    open_store,
)
from todocli.utils import FORMATS, Task, TaskList

logger = logging.getLogger(__name__)

# Commands that may target the archive store via --archive
ARCHIVE_ALLOWED_COMMANDS = frozenset({"list", "delete"})

# Receives the completed tasks and whether they will be deleted; returns consent
ConfirmCleanup = Callable[[List[Task], bool], bool]


@contextmanager
def error_context(description: str) -> Iterator[None]:
    """Attach a description to any TodoError raised inside the block."""
    try:
        yield
    except TodoError as e:
        if e.context is None:
            e.with_context(description)
        raise


# =============================================================================
# Argument validation
# =============================================================================


def validate_archive_flag(command: str, archive: bool) -> None:
    """Reject --archive for commands other than list and delete."""
    if archive and command not in ARCHIVE_ALLOWED_COMMANDS:
        raise InputError(
            f"--archive flag is only supported with 'list' and 'delete' commands, not '{command}'"
        )


def validate_format(format: str) -> str:
    if format not in FORMATS:
        raise InputError(f"invalid format: {format}. Allowed formats: {', '.join(FORMATS)}")
    return format


def parse_id(raw: str) -> int:
    """Parse a 1-based display ID given on the command line."""
    try:
        task_id = int(raw.strip())
    except ValueError:
        raise InputError(f"invalid ID: {raw} must be a number") from None
    if task_id <= 0:
        raise InputError("ID must be greater than 0")
    return task_id


def check_id(todo_list: TaskList, task_id: int) -> None:
    """Reject a display ID past the end of the list, reporting it as typed."""
    if task_id > len(todo_list):
        raise InputError(f"invalid ID: {task_id} (valid range: 1-{len(todo_list)})")


def join_task(words: Sequence[str]) -> str:
    """Join positional words into a task description."""
    task = " ".join(words)
    if not task.strip():
        raise InputError("task description is required")
    return task


# =============================================================================
# Store access
# =============================================================================


def _resolve(resolver: Callable[..., Path], *args: bool) -> Path:
    with error_context("getting storage path"):
        return resolver(*args)


def _open(path: Path, what: str = "todo list") -> tuple[TaskList, Storage]:
    with error_context(f"initializing {what}"):
        return open_store(path)


def _save(storage: Storage, todo_list: TaskList, what: str = "todos") -> None:
    with error_context(f"saving {what}"):
        storage.save(todo_list)


def load_view_list(is_global: bool, is_archive: bool, filter_incomplete: bool = False) -> TaskList:
    """Load the effective store for display."""
    path = _resolve(get_effective_storage_path, is_global, is_archive)
    todo_list, _ = _open(path)
    if filter_incomplete:
        todo_list.filter_incomplete()
    return todo_list


# =============================================================================
# Commands
# =============================================================================


def add_task(task: str, is_global: bool) -> Task:
    """Append a task to the live store."""
    path = _resolve(get_storage_path, is_global)
    todo_list, storage = _open(path)
    with error_context("adding task"):
        item = todo_list.add(task)
    _save(storage, todo_list)
    logger.debug("Added task %s to %s", item.internal_id, path)
    return item


def delete_task(task_id: int, is_global: bool, is_archive: bool = False) -> Task:
    """Remove a task from the effective store by display ID."""
    path = _resolve(get_effective_storage_path, is_global, is_archive)
    todo_list, storage = _open(path)
    with error_context("deleting task"):
        check_id(todo_list, task_id)
        item = todo_list.delete(task_id - 1)
    _save(storage, todo_list)
    return item


def edit_task(task_id: int, task: str, is_global: bool) -> Task:
    """Replace the description of a live task."""
    path = _resolve(get_storage_path, is_global)
    todo_list, storage = _open(path)
    with error_context("updating task"):
        check_id(todo_list, task_id)
        item = todo_list.update(task_id - 1, task)
    _save(storage, todo_list)
    return item


def toggle_task(task_id: int, is_global: bool) -> Task:
    """Flip completion of a live task. ``task_id`` is the 1-based display ID."""
    path = _resolve(get_storage_path, is_global)
    todo_list, storage = _open(path)
    with error_context("toggling task"):
        check_id(todo_list, task_id)
        item = todo_list.toggle(task_id)
    _save(storage, todo_list)
    return item


def archive_task(task_id: int, is_global: bool) -> Task:
    """Move one task from the live store to the archive of the same scope."""
    live_path = _resolve(get_storage_path, is_global)
    archive_path = _resolve(get_archive_path, is_global)
    todo_list, storage = _open(live_path)
    archive_list, archive_storage = _open(archive_path, "archive list")

    check_id(todo_list, task_id)

    item = todo_list[task_id - 1]
    archive_list.append(item)
    todo_list.delete(task_id - 1)

    _save(archive_storage, archive_list, "archive")
    _save(storage, todo_list)
    logger.debug("Archived %r from %s to %s", item.task, live_path, archive_path)
    return item


@dataclass
class CleanupResult:
    """Outcome of a cleanup run."""

    delete: bool
    processed: List[Task] = field(default_factory=list)
    cancelled: bool = False

    @property
    def count(self) -> int:
        return len(self.processed)


def cleanup_tasks(
    is_global: bool,
    delete: bool = False,
    force: bool = False,
    confirm: ConfirmCleanup | None = None,
) -> CleanupResult:
    """Archive (or delete) every completed task in the live store.

    Unless ``force`` is set, ``confirm`` is asked for consent with the
    list of completed tasks; declining leaves both stores untouched.
    """
    live_path = _resolve(get_storage_path, is_global)
    archive_list: TaskList | None = None
    archive_storage: Storage | None = None
    if not delete:
        archive_path = _resolve(get_archive_path, is_global)
        archive_list, archive_storage = _open(archive_path, "archive list")
    todo_list, storage = _open(live_path)

    completed, remaining = todo_list.partition_completed()
    result = CleanupResult(delete=delete)
    if not completed:
        return result

    if not force:
        if confirm is None or not confirm(completed, delete):
            result.cancelled = True
            return result

    if archive_list is not None and archive_storage is not None:
        archive_list.extend(completed)
        _save(archive_storage, archive_list, "archive")

    _save(storage, TaskList(remaining))
    result.processed = completed
    logger.debug("Cleanup %s %d task(s)", "deleted" if delete else "archived", len(completed))
    return result
