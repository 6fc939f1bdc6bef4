"""Utility functions and classes for the todocli package.

This module contains:
- Data classes: Task, TaskList
- Constants: FORMATS, TIMESTAMP_DATE_FORMAT
- Timestamp helpers shared by the list operations and the renderer

Display IDs are never stored: the ID of a task is its 1-based position
in the list at the moment it is viewed or addressed.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import (
    IO,
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
)

from todocli.errors import InvalidIndexError, StorageDecodeError

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Output formats accepted by `todo list --format`
FORMATS: Tuple[str, ...] = ("table", "json", "pretty", "none")

TIMESTAMP_DATE_FORMAT = "%Y-%m-%d"


# =============================================================================
# Timestamps
# =============================================================================


def format_timestamp(dt: datetime) -> str:
    """Format an aware datetime as RFC 3339 with second precision.

    A zero UTC offset is written as ``Z``.
    """
    text = dt.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def now_timestamp() -> str:
    """Get the current wall-clock time as an RFC 3339 string."""
    return format_timestamp(datetime.now(timezone.utc).astimezone())


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp, returning None if it is not one."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        return None
    return dt


def generate_internal_id() -> str:
    """Generate a short opaque identifier (12 hex characters)."""
    return secrets.token_hex(6)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class Task:
    """A single todo item.

    Attributes:
        task: User-visible description
        completed: Whether the task is done
        created_at: RFC 3339 creation timestamp
        updated_at: RFC 3339 timestamp of the last change to task/completed
        completed_at: RFC 3339 completion timestamp, set iff completed
        internal_id: Opaque identifier, stable across edits, never displayed
    """

    task: str
    completed: bool = False
    created_at: str = ""
    updated_at: str = ""
    completed_at: Optional[str] = None
    internal_id: Optional[str] = None

    @classmethod
    def create(cls, task: str) -> "Task":
        """Create a new open task stamped with the current time."""
        now = now_timestamp()
        return cls(
            task=task,
            completed=False,
            created_at=now,
            updated_at=now,
            completed_at=None,
            internal_id=generate_internal_id(),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Build a task from its persisted form.

        Unknown keys are ignored and an empty ``completed_at`` is treated
        the same as a missing one.
        """
        if not isinstance(data, dict):
            raise StorageDecodeError(f"expected a task object, got {type(data).__name__}")
        task = data.get("task")
        if not isinstance(task, str):
            raise StorageDecodeError("task object is missing a 'task' string")
        completed = data.get("completed", False)
        if not isinstance(completed, bool):
            raise StorageDecodeError(f"'completed' must be a boolean for task {task!r}")
        return cls(
            task=task,
            completed=completed,
            created_at=str(data.get("created_at") or ""),
            updated_at=str(data.get("updated_at") or ""),
            completed_at=data.get("completed_at") or None,
            internal_id=data.get("internal_id") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted form (omits unset optional fields)."""
        data: Dict[str, Any] = {}
        if self.internal_id:
            data["internal_id"] = self.internal_id
        data["task"] = self.task
        data["completed"] = self.completed
        data["created_at"] = self.created_at
        data["updated_at"] = self.updated_at
        if self.completed_at:
            data["completed_at"] = self.completed_at
        return data

    def to_display_dict(self, display_id: int) -> Dict[str, Any]:
        """Serialize to the form shown by the JSON views."""
        data: Dict[str, Any] = {
            "id": display_id,
            "task": self.task,
            "completed": self.completed,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.completed_at:
            data["completed_at"] = self.completed_at
        return data

    def copy(self) -> "Task":
        return replace(self)

    def __str__(self) -> str:
        mark = "x" if self.completed else " "
        return f"[{mark}] {self.task}"


@dataclass
class TaskList:
    """Ordered collection of tasks, duplicates allowed.

    Indices taken by ``delete`` and ``update`` are 0-based; ``toggle``
    takes the 1-based display ID directly. None of these touch the
    filesystem; persistence is the caller's job.
    """

    tasks: List[Task] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.tasks)

    def __getitem__(self, index: int) -> Task:
        return self.tasks[index]

    def _validate_index(self, index: int) -> None:
        if index < 0 or index >= len(self.tasks):
            raise InvalidIndexError(index)

    def add(self, task: str) -> Task:
        """Append a new open task and return it."""
        item = Task.create(task)
        self.tasks.append(item)
        return item

    def append(self, task: Task) -> Task:
        """Append a copy of an existing task, preserving its timestamps."""
        item = task.copy()
        self.tasks.append(item)
        return item

    def extend(self, tasks: Iterable[Task]) -> None:
        for task in tasks:
            self.append(task)

    def delete(self, index: int) -> Task:
        """Remove and return the task at a 0-based index."""
        self._validate_index(index)
        return self.tasks.pop(index)

    def update(self, index: int, task: str) -> Task:
        """Replace the description of the task at a 0-based index."""
        self._validate_index(index)
        item = self.tasks[index]
        item.task = task
        item.updated_at = now_timestamp()
        return item

    def toggle(self, index: int) -> Task:
        """Flip completion of the task with the given 1-based display ID."""
        index -= 1
        self._validate_index(index)
        item = self.tasks[index]
        now = now_timestamp()
        item.completed = not item.completed
        item.updated_at = now
        item.completed_at = now if item.completed else None
        return item

    def filter_incomplete(self) -> None:
        """Keep only open tasks, in order."""
        self.tasks = [t for t in self.tasks if not t.completed]

    def partition_completed(self) -> Tuple[List[Task], List[Task]]:
        """Split into (completed, remaining), each in original order."""
        completed = [t for t in self.tasks if t.completed]
        remaining = [t for t in self.tasks if not t.completed]
        return completed, remaining

    def view(self, format: str, file: Optional[IO[str]] = None) -> None:
        """Render the list to stdout (or ``file``) in the given format."""
        from todocli.render import view

        view(self, format, file=file)

    def to_list(self) -> List[Dict[str, Any]]:
        return [t.to_dict() for t in self.tasks]

    @classmethod
    def from_list(cls, data: Any) -> "TaskList":
        if data is None:
            return cls()
        if not isinstance(data, list):
            raise StorageDecodeError(f"expected a JSON array of tasks, got {type(data).__name__}")
        return cls([Task.from_dict(item) for item in data])
