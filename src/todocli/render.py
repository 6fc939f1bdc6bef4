"""Rendering of task lists for the terminal.

Formats:
- table: rich table with dates shortened to YYYY-MM-DD
- json: compact one-line JSON array with synthesized display IDs
- pretty: the same JSON indented by two spaces
- none: no output

Unknown formats fall back to compact JSON. Empty lists render as
``No todos found.`` in the table view and as ``null`` in the JSON views.
"""

import json
import logging
from typing import IO, TYPE_CHECKING, Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from todocli.utils import TIMESTAMP_DATE_FORMAT, parse_timestamp

if TYPE_CHECKING:
    from todocli.utils import TaskList

logger = logging.getLogger(__name__)

# Keep console instance for CLI output
console = Console(highlight=False)

TABLE_HEADERS = ["ID", "Task", "Completed", "CreatedAt", "UpdatedAt", "CompletedAt"]
COMPLETED_EMOJI = {True: "✅", False: "❌"}


def format_date(value: Optional[str]) -> str:
    """Shorten a timestamp to its date, or ``Invalid`` if unparsable."""
    dt = parse_timestamp(value)
    if dt is None:
        return "Invalid"
    return dt.strftime(TIMESTAMP_DATE_FORMAT)


def display_records(todo_list: "TaskList") -> List[Dict[str, Any]]:
    """Build the display form of every task, with 1-based IDs."""
    return [task.to_display_dict(i) for i, task in enumerate(todo_list, start=1)]


def render_json(todo_list: "TaskList", pretty: bool = False) -> str:
    if len(todo_list) == 0:
        return "null"
    records = display_records(todo_list)
    if pretty:
        return json.dumps(records, indent=2, ensure_ascii=False)
    return json.dumps(records, separators=(",", ":"), ensure_ascii=False)


def build_table(todo_list: "TaskList") -> Table:
    table = Table(show_lines=False)
    for header in TABLE_HEADERS:
        table.add_column(header)

    for display_id, task in enumerate(todo_list, start=1):
        completed_at = format_date(task.completed_at) if task.completed_at else ""
        table.add_row(
            str(display_id),
            Text(task.task),
            COMPLETED_EMOJI[task.completed],
            format_date(task.created_at),
            format_date(task.updated_at),
            Text(completed_at, style="green"),
        )
    return table


def view_table(todo_list: "TaskList", out: Optional[Console] = None) -> None:
    out = out or console
    if len(todo_list) == 0:
        out.print("No todos found.")
        return
    out.print(build_table(todo_list))


def view(todo_list: "TaskList", format: str, file: Optional[IO[str]] = None) -> None:
    """Render a task list in the requested format."""
    logger.debug("Rendering %d task(s) as %s", len(todo_list), format)
    if format == "none":
        return
    if format == "table":
        view_table(todo_list, Console(file=file, highlight=False) if file else None)
        return
    print(render_json(todo_list, pretty=format == "pretty"), file=file)
