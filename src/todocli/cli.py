"""Command-line interface for the todo list manager.

Commands:
- add, delete, edit, toggle: single-task mutations
- archive, cleanup: move tasks from the live store into the archive
- list: render the live (or archive) store
- version, config, help: informational

Running `todo` with no command is the same as `todo list --format table`.
"""

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional

import click

from todocli import lib
from todocli.config import RELEASE_DATE, VERSION, get_config_path, load_config
from todocli.errors import InputError, StorageDecodeError, StorageIOError
from todocli.utils import Task

logger = logging.getLogger(__name__)

COMMAND_ALIASES = {
    "a": "add",
    "del": "delete",
    "rm": "delete",
    "e": "edit",
    "t": "toggle",
    "complete": "toggle",
    "ar": "archive",
    "clean": "cleanup",
    "l": "list",
    "ls": "list",
    "v": "version",
}

# Lets negative IDs such as `-1` reach ID validation instead of the option parser
ID_ARGS_SETTINGS = {"ignore_unknown_options": True}


def read_confirmation(prompt: str) -> bool:
    """Print ``prompt`` and read one line from stdin.

    Only ``y`` or ``yes`` (case-insensitive) count as consent; EOF declines.
    """
    click.echo(prompt, nl=False)
    line = sys.stdin.readline()
    return line.strip().lower() in ("y", "yes")


@contextmanager
def input_error_exit_code() -> Iterator[None]:
    try:
        yield
    except click.UsageError as e:
        e.exit_code = InputError.exit_code
        raise


@dataclass
class CliOptions:
    """Global flags shared by every command."""

    debug: bool = False
    is_global: bool = False
    archive: bool = False
    show_list: bool = False
    confirm: Callable[[str], bool] = field(default=read_confirmation)


class AliasedGroup(click.Group):
    """Group that resolves the short command aliases.

    Usage errors raised while parsing the group or any subcommand exit
    with the input error code (1) rather than click's default of 2.
    """

    def make_context(self, info_name, args, parent=None, **extra):
        with input_error_exit_code():
            return super().make_context(info_name, args, parent=parent, **extra)

    def invoke(self, ctx: click.Context):
        with input_error_exit_code():
            return super().invoke(ctx)

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        return super().get_command(ctx, COMMAND_ALIASES.get(cmd_name, cmd_name))

    def resolve_command(self, ctx: click.Context, args: List[str]):
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name if cmd else None, cmd, args


pass_options = click.make_pass_decorator(CliOptions, ensure=True)


def show_list_after(opts: CliOptions) -> None:
    """Render the effective store as a table if --list was given."""
    if not opts.show_list:
        return
    logger.debug("Executing list command after main action")
    todo_list = lib.load_view_list(opts.is_global, opts.archive)
    click.echo()
    todo_list.view("table")


@click.group(cls=AliasedGroup, invoke_without_command=True)
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.option("-g", "--global", "is_global", is_flag=True, help="Use the global store in ~/.todo")
@click.option(
    "-a",
    "--archive",
    is_flag=True,
    help="Operate on the archive store (only with 'list' and 'delete')",
)
@click.option(
    "-l",
    "--list",
    "show_list",
    is_flag=True,
    help="Display the todo list after executing the command",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, is_global: bool, archive: bool, show_list: bool):
    """Todo is a simple command-line interface for managing todo items."""
    log_level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s %(name)s: %(message)s", force=True)

    opts = ctx.ensure_object(CliOptions)
    opts.debug = debug
    opts.is_global = is_global
    opts.archive = archive
    opts.show_list = show_list
    logger.debug("Global flags: %s", opts)

    if ctx.invoked_subcommand is None:
        ctx.invoke(list_, format="table", filter_incomplete=False)


@cli.command("add")
@click.argument("words", nargs=-1)
@pass_options
def add(opts: CliOptions, words: tuple[str, ...]):
    """Add a new todo item."""
    lib.validate_archive_flag("add", opts.archive)
    task = lib.join_task(words)
    lib.add_task(task, opts.is_global)
    click.echo(f"Added task: {task}")
    show_list_after(opts)


@cli.command("delete", context_settings=ID_ARGS_SETTINGS)
@click.argument("args", nargs=-1)
@pass_options
def delete(opts: CliOptions, args: tuple[str, ...]):
    """Delete a todo item by ID."""
    lib.validate_archive_flag("delete", opts.archive)
    task_id = _single_id(args)
    lib.delete_task(task_id, opts.is_global, opts.archive)
    click.echo(f"Deleted todo item with ID: {task_id}")
    show_list_after(opts)


@cli.command("edit", context_settings=ID_ARGS_SETTINGS)
@click.argument("args", nargs=-1)
@pass_options
def edit(opts: CliOptions, args: tuple[str, ...]):
    """Edit a todo item by ID."""
    lib.validate_archive_flag("edit", opts.archive)
    if len(args) < 2:
        raise InputError("ID and new task description are required")
    task_id = lib.parse_id(args[0])
    task = lib.join_task(args[1:])
    lib.edit_task(task_id, task, opts.is_global)
    click.echo(f"Updated todo item {task_id}: {task}")
    show_list_after(opts)


@cli.command("toggle", context_settings=ID_ARGS_SETTINGS)
@click.argument("args", nargs=-1)
@pass_options
def toggle(opts: CliOptions, args: tuple[str, ...]):
    """Toggle completion status of a todo item by ID."""
    lib.validate_archive_flag("toggle", opts.archive)
    task_id = _single_id(args)
    lib.toggle_task(task_id, opts.is_global)
    click.echo(f"Toggled completion status for todo item with ID: {task_id}")
    show_list_after(opts)


@cli.command("archive", context_settings=ID_ARGS_SETTINGS)
@click.argument("args", nargs=-1)
@pass_options
def archive(opts: CliOptions, args: tuple[str, ...]):
    """Archive a todo item by ID (moves to archive file)."""
    lib.validate_archive_flag("archive", opts.archive)
    task_id = _single_id(args)
    item = lib.archive_task(task_id, opts.is_global)
    click.echo(f"Archived todo item: {item.task}")
    show_list_after(opts)


@cli.command("cleanup")
@click.option("-f", "--force", is_flag=True, help="Skip confirmation prompt")
@click.option(
    "-d",
    "--delete",
    "delete_",
    is_flag=True,
    help="Delete completed items instead of archiving them",
)
@pass_options
def cleanup(opts: CliOptions, force: bool, delete_: bool):
    """Archive or delete all completed todo items."""
    lib.validate_archive_flag("cleanup", opts.archive)
    verb = "delete" if delete_ else "archive"

    def confirm(completed: List[Task], delete: bool) -> bool:
        click.echo(f"Found {len(completed)} completed item(s) to {verb}:")
        for i, item in enumerate(completed, start=1):
            click.echo(f"  {i}. {item.task}")
        return opts.confirm(
            f"\nAre you sure you want to {verb} these {len(completed)} completed item(s)? (y/N): "
        )

    result = lib.cleanup_tasks(opts.is_global, delete=delete_, force=force, confirm=confirm)

    if result.cancelled:
        click.echo("Delete cancelled." if delete_ else "Cleanup cancelled.")
    elif result.count == 0:
        click.echo(f"No completed items found to {verb}.")
    else:
        click.echo(f"Successfully {verb}d {result.count} completed item(s).")
    show_list_after(opts)


@cli.command("list")
@click.option(
    "-f",
    "--format",
    default="table",
    show_default=True,
    help="Output format (table, json, pretty, none)",
)
@click.option("--filter", "filter_incomplete", is_flag=True, help="Filter out completed tasks")
@pass_options
def list_(opts: CliOptions, format: str, filter_incomplete: bool):
    """List all todo items."""
    lib.validate_archive_flag("list", opts.archive)
    lib.validate_format(format)
    todo_list = lib.load_view_list(opts.is_global, opts.archive, filter_incomplete)
    todo_list.view(format)


@cli.command("version")
@pass_options
def version(opts: CliOptions):
    """Display the version of the application."""
    lib.validate_archive_flag("version", opts.archive)
    click.echo(f"TODO CLI Version: {VERSION}")
    click.echo(f"Release Date: {RELEASE_DATE}")


@cli.group("config")
def config():
    """Manage todo-cli configuration."""


@config.command("list")
@click.option("--raw", is_flag=True, help="Print raw JSON config instead of formatted list")
@pass_options
def config_list(opts: CliOptions, raw: bool):
    """List configured todo storage files."""
    lib.validate_archive_flag("config", opts.archive)
    config_path = get_config_path()
    if not config_path.exists():
        click.echo("No config found. No todo lists have been initialized yet.")
        return

    if raw:
        click.echo(_read_raw(config_path))
        return

    try:
        cfg = load_config(config_path)
    except StorageDecodeError:
        click.echo(_read_raw(config_path))
        return

    if cfg is None or not cfg.paths:
        click.echo("No configured todo storage files found.")
        return
    click.echo("Configured todo storage files:")
    for i, path in enumerate(cfg.paths, start=1):
        click.echo(f"{i}. {path}")


@cli.command("help")
@click.argument("command", required=False)
@click.pass_context
def help_(ctx: click.Context, command: Optional[str]):
    """Show help information for commands."""
    lib.validate_archive_flag("help", ctx.ensure_object(CliOptions).archive)
    group = ctx.parent.command if ctx.parent else cli
    if not command:
        click.echo(group.get_help(ctx.parent or ctx))
        return
    cmd = cli.get_command(ctx, command)
    if cmd is None:
        click.echo(f"Unknown command: {command}")
        return
    with click.Context(cmd, info_name=cmd.name, parent=ctx.parent) as cmd_ctx:
        click.echo(cmd.get_help(cmd_ctx))


def _single_id(args: tuple[str, ...]) -> int:
    if len(args) != 1:
        raise InputError("exactly one ID is required")
    return lib.parse_id(args[0])


def _read_raw(path) -> str:
    try:
        return path.read_text(encoding="utf-8").rstrip("\n")
    except OSError as e:
        raise StorageIOError(f"{e}", context="reading config") from e


def main():
    cli(prog_name="todo")


if __name__ == "__main__":
    main()
