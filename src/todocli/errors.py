"""
Error classes for the todo CLI.

Every error carries the process exit code it maps to, so command
handlers can raise and let click report and exit:

- InputError (exit 1): bad arguments, bad ids, disallowed flag combinations
- StorageError (exit 2): home resolution, file I/O, JSON encode/decode
"""

import click


class TodoError(click.ClickException):
    """Base exception for all todo CLI errors."""

    exit_code = 1

    def __init__(self, message: str, context: str | None = None):
        """
        Initialize todo error.

        Args:
            message: Error detail
            context: Optional description of what was being attempted,
                rendered as ``error <context>: <message>``
        """
        super().__init__(message)
        self.context = context

    def format_message(self) -> str:
        if self.context:
            return f"error {self.context}: {self.message}"
        return self.message

    def with_context(self, context: str) -> "TodoError":
        """Attach context to an error raised deeper in the stack."""
        self.context = context
        return self

    def show(self, file=None) -> None:
        click.echo(self.format_message(), file=file, err=True)


class InputError(TodoError):
    """Raised when user input is missing or invalid."""

    exit_code = 1


class InvalidIndexError(InputError):
    """Raised when a list index is out of range.

    ``index`` is the 0-based position used by TaskList; commands check
    1-based display IDs before reaching it.
    """

    def __init__(self, index: int):
        super().__init__(f"invalid index: {index}")
        self.index = index


class StorageError(TodoError):
    """Raised when a store cannot be located, read or written."""

    exit_code = 2


class NoHomeError(StorageError):
    """Raised when the user's home directory cannot be resolved."""

    def __init__(self, message: str = "unable to get user home directory"):
        super().__init__(message)


class StorageIOError(StorageError):
    """Raised on filesystem read/write failures."""


class StorageDecodeError(StorageError):
    """Raised when a store file is not valid task JSON."""


class StorageEncodeError(StorageError):
    """Raised when a task list cannot be serialized."""
