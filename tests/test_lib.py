"""Tests for the command operations in lib."""

import pytest

from todocli import lib
from todocli.errors import InputError, StorageDecodeError, StorageIOError
from todocli.storage import Storage, get_archive_path, get_storage_path
from todocli.utils import TaskList


def stored_tasks(path) -> list[str]:
    return [t.task for t in Storage(path).load()]


def seed(*names: str, done: tuple[int, ...] = (), is_global: bool = False) -> None:
    for name in names:
        lib.add_task(name, is_global)
    for task_id in done:
        lib.toggle_task(task_id, is_global)


class TestValidation:
    """Test argument validation helpers."""

    @pytest.mark.parametrize("command", ["add", "edit", "toggle", "archive", "cleanup", "version"])
    def test_archive_flag_rejected(self, command):
        with pytest.raises(InputError) as exc:
            lib.validate_archive_flag(command, True)
        assert "--archive flag is only supported with 'list' and 'delete' commands" in str(exc.value)
        assert exc.value.exit_code == 1

    @pytest.mark.parametrize("command", ["list", "delete"])
    def test_archive_flag_allowed(self, command):
        lib.validate_archive_flag(command, True)

    def test_archive_flag_unset(self):
        lib.validate_archive_flag("add", False)

    @pytest.mark.parametrize(
        "raw,message",
        [("abc", "must be a number"), ("0", "greater than 0"), ("-3", "greater than 0")],
    )
    def test_parse_id_rejects(self, raw, message):
        with pytest.raises(InputError, match=message):
            lib.parse_id(raw)

    def test_parse_id(self):
        assert lib.parse_id("12") == 12

    def test_join_task(self):
        assert lib.join_task(["Buy", "milk", "today"]) == "Buy milk today"
        with pytest.raises(InputError):
            lib.join_task([])

    def test_validate_format(self):
        for fmt in ("table", "json", "pretty", "none"):
            assert lib.validate_format(fmt) == fmt
        with pytest.raises(InputError, match="invalid format: xml"):
            lib.validate_format("xml")


class TestSingleTaskCommands:
    """Test add/delete/edit/toggle against the local store."""

    def test_add_persists(self):
        item = lib.add_task("Buy groceries", is_global=False)
        assert item.task == "Buy groceries"
        assert stored_tasks(get_storage_path(False)) == ["Buy groceries"]

    def test_delete_reindexes(self):
        seed("a", "b", "c")
        removed = lib.delete_task(2, is_global=False)
        assert removed.task == "b"
        assert stored_tasks(get_storage_path(False)) == ["a", "c"]

    def test_delete_out_of_range(self):
        seed("a")
        with pytest.raises(InputError) as exc:
            lib.delete_task(5, is_global=False)
        assert exc.value.format_message() == "error deleting task: invalid ID: 5 (valid range: 1-1)"
        assert stored_tasks(get_storage_path(False)) == ["a"]

    @pytest.mark.parametrize(
        "operation,context",
        [
            (lambda: lib.edit_task(3, "x", is_global=False), "updating task"),
            (lambda: lib.toggle_task(3, is_global=False), "toggling task"),
        ],
    )
    def test_out_of_range_reports_display_id(self, operation, context):
        seed("a", "b")
        with pytest.raises(InputError) as exc:
            operation()
        assert exc.value.format_message() == f"error {context}: invalid ID: 3 (valid range: 1-2)"

    def test_delete_from_archive(self):
        archive = Storage(get_archive_path(False))
        archived = TaskList()
        archived.add("old 1")
        archived.add("old 2")
        archive.save(archived)
        seed("live")

        lib.delete_task(1, is_global=False, is_archive=True)
        assert stored_tasks(get_archive_path(False)) == ["old 2"]
        assert stored_tasks(get_storage_path(False)) == ["live"]

    def test_edit_keeps_identity(self):
        seed("a")
        before = Storage(get_storage_path(False)).load()[0]
        after = lib.edit_task(1, "b", is_global=False)
        assert after.task == "b"
        assert after.internal_id == before.internal_id
        assert after.created_at == before.created_at

    def test_toggle_round_trip(self):
        seed("a")
        assert lib.toggle_task(1, is_global=False).completed is True
        stored = Storage(get_storage_path(False)).load()[0]
        assert stored.completed and stored.completed_at

        lib.toggle_task(1, is_global=False)
        stored = Storage(get_storage_path(False)).load()[0]
        assert not stored.completed and stored.completed_at is None

    def test_scopes_are_isolated(self, home_dir):
        lib.add_task("local", is_global=False)
        lib.add_task("global", is_global=True)
        assert stored_tasks(get_storage_path(False)) == ["local"]
        assert stored_tasks(home_dir / ".todo" / "todos.json") == ["global"]


class TestArchive:
    """Test moving one task into the archive."""

    def test_moves_and_preserves_timestamps(self):
        seed("x", "y")
        original = Storage(get_storage_path(False)).load()[0]

        moved = lib.archive_task(1, is_global=False)

        assert moved == original
        assert stored_tasks(get_storage_path(False)) == ["y"]
        archived = Storage(get_archive_path(False)).load()
        assert len(archived) == 1
        assert archived[0] == original

    def test_appends_to_existing_archive(self):
        seed("x", "y")
        lib.archive_task(1, is_global=False)
        lib.archive_task(1, is_global=False)
        assert stored_tasks(get_archive_path(False)) == ["x", "y"]
        assert stored_tasks(get_storage_path(False)) == []

    def test_invalid_id(self):
        seed("x")
        with pytest.raises(InputError, match=r"invalid ID: 2 \(valid range: 1-1\)"):
            lib.archive_task(2, is_global=False)
        assert stored_tasks(get_storage_path(False)) == ["x"]

    def test_archive_saved_before_live(self, monkeypatch):
        seed("x", "y")
        live_path = get_storage_path(False)
        real_save = Storage.save

        def failing_save(self, todo_list):
            if self.path == live_path:
                raise StorageIOError("disk full")
            real_save(self, todo_list)

        monkeypatch.setattr(Storage, "save", failing_save)
        with pytest.raises(StorageIOError) as exc:
            lib.archive_task(1, is_global=False)
        assert exc.value.format_message() == "error saving todos: disk full"

        # The moved task now exists in both stores
        assert stored_tasks(get_archive_path(False)) == ["x"]
        assert stored_tasks(live_path) == ["x", "y"]

    def test_archive_save_failure_leaves_live_untouched(self, monkeypatch):
        seed("x", "y")
        archive_path = get_archive_path(False)
        real_save = Storage.save

        def failing_save(self, todo_list):
            if self.path == archive_path:
                raise StorageIOError("disk full")
            real_save(self, todo_list)

        monkeypatch.setattr(Storage, "save", failing_save)
        with pytest.raises(StorageIOError):
            lib.archive_task(1, is_global=False)
        assert stored_tasks(get_storage_path(False)) == ["x", "y"]


class TestCleanup:
    """Test archiving or deleting all completed tasks."""

    def test_archive_mode_partitions(self):
        seed("old")
        lib.toggle_task(1, is_global=False)
        lib.archive_task(1, is_global=False)
        seed("keep", "done1", "done2", "keep2", done=(2, 3))

        result = lib.cleanup_tasks(is_global=False, force=True)

        assert result.count == 2
        assert not result.cancelled
        assert stored_tasks(get_storage_path(False)) == ["keep", "keep2"]
        assert stored_tasks(get_archive_path(False)) == ["old", "done1", "done2"]
        archived = Storage(get_archive_path(False)).load()
        assert all(t.completed and t.completed_at for t in archived)

    def test_delete_mode_skips_archive(self):
        seed("keep", "done", done=(2,))
        result = lib.cleanup_tasks(is_global=False, delete=True, force=True)
        assert result.delete and result.count == 1
        assert stored_tasks(get_storage_path(False)) == ["keep"]
        assert not get_archive_path(False).exists()

    def test_nothing_completed(self):
        seed("a", "b")
        result = lib.cleanup_tasks(is_global=False, force=True)
        assert result.count == 0
        assert stored_tasks(get_storage_path(False)) == ["a", "b"]

    def test_confirmation_receives_completed(self):
        seed("a", "b", done=(2,))
        seen = []

        def confirm(completed, delete):
            seen.append(([t.task for t in completed], delete))
            return True

        lib.cleanup_tasks(is_global=False, confirm=confirm)
        assert seen == [(["b"], False)]
        assert stored_tasks(get_storage_path(False)) == ["a"]

    def test_declined(self):
        seed("a", "b", done=(2,))
        result = lib.cleanup_tasks(is_global=False, confirm=lambda completed, delete: False)
        assert result.cancelled
        assert stored_tasks(get_storage_path(False)) == ["a", "b"]
        assert stored_tasks(get_archive_path(False)) == []

    def test_no_confirm_callback_declines(self):
        seed("a", done=(1,))
        assert lib.cleanup_tasks(is_global=False).cancelled


class TestLoadViewList:
    def test_filter(self):
        seed("a", "b", "c", done=(2,))
        todo_list = lib.load_view_list(False, False, filter_incomplete=True)
        assert [t.task for t in todo_list] == ["a", "c"]

    def test_archive(self):
        seed("a", "b")
        lib.archive_task(2, is_global=False)
        assert [t.task for t in lib.load_view_list(False, True)] == ["b"]

    def test_storage_errors_carry_context(self, work_dir):
        (work_dir / ".todos.json").write_text("[{")
        with pytest.raises(StorageDecodeError) as exc:
            lib.load_view_list(False, False)
        assert exc.value.exit_code == 2
        assert exc.value.format_message().startswith("error initializing todo list: ")
