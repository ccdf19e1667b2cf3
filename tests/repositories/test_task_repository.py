"""Unit tests for TaskRepository."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError as PydanticValidationError

from todry.adapters.memory import InMemoryStorage
from todry.models import (
    ALL_SPACES,
    Backup,
    CategoryNotFoundError,
    DuplicateNameError,
    EmptyNameError,
    EmptyTextError,
    FilteredReorderError,
    MalformedBackupError,
    Priority,
    TaskNotFoundError,
    TaskUpdate,
    ValidationError,
)
from todry.repositories.task_repository import TaskRepository, collection_key
from todry.services.backup_service import BackupCodec
from todry.services.feedback_service import FeedbackCue, FeedbackDispatcher


def assert_categories_consistent(repo: TaskRepository) -> None:
    for task in repo.tasks:
        assert task.category in repo.categories
    assert not set(repo.categories) & set(repo.archived_categories)
    assert not {t.id for t in repo.tasks} & {t.id for t in repo.archived_tasks}


# ---------------------------------------------------------------------------
# Loading and persistence
# ---------------------------------------------------------------------------


class TestLoad:
    def test_empty_storage_loads_empty_collections(self, repo):
        assert repo.tasks == []
        assert repo.categories == []
        assert repo.archived_tasks == []
        assert repo.archived_categories == []

    def test_loads_wire_format_written_by_web_front_end(self):
        storage = InMemoryStorage(
            {
                "todry_u1_tasks": [
                    {
                        "id": "task_1",
                        "text": "Ship v1",
                        "completed": False,
                        "category": "Work",
                        "priority": "High",
                        "dueDate": "2025-03-02T00:00:00+00:00",
                        "createdAt": 1740819600000,
                    }
                ],
                "todry_u1_categories": ["Work"],
            }
        )
        repo = TaskRepository.load(storage, "u1")

        assert len(repo.tasks) == 1
        task = repo.tasks[0]
        assert task.priority is Priority.HIGH
        assert task.due_date == datetime(2025, 3, 2, tzinfo=UTC)
        assert task.created_at.year == 2025
        assert repo.categories == ["Work"]

    def test_users_are_partitioned(self, storage):
        alice = TaskRepository.load(storage, "alice")
        alice.create_task("Alice's task")

        bob = TaskRepository.load(storage, "bob")
        assert bob.tasks == []

    def test_mutation_is_persisted_before_return(self, storage, repo):
        task = repo.create_task("Buy milk")

        reloaded = TaskRepository.load(storage, "u1")
        assert reloaded.tasks == [task]
        assert storage.read(collection_key("u1", "tasks"))[0]["id"] == task.id

    def test_collection_key_format(self):
        assert collection_key("abc", "archived_tasks") == "todry_abc_archived_tasks"

    def test_accessors_return_copies(self, repo):
        repo.create_category("Work")
        repo.categories.append("Sneaky")
        assert repo.categories == ["Work"]


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class TestCreateTask:
    def test_new_task_goes_to_the_front(self, repo):
        repo.create_category("Work")
        first = repo.create_task("First", category="Work")
        second = repo.create_task("Second", category="Work")

        assert [t.id for t in repo.tasks] == [second.id, first.id]

    def test_defaults(self, repo):
        repo.create_category("Work")
        task = repo.create_task("  Ship v1  ")

        assert task.text == "Ship v1"
        assert task.completed is False
        assert task.priority is Priority.MEDIUM
        assert task.category == "Work"
        assert task.due_date is None
        assert task.description is None
        assert task.id.startswith("task_")

    def test_defaults_to_first_space(self, repo):
        repo.create_category("Home")
        repo.create_category("Work")
        assert repo.create_task("Water plants").category == "Home"

    def test_without_spaces_files_under_general(self, repo):
        task = repo.create_task("Anything")

        assert task.category == "General"
        assert repo.categories == ["General"]
        assert_categories_consistent(repo)

    def test_blank_text_rejected_without_changes(self, storage, repo):
        with pytest.raises(EmptyTextError):
            repo.create_task("   ")
        assert repo.tasks == []
        assert storage.keys() == []

    def test_unknown_space_rejected(self, repo):
        repo.create_category("Work")
        with pytest.raises(CategoryNotFoundError):
            repo.create_task("Lost", category="Nowhere")
        assert repo.tasks == []

    def test_unknown_priority_rejected(self, repo):
        with pytest.raises(ValidationError, match="Unknown priority"):
            repo.create_task("Lost", priority="Urgent")

    def test_priority_accepts_plain_string(self, repo):
        assert repo.create_task("Ship", priority="High").priority is Priority.HIGH

    def test_emits_created_cue(self, storage):
        sink = MagicMock()
        repo = TaskRepository.load(storage, "u1", feedback=FeedbackDispatcher([sink]))
        repo.create_task("Ping")
        sink.assert_called_once_with(FeedbackCue.TASK_CREATED)

    def test_failing_sink_does_not_affect_state(self, storage):
        sink = MagicMock(side_effect=RuntimeError("speaker on fire"))
        repo = TaskRepository.load(storage, "u1", feedback=FeedbackDispatcher([sink]))

        task = repo.create_task("Still saved")

        assert repo.tasks == [task]


class TestUpdateTask:
    def test_partial_update(self, repo):
        repo.create_category("Work")
        repo.create_category("Home")
        task = repo.create_task("Draft", category="Work")

        updated = repo.update_task(task.id, text="Final", category="Home", priority="Low")

        assert updated.text == "Final"
        assert updated.category == "Home"
        assert updated.priority is Priority.LOW
        assert updated.created_at == task.created_at
        assert repo.get_task(task.id) == updated

    def test_accepts_task_update_model(self, repo):
        task = repo.create_task("Draft")
        updated = repo.update_task(task.id, TaskUpdate(description="notes"))
        assert updated.description == "notes"

    def test_blank_text_rejected(self, repo):
        task = repo.create_task("Draft")
        with pytest.raises(EmptyTextError):
            repo.update_task(task.id, text="  ")
        assert repo.get_task(task.id).text == "Draft"

    def test_unknown_field_rejected(self, repo):
        task = repo.create_task("Draft")
        with pytest.raises(ValidationError):
            repo.update_task(task.id, completed=True)

    def test_unknown_space_rejected(self, repo):
        task = repo.create_task("Draft")
        with pytest.raises(CategoryNotFoundError):
            repo.update_task(task.id, category="Nowhere")

    def test_unknown_task(self, repo):
        with pytest.raises(TaskNotFoundError):
            repo.update_task("task_missing", text="x")

    def test_blank_description_clears(self, repo):
        task = repo.create_task("Draft", description="old")
        assert repo.update_task(task.id, description="").description is None

    def test_set_and_clear_due_date(self, repo):
        task = repo.create_task("Draft")
        due = datetime(2025, 3, 8, tzinfo=UTC)

        assert repo.set_due_date(task.id, due).due_date == due
        assert repo.set_due_date(task.id, None).due_date is None


class TestToggleComplete:
    def test_toggle_flips_and_emits_only_on_completion(self, storage):
        sink = MagicMock()
        repo = TaskRepository.load(storage, "u1", feedback=FeedbackDispatcher([sink]))
        task = repo.create_task("Ship")
        sink.reset_mock()

        assert repo.toggle_complete(task.id).completed is True
        sink.assert_called_once_with(FeedbackCue.TASK_COMPLETED)

        sink.reset_mock()
        assert repo.toggle_complete(task.id).completed is False
        sink.assert_not_called()

    def test_unknown_task(self, repo):
        with pytest.raises(TaskNotFoundError):
            repo.toggle_complete("task_missing")


class TestDeleteRestorePurgeTask:
    def test_delete_moves_to_front_of_archive(self, repo):
        a = repo.create_task("A")
        b = repo.create_task("B")

        repo.delete_task(a.id)
        repo.delete_task(b.id)

        assert repo.tasks == []
        assert [t.id for t in repo.archived_tasks] == [b.id, a.id]

    def test_delete_emits_cue_and_event(self, storage):
        sink = MagicMock()
        listener = MagicMock()
        repo = TaskRepository.load(storage, "u1", feedback=FeedbackDispatcher([sink]))
        repo.subscribe(listener)
        task = repo.create_task("Gone")

        repo.delete_task(task.id)

        sink.assert_called_with(FeedbackCue.TASK_DELETED)
        event = listener.call_args.args[0]
        assert event.kind == "archived"
        assert event.entry.task == task

    def test_identical_text_uses_id_not_text(self, repo):
        first = repo.create_task("Same")
        second = repo.create_task("Same")

        repo.delete_task(first.id)

        assert repo.tasks == [second]
        assert repo.archived_tasks == [first]

    def test_restore_puts_task_back_on_top(self, repo):
        a = repo.create_task("A")
        b = repo.create_task("B")
        repo.delete_task(a.id)

        restored = repo.restore_task(a.id)

        assert restored == a
        assert [t.id for t in repo.tasks] == [a.id, b.id]
        assert repo.archived_tasks == []

    def test_restore_refiles_when_space_is_gone(self, repo):
        repo.create_category("Work")
        repo.create_category("Home")
        task = repo.create_task("Ship", category="Work")
        repo.delete_task(task.id)
        repo.delete_category("Work")

        restored = repo.restore_task(task.id)

        assert restored.category == "Home"
        assert_categories_consistent(repo)

    def test_restore_unknown(self, repo):
        with pytest.raises(TaskNotFoundError):
            repo.restore_task("task_missing")

    def test_purge_removes_everywhere(self, repo):
        task = repo.create_task("Gone")
        repo.delete_task(task.id)

        repo.purge_task(task.id)

        assert task.id not in {t.id for t in repo.tasks}
        assert task.id not in {t.id for t in repo.archived_tasks}

    def test_purge_requires_archived(self, repo):
        task = repo.create_task("Active")
        with pytest.raises(TaskNotFoundError):
            repo.purge_task(task.id)
        assert repo.tasks == [task]

    def test_listener_failure_is_contained(self, repo):
        repo.subscribe(MagicMock(side_effect=RuntimeError("boom")))
        task = repo.create_task("Gone")

        repo.delete_task(task.id)

        assert repo.archived_tasks == [task]


# ---------------------------------------------------------------------------
# Spaces
# ---------------------------------------------------------------------------


class TestCategories:
    def test_create_appends(self, repo):
        repo.create_category("Work")
        repo.create_category("Home")
        assert repo.categories == ["Work", "Home"]

    def test_create_trims(self, repo):
        assert repo.create_category("  Work ") == "Work"

    def test_create_rejects_blank(self, repo):
        with pytest.raises(EmptyNameError):
            repo.create_category(" ")

    def test_create_rejects_duplicate(self, repo):
        repo.create_category("Work")
        with pytest.raises(DuplicateNameError):
            repo.create_category("Work")
        assert repo.categories == ["Work"]

    def test_duplicate_check_is_case_sensitive(self, repo):
        repo.create_category("Work")
        repo.create_category("work")
        assert repo.categories == ["Work", "work"]

    def test_create_rejects_all(self, repo):
        with pytest.raises(ValidationError):
            repo.create_category(ALL_SPACES)

    def test_create_revives_archived_name(self, repo):
        repo.create_category("Work")
        repo.delete_category("Work")

        repo.create_category("Work")

        assert repo.categories == ["Work"]
        assert repo.archived_categories == []

    def test_delete_scenario(self, repo):
        repo.create_category("Work")
        repo.create_category("Home")
        task = repo.create_task("Ship v1", category="Work", priority=Priority.HIGH)

        stats = {s.name: s for s in repo.stats_by_category()}
        assert stats["Work"].count == 1
        assert stats["Work"].progress == 0

        repo.toggle_complete(task.id)
        stats = {s.name: s for s in repo.stats_by_category()}
        assert stats["Work"].progress == 100

        repo.delete_category("Work")

        assert repo.get_task(task.id).category == "Home"
        assert repo.archived_categories == ["Work"]
        assert_categories_consistent(repo)

    def test_delete_falls_back_by_list_order(self, repo):
        for name in ("Work", "Zeta", "Alpha"):
            repo.create_category(name)
        task = repo.create_task("t", category="Alpha")

        repo.delete_category("Alpha")

        assert repo.get_task(task.id).category == "Work"

    def test_fallback_for_matches_delete(self, repo):
        assert repo.fallback_for("Work") == "General"
        for name in ("Work", "Home"):
            repo.create_category(name)
        task = repo.create_task("t", category="Work")

        expected = repo.fallback_for("Work")
        repo.delete_category("Work")

        assert expected == "Home"
        assert repo.get_task(task.id).category == expected

    def test_delete_last_space_falls_back_to_general(self, repo):
        repo.create_category("Work")
        task = repo.create_task("t", category="Work")

        repo.delete_category("Work")

        assert repo.get_task(task.id).category == "General"
        assert repo.categories == ["General"]
        assert_categories_consistent(repo)

    def test_delete_general_when_only_space_with_tasks_rejected(self, repo):
        task = repo.create_task("t")
        assert task.category == "General"

        with pytest.raises(ValidationError):
            repo.delete_category("General")
        assert repo.categories == ["General"]

    def test_delete_empty_last_space(self, repo):
        repo.create_category("Work")
        repo.delete_category("Work")
        assert repo.categories == []
        assert repo.archived_categories == ["Work"]

    def test_delete_unknown(self, repo):
        with pytest.raises(CategoryNotFoundError):
            repo.delete_category("Nowhere")

    def test_delete_viewed_space_resets_view(self, repo):
        repo.create_category("Work")
        repo.create_category("Home")
        repo.set_view("Work", "ship")

        repo.delete_category("Work")

        assert repo.view.category == ALL_SPACES
        assert repo.view.search == "ship"

    def test_restore_goes_to_front_without_moving_tasks_back(self, repo):
        repo.create_category("Work")
        repo.create_category("Home")
        task = repo.create_task("t", category="Work")
        repo.delete_category("Work")

        repo.restore_category("Work")

        assert repo.categories == ["Work", "Home"]
        assert repo.archived_categories == []
        assert repo.get_task(task.id).category == "Home"

    def test_restore_unknown(self, repo):
        with pytest.raises(CategoryNotFoundError):
            repo.restore_category("Nowhere")

    def test_purge(self, repo):
        repo.create_category("Work")
        repo.delete_category("Work")

        repo.purge_category("Work")

        assert "Work" not in repo.categories
        assert "Work" not in repo.archived_categories

    def test_purge_unknown(self, repo):
        with pytest.raises(CategoryNotFoundError):
            repo.purge_category("Work")


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------


class TestViews:
    @pytest.fixture
    def populated(self, repo):
        repo.create_category("Work")
        repo.create_category("Home")
        repo.create_task("Ship v1", category="Work")
        repo.create_task("Write release notes", category="Work")
        repo.create_task("Shopping", category="Home")
        return repo

    def test_stats_for_empty_space(self, repo):
        repo.create_category("Empty")
        [stat] = repo.stats_by_category()
        assert (stat.count, stat.completed, stat.progress) == (0, 0, 0)

    def test_stats_progress(self, populated):
        work = next(t for t in populated.tasks if t.text == "Ship v1")
        populated.toggle_complete(work.id)

        stats = {s.name: s for s in populated.stats_by_category()}
        assert stats["Work"].count == 2
        assert stats["Work"].completed == 1
        assert stats["Work"].progress == 50
        assert stats["Home"].progress == 0

    def test_filter_by_space(self, populated):
        assert {t.text for t in populated.filter("Home")} == {"Shopping"}

    def test_filter_search_ignores_case(self, populated):
        texts = [t.text for t in populated.filter(search="SH")]
        assert texts == ["Shopping", "Ship v1"]

    def test_filter_all_keeps_order(self, populated):
        assert populated.filter() == populated.tasks

    def test_visible_tasks_follow_view(self, populated):
        populated.set_view("Work", "notes")
        assert [t.text for t in populated.visible_tasks()] == ["Write release notes"]

    def test_set_view_unknown_space(self, populated):
        with pytest.raises(CategoryNotFoundError):
            populated.set_view("Nowhere")


class TestReorder:
    def test_reorder_replaces_order(self, repo):
        a = repo.create_task("A")
        b = repo.create_task("B")
        c = repo.create_task("C")

        repo.reorder([a.id, b.id, c.id])

        assert [t.id for t in repo.tasks] == [a.id, b.id, c.id]

    def test_reorder_rejected_when_filtered(self, repo):
        a = repo.create_task("A")
        b = repo.create_task("B")
        repo.set_view(search="A")

        with pytest.raises(FilteredReorderError):
            repo.reorder([a.id, b.id])
        assert [t.id for t in repo.tasks] == [b.id, a.id]

    def test_reorder_requires_permutation(self, repo):
        a = repo.create_task("A")
        repo.create_task("B")
        with pytest.raises(ValidationError):
            repo.reorder([a.id])
        with pytest.raises(ValidationError):
            repo.reorder([a.id, a.id])

    def test_move_task(self, repo):
        a = repo.create_task("A")
        b = repo.create_task("B")
        c = repo.create_task("C")

        repo.move_task(c.id, 2)

        assert [t.id for t in repo.tasks] == [b.id, a.id, c.id]

    def test_move_task_clamps_position(self, repo):
        a = repo.create_task("A")
        b = repo.create_task("B")
        repo.move_task(a.id, -5)
        assert [t.id for t in repo.tasks] == [a.id, b.id]


# ---------------------------------------------------------------------------
# Backup
# ---------------------------------------------------------------------------


class TestApplyBackup:
    def test_categories_only_leaves_tasks(self, repo):
        repo.create_category("Work")
        task = repo.create_task("t", category="Work")

        repo.apply_backup(Backup(categories=["Home"]))

        assert repo.tasks == [task]
        assert repo.categories == ["Home"]

    def test_empty_list_replaces(self, repo):
        repo.create_task("t")
        repo.apply_backup(Backup(tasks=[]))
        assert repo.tasks == []

    def test_colliding_archive_entries_dropped(self, repo):
        repo.create_category("Work")
        task = repo.create_task("t", category="Work")
        repo.delete_task(task.id)
        repo.delete_category("Work")

        repo.apply_backup(Backup(tasks=[task], categories=["Work"]))

        assert repo.archived_tasks == []
        assert repo.archived_categories == []
        assert_categories_consistent(repo)

    def test_view_reset_when_space_disappears(self, repo):
        repo.create_category("Work")
        repo.set_view("Work")

        repo.apply_backup(Backup(categories=["Home"]))

        assert repo.view.category == ALL_SPACES

    def test_imported_backup_keeps_collections_exclusive(self, repo):
        codec = BackupCodec()
        repo.create_category("Work")
        task = repo.create_task("t", category="Work")
        backup = codec.import_(codec.export([task], [" Home ", "Work"]))

        repo.apply_backup(backup)
        repo.delete_category("Home")
        repo.delete_task(task.id)

        assert repo.categories == ["Work"]
        assert repo.archived_categories == ["Home"]
        assert [t.id for t in repo.archived_tasks] == [task.id]
        assert_categories_consistent(repo)

    @pytest.mark.parametrize(
        "blob",
        [
            '{"categories": ["Home", "Home", "", "All"]}',
            '{"tasks": ['
            '{"id": "t1", "text": "a", "category": "Work", "createdAt": "2025-03-01T09:00:00Z"},'
            '{"id": "t1", "text": "b", "category": "Work", "createdAt": "2025-03-01T09:00:00Z"}]}',
        ],
    )
    def test_invalid_backup_never_reaches_the_repository(self, storage, repo, blob):
        repo.create_category("Work")
        repo.create_task("t", category="Work")
        before = {key: storage.read(key) for key in storage.keys()}

        with pytest.raises(MalformedBackupError):
            repo.apply_backup(BackupCodec().import_(blob))

        assert {key: storage.read(key) for key in storage.keys()} == before
        assert repo.categories == ["Work"]

    def test_backup_model_rejects_duplicate_spaces(self):
        with pytest.raises(PydanticValidationError):
            Backup(categories=["Home", "Home"])
