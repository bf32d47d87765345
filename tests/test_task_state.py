import uuid
from datetime import date

from app.core.task_state import (
    AssigneeDelta,
    FieldChange,
    apply_field_updates,
    replace_assignees,
    transition_priority,
    transition_status,
)
from app.models.task import Task, TaskPriority, TaskStatus


def make_task(**kwargs) -> Task:
    values = {
        "project_id": uuid.uuid4(),
        "title": "Write docs",
        "status": TaskStatus.TODO,
        "priority": TaskPriority.LOW,
    }
    values.update(kwargs)
    return Task(**values)


class TestTransitions:
    """Status and priority changes."""

    def test_status_change_is_reported(self):
        task = make_task()

        change = transition_status(task, TaskStatus.DONE)

        assert task.status == TaskStatus.DONE
        assert change == FieldChange("status", TaskStatus.TODO, TaskStatus.DONE)
        assert change.old_value == "todo"
        assert change.new_value == "done"

    def test_any_status_may_follow_any_other(self):
        task = make_task(status=TaskStatus.DONE)

        change = transition_status(task, TaskStatus.TODO)

        assert change is not None
        assert task.status == TaskStatus.TODO

    def test_same_value_yields_no_change(self):
        task = make_task(priority=TaskPriority.HIGH)

        assert transition_priority(task, TaskPriority.HIGH) is None
        assert transition_status(task, TaskStatus.TODO) is None

    def test_raw_values_are_coerced(self):
        task = make_task()

        change = transition_priority(task, "medium")

        assert task.priority == TaskPriority.MEDIUM
        assert change.new_value == "medium"


class TestFieldUpdates:
    """Applying several fields at once."""

    def test_only_changed_fields_are_reported(self):
        task = make_task(description="old")

        changes = apply_field_updates(
            task,
            {
                "title": "Write docs",
                "description": "new",
                "status": TaskStatus.IN_PROGRESS,
                "due_date": date(2030, 1, 1),
            },
        )

        assert [change.field for change in changes] == [
            "description",
            "status",
            "due_date",
        ]
        assert task.description == "new"
        assert task.due_date == date(2030, 1, 1)

    def test_empty_update_changes_nothing(self):
        task = make_task()
        assert apply_field_updates(task, {}) == []


class TestAssigneeReplacement:
    """Full-replace assignee semantics."""

    def test_delta_partitions_users(self):
        a, b, c = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()

        delta = replace_assignees({a, b}, [b, c])

        assert delta.added == {c}
        assert delta.removed == {a}
        assert delta.retained == {b}
        assert delta.changed is True

    def test_same_set_is_unchanged(self):
        a = uuid.uuid4()

        delta = replace_assignees([a], [a, a])

        assert delta.added == set()
        assert delta.removed == set()
        assert delta.changed is False

    def test_clearing_assignees(self):
        a = uuid.uuid4()
        delta = AssigneeDelta([a], [])
        assert delta.removed == {a}
        assert delta.new == set()
