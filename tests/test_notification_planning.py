import uuid

import pytest

from app.core.notifications.events import (
    NotificationKind,
    plan_assignees_replaced,
    plan_field_changed,
    plan_task_created,
    plan_task_updated,
)
from app.core.task_state import AssigneeDelta, FieldChange
from app.models.project import Project
from app.models.task import Task, TaskPriority, TaskStatus
from app.schemas.auth import AuthUser


def make_actor(name: str = "Olivia Owner") -> AuthUser:
    return AuthUser(id=uuid.uuid4(), name=name, email="actor@example.com")


@pytest.fixture
def task() -> Task:
    project = Project(id=uuid.uuid4(), name="Launch", created_by=uuid.uuid4())
    return Task(
        id=uuid.uuid4(),
        project_id=project.id,
        project=project,
        title="Ship it",
        status=TaskStatus.TODO,
        priority=TaskPriority.LOW,
    )


class TestAssignmentPlanning:
    """Who hears about assignments."""

    def test_creation_notifies_every_initial_assignee(self, task):
        actor = make_actor()
        other = uuid.uuid4()

        messages = plan_task_created(task, [actor.id, other], actor)

        assert {m.recipient_id for m in messages} == {actor.id, other}
        assert all(m.kind == NotificationKind.TASK_ASSIGNED for m in messages)

    def test_assignment_payload(self, task):
        actor = make_actor("Manu Manager")
        recipient = uuid.uuid4()

        [message] = plan_task_created(task, [recipient], actor)

        assert message.data["type"] == "task_assigned"
        assert message.data["task_id"] == str(task.id)
        assert message.data["task_title"] == "Ship it"
        assert message.data["project_name"] == "Launch"
        assert message.data["assigned_by"] == "Manu Manager"
        assert message.message == "You have been assigned to task: Ship it"

    def test_replacement_notifies_only_added_users(self, task):
        actor = make_actor()
        kept, dropped, added = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()

        messages = plan_assignees_replaced(
            task, AssigneeDelta([kept, dropped], [kept, added]), actor
        )

        assert [m.recipient_id for m in messages] == [added]

    def test_no_assignees_no_messages(self, task):
        assert plan_task_created(task, [], make_actor()) == []


class TestFieldChangePlanning:
    """Status and priority change fan-out."""

    def test_actor_is_excluded(self, task):
        actor = make_actor()
        other = uuid.uuid4()
        change = FieldChange("status", TaskStatus.TODO, TaskStatus.DONE)

        messages = plan_field_changed(task, change, [actor.id, other], actor)

        assert [m.recipient_id for m in messages] == [other]

    def test_status_payload(self, task):
        actor = make_actor("Mika Member")
        change = FieldChange("status", TaskStatus.TODO, TaskStatus.IN_PROGRESS)

        [message] = plan_field_changed(task, change, [uuid.uuid4()], actor)

        assert message.kind == NotificationKind.TASK_STATUS_CHANGED
        assert message.data["old_status"] == "todo"
        assert message.data["new_status"] == "in_progress"
        assert message.data["changed_by"] == "Mika Member"
        assert message.message == "Task 'Ship it' status changed from todo to in_progress"

    def test_priority_payload(self, task):
        change = FieldChange("priority", TaskPriority.LOW, TaskPriority.HIGH)

        [message] = plan_field_changed(task, change, [uuid.uuid4()], make_actor())

        assert message.kind == NotificationKind.TASK_PRIORITY_CHANGED
        assert message.data["old_priority"] == "low"
        assert message.data["new_priority"] == "high"

    def test_no_change_no_messages(self, task):
        assert plan_field_changed(task, None, [uuid.uuid4()], make_actor()) == []

    def test_other_fields_do_not_notify(self, task):
        change = FieldChange("title", "a", "b")
        assert plan_field_changed(task, change, [uuid.uuid4()], make_actor()) == []

    def test_only_actor_assigned_yields_nothing(self, task):
        actor = make_actor()
        change = FieldChange("priority", TaskPriority.LOW, TaskPriority.MEDIUM)
        assert plan_field_changed(task, change, [actor.id], actor) == []


class TestGeneralUpdatePlanning:
    """Combined update fan-out."""

    def test_changes_go_to_assignees_after_replacement(self, task):
        actor = make_actor()
        old, new = uuid.uuid4(), uuid.uuid4()
        delta = AssigneeDelta([old], [new])
        change = FieldChange("status", TaskStatus.TODO, TaskStatus.DONE)

        messages = plan_task_updated(task, [change], delta, actor)

        assigned = [m for m in messages if m.kind == NotificationKind.TASK_ASSIGNED]
        changed = [m for m in messages if m.kind == NotificationKind.TASK_STATUS_CHANGED]
        assert [m.recipient_id for m in assigned] == [new]
        assert [m.recipient_id for m in changed] == [new]

    def test_detail_changes_are_silent(self, task):
        changes = [FieldChange("title", "a", "b"), FieldChange("description", None, "x")]
        delta = AssigneeDelta([uuid.uuid4()], [])
        assert plan_task_updated(task, changes, delta, make_actor()) == []
