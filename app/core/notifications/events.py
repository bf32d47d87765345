"""
Notification planning.

Pure functions that decide who is notified about a task change and what
each recipient receives. Nothing here touches storage or transport.
"""

import uuid
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from app.core.task_state import AssigneeDelta, FieldChange


class NotificationKind(str, Enum):
    """Notification kind tags"""

    TASK_ASSIGNED = "task_assigned"
    TASK_STATUS_CHANGED = "task_status_changed"
    TASK_PRIORITY_CHANGED = "task_priority_changed"


class NotificationMessage:
    """A single (recipient, payload) pair ready for delivery"""

    def __init__(self, recipient_id: uuid.UUID, kind: NotificationKind, data: Dict[str, Any]):
        self.recipient_id = recipient_id
        self.kind = kind
        self.data = data

    @property
    def message(self) -> str:
        return self.data.get("message", "")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recipient_id": str(self.recipient_id),
            "kind": self.kind.value,
            "data": self.data,
        }

    def __repr__(self) -> str:
        return f"<NotificationMessage(recipient_id={self.recipient_id}, kind={self.kind.value})>"


def _task_fields(task) -> Dict[str, Any]:
    project = getattr(task, "project", None)
    return {
        "task_id": str(task.id),
        "task_title": task.title,
        "project_id": str(task.project_id),
        "project_name": project.name if project is not None else None,
    }


def _ordered(ids: Iterable[uuid.UUID]) -> List[uuid.UUID]:
    # Deterministic fan-out order
    return sorted(set(ids), key=str)


def plan_task_assigned(
    task, recipients: Iterable[uuid.UUID], actor
) -> List[NotificationMessage]:
    """
    Assignment notifications. The actor is not excluded: assigning yourself
    still lands in your inbox.
    """
    messages = []
    for recipient_id in _ordered(recipients):
        data = {
            "type": NotificationKind.TASK_ASSIGNED.value,
            **_task_fields(task),
            "assigned_by": actor.name,
            "assigned_by_id": str(actor.id),
            "message": f"You have been assigned to task: {task.title}",
        }
        messages.append(
            NotificationMessage(recipient_id, NotificationKind.TASK_ASSIGNED, data)
        )
    return messages


def plan_task_created(task, assignee_ids: Iterable[uuid.UUID], actor) -> List[NotificationMessage]:
    """Every initial assignee is notified, the creator included"""
    return plan_task_assigned(task, assignee_ids, actor)


def plan_assignees_replaced(
    task, delta: AssigneeDelta, actor
) -> List[NotificationMessage]:
    """Only users newly added by the replacement are notified"""
    return plan_task_assigned(task, delta.added, actor)


def plan_field_changed(
    task, change: Optional[FieldChange], assignee_ids: Iterable[uuid.UUID], actor
) -> List[NotificationMessage]:
    """
    Status or priority change notifications.
    :param task: Task after the change.
    :param change: Recorded change; None or a non-notifying field yields nothing.
    :param assignee_ids: Current assignees of the task.
    :param actor: User who made the change; never notified.
    :return: One message per assignee other than the actor.
    """
    if change is None:
        return []

    if change.field == "status":
        kind = NotificationKind.TASK_STATUS_CHANGED
    elif change.field == "priority":
        kind = NotificationKind.TASK_PRIORITY_CHANGED
    else:
        return []

    messages = []
    for recipient_id in _ordered(assignee_ids):
        if recipient_id == actor.id:
            continue
        data = {
            "type": kind.value,
            **_task_fields(task),
            f"old_{change.field}": change.old_value,
            f"new_{change.field}": change.new_value,
            "changed_by": actor.name,
            "changed_by_id": str(actor.id),
            "message": (
                f"Task '{task.title}' {change.field} changed from "
                f"{change.old_value} to {change.new_value}"
            ),
        }
        messages.append(NotificationMessage(recipient_id, kind, data))
    return messages


def plan_task_updated(
    task,
    changes: Iterable[FieldChange],
    delta: Optional[AssigneeDelta],
    actor,
) -> List[NotificationMessage]:
    """
    Notifications for a general task update: newly added assignees, then
    status and priority changes sent to the assignees after the update.
    """
    messages: List[NotificationMessage] = []
    if delta is not None:
        messages.extend(plan_assignees_replaced(task, delta, actor))

    current = delta.new if delta is not None else task.assignee_ids
    for change in changes:
        messages.extend(plan_field_changed(task, change, current, actor))
    return messages
