"""
Task state transitions.

Status and priority are orthogonal attributes with no forbidden
transitions. Applying a change yields a FieldChange record (old and new
value) that drives notifications; setting a field to its current value
yields nothing. Assignee sets use full-replace semantics and produce an
AssigneeDelta computed against the set captured before mutation.
"""

import uuid
from typing import Any, Dict, Iterable, List, Optional, Set

from app.models.task import Task, TaskPriority, TaskStatus


class FieldChange:
    """Old and new value of a single task attribute"""

    def __init__(self, field: str, old: Any, new: Any):
        self.field = field
        self.old = old
        self.new = new

    @property
    def old_value(self) -> Optional[str]:
        return _plain(self.old)

    @property
    def new_value(self) -> Optional[str]:
        return _plain(self.new)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldChange):
            return NotImplemented
        return (self.field, self.old, self.new) == (other.field, other.old, other.new)

    def __repr__(self) -> str:
        return f"<FieldChange({self.field}: {self.old_value} -> {self.new_value})>"


class AssigneeDelta:
    """Result of replacing a task's assignee set"""

    def __init__(self, old: Iterable[uuid.UUID], new: Iterable[uuid.UUID]):
        self.old: Set[uuid.UUID] = set(old)
        self.new: Set[uuid.UUID] = set(new)

    @property
    def added(self) -> Set[uuid.UUID]:
        return self.new - self.old

    @property
    def removed(self) -> Set[uuid.UUID]:
        return self.old - self.new

    @property
    def retained(self) -> Set[uuid.UUID]:
        return self.old & self.new

    @property
    def changed(self) -> bool:
        return self.old != self.new

    def __repr__(self) -> str:
        return (
            f"<AssigneeDelta(added={len(self.added)}, removed={len(self.removed)}, "
            f"retained={len(self.retained)})>"
        )


def _plain(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (TaskStatus, TaskPriority)):
        return value.value
    return str(value)


def transition_status(task: Task, new_status: TaskStatus) -> Optional[FieldChange]:
    """Set task status, returning the change or None when unchanged"""
    return _transition(task, "status", TaskStatus(new_status))


def transition_priority(
    task: Task, new_priority: TaskPriority
) -> Optional[FieldChange]:
    """Set task priority, returning the change or None when unchanged"""
    return _transition(task, "priority", TaskPriority(new_priority))


def apply_field_updates(task: Task, values: Dict[str, Any]) -> List[FieldChange]:
    """
    Apply a set of field updates to a task.
    :param task: Task to mutate in place.
    :param values: Mapping of field name to new value.
    :return: FieldChange records for every field whose value actually changed.
    """
    changes: List[FieldChange] = []
    for field, value in values.items():
        if field == "status":
            change = transition_status(task, value)
        elif field == "priority":
            change = transition_priority(task, value)
        else:
            change = _transition(task, field, value)
        if change:
            changes.append(change)
    return changes


def _transition(task: Task, field: str, new: Any) -> Optional[FieldChange]:
    old = getattr(task, field)
    if old == new:
        return None
    setattr(task, field, new)
    return FieldChange(field, old, new)


def replace_assignees(
    current: Iterable[uuid.UUID], requested: Iterable[uuid.UUID]
) -> AssigneeDelta:
    """Compute the delta of a full assignee-set replacement"""
    return AssigneeDelta(current, requested)
