"""
Project role policy.

Pure decision functions mapping an actor's project role and an action to
allow/deny. A role of ``None`` means the actor holds no membership in the
project, which denies every action.
"""

import uuid
from enum import Enum
from typing import Dict, FrozenSet, Optional

from app.models.project_member import ProjectRole
from app.models.user import UserRole


class ProjectAction(str, Enum):
    """Actions governed by project roles"""

    VIEW_PROJECT = "project.view"
    UPDATE_PROJECT = "project.update"
    DELETE_PROJECT = "project.delete"
    CREATE_TASK = "task.create"
    UPDATE_TASK = "task.update"
    UPDATE_TASK_DETAILS = "task.update_details"
    UPDATE_TASK_STATE = "task.update_state"
    REASSIGN_TASK = "task.reassign"
    DELETE_TASK = "task.delete"
    CREATE_COMMENT = "comment.create"
    DELETE_COMMENT = "comment.delete"


_ALL_ROLES: FrozenSet[ProjectRole] = frozenset(ProjectRole)
_MANAGING_ROLES: FrozenSet[ProjectRole] = frozenset(
    {ProjectRole.OWNER, ProjectRole.MANAGER}
)
_OWNER_ONLY: FrozenSet[ProjectRole] = frozenset({ProjectRole.OWNER})

DETAIL_FIELDS: FrozenSet[str] = frozenset({"title", "description"})
STATE_FIELDS: FrozenSet[str] = frozenset({"status", "priority", "due_date"})

# Roles allowed unconditionally
ROLE_PERMISSIONS: Dict[ProjectAction, FrozenSet[ProjectRole]] = {
    ProjectAction.VIEW_PROJECT: _ALL_ROLES,
    ProjectAction.UPDATE_PROJECT: _MANAGING_ROLES,
    ProjectAction.DELETE_PROJECT: _OWNER_ONLY,
    ProjectAction.CREATE_TASK: _MANAGING_ROLES,
    ProjectAction.UPDATE_TASK: _MANAGING_ROLES,
    ProjectAction.UPDATE_TASK_DETAILS: _MANAGING_ROLES,
    ProjectAction.UPDATE_TASK_STATE: _MANAGING_ROLES,
    ProjectAction.REASSIGN_TASK: _MANAGING_ROLES,
    ProjectAction.DELETE_TASK: _OWNER_ONLY,
    ProjectAction.CREATE_COMMENT: _ALL_ROLES,
    ProjectAction.DELETE_COMMENT: _OWNER_ONLY,
}

# Roles additionally allowed when the actor is assigned to the task
ASSIGNEE_PERMISSIONS: Dict[ProjectAction, FrozenSet[ProjectRole]] = {
    ProjectAction.UPDATE_TASK: frozenset({ProjectRole.MEMBER}),
    ProjectAction.UPDATE_TASK_STATE: frozenset({ProjectRole.MEMBER}),
}


def can_perform(
    role: Optional[ProjectRole],
    action: ProjectAction,
    *,
    is_assignee: bool = False,
) -> bool:
    """
    Decide whether a project role may perform an action.
    :param role: Actor's role in the project, or None when not a member.
    :param action: Action being attempted.
    :param is_assignee: Whether the actor is assigned to the task in question.
    :return: True if allowed, False otherwise.
    """
    if role is None:
        return False

    if role in ROLE_PERMISSIONS[action]:
        return True

    if is_assignee and role in ASSIGNEE_PERMISSIONS.get(action, frozenset()):
        return True

    return False


def can_delete_project(role: Optional[ProjectRole], global_role: UserRole) -> bool:
    """Project owner, or a global admin regardless of membership"""
    if global_role == UserRole.ADMIN:
        return True
    return can_perform(role, ProjectAction.DELETE_PROJECT)


def can_delete_comment(
    role: Optional[ProjectRole], actor_id: uuid.UUID, author_id: uuid.UUID
) -> bool:
    """Comment author, or the project owner. Managers are not enough."""
    if role is None:
        return False
    if actor_id == author_id:
        return True
    return can_perform(role, ProjectAction.DELETE_COMMENT)


def can_update_task_fields(
    role: Optional[ProjectRole],
    fields: FrozenSet[str],
    *,
    is_assignee: bool = False,
) -> bool:
    """
    Field-level check for the general task update.
    Members that are assigned may touch work-state fields only.
    """
    if not can_perform(role, ProjectAction.UPDATE_TASK, is_assignee=is_assignee):
        return False

    if fields & DETAIL_FIELDS and not can_perform(
        role, ProjectAction.UPDATE_TASK_DETAILS
    ):
        return False

    if fields & STATE_FIELDS and not can_perform(
        role, ProjectAction.UPDATE_TASK_STATE, is_assignee=is_assignee
    ):
        return False

    return True
