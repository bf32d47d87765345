import uuid

import pytest

from app.core.policy import (
    ProjectAction,
    can_perform,
    can_delete_project,
    can_delete_comment,
    can_update_task_fields,
)
from app.models.project_member import ProjectRole
from app.models.user import UserRole


OWNER = ProjectRole.OWNER
MANAGER = ProjectRole.MANAGER
MEMBER = ProjectRole.MEMBER


class TestRolePermissions:
    """Role to action table."""

    @pytest.mark.parametrize(
        "action,allowed",
        [
            (ProjectAction.VIEW_PROJECT, {OWNER, MANAGER, MEMBER}),
            (ProjectAction.UPDATE_PROJECT, {OWNER, MANAGER}),
            (ProjectAction.DELETE_PROJECT, {OWNER}),
            (ProjectAction.CREATE_TASK, {OWNER, MANAGER}),
            (ProjectAction.UPDATE_TASK, {OWNER, MANAGER}),
            (ProjectAction.REASSIGN_TASK, {OWNER, MANAGER}),
            (ProjectAction.DELETE_TASK, {OWNER}),
            (ProjectAction.CREATE_COMMENT, {OWNER, MANAGER, MEMBER}),
        ],
    )
    def test_unconditional_permissions(self, action, allowed):
        for role in ProjectRole:
            assert can_perform(role, action) is (role in allowed)

    @pytest.mark.parametrize("action", list(ProjectAction))
    def test_non_member_is_always_denied(self, action):
        assert can_perform(None, action) is False
        assert can_perform(None, action, is_assignee=True) is False

    def test_assigned_member_may_update_task(self):
        assert can_perform(MEMBER, ProjectAction.UPDATE_TASK) is False
        assert can_perform(MEMBER, ProjectAction.UPDATE_TASK, is_assignee=True) is True
        assert (
            can_perform(MEMBER, ProjectAction.UPDATE_TASK_STATE, is_assignee=True)
            is True
        )

    def test_assignment_does_not_grant_other_actions(self):
        for action in (
            ProjectAction.REASSIGN_TASK,
            ProjectAction.DELETE_TASK,
            ProjectAction.UPDATE_TASK_DETAILS,
            ProjectAction.CREATE_TASK,
        ):
            assert can_perform(MEMBER, action, is_assignee=True) is False


class TestDeletionRules:
    """Project and comment deletion."""

    def test_admin_may_delete_any_project(self):
        assert can_delete_project(None, UserRole.ADMIN) is True
        assert can_delete_project(MEMBER, UserRole.ADMIN) is True

    def test_only_owner_deletes_project_otherwise(self):
        assert can_delete_project(OWNER, UserRole.USER) is True
        assert can_delete_project(MANAGER, UserRole.USER) is False
        assert can_delete_project(None, UserRole.USER) is False

    def test_comment_author_may_delete(self):
        author = uuid.uuid4()
        assert can_delete_comment(MEMBER, author, author) is True

    def test_owner_may_delete_any_comment(self):
        assert can_delete_comment(OWNER, uuid.uuid4(), uuid.uuid4()) is True

    def test_manager_may_not_delete_others_comments(self):
        assert can_delete_comment(MANAGER, uuid.uuid4(), uuid.uuid4()) is False

    def test_former_member_may_not_delete_own_comment(self):
        author = uuid.uuid4()
        assert can_delete_comment(None, author, author) is False


class TestFieldLevelUpdates:
    """General task update field rules."""

    def test_manager_may_update_everything(self):
        fields = frozenset({"title", "description", "status", "priority", "due_date"})
        assert can_update_task_fields(MANAGER, fields) is True

    def test_assigned_member_may_update_state_fields(self):
        fields = frozenset({"status", "priority", "due_date"})
        assert can_update_task_fields(MEMBER, fields, is_assignee=True) is True

    def test_assigned_member_may_not_update_details(self):
        assert (
            can_update_task_fields(MEMBER, frozenset({"title"}), is_assignee=True)
            is False
        )
        assert (
            can_update_task_fields(
                MEMBER, frozenset({"status", "description"}), is_assignee=True
            )
            is False
        )

    def test_unassigned_member_may_not_update(self):
        assert can_update_task_fields(MEMBER, frozenset({"status"})) is False
        assert can_update_task_fields(MEMBER, frozenset()) is False
