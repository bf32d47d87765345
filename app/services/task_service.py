import logging
from typing import Optional, List, Tuple, Iterable
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.notifications import NotificationDispatcher, create_dispatcher
from app.core.notifications.events import (
    NotificationMessage,
    plan_assignees_replaced,
    plan_field_changed,
    plan_task_created,
    plan_task_updated,
)
from app.core.policy import ProjectAction, can_perform, can_update_task_fields
from app.core.task_state import (
    AssigneeDelta,
    apply_field_updates,
    replace_assignees,
    transition_priority,
    transition_status,
)
from app.models.comment import Comment
from app.models.project import Project
from app.models.task import Task, TaskAssignee, TaskStatus, TaskPriority
from app.schemas.auth import AuthUser
from app.schemas.task import TaskCreate, TaskUpdate, TaskFilters
from app.services.membership_service import MembershipService
from app.services.results import ServiceResult

logger = logging.getLogger(__name__)

# Columns that cannot be cleared through a general update
NON_NULLABLE_FIELDS = {"title", "status", "priority"}


class TaskService:
    """
    Task operations.
    Every mutation checks existence, then the actor's project role, then
    applies the change. Notifications are planned only after the change is
    committed and are delivered best effort.
    """

    def __init__(
        self, db: AsyncSession, dispatcher: Optional[NotificationDispatcher] = None
    ):
        self.db = db
        self.memberships = MembershipService(db)
        self.dispatcher = dispatcher or create_dispatcher(db)

    async def get_task_by_id(self, task_id: UUID) -> Optional[Task]:
        """
        Retrieve a task by its ID with project and assignees loaded.
        :param task_id: UUID of the task to retrieve.
        :return: Task object if found, otherwise None.
        """
        stmt = (
            select(Task)
            .where(Task.id == task_id)
            .options(
                selectinload(Task.project),
                selectinload(Task.assignees).selectinload(TaskAssignee.user),
            )
            .execution_options(populate_existing=True)
        )
        return await self.db.scalar(stmt)

    async def authorize_task_creation(
        self, actor: AuthUser, project_id: UUID
    ) -> ServiceResult[Project]:
        """
        Check that the project exists and the actor may create tasks in it.
        Needs nothing from the request but the project id.
        :param actor: User creating the task.
        :param project_id: Target project.
        :return: Result carrying the project.
        """
        project = await self.db.get(Project, project_id)
        if not project:
            return ServiceResult.not_found("Project", project_id)

        role = await self.memberships.get_role(project.id, actor.id)
        if not can_perform(role, ProjectAction.CREATE_TASK):
            return ServiceResult.forbidden(
                "Only the project owner or a manager can create tasks"
            )
        return ServiceResult.success(project)

    async def create_task(
        self, actor: AuthUser, task_data: TaskCreate
    ) -> ServiceResult[Task]:
        """
        Create a new task. Only project owners and managers may create tasks.
        Every initial assignee is notified, the creator included.
        :param actor: User creating the task.
        :param task_data: TaskCreate schema containing task details.
        :return: Result carrying the created task.
        """
        authorized = await self.authorize_task_creation(actor, task_data.project_id)
        if not authorized.ok:
            return authorized
        project = authorized.data

        assignee_ids = task_data.assigned_users or []
        invalid = await self._validate_assignees(project.id, assignee_ids)
        if invalid is not None:
            return invalid

        task = Task(
            project_id=project.id,
            title=task_data.title,
            description=task_data.description,
            status=task_data.status or TaskStatus.TODO,
            priority=task_data.priority or TaskPriority.LOW,
            due_date=task_data.due_date,
            assignees=[
                TaskAssignee(user_id=user_id, assigned_by=actor.id)
                for user_id in assignee_ids
            ],
        )
        self.db.add(task)
        await self.db.commit()
        logger.info(f"Task {task.id} created in project {project.id} by {actor.id}")

        task = await self.get_task_by_id(task.id)
        await self._notify(plan_task_created(task, assignee_ids, actor))

        return ServiceResult.success(task, "Task created successfully")

    async def list_tasks(
        self, actor: AuthUser, filters: TaskFilters
    ) -> ServiceResult[List[Tuple[Task, int]]]:
        """
        List tasks across the actor's projects.
        :param actor: Requesting user.
        :param filters: Optional project, status and priority filters.
        :return: Result carrying (task, comment count) tuples, newest first.
        """
        project_ids = await self.memberships.get_user_project_ids(actor.id)
        if not project_ids:
            return ServiceResult.success([], "Tasks retrieved successfully")

        comment_counts = (
            select(Comment.task_id, func.count(Comment.id).label("comments_count"))
            .group_by(Comment.task_id)
            .subquery()
        )

        stmt = (
            select(Task, func.coalesce(comment_counts.c.comments_count, 0))
            .outerjoin(comment_counts, comment_counts.c.task_id == Task.id)
            .where(Task.project_id.in_(project_ids))
        )

        if filters.project_id:
            stmt = stmt.where(Task.project_id == filters.project_id)
        if filters.status:
            stmt = stmt.where(Task.status == filters.status)
        if filters.priority:
            stmt = stmt.where(Task.priority == filters.priority)

        stmt = stmt.order_by(Task.created_at.desc()).options(
            selectinload(Task.project),
            selectinload(Task.assignees).selectinload(TaskAssignee.user),
        )

        result = await self.db.execute(stmt)
        rows = [(task, count) for task, count in result.all()]

        return ServiceResult.success(rows, "Tasks retrieved successfully")

    async def get_task(self, actor: AuthUser, task_id: UUID) -> ServiceResult[Task]:
        """Get a task in one of the actor's projects"""
        task = await self.get_task_by_id(task_id)
        if not task:
            return ServiceResult.not_found("Task", task_id)

        role = await self.memberships.get_role(task.project_id, actor.id)
        if not can_perform(role, ProjectAction.VIEW_PROJECT):
            return ServiceResult.forbidden("You are not authorized to view this task")

        return ServiceResult.success(task, "Task retrieved successfully")

    async def update_task(
        self, actor: AuthUser, task_id: UUID, update_data: TaskUpdate
    ) -> ServiceResult[Task]:
        """
        Update task fields and, for owners and managers, its assignees.
        Assigned members may change status, priority and due date only.
        :param actor: User performing the update.
        :param task_id: UUID of the task to update.
        :param update_data: TaskUpdate schema containing fields to update.
        :return: Result carrying the updated task.
        """
        task = await self.get_task_by_id(task_id)
        if not task:
            return ServiceResult.not_found("Task", task_id)

        role = await self.memberships.get_role(task.project_id, actor.id)
        is_assignee = task.is_assigned(actor.id)

        values = {
            field: value
            for field, value in update_data.model_dump(
                exclude_unset=True, exclude={"assigned_users"}
            ).items()
            if value is not None or field not in NON_NULLABLE_FIELDS
        }

        if not can_update_task_fields(role, frozenset(values), is_assignee=is_assignee):
            return ServiceResult.forbidden(
                "You are not authorized to update these task fields"
            )

        reassigning = update_data.assigned_users is not None
        if reassigning:
            if not can_perform(role, ProjectAction.REASSIGN_TASK):
                return ServiceResult.forbidden(
                    "Only the project owner or a manager can reassign tasks"
                )
            invalid = await self._validate_assignees(
                task.project_id, update_data.assigned_users
            )
            if invalid is not None:
                return invalid

        changes = apply_field_updates(task, values)
        delta = (
            self._replace_assignees(task, update_data.assigned_users, actor)
            if reassigning
            else None
        )

        await self.db.commit()
        logger.info(
            f"Task {task_id} updated by {actor.id}: "
            f"{[change.field for change in changes]}"
        )

        task = await self.get_task_by_id(task_id)
        await self._notify(plan_task_updated(task, changes, delta, actor))

        return ServiceResult.success(task, "Task updated successfully")

    async def update_status(
        self, actor: AuthUser, task_id: UUID, status: TaskStatus
    ) -> ServiceResult[Task]:
        """
        Change task status. Owners, managers and assigned members may do so.
        Assignees other than the actor are notified.
        """
        task = await self.get_task_by_id(task_id)
        if not task:
            return ServiceResult.not_found("Task", task_id)

        denied = await self._authorize_state_change(task, actor)
        if denied is not None:
            return denied

        change = transition_status(task, status)
        await self.db.commit()
        if change:
            logger.info(f"Task {task_id} {change} by {actor.id}")

        await self._notify(plan_field_changed(task, change, task.assignee_ids, actor))
        return ServiceResult.success(task, "Task status updated successfully")

    async def update_priority(
        self, actor: AuthUser, task_id: UUID, priority: TaskPriority
    ) -> ServiceResult[Task]:
        """
        Change task priority. Same rules as status changes.
        """
        task = await self.get_task_by_id(task_id)
        if not task:
            return ServiceResult.not_found("Task", task_id)

        denied = await self._authorize_state_change(task, actor)
        if denied is not None:
            return denied

        change = transition_priority(task, priority)
        await self.db.commit()
        if change:
            logger.info(f"Task {task_id} {change} by {actor.id}")

        await self._notify(plan_field_changed(task, change, task.assignee_ids, actor))
        return ServiceResult.success(task, "Task priority updated successfully")

    async def replace_assignees(
        self, actor: AuthUser, task_id: UUID, user_ids: List[UUID]
    ) -> ServiceResult[Task]:
        """
        Replace the full assignee set of a task.
        Only newly added users are notified.
        :param actor: User performing the change; must be owner or manager.
        :param task_id: UUID of the task.
        :param user_ids: The new assignee set.
        :return: Result carrying the updated task.
        """
        task = await self.get_task_by_id(task_id)
        if not task:
            return ServiceResult.not_found("Task", task_id)

        role = await self.memberships.get_role(task.project_id, actor.id)
        if not can_perform(role, ProjectAction.REASSIGN_TASK):
            return ServiceResult.forbidden(
                "Only the project owner or a manager can reassign tasks"
            )

        invalid = await self._validate_assignees(task.project_id, user_ids)
        if invalid is not None:
            return invalid

        delta = self._replace_assignees(task, user_ids, actor)
        await self.db.commit()
        logger.info(f"Task {task_id} assignees replaced by {actor.id}: {delta}")

        task = await self.get_task_by_id(task_id)
        await self._notify(plan_assignees_replaced(task, delta, actor))

        return ServiceResult.success(task, "Task assignees updated successfully")

    async def delete_task(self, actor: AuthUser, task_id: UUID) -> ServiceResult[None]:
        """
        Delete a task with its comments and assignments.
        Only the project owner may delete tasks; admin status does not apply.
        """
        task = await self.get_task_by_id(task_id)
        if not task:
            return ServiceResult.not_found("Task", task_id)

        role = await self.memberships.get_role(task.project_id, actor.id)
        if not can_perform(role, ProjectAction.DELETE_TASK):
            return ServiceResult.forbidden("Only the project owner can delete tasks")

        await self.db.delete(task)
        await self.db.commit()
        logger.info(f"Task {task_id} deleted by {actor.id}")

        return ServiceResult.success(message="Task deleted successfully")

    async def _authorize_state_change(
        self, task: Task, actor: AuthUser
    ) -> Optional[ServiceResult]:
        role = await self.memberships.get_role(task.project_id, actor.id)
        if not can_perform(
            role, ProjectAction.UPDATE_TASK_STATE, is_assignee=task.is_assigned(actor.id)
        ):
            return ServiceResult.forbidden(
                "Only the project owner, a manager or an assignee can change this task"
            )
        return None

    async def _validate_assignees(
        self, project_id: UUID, user_ids: Iterable[UUID]
    ) -> Optional[ServiceResult]:
        """Check that all users are project members"""
        user_ids = list(user_ids)
        if not user_ids:
            return None

        members = await self.memberships.get_member_ids(project_id)
        invalid_users = [str(user_id) for user_id in user_ids if user_id not in members]
        if invalid_users:
            return ServiceResult.invalid(
                f"Users not in project: {invalid_users}", field="assigned_users"
            )
        return None

    def _replace_assignees(
        self, task: Task, user_ids: Iterable[UUID], actor: AuthUser
    ) -> AssigneeDelta:
        """Swap the assignee set in place, keeping rows for retained users"""
        requested = list(dict.fromkeys(user_ids))
        delta = replace_assignees(task.assignee_ids, requested)

        kept = [assignment for assignment in task.assignees if assignment.user_id in delta.new]
        added = [
            TaskAssignee(user_id=user_id, assigned_by=actor.id)
            for user_id in requested
            if user_id in delta.added
        ]
        task.assignees = kept + added
        return delta

    async def _notify(self, messages: List[NotificationMessage]) -> None:
        if messages:
            await self.dispatcher.dispatch(messages)
