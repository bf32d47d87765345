import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.policy import (
    ProjectAction,
    can_perform,
    can_delete_comment,
)
from app.models.comment import Comment
from app.models.task import Task
from app.schemas.auth import AuthUser
from app.schemas.comment import CommentCreate
from app.services.membership_service import MembershipService
from app.services.results import ServiceResult

logger = logging.getLogger(__name__)


class CommentService:
    """Task comments"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.memberships = MembershipService(db)

    async def get_comment_by_id(self, comment_id: UUID) -> Optional[Comment]:
        stmt = (
            select(Comment)
            .where(Comment.id == comment_id)
            .options(selectinload(Comment.task), selectinload(Comment.author))
            .execution_options(populate_existing=True)
        )
        return await self.db.scalar(stmt)

    async def list_comments(
        self, actor: AuthUser, task_id: UUID
    ) -> ServiceResult[List[Comment]]:
        """
        List comments on a task, newest first.
        :param actor: Requesting user; must be a project member.
        :param task_id: UUID of the task.
        :return: Result carrying the comments.
        """
        task = await self.db.get(Task, task_id)
        if not task:
            return ServiceResult.not_found("Task", task_id)

        role = await self.memberships.get_role(task.project_id, actor.id)
        if not can_perform(role, ProjectAction.VIEW_PROJECT):
            return ServiceResult.forbidden("You are not authorized to view this task")

        stmt = (
            select(Comment)
            .where(Comment.task_id == task_id)
            .options(selectinload(Comment.author))
            .order_by(Comment.created_at.desc())
        )
        comments = list(await self.db.scalars(stmt))

        return ServiceResult.success(comments, "Comments retrieved successfully")

    async def create_comment(
        self, actor: AuthUser, comment_data: CommentCreate
    ) -> ServiceResult[Comment]:
        """
        Add a comment to a task. Any project member may comment.
        :param actor: Comment author.
        :param comment_data: CommentCreate schema.
        :return: Result carrying the created comment.
        """
        task = await self.db.get(Task, comment_data.task_id)
        if not task:
            return ServiceResult.not_found("Task", comment_data.task_id)

        role = await self.memberships.get_role(task.project_id, actor.id)
        if not can_perform(role, ProjectAction.CREATE_COMMENT):
            return ServiceResult.forbidden(
                "Only project members can comment on this task"
            )

        comment = Comment(
            task_id=task.id, user_id=actor.id, message=comment_data.message
        )
        self.db.add(comment)
        await self.db.commit()
        logger.info(f"Comment {comment.id} added to task {task.id} by {actor.id}")

        return ServiceResult.success(
            await self.get_comment_by_id(comment.id), "Comment created successfully"
        )

    async def delete_comment(
        self, actor: AuthUser, comment_id: UUID
    ) -> ServiceResult[None]:
        """
        Delete a comment. The author or the project owner may do so.
        """
        comment = await self.get_comment_by_id(comment_id)
        if not comment:
            return ServiceResult.not_found("Comment", comment_id)

        role = await self.memberships.get_role(comment.task.project_id, actor.id)
        if not can_delete_comment(role, actor.id, comment.user_id):
            return ServiceResult.forbidden(
                "Only the author or the project owner can delete this comment"
            )

        await self.db.delete(comment)
        await self.db.commit()
        logger.info(f"Comment {comment_id} deleted by {actor.id}")

        return ServiceResult.success(message="Comment deleted successfully")
