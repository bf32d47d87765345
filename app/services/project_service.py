import logging
from typing import Optional, List, Tuple
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.policy import ProjectAction, can_perform, can_delete_project
from app.models.project import Project
from app.models.project_member import ProjectMember, ProjectRole
from app.models.task import Task
from app.schemas.auth import AuthUser
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services.membership_service import MembershipService
from app.services.results import ServiceResult

logger = logging.getLogger(__name__)


class ProjectService:
    """Project management service with member operations"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.memberships = MembershipService(db)

    async def get_project_by_id(self, project_id: UUID) -> Optional[Project]:
        """
        Retrieve a project by its ID with creator and members loaded.
        :param project_id: UUID of the project to retrieve.
        :return: Project object if found, otherwise None.
        """
        stmt = (
            select(Project)
            .where(Project.id == project_id)
            .options(
                selectinload(Project.creator),
                selectinload(Project.members).selectinload(ProjectMember.user),
            )
            .execution_options(populate_existing=True)
        )
        return await self.db.scalar(stmt)

    async def create_project(
        self, actor: AuthUser, project_data: ProjectCreate
    ) -> ServiceResult[Project]:
        """
        Create a new project. The creator becomes its owner.
        :param actor: User creating the project.
        :param project_data: ProjectCreate schema containing project details.
        :return: Result carrying the created project.
        """
        project = Project(
            name=project_data.name,
            description=project_data.description,
            created_by=actor.id,
            members=[],
        )
        self.db.add(project)

        synced = await self.memberships.sync_members(project, project_data.users)
        if not synced.ok:
            await self.db.rollback()
            return synced

        await self.db.commit()
        logger.info(f"Project {project.id} created by {actor.id}")

        return ServiceResult.success(
            await self.get_project_by_id(project.id), "Project created successfully"
        )

    async def list_projects(
        self, actor: AuthUser
    ) -> ServiceResult[List[Tuple[Project, ProjectRole, int]]]:
        """
        List projects the actor belongs to.
        :param actor: Requesting user.
        :return: Result carrying (project, actor's role, task count) tuples.
        """
        stmt = (
            select(Project, ProjectMember.role, func.count(Task.id))
            .join(ProjectMember, ProjectMember.project_id == Project.id)
            .outerjoin(Task, Task.project_id == Project.id)
            .where(ProjectMember.user_id == actor.id)
            .group_by(Project.id, ProjectMember.role)
            .order_by(Project.created_at.desc())
        )
        result = await self.db.execute(stmt)
        rows = [(project, role, count) for project, role, count in result.all()]

        return ServiceResult.success(rows, "Projects retrieved successfully")

    async def get_project(
        self, actor: AuthUser, project_id: UUID
    ) -> ServiceResult[Project]:
        """Get a project the actor is a member of"""
        project = await self.get_project_by_id(project_id)
        if not project:
            return ServiceResult.not_found("Project", project_id)

        role = await self.memberships.get_role(project_id, actor.id)
        if not can_perform(role, ProjectAction.VIEW_PROJECT):
            return ServiceResult.forbidden("You are not authorized to view this project")

        return ServiceResult.success(project, "Project retrieved successfully")

    async def update_project(
        self, actor: AuthUser, project_id: UUID, update_data: ProjectUpdate
    ) -> ServiceResult[Project]:
        """
        Update project details and optionally replace its membership.
        :param actor: User performing the update; must be owner or manager.
        :param project_id: UUID of the project to update.
        :param update_data: ProjectUpdate schema.
        :return: Result carrying the updated project.
        """
        project = await self.get_project_by_id(project_id)
        if not project:
            return ServiceResult.not_found("Project", project_id)

        role = await self.memberships.get_role(project_id, actor.id)
        if not can_perform(role, ProjectAction.UPDATE_PROJECT):
            return ServiceResult.forbidden(
                "Only the project owner or a manager can update this project"
            )

        project.name = update_data.name
        if "description" in update_data.model_fields_set:
            project.description = update_data.description

        if update_data.users is not None:
            synced = await self.memberships.sync_members(project, update_data.users)
            if not synced.ok:
                await self.db.rollback()
                return synced

        await self.db.commit()
        logger.info(f"Project {project_id} updated by {actor.id}")

        return ServiceResult.success(
            await self.get_project_by_id(project_id), "Project updated successfully"
        )

    async def delete_project(self, actor: AuthUser, project_id: UUID) -> ServiceResult[None]:
        """
        Delete a project with its tasks, comments and memberships.
        Allowed for the project owner and for global admins.
        """
        project = await self.get_project_by_id(project_id)
        if not project:
            return ServiceResult.not_found("Project", project_id)

        role = await self.memberships.get_role(project_id, actor.id)
        if not can_delete_project(role, actor.role):
            return ServiceResult.forbidden(
                "Only the project owner or system admin can delete this project"
            )

        await self.db.delete(project)
        await self.db.commit()
        logger.info(f"Project {project_id} deleted by {actor.id}")

        return ServiceResult.success(message="Project deleted successfully")
