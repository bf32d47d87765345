import logging
from typing import Dict, Iterable, List, Mapping, Optional, Set, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project import Project
from app.models.project_member import ProjectMember, ProjectRole
from app.models.user import User
from app.services.results import ServiceResult

logger = logging.getLogger(__name__)

RoleAssignments = Union[Mapping[UUID, ProjectRole], Iterable[UUID], None]


def build_role_map(creator_id: UUID, users: RoleAssignments) -> Dict[UUID, ProjectRole]:
    """
    Normalise requested members into a {user_id: role} map.
    A plain list of ids joins everyone as member. Whatever the input says
    about the creator, the creator is owner.
    """
    roles: Dict[UUID, ProjectRole] = {}

    if isinstance(users, Mapping):
        for user_id, role in users.items():
            roles[user_id] = ProjectRole(role)
    elif users is not None:
        for user_id in users:
            roles[user_id] = ProjectRole.MEMBER

    roles[creator_id] = ProjectRole.OWNER
    return roles


class MembershipService:
    """Source of truth for project roles"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_membership(
        self, project_id: UUID, user_id: UUID
    ) -> Optional[ProjectMember]:
        stmt = select(ProjectMember).where(
            ProjectMember.project_id == project_id, ProjectMember.user_id == user_id
        )
        return await self.db.scalar(stmt)

    async def get_role(self, project_id: UUID, user_id: UUID) -> Optional[ProjectRole]:
        """
        Look up a user's role in a project.
        :param project_id: UUID of the project.
        :param user_id: UUID of the user.
        :return: The role, or None when the user is not a member.
        """
        stmt = select(ProjectMember.role).where(
            ProjectMember.project_id == project_id, ProjectMember.user_id == user_id
        )
        return await self.db.scalar(stmt)

    async def get_roles(self, project_id: UUID) -> Dict[UUID, ProjectRole]:
        """Get every member's role in a project"""
        stmt = select(ProjectMember.user_id, ProjectMember.role).where(
            ProjectMember.project_id == project_id
        )
        result = await self.db.execute(stmt)
        return {user_id: role for user_id, role in result.all()}

    async def get_member_ids(self, project_id: UUID) -> Set[UUID]:
        stmt = select(ProjectMember.user_id).where(
            ProjectMember.project_id == project_id
        )
        return set(await self.db.scalars(stmt))

    async def get_user_project_ids(self, user_id: UUID) -> List[UUID]:
        """Projects the user belongs to, in any role"""
        stmt = select(ProjectMember.project_id).where(ProjectMember.user_id == user_id)
        return list(await self.db.scalars(stmt))

    async def sync_members(
        self, project: Project, users: RoleAssignments
    ) -> ServiceResult[Dict[UUID, ProjectRole]]:
        """
        Replace a project's membership with the requested role map.
        Members missing from the map are removed; the creator is forced to
        owner and nobody else may be. Changes are flushed, not committed.
        :param project: Project with its members loaded.
        :param users: Requested {user_id: role} map or list of user ids.
        :return: Result carrying the resulting role map.
        """
        roles = build_role_map(project.created_by, users)

        extra_owners = [
            str(user_id)
            for user_id, role in roles.items()
            if role == ProjectRole.OWNER and user_id != project.created_by
        ]
        if extra_owners:
            return ServiceResult.invalid(
                f"Only the project creator can be owner: {extra_owners}", field="users"
            )

        known_stmt = select(User.id).where(User.id.in_(list(roles)))
        known = set(await self.db.scalars(known_stmt))
        unknown = [str(user_id) for user_id in roles if user_id not in known]
        if unknown:
            return ServiceResult.invalid(f"Users not found: {unknown}", field="users")

        existing = {member.user_id: member for member in project.members}

        for user_id, member in existing.items():
            if user_id not in roles:
                project.members.remove(member)

        for user_id, role in roles.items():
            member = existing.get(user_id)
            if member is None:
                project.members.append(ProjectMember(user_id=user_id, role=role))
            elif member.role != role:
                member.role = role

        await self.db.flush()

        logger.info(f"Synced {len(roles)} members for project {project.id}")
        return ServiceResult.success(roles, "Project members synced")
