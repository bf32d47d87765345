import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project import Project
from app.models.project_member import ProjectMember, ProjectRole
from app.models.task import Task
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services.project_service import ProjectService
from app.services.results import ErrorKind


class TestProjectCreation:
    """Creating projects."""

    @pytest.mark.asyncio
    async def test_creator_is_sole_owner(self, test_db: AsyncSession, make_user):
        creator = await make_user()

        result = await ProjectService(test_db).create_project(
            creator, ProjectCreate(name="Solo", description="Just me")
        )

        assert result.ok
        project = result.data
        assert project.name == "Solo"
        assert project.created_by == creator.id
        assert [(m.user_id, m.role) for m in project.members] == [
            (creator.id, ProjectRole.OWNER)
        ]

    @pytest.mark.asyncio
    async def test_plain_list_joins_as_members(self, test_db: AsyncSession, make_user):
        creator = await make_user()
        other = await make_user()

        result = await ProjectService(test_db).create_project(
            creator, ProjectCreate(name="Pair", users=[other.id])
        )

        roles = {m.user_id: m.role for m in result.data.members}
        assert roles == {creator.id: ProjectRole.OWNER, other.id: ProjectRole.MEMBER}


class TestProjectAccess:
    """Reading and listing projects."""

    @pytest.mark.asyncio
    async def test_member_can_view(self, test_db: AsyncSession, team):
        result = await ProjectService(test_db).get_project(
            team["member"], team["project"].id
        )
        assert result.ok
        assert result.data.id == team["project"].id

    @pytest.mark.asyncio
    async def test_outsider_is_forbidden(self, test_db: AsyncSession, team):
        result = await ProjectService(test_db).get_project(
            team["outsider"], team["project"].id
        )
        assert result.error == ErrorKind.FORBIDDEN

    @pytest.mark.asyncio
    async def test_missing_project_is_not_found(self, test_db: AsyncSession, team):
        result = await ProjectService(test_db).get_project(team["owner"], uuid.uuid4())
        assert result.error == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_list_carries_role_and_task_count(self, test_db: AsyncSession, team):
        project = team["project"]
        test_db.add_all(
            [
                Task(project_id=project.id, title="One"),
                Task(project_id=project.id, title="Two"),
            ]
        )
        await test_db.commit()

        result = await ProjectService(test_db).list_projects(team["manager"])

        assert result.ok
        [(listed, role, tasks_count)] = result.data
        assert listed.id == project.id
        assert role == ProjectRole.MANAGER
        assert tasks_count == 2

    @pytest.mark.asyncio
    async def test_list_excludes_foreign_projects(self, test_db: AsyncSession, team):
        result = await ProjectService(test_db).list_projects(team["outsider"])
        assert result.data == []


class TestProjectUpdate:
    """Updating projects."""

    @pytest.mark.asyncio
    async def test_manager_can_rename(self, test_db: AsyncSession, team):
        result = await ProjectService(test_db).update_project(
            team["manager"],
            team["project"].id,
            ProjectUpdate(name="Renamed", description="Fresh"),
        )

        assert result.ok
        assert result.data.name == "Renamed"
        assert result.data.description == "Fresh"

    @pytest.mark.asyncio
    async def test_member_cannot_update(self, test_db: AsyncSession, team):
        result = await ProjectService(test_db).update_project(
            team["member"], team["project"].id, ProjectUpdate(name="Hijacked")
        )
        assert result.error == ErrorKind.FORBIDDEN

    @pytest.mark.asyncio
    async def test_update_without_users_keeps_membership(
        self, test_db: AsyncSession, team
    ):
        result = await ProjectService(test_db).update_project(
            team["owner"], team["project"].id, ProjectUpdate(name="Same crew")
        )

        assert len(result.data.members) == 3


class TestProjectDeletion:
    """Deleting projects."""

    @pytest.mark.asyncio
    async def test_manager_cannot_delete(self, test_db: AsyncSession, team):
        result = await ProjectService(test_db).delete_project(
            team["manager"], team["project"].id
        )

        assert result.error == ErrorKind.FORBIDDEN
        assert await test_db.get(Project, team["project"].id) is not None

    @pytest.mark.asyncio
    async def test_owner_can_delete(self, test_db: AsyncSession, team):
        project_id = team["project"].id
        test_db.add(Task(project_id=project_id, title="Doomed"))
        await test_db.commit()

        result = await ProjectService(test_db).delete_project(team["owner"], project_id)

        assert result.ok
        assert await test_db.scalar(select(Project).where(Project.id == project_id)) is None
        assert list(await test_db.scalars(select(Task).where(Task.project_id == project_id))) == []
        assert (
            list(
                await test_db.scalars(
                    select(ProjectMember).where(ProjectMember.project_id == project_id)
                )
            )
            == []
        )

    @pytest.mark.asyncio
    async def test_admin_can_delete_without_membership(
        self, test_db: AsyncSession, team
    ):
        result = await ProjectService(test_db).delete_project(
            team["admin"], team["project"].id
        )
        assert result.ok
