import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project_member import ProjectRole
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services.membership_service import MembershipService, build_role_map
from app.services.project_service import ProjectService
from app.services.results import ErrorKind


class TestBuildRoleMap:
    """Normalising requested members."""

    def test_list_joins_everyone_as_member(self):
        creator, a, b = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()

        roles = build_role_map(creator, [a, b])

        assert roles == {
            creator: ProjectRole.OWNER,
            a: ProjectRole.MEMBER,
            b: ProjectRole.MEMBER,
        }

    def test_creator_is_forced_to_owner(self):
        creator, a = uuid.uuid4(), uuid.uuid4()

        roles = build_role_map(creator, {creator: ProjectRole.MEMBER, a: "manager"})

        assert roles[creator] == ProjectRole.OWNER
        assert roles[a] == ProjectRole.MANAGER

    def test_no_users_leaves_only_creator(self):
        creator = uuid.uuid4()
        assert build_role_map(creator, None) == {creator: ProjectRole.OWNER}


class TestMembershipSync:
    """Membership replacement through project create and update."""

    @pytest.mark.asyncio
    async def test_creator_becomes_owner_with_requested_roles(
        self, test_db: AsyncSession, make_user
    ):
        creator = await make_user()
        manager = await make_user()
        member = await make_user()

        result = await ProjectService(test_db).create_project(
            creator,
            ProjectCreate(
                name="Apollo",
                users={
                    manager.id: ProjectRole.MANAGER,
                    member.id: ProjectRole.MEMBER,
                    creator.id: ProjectRole.MEMBER,
                },
            ),
        )

        assert result.ok
        roles = await MembershipService(test_db).get_roles(result.data.id)
        assert roles == {
            creator.id: ProjectRole.OWNER,
            manager.id: ProjectRole.MANAGER,
            member.id: ProjectRole.MEMBER,
        }

    @pytest.mark.asyncio
    async def test_sync_adds_updates_and_removes(
        self, test_db: AsyncSession, team, make_user
    ):
        newcomer = await make_user()
        project = team["project"]

        result = await ProjectService(test_db).update_project(
            team["owner"],
            project.id,
            ProjectUpdate(
                name=project.name,
                users={
                    team["member"].id: ProjectRole.MANAGER,
                    newcomer.id: ProjectRole.MEMBER,
                },
            ),
        )

        assert result.ok
        roles = await MembershipService(test_db).get_roles(project.id)
        assert roles == {
            team["owner"].id: ProjectRole.OWNER,
            team["member"].id: ProjectRole.MANAGER,
            newcomer.id: ProjectRole.MEMBER,
        }

    @pytest.mark.asyncio
    async def test_second_owner_is_rejected(self, test_db: AsyncSession, team):
        project = team["project"]
        project_id, project_name = project.id, project.name

        result = await ProjectService(test_db).update_project(
            team["owner"],
            project_id,
            ProjectUpdate(
                name=project_name,
                users={team["manager"].id: ProjectRole.OWNER},
            ),
        )

        assert result.error == ErrorKind.VALIDATION_FAILED
        roles = await MembershipService(test_db).get_roles(project_id)
        assert roles[team["manager"].id] == ProjectRole.MANAGER

    @pytest.mark.asyncio
    async def test_unknown_user_is_rejected(self, test_db: AsyncSession, make_user):
        creator = await make_user()

        result = await ProjectService(test_db).create_project(
            creator, ProjectCreate(name="Ghosts", users=[uuid.uuid4()])
        )

        assert result.error == ErrorKind.VALIDATION_FAILED
        assert result.details["field"] == "users"

    @pytest.mark.asyncio
    async def test_role_lookup(self, test_db: AsyncSession, team):
        memberships = MembershipService(test_db)
        project_id = team["project"].id

        assert await memberships.get_role(project_id, team["owner"].id) == ProjectRole.OWNER
        assert await memberships.get_role(project_id, team["member"].id) == ProjectRole.MEMBER
        assert await memberships.get_role(project_id, team["outsider"].id) is None
        assert await memberships.get_user_project_ids(team["manager"].id) == [project_id]
