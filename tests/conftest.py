import uuid
import pytest
import pytest_asyncio
from typing import AsyncGenerator, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.core.auth import get_current_user
from app.core.notifications import NotificationChannel, NotificationDispatcher
from app.core.notifications.events import NotificationMessage
from app.db.client import get_db
from app.db.base import Base
from app.models.project import Project
from app.models.project_member import ProjectMember, ProjectRole
from app.models.user import User, UserRole
from app.schemas.auth import AuthUser

# In-memory database shared by every connection of one test
TEST_DATABASE_URL = "sqlite+aiosqlite://"


def get_unique_id():
    """Get unique identifier for test data."""
    return str(uuid.uuid4())[:8]


class RecordingChannel(NotificationChannel):
    """Keeps delivered notifications in memory."""

    name = "recording"

    def __init__(self):
        self.delivered: List[NotificationMessage] = []

    async def deliver(self, message: NotificationMessage) -> None:
        self.delivered.append(message)

    def recipients(self, kind=None) -> List[uuid.UUID]:
        return [
            message.recipient_id
            for message in self.delivered
            if kind is None or message.kind == kind
        ]


class FailingChannel(NotificationChannel):
    """Fails every delivery."""

    name = "failing"

    async def deliver(self, message: NotificationMessage) -> None:
        raise RuntimeError("transport down")


@pytest_asyncio.fixture(scope="function")
async def test_db() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    # Cleanup after test
    await engine.dispose()


@pytest_asyncio.fixture
async def broken_inbox() -> AsyncGenerator[async_sessionmaker, None]:
    """Sessions on a database without tables: every inbox write fails."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def recorder() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def dispatcher(recorder: RecordingChannel) -> NotificationDispatcher:
    return NotificationDispatcher([recorder])


@pytest_asyncio.fixture
async def make_user(test_db: AsyncSession):
    """Factory creating persisted users and returning them as actors."""

    async def _make_user(name: Optional[str] = None, role: UserRole = UserRole.USER) -> AuthUser:
        unique_id = get_unique_id()
        user = User(
            name=name or f"user_{unique_id}",
            email=f"user_{unique_id}@example.com",
            role=role,
        )
        test_db.add(user)
        await test_db.commit()
        return AuthUser.model_validate(user)

    return _make_user


@pytest_asyncio.fixture
async def make_project(test_db: AsyncSession):
    """Factory creating a project with the given (user, role) members."""

    async def _make_project(
        owner: AuthUser, members: Optional[List[Tuple[AuthUser, ProjectRole]]] = None
    ) -> Project:
        project = Project(
            name=f"project_{get_unique_id()}",
            created_by=owner.id,
            members=[ProjectMember(user_id=owner.id, role=ProjectRole.OWNER)],
        )
        for user, role in members or []:
            project.members.append(ProjectMember(user_id=user.id, role=role))
        test_db.add(project)
        await test_db.commit()
        return project

    return _make_project


@pytest_asyncio.fixture
async def team(make_user, make_project):
    """
    A project with one user per role plus an outsider.
    Keys: owner, manager, member, outsider, admin, project.
    """
    owner = await make_user("Olivia Owner")
    manager = await make_user("Manu Manager")
    member = await make_user("Mika Member")
    outsider = await make_user("Otto Outsider")
    admin = await make_user("Ada Admin", role=UserRole.ADMIN)

    project = await make_project(
        owner, [(manager, ProjectRole.MANAGER), (member, ProjectRole.MEMBER)]
    )
    return {
        "owner": owner,
        "manager": manager,
        "member": member,
        "outsider": outsider,
        "admin": admin,
        "project": project,
    }


class ActorSwitch:
    """Controls which user the API client acts as."""

    def __init__(self):
        self.user: Optional[AuthUser] = None

    def __call__(self, user: AuthUser) -> "ActorSwitch":
        self.user = user
        return self


@pytest.fixture
def acting_as() -> ActorSwitch:
    return ActorSwitch()


@pytest_asyncio.fixture
async def client(
    test_db: AsyncSession, acting_as: ActorSwitch
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database and auth dependencies."""

    async def override_get_db():
        yield test_db

    async def override_get_current_user() -> AuthUser:
        return acting_as.user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client

    # Cleanup
    app.dependency_overrides.clear()
