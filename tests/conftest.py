from collections.abc import AsyncGenerator, Sequence
from typing import Any, TypeVar

import pytest
from pydantic import BaseModel
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from github_classroom.records.database import DatabaseConnection
from github_classroom.records.models import Assignment, Base, Group, GroupAssignment, Grouping, Organization, User
from tests.fakes import FakeGitHubClassroomClient

ORGANIZATION_GITHUB_ID = 6667880
ORGANIZATION_LOGIN = "tatooine-moisture-farmers"

CREATOR_UID = 564113
CREATOR_LOGIN = "obi-wan"
CREATOR_TOKEN = "creator-token"  # noqa: S105

STUDENT_UID = 1203019
STUDENT_LOGIN = "luke"
STUDENT_TOKEN = "student-token"  # noqa: S105

STARTER_CODE_REPO_ID = 1062897
STARTER_CODE_FULL_NAME = "obi-wan/lightsaber-basics"

TEAM_ID = 1867045
TEAM_NAME = "Rogue Squadron"

RecordT = TypeVar("RecordT", bound=Base)


# Remote


@pytest.fixture
def github_client() -> FakeGitHubClassroomClient:
    github_client = FakeGitHubClassroomClient(access_token=CREATOR_TOKEN, authenticated_login=CREATOR_LOGIN)

    github_client.add_organization(ORGANIZATION_GITHUB_ID, login=ORGANIZATION_LOGIN, owned_private_repos=0, private_repos=10)
    github_client.add_user(CREATOR_UID, login=CREATOR_LOGIN)
    github_client.add_user(STUDENT_UID, login=STUDENT_LOGIN)
    github_client.add_repository(STARTER_CODE_REPO_ID, full_name=STARTER_CODE_FULL_NAME)
    github_client.add_team(TEAM_ID, organization_id=ORGANIZATION_GITHUB_ID, name=TEAM_NAME)

    return github_client


# Records


@pytest.fixture
async def database() -> AsyncGenerator[DatabaseConnection, Any]:
    database = DatabaseConnection(
        database_url="sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(database.engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection: Any, _connection_record: Any):  # pyright: ignore[reportUnusedFunction]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    await database.create_tables()

    yield database

    await database.close()


@pytest.fixture
async def session(database: DatabaseConnection) -> AsyncGenerator[AsyncSession, Any]:
    async with database.session_factory() as session:
        yield session


async def persist(session: AsyncSession, record: RecordT) -> RecordT:
    session.add(record)
    await session.commit()
    return record


async def count_rows(session: AsyncSession, model: type[Base]) -> int:
    return await session.scalar(select(func.count()).select_from(model)) or 0


@pytest.fixture
async def organization(session: AsyncSession) -> Organization:
    return await persist(session, Organization(github_id=ORGANIZATION_GITHUB_ID, title="Tatooine Academy", deleted_at=None))


@pytest.fixture
async def creator(session: AsyncSession) -> User:
    return await persist(session, User(uid=CREATOR_UID, token=CREATOR_TOKEN, site_admin=False))


@pytest.fixture
async def student(session: AsyncSession) -> User:
    return await persist(session, User(uid=STUDENT_UID, token=STUDENT_TOKEN, site_admin=False))


@pytest.fixture
async def public_assignment(session: AsyncSession, organization: Organization, creator: User) -> Assignment:
    return await persist(
        session,
        Assignment(
            title="Moisture Vaporators",
            slug="moisture-vaporators",
            public_repo=True,
            starter_code_repo_id=STARTER_CODE_REPO_ID,
            organization=organization,
            creator=creator,
        ),
    )


@pytest.fixture
async def private_assignment(session: AsyncSession, organization: Organization, creator: User) -> Assignment:
    return await persist(
        session,
        Assignment(
            title="Lightsaber Basics",
            slug="lightsaber-basics",
            public_repo=False,
            starter_code_repo_id=STARTER_CODE_REPO_ID,
            organization=organization,
            creator=creator,
        ),
    )


@pytest.fixture
async def grouping(session: AsyncSession, organization: Organization) -> Grouping:
    return await persist(session, Grouping(title="Squadrons", organization=organization))


@pytest.fixture
async def group(session: AsyncSession, grouping: Grouping) -> Group:
    return await persist(session, Group(title=TEAM_NAME, github_team_id=TEAM_ID, grouping=grouping, repo_accesses=[]))


@pytest.fixture
async def group_assignment(session: AsyncSession, organization: Organization, creator: User, grouping: Grouping) -> GroupAssignment:
    return await persist(
        session,
        GroupAssignment(
            title="Trench Run",
            slug="trench-run",
            public_repo=False,
            starter_code_repo_id=STARTER_CODE_REPO_ID,
            organization=organization,
            creator=creator,
            grouping=grouping,
        ),
    )


# Snapshots


def dump_for_snapshot(
    basemodel: BaseModel | None,
    /,
    exclude_keys: list[str] | None = None,
    exclude_none: bool = True,
    **dump_kwargs: Any,
) -> dict[str, Any] | None:
    if basemodel is None:
        return None

    dumped: dict[str, Any] = basemodel.model_dump(exclude_none=exclude_none, **dump_kwargs)

    return {key: value for key, value in dumped.items() if key not in (exclude_keys or [])}


def dump_list_for_snapshot(
    basemodels: Sequence[BaseModel],
    /,
    exclude_keys: list[str] | None = None,
    exclude_none: bool = True,
    **dump_kwargs: Any,
) -> list[dict[str, Any]]:
    return [
        dump
        for basemodel in basemodels
        if (dump := dump_for_snapshot(basemodel, exclude_keys=exclude_keys, exclude_none=exclude_none, **dump_kwargs)) is not None
    ]
