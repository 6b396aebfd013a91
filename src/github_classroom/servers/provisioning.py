from collections.abc import Callable
from logging import Logger
from typing import Any

from fastmcp.server import FastMCP
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger

from github_classroom.builders.assignment_repo_builder import AssignmentRepoBuilder
from github_classroom.builders.base import TeardownReport
from github_classroom.builders.group_assignment_repo_builder import GroupAssignmentRepoBuilder
from github_classroom.clients.github import GitHubClassroomClient
from github_classroom.clients.models.github import OrganizationPlan
from github_classroom.github.organization import GitHubOrganization
from github_classroom.records.database import DatabaseConnection
from github_classroom.records.models import Assignment, AssignmentRepo, Group, GroupAssignment, GroupAssignmentRepo, Organization, User
from github_classroom.servers.models.provisioning import SubmissionRepository
from github_classroom.servers.shared.annotations import (
    ASSIGNMENT_ID,
    ASSIGNMENT_REPO_ID,
    GROUP_ASSIGNMENT_ID,
    GROUP_ASSIGNMENT_REPO_ID,
    GROUP_ID,
    INVITEE_ID,
    ORGANIZATION_ID,
    USER_ID,
)
from github_classroom.servers.shared.errors import RecordNotFoundError

GitHubClientFactory = Callable[[User], GitHubClassroomClient]


class ProvisioningServer:
    """Exposes the provisioning workflows as tools.

    Submission repositories are provisioned with the assignment creator's credentials. Pass a `github_client_factory`
    to decide which client acts for a creator instead.
    """

    database: DatabaseConnection
    github_client_factory: GitHubClientFactory | None
    logger: Logger

    def __init__(
        self,
        database: DatabaseConnection | None = None,
        github_client_factory: GitHubClientFactory | None = None,
        logger: Logger | None = None,
    ):
        self.logger = logger or get_logger(name=__name__)
        self.database = database or DatabaseConnection()
        self.github_client_factory = github_client_factory

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.create_assignment_repo))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.destroy_assignment_repo))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.create_group_assignment_repo))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.destroy_group_assignment_repo))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_organization_plan))

        return fastmcp

    def _client_for(self, creator: User) -> GitHubClassroomClient:
        if self.github_client_factory is not None:
            return self.github_client_factory(creator)

        return GitHubClassroomClient.for_access_token(access_token=creator.access_token, logger=self.logger)

    async def create_assignment_repo(self, assignment_id: ASSIGNMENT_ID, invitee_id: INVITEE_ID) -> SubmissionRepository:
        """Provision a student's submission repository for an individual assignment."""

        async with self.database.session() as session:
            if not (assignment := await session.get(Assignment, assignment_id)):
                raise RecordNotFoundError(record_type="Assignment", record_id=assignment_id)

            if not (invitee := await session.get(User, invitee_id)):
                raise RecordNotFoundError(record_type="User", record_id=invitee_id)

            builder = AssignmentRepoBuilder(
                assignment=assignment,
                invitee=invitee,
                session=session,
                github_client=self._client_for(assignment.creator),
                logger=self.logger,
            )

            assignment_repo: AssignmentRepo = await builder.build()

            return SubmissionRepository.from_assignment_repo(assignment_repo)

    async def destroy_assignment_repo(self, assignment_repo_id: ASSIGNMENT_REPO_ID) -> TeardownReport:
        """Delete a student's submission repository on GitHub and in the classroom database."""

        async with self.database.session() as session:
            if not (assignment_repo := await session.get(AssignmentRepo, assignment_repo_id)):
                raise RecordNotFoundError(record_type="AssignmentRepo", record_id=assignment_repo_id)

            return await AssignmentRepoBuilder.destroy(
                assignment_repo, session=session, github_client=self._client_for(assignment_repo.creator), logger=self.logger
            )

    async def create_group_assignment_repo(self, group_assignment_id: GROUP_ASSIGNMENT_ID, group_id: GROUP_ID) -> SubmissionRepository:
        """Provision a group's submission repository for a group assignment."""

        async with self.database.session() as session:
            if not (group_assignment := await session.get(GroupAssignment, group_assignment_id)):
                raise RecordNotFoundError(record_type="GroupAssignment", record_id=group_assignment_id)

            if not (group := await session.get(Group, group_id)):
                raise RecordNotFoundError(record_type="Group", record_id=group_id)

            builder = GroupAssignmentRepoBuilder(
                group_assignment=group_assignment,
                group=group,
                session=session,
                github_client=self._client_for(group_assignment.creator),
                logger=self.logger,
            )

            group_assignment_repo: GroupAssignmentRepo = await builder.build()

            return SubmissionRepository.from_group_assignment_repo(group_assignment_repo)

    async def destroy_group_assignment_repo(self, group_assignment_repo_id: GROUP_ASSIGNMENT_REPO_ID) -> TeardownReport:
        """Delete a group's submission repository and team on GitHub and in the classroom database."""

        async with self.database.session() as session:
            if not (group_assignment_repo := await session.get(GroupAssignmentRepo, group_assignment_repo_id)):
                raise RecordNotFoundError(record_type="GroupAssignmentRepo", record_id=group_assignment_repo_id)

            return await GroupAssignmentRepoBuilder.destroy(
                group_assignment_repo,
                session=session,
                github_client=self._client_for(group_assignment_repo.creator),
                logger=self.logger,
            )

    async def get_organization_plan(self, organization_id: ORGANIZATION_ID, user_id: USER_ID) -> OrganizationPlan:
        """Get how many private repositories the organization owns and how many its plan allows, as seen by the user."""

        async with self.database.session() as session:
            if not (organization := await session.get(Organization, organization_id)):
                raise RecordNotFoundError(record_type="Organization", record_id=organization_id)

            if not (user := await session.get(User, user_id)):
                raise RecordNotFoundError(record_type="User", record_id=user_id)

            github_organization = GitHubOrganization(client=self._client_for(user), id=organization.github_id)

            return await github_organization.plan()
