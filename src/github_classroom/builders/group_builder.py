from collections.abc import Sequence
from logging import Logger

from fastmcp.utilities.logging import get_logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from github_classroom.builders.base import TeardownReport
from github_classroom.builders.errors import TeamCreationFailedError
from github_classroom.builders.helpers.repository import silently_destroy_github_repository
from github_classroom.builders.helpers.team import create_github_team, silently_destroy_github_team
from github_classroom.clients.github import GitHubClassroomClient
from github_classroom.github.organization import GitHubOrganization
from github_classroom.github.repository import GitHubRepository
from github_classroom.github.team import GitHubTeam
from github_classroom.github.user import GitHubUser
from github_classroom.records.models import Group, GroupAssignmentRepo, Grouping, RepoAccess, User


class GroupBuilder:
    """Provision groups of a grouping, each backed by a team in the grouping's organization."""

    session: AsyncSession
    github_client: GitHubClassroomClient
    logger: Logger

    def __init__(self, session: AsyncSession, github_client: GitHubClassroomClient, logger: Logger | None = None):
        self.session = session
        self.github_client = github_client
        self.logger = logger or get_logger(name=__name__)

    def _organization(self, grouping: Grouping) -> GitHubOrganization:
        return GitHubOrganization(client=self.github_client, id=grouping.organization.github_id)

    async def build(self, grouping: Grouping, title: str) -> Group:
        """Create the team on GitHub and record the group.

        Raises:
            ValueError: If the title is empty or too long for a group. Nothing is created on GitHub.
            TeamCreationFailedError: If the group could not be recorded. The team has been deleted.
        """

        group = Group(title=title, grouping=grouping, repo_accesses=[])

        github_organization = self._organization(grouping)

        github_team: GitHubTeam = await create_github_team(github_organization, title=title)

        self.logger.info(f"Created {github_team!r} for group {title!r} of grouping {grouping.id}")

        group.github_team_id = github_team.id

        try:
            async with self.session.begin_nested():
                self.session.add(group)
        except SQLAlchemyError as e:
            _ = await silently_destroy_github_team(github_organization, github_team.id, logger=self.logger)

            raise TeamCreationFailedError(extra_info={"team_id": str(github_team.id), "cause": str(e)}) from e

        await self.session.commit()

        return group

    async def add_member(self, group: Group, user: User) -> Group:
        """Add the user to the group's team and give them access to the group's repositories."""

        github_user = GitHubUser(client=self.github_client, id=user.uid)
        github_team = GitHubTeam(client=self.github_client, id=group.github_team_id)

        login: str = await github_user.login()
        _ = await github_team.add_team_membership(login)

        repo_access: RepoAccess = await self._get_or_create_repo_access(user=user, group=group)

        if repo_access not in group.repo_accesses:
            group.repo_accesses.append(repo_access)

        await self.session.commit()

        return group

    async def remove_member(self, group: Group, user: User) -> Group:
        """Remove the user from the group's team and unlink their repository access from the group."""

        github_user = GitHubUser(client=self.github_client, id=user.uid)
        github_team = GitHubTeam(client=self.github_client, id=group.github_team_id)

        login: str = await github_user.login()
        _ = await github_team.remove_team_membership(login)

        group.repo_accesses = [repo_access for repo_access in group.repo_accesses if repo_access.user_id != user.id]

        await self.session.commit()

        return group

    async def destroy(self, group: Group) -> TeardownReport:
        """Delete the group's submission repositories and team on GitHub, then the group and its repository records.
        Never raises for remote failures."""

        report = TeardownReport(github_team_id=group.github_team_id)

        github_organization = self._organization(group.grouping)

        group_assignment_repos: Sequence[GroupAssignmentRepo] = (
            await self.session.scalars(select(GroupAssignmentRepo).where(GroupAssignmentRepo.group_id == group.id))
        ).all()

        for group_assignment_repo in group_assignment_repos:
            submission_repository = GitHubRepository(client=self.github_client, id=group_assignment_repo.github_repo_id)

            if diagnostic := await silently_destroy_github_repository(submission_repository, logger=self.logger):
                report.diagnostics.append(diagnostic)

            await self.session.delete(group_assignment_repo)

        if diagnostic := await silently_destroy_github_team(github_organization, group.github_team_id, logger=self.logger):
            report.diagnostics.append(diagnostic)

        self.logger.info(f"Removing group {group.id} with {len(report.diagnostics)} remote failure(s)")

        await self.session.delete(group)
        await self.session.commit()

        return report

    async def _get_or_create_repo_access(self, user: User, group: Group) -> RepoAccess:
        organization_id: int = group.grouping.organization_id

        repo_access: RepoAccess | None = await self.session.scalar(
            select(RepoAccess).where(RepoAccess.user_id == user.id, RepoAccess.organization_id == organization_id)
        )

        if repo_access is None:
            repo_access = RepoAccess(user=user, organization=group.grouping.organization)
            self.session.add(repo_access)

        return repo_access
