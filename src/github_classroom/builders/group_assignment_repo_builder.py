from logging import Logger

from fastmcp.utilities.logging import get_logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from github_classroom.builders.base import TeardownReport, client_for, destroy_submission_repository
from github_classroom.builders.helpers.plan import verify_organization_has_private_repos_available
from github_classroom.builders.helpers.repository import (
    create_github_repository,
    delete_github_repository_on_failure,
    push_starter_code_to,
    slugify,
)
from github_classroom.clients.github import GitHubClassroomClient
from github_classroom.github.organization import GitHubOrganization
from github_classroom.github.repository import GitHubRepository
from github_classroom.github.team import GitHubTeam
from github_classroom.github.user import GitHubUser
from github_classroom.records.models import Group, GroupAssignment, GroupAssignmentRepo


class GroupAssignmentRepoBuilder:
    """Provision a group's submission repository for a group assignment.

    Works like `AssignmentRepoBuilder`, except the repository is named after the group and the group's team is
    granted push access instead of a single collaborator.
    """

    group_assignment: GroupAssignment
    group: Group
    session: AsyncSession
    github_client: GitHubClassroomClient
    logger: Logger

    def __init__(
        self,
        group_assignment: GroupAssignment,
        group: Group,
        session: AsyncSession,
        github_client: GitHubClassroomClient | None = None,
        logger: Logger | None = None,
    ):
        self.group_assignment = group_assignment
        self.group = group
        self.session = session
        self.logger = logger or get_logger(name=__name__)
        self.github_client = client_for(group_assignment.creator, github_client=github_client, logger=self.logger)

    async def build(self) -> GroupAssignmentRepo:
        """Provision the group's submission repository and record it.

        Raises:
            RepositoryLimitReachedError: If the assignment is private and the organization has no private repository left.
            RepositoryCreationFailedError: If a step after creating the repository failed. The repository has been deleted.
            ClientError: If the repository could not be created at all.
        """

        github_organization = GitHubOrganization(client=self.github_client, id=self.group_assignment.organization.github_id)
        github_team = GitHubTeam(client=self.github_client, id=self.group.github_team_id)
        github_creator = GitHubUser(client=self.github_client, id=self.group_assignment.creator.uid)

        if self.group_assignment.is_private:
            _ = await verify_organization_has_private_repos_available(github_organization)

        submission_repository: GitHubRepository = await create_github_repository(
            github_organization,
            slug=self.group_assignment.slug,
            suffix=self._repository_suffix(),
            private=self.group_assignment.is_private,
        )

        self.logger.info(f"Created {submission_repository!r} for group {self.group.id} in group assignment {self.group_assignment.id}")

        async with delete_github_repository_on_failure(submission_repository, logger=self.logger):
            full_name: str = await submission_repository.full_name()
            await github_team.add_team_repository(full_name)

        _ = await push_starter_code_to(
            submission_repository,
            starter_code_repo_id=self.group_assignment.starter_code_repo_id,
            private=self.group_assignment.is_private,
            creator=github_creator,
            logger=self.logger,
        )

        async with delete_github_repository_on_failure(submission_repository, logger=self.logger, failures=(SQLAlchemyError,)):
            return await self._persist(submission_repository)

    def _repository_suffix(self) -> str:
        # Titles without any ASCII form fall back to the group id.
        return slugify(self.group.title) or f"group-{self.group.id}"

    async def _persist(self, submission_repository: GitHubRepository) -> GroupAssignmentRepo:
        group_assignment_repo = GroupAssignmentRepo(
            github_repo_id=submission_repository.id,
            group_assignment=self.group_assignment,
            group=self.group,
        )

        # A failed insert only undoes its savepoint, the records the caller loaded stay usable.
        async with self.session.begin_nested():
            self.session.add(group_assignment_repo)

        await self.session.commit()

        return group_assignment_repo

    @classmethod
    async def destroy(
        cls,
        group_assignment_repo: GroupAssignmentRepo,
        session: AsyncSession,
        github_client: GitHubClassroomClient | None = None,
        logger: Logger | None = None,
    ) -> TeardownReport:
        """Delete the submission repository and the group's team on GitHub, then the record. Never raises for remote
        failures, which are returned in the report instead."""

        return await destroy_submission_repository(
            group_assignment_repo, session=session, github_client=github_client, logger=logger or get_logger(name=__name__)
        )
