from logging import Logger

from fastmcp.utilities.logging import get_logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from github_classroom.builders.base import TeardownReport, client_for, destroy_submission_repository
from github_classroom.builders.helpers.plan import verify_organization_has_private_repos_available
from github_classroom.builders.helpers.repository import (
    add_user_as_collaborator_to_submission_repository,
    create_github_repository,
    delete_github_repository_on_failure,
    push_starter_code_to,
)
from github_classroom.clients.github import GitHubClassroomClient
from github_classroom.github.organization import GitHubOrganization
from github_classroom.github.repository import GitHubRepository
from github_classroom.github.user import GitHubUser
from github_classroom.records.models import Assignment, AssignmentRepo, RepoAccess, User


class AssignmentRepoBuilder:
    """Provision a student's submission repository for an individual assignment.

    The repository is created in the assignment's organization with the creator's credentials, the student is
    added as a collaborator, private assignments get the starter code imported, and finally the `AssignmentRepo`
    record is persisted. If any step after the repository was created fails, the repository is deleted again
    (best-effort) and `RepositoryCreationFailedError` is raised.

    Example:
        builder = AssignmentRepoBuilder(assignment=assignment, invitee=student, session=session)
        assignment_repo = await builder.build()
    """

    assignment: Assignment
    invitee: User
    session: AsyncSession
    github_client: GitHubClassroomClient
    logger: Logger

    def __init__(
        self,
        assignment: Assignment,
        invitee: User,
        session: AsyncSession,
        github_client: GitHubClassroomClient | None = None,
        logger: Logger | None = None,
    ):
        self.assignment = assignment
        self.invitee = invitee
        self.session = session
        self.logger = logger or get_logger(name=__name__)
        self.github_client = client_for(assignment.creator, github_client=github_client, logger=self.logger)

    async def build(self) -> AssignmentRepo:
        """Provision the submission repository and record it.

        Raises:
            RepositoryLimitReachedError: If the assignment is private and the organization has no private repository left.
            RepositoryCreationFailedError: If a step after creating the repository failed. The repository has been deleted.
            ClientError: If the repository could not be created at all.
        """

        github_organization = GitHubOrganization(client=self.github_client, id=self.assignment.organization.github_id)
        github_invitee = GitHubUser(client=self.github_client, id=self.invitee.uid)
        github_creator = GitHubUser(client=self.github_client, id=self.assignment.creator.uid)

        if self.assignment.is_private:
            _ = await verify_organization_has_private_repos_available(github_organization)

        invitee_login: str = await github_invitee.login()

        submission_repository: GitHubRepository = await create_github_repository(
            github_organization, slug=self.assignment.slug, suffix=invitee_login, private=self.assignment.is_private
        )

        self.logger.info(f"Created {submission_repository!r} for {invitee_login} in assignment {self.assignment.id}")

        await add_user_as_collaborator_to_submission_repository(submission_repository, github_invitee, logger=self.logger)

        _ = await push_starter_code_to(
            submission_repository,
            starter_code_repo_id=self.assignment.starter_code_repo_id,
            private=self.assignment.is_private,
            creator=github_creator,
            logger=self.logger,
        )

        async with delete_github_repository_on_failure(submission_repository, logger=self.logger, failures=(SQLAlchemyError,)):
            return await self._persist(submission_repository)

    async def _persist(self, submission_repository: GitHubRepository) -> AssignmentRepo:
        repo_access: RepoAccess | None = await self.session.scalar(
            select(RepoAccess).where(
                RepoAccess.user_id == self.invitee.id,
                RepoAccess.organization_id == self.assignment.organization_id,
            )
        )

        assignment_repo = AssignmentRepo(
            github_repo_id=submission_repository.id,
            assignment=self.assignment,
            user=self.invitee,
            repo_access=repo_access,
        )

        # A failed insert only undoes its savepoint, the records the caller loaded stay usable.
        async with self.session.begin_nested():
            self.session.add(assignment_repo)

        await self.session.commit()

        return assignment_repo

    @classmethod
    async def destroy(
        cls,
        assignment_repo: AssignmentRepo,
        session: AsyncSession,
        github_client: GitHubClassroomClient | None = None,
        logger: Logger | None = None,
    ) -> TeardownReport:
        """Delete the submission repository on GitHub with the creator's credentials, then the record. Never raises for
        remote failures, which are returned in the report instead."""

        return await destroy_submission_repository(
            assignment_repo, session=session, github_client=github_client, logger=logger or get_logger(name=__name__)
        )
