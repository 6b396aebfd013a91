from logging import Logger

from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from github_classroom.builders.helpers.repository import silently_destroy_github_repository
from github_classroom.builders.helpers.team import silently_destroy_github_team
from github_classroom.clients.github import GitHubClassroomClient
from github_classroom.github.organization import GitHubOrganization
from github_classroom.github.repository import GitHubRepository
from github_classroom.records.models import AssignmentRepo, GroupAssignmentRepo, User


class TeardownReport(BaseModel):
    """What a teardown removed, and what it had to leave behind on GitHub."""

    github_repo_id: int | None = Field(default=None, description="The id of the repository on GitHub, if there was one.")
    github_team_id: int | None = Field(default=None, description="The id of the team on GitHub, if there was one.")
    diagnostics: list[str] = Field(default_factory=list, description="The remote deletions that failed.")

    @property
    def is_clean(self) -> bool:
        return not self.diagnostics


def client_for(user: User, github_client: GitHubClassroomClient | None = None, logger: Logger | None = None) -> GitHubClassroomClient:
    """Use the provided client, or act with the user's own access token."""

    return github_client or GitHubClassroomClient.for_access_token(access_token=user.access_token, logger=logger)


async def destroy_submission_repository(
    submission_repo: AssignmentRepo | GroupAssignmentRepo,
    session: AsyncSession,
    github_client: GitHubClassroomClient | None = None,
    logger: Logger | None = None,
) -> TeardownReport:
    """Delete the repository (and team, if any) on GitHub, then the local record.

    Remote failures are logged and reported, never raised: the local record is removed regardless.
    """

    logger = logger or get_logger(name=__name__)
    github_client = client_for(submission_repo.creator, github_client=github_client, logger=logger)

    report = TeardownReport(github_repo_id=submission_repo.github_repo_id, github_team_id=submission_repo.github_team_id)

    submission_repository = GitHubRepository(client=github_client, id=submission_repo.github_repo_id)

    if diagnostic := await silently_destroy_github_repository(submission_repository, logger=logger):
        report.diagnostics.append(diagnostic)

    if submission_repo.github_team_id is not None:
        github_organization = GitHubOrganization(client=github_client, id=submission_repo.organization.github_id)

        if diagnostic := await silently_destroy_github_team(github_organization, submission_repo.github_team_id, logger=logger):
            report.diagnostics.append(diagnostic)

    logger.info(f"Removing {type(submission_repo).__name__} {submission_repo.id} with {len(report.diagnostics)} remote failure(s)")

    await session.delete(submission_repo)
    await session.commit()

    return report
