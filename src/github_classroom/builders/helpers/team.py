from logging import Logger

from github_classroom.clients.errors.github import ClientError
from github_classroom.github.organization import GitHubOrganization
from github_classroom.github.team import GitHubTeam


async def create_github_team(github_organization: GitHubOrganization, title: str) -> GitHubTeam:
    return await github_organization.create_team(title)


async def destroy_github_team(github_organization: GitHubOrganization, github_team_id: int | None) -> bool:
    if github_team_id is None:
        return True

    return await github_organization.delete_team(github_team_id)


async def silently_destroy_github_team(github_organization: GitHubOrganization, github_team_id: int | None, logger: Logger) -> str | None:
    """Delete the team, logging instead of raising when GitHub refuses. Returns the failure, if any."""

    try:
        _ = await destroy_github_team(github_organization, github_team_id)
    except ClientError as e:
        logger.warning(f"Could not delete team {github_team_id} of {github_organization!r}, it is left behind on GitHub: {e}")
        return f"Could not delete team {github_team_id}: {e}"

    return None
