from github_classroom.github.base import GitHubResource
from github_classroom.github.organization import GitHubOrganization
from github_classroom.github.repository import GitHubRepository
from github_classroom.github.team import GitHubTeam
from github_classroom.github.user import GitHubUser

__all__ = [
    "GitHubOrganization",
    "GitHubRepository",
    "GitHubResource",
    "GitHubTeam",
    "GitHubUser",
]
