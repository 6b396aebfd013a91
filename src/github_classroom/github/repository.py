from typing import TYPE_CHECKING

from github_classroom.clients.errors.github import ClientError
from github_classroom.clients.models.github import RemoteRepresentation
from github_classroom.github.base import GitHubResource

if TYPE_CHECKING:
    from github_classroom.github.organization import GitHubOrganization
    from github_classroom.github.user import GitHubUser

GITHUB_URL = "https://github.com"


class GitHubRepository(GitHubResource):
    """A GitHub repository."""

    async def fetch(self) -> RemoteRepresentation:
        return await self.client.get_repository(repository_id=self.id)

    async def full_name(self) -> str:
        return await self.get_field("full_name")

    async def add_collaborator(self, collaborator: "GitHubUser") -> bool:
        login: str = await collaborator.login()

        return await self.client.add_collaborator(repository_id=self.id, username=login)

    async def get_starter_code_from(self, repository: "GitHubRepository", assignment_creator: "GitHubUser") -> RemoteRepresentation:
        """Import the contents of `repository` into this repository, authenticated as the assignment creator.

        GitHub clones the source with the creator's login and access token, so the creator must be able to read it.
        """

        source_full_name: str = await repository.full_name()
        creator_login: str = await assignment_creator.login()

        if not assignment_creator.client.access_token:
            msg = f"{assignment_creator!r} has no access token to import starter code with"
            raise ClientError(message=msg)

        return await self.client.start_source_import(
            repository_id=self.id,
            vcs="git",
            vcs_url=f"{GITHUB_URL}/{source_full_name}",
            vcs_username=creator_login,
            vcs_password=assignment_creator.client.access_token,
        )

    async def destroy(self) -> bool:
        return await self.client.delete_repository(repository_id=self.id)

    async def organization(self) -> "GitHubOrganization":
        from github_classroom.github.organization import GitHubOrganization

        organization: RemoteRepresentation = await self.get_field("organization")

        return GitHubOrganization(client=self.client, id=organization["id"])
