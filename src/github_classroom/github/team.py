from github_classroom.clients.errors.github import RequestError
from github_classroom.clients.models.github import Membership, RemoteRepresentation
from github_classroom.github.base import GitHubResource


class GitHubTeam(GitHubResource):
    """A GitHub team, addressed through the id based team endpoints."""

    async def fetch(self) -> RemoteRepresentation:
        return await self.client.get_team(team_id=self.id)

    async def team(self) -> RemoteRepresentation:
        return await self.fetch()

    async def add_team_membership(self, new_user_github_login: str) -> Membership:
        return await self.client.add_team_membership(team_id=self.id, username=new_user_github_login)

    async def remove_team_membership(self, user_github_login: str) -> bool:
        return await self.client.remove_team_membership(team_id=self.id, username=user_github_login)

    async def add_team_repository(self, full_name: str) -> None:
        if not await self.client.add_team_repository(team_id=self.id, full_name=full_name):
            raise RequestError(action="Add team repository", message="Could not add team to the GitHub repository")

    async def is_team_repository(self, full_name: str) -> bool:
        return await self.client.is_team_repository(team_id=self.id, full_name=full_name)
