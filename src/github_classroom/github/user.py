from typing import TYPE_CHECKING

from github_classroom.clients.errors.github import ForbiddenError
from github_classroom.clients.models.github import Membership, RemoteRepresentation
from github_classroom.github.base import GitHubResource

if TYPE_CHECKING:
    from github_classroom.github.organization import GitHubOrganization


class GitHubUser(GitHubResource):
    """A GitHub user.

    Membership and token operations act as the owner of the client's access token, so build the client from the
    user's own token when calling them.
    """

    async def fetch(self) -> RemoteRepresentation:
        return await self.client.get_user(user_id=self.id)

    async def login(self) -> str:
        return await self.get_field("login")

    async def accept_organization_membership(self, github_organization: "GitHubOrganization") -> Membership:
        """Accept a pending invitation to the organization, or return the membership if the user is already a member."""

        organization_login: str = await github_organization.login()

        if await github_organization.is_organization_member(self):
            return await self.client.get_authenticated_organization_membership(organization_login=organization_login)

        return await self.client.activate_organization_membership(organization_login=organization_login)

    async def active_organization_memberships(self) -> list[Membership]:
        return await self.client.list_organization_memberships(state="active")

    async def is_authorized_access_token(self) -> bool:
        """Whether the user's access token is still authorized for the application."""

        return await self.client.check_application_authorization()

    async def client_scopes(self) -> list[str]:
        """The permission scopes of the access token, for example `["admin:org", "delete_repo", "repo", "user:email"]`."""

        try:
            return await self.client.get_token_scopes()
        except ForbiddenError:
            return []
