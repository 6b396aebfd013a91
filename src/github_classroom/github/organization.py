from typing import TYPE_CHECKING, Any

from github_classroom.clients.errors.github import PlanUnavailableError
from github_classroom.clients.models.github import Membership, OrganizationPlan, RemoteRepresentation
from github_classroom.github.base import GitHubResource
from github_classroom.github.repository import GitHubRepository
from github_classroom.github.team import GitHubTeam

if TYPE_CHECKING:
    from github_classroom.github.user import GitHubUser

TEAM_DESCRIPTION_TEMPLATE = "{name} created by Classroom for GitHub"


def github_repo_default_options() -> dict[str, Any]:
    """The options every repository created for an organization starts from."""
    return {
        "has_issues": True,
        "has_wiki": True,
        "has_downloads": True,
    }


class GitHubOrganization(GitHubResource):
    """A GitHub organization.

    Example:
        organization = GitHubOrganization(client=GitHubClassroomClient.for_access_token(token), id=6667880)
        await organization.login()
        # => "tatooine-moisture-farmers"
    """

    async def fetch(self) -> RemoteRepresentation:
        return await self.client.get_organization(organization_id=self.id)

    async def login(self) -> str:
        return await self.get_field("login")

    async def add_membership(self, github_user: "GitHubUser") -> Membership:
        """Add the user to the organization.

        If the user already belongs to the organization, the existing membership is returned untouched. Otherwise the
        user is invited as a `member`.
        """

        login: str = await github_user.login()

        if await self.client.is_organization_member(organization_id=self.id, username=login):
            return await self.client.get_organization_membership(organization_id=self.id, username=login, error_on_not_found=True)

        return await self.client.set_organization_membership(organization_id=self.id, username=login, role="member")

    async def is_active_admin(self, github_user: "GitHubUser") -> bool:
        """Whether the user is an admin with an active membership. A user without a membership is not an admin."""

        login: str = await github_user.login()

        membership: Membership | None = await self.client.get_organization_membership(
            organization_id=self.id, username=login, error_on_not_found=False
        )

        if membership is None:
            return False

        return membership.is_active_admin

    async def create_repository(self, name: str, **users_repo_options: Any) -> GitHubRepository:  # pyright: ignore[reportAny]
        """Create a repository owned by the organization.

        Args:
            name: The name of the repository on GitHub. Callers are responsible for passing a name GitHub accepts.
            users_repo_options: Options merged over the defaults, for example `private=True`.
        """

        repo_options: dict[str, Any] = {**github_repo_default_options(), **users_repo_options}

        repository: RemoteRepresentation = await self.client.create_organization_repository(
            organization_id=self.id, name=name, **repo_options
        )

        return GitHubRepository(client=self.client, id=repository["id"])

    async def create_team(self, name: str) -> GitHubTeam:
        team: RemoteRepresentation = await self.client.create_team(
            organization_id=self.id,
            name=name,
            description=TEAM_DESCRIPTION_TEMPLATE.format(name=name),
            permission="push",
        )

        return GitHubTeam(client=self.client, id=team["id"])

    async def delete_team(self, team_id: int) -> bool:
        return await self.client.delete_team(team_id=team_id)

    async def organization_members(self, **options: Any) -> list[RemoteRepresentation]:  # pyright: ignore[reportAny]
        return await self.client.list_organization_members(organization_id=self.id, **options)

    async def is_organization_member(self, github_user: "GitHubUser") -> bool:
        login: str = await github_user.login()

        return await self.client.is_organization_member(organization_id=self.id, username=login)

    async def plan(self) -> OrganizationPlan:
        """Get the private repository plan of the organization, bypassing any cache.

        Raises:
            PlanUnavailableError: If the token is not allowed to see the plan.
        """

        organization: RemoteRepresentation = await self.client.get_organization(organization_id=self.id, no_cache=True)

        if plan := OrganizationPlan.from_representation(organization):
            return plan

        raise PlanUnavailableError(organization_id=self.id)

    async def remove_organization_member(self, github_user: "GitHubUser") -> bool:
        """Remove the user from the organization. Active admins and non-members are left alone and False is returned."""

        login: str = await github_user.login()

        membership: Membership | None = await self.client.get_organization_membership(
            organization_id=self.id, username=login, error_on_not_found=False
        )

        if membership is None or membership.is_active_admin:
            return False

        return await self.client.remove_organization_member(organization_id=self.id, username=login)
