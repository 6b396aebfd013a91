from copy import deepcopy
from typing import Any
from unittest.mock import MagicMock

from github_classroom.clients.errors.github import ClientError, RequestError, ResourceNotFoundError
from github_classroom.clients.github import GitHubClassroomClient
from github_classroom.clients.models.github import Membership, RemoteRepresentation

FIRST_CREATED_ID = 5000


class FakeGitHubClassroomClient(GitHubClassroomClient):
    """An in-memory GitHub behind the client interface.

    Every call that changes GitHub is appended to `mutations`. Use `fail_on` to make the next call of an operation raise.
    """

    def __init__(self, access_token: str = "creator-token", authenticated_login: str = "professor-x"):
        super().__init__(githubkit_client=MagicMock(), access_token=access_token, client_id="classroom-client-id")

        self.authenticated_login: str = authenticated_login
        self.next_id: int = FIRST_CREATED_ID

        self.organizations: dict[int, RemoteRepresentation] = {}
        self.users: dict[int, RemoteRepresentation] = {}
        self.repositories: dict[int, RemoteRepresentation] = {}
        self.teams: dict[int, RemoteRepresentation] = {}

        self.organization_members: dict[int, set[str]] = {}
        self.memberships: dict[tuple[int, str], Membership] = {}
        self.collaborators: dict[int, set[str]] = {}
        self.team_members: dict[int, set[str]] = {}
        self.team_repositories: dict[int, set[str]] = {}
        self.source_imports: dict[int, RemoteRepresentation] = {}

        self.token_scopes: list[str] = []
        self.authorized_tokens: set[str] = set()

        self.mutations: list[str] = []
        self.failures: dict[str, ClientError] = {}

    # Test setup

    def fail_on(self, operation: str, error: ClientError | None = None) -> None:
        self.failures[operation] = error or RequestError(action=operation, message="Server Error")

    def add_organization(self, organization_id: int, login: str, owned_private_repos: int = 0, private_repos: int | None = 10) -> None:
        organization: RemoteRepresentation = {"id": organization_id, "login": login, "owned_private_repos": owned_private_repos}

        if private_repos is not None:
            organization["plan"] = {"name": "team", "private_repos": private_repos}

        self.organizations[organization_id] = organization

    def add_user(self, user_id: int, login: str) -> None:
        self.users[user_id] = {"id": user_id, "login": login}

    def add_repository(self, repository_id: int, full_name: str, private: bool = False) -> None:
        self.repositories[repository_id] = {"id": repository_id, "full_name": full_name, "private": private}

    def add_team(self, team_id: int, organization_id: int, name: str) -> None:
        self.teams[team_id] = {"id": team_id, "name": name, "organization": {"id": organization_id}}

    def add_membership(self, organization_id: int, login: str, role: str, state: str) -> None:
        self.memberships[(organization_id, login)] = Membership(role=role, state=state)

        if state == "active":
            self.organization_members.setdefault(organization_id, set()).add(login)

    def private_repository_count(self, organization_id: int) -> int:
        return self.organizations[organization_id]["owned_private_repos"]

    def _check(self, operation: str) -> None:
        if error := self.failures.pop(operation, None):
            raise error

    def _mutate(self, operation: str) -> None:
        self._check(operation)
        self.mutations.append(operation)

    def _next_id(self) -> int:
        self.next_id += 1
        return self.next_id

    def _organization_id_for(self, organization_login: str) -> int:
        for organization_id, organization in self.organizations.items():
            if organization["login"] == organization_login:
                return organization_id

        raise ResourceNotFoundError(action="Find organization", resource=organization_login)

    # Organizations

    async def get_organization(self, organization_id: int, no_cache: bool = False) -> RemoteRepresentation:
        self._check("get_organization")

        if organization_id not in self.organizations:
            raise ResourceNotFoundError(action="Get organization", resource=f"/organizations/{organization_id}")

        return deepcopy(self.organizations[organization_id])

    async def is_organization_member(self, organization_id: int, username: str) -> bool:
        self._check("is_organization_member")

        return username in self.organization_members.get(organization_id, set())

    async def get_organization_membership(self, organization_id: int, username: str, error_on_not_found: bool = False) -> Membership | None:  # pyright: ignore[reportIncompatibleMethodOverride]
        self._check("get_organization_membership")

        membership: Membership | None = self.memberships.get((organization_id, username))

        if membership is None and error_on_not_found:
            raise ResourceNotFoundError(action="Get organization membership", resource=username)

        return membership

    async def set_organization_membership(self, organization_id: int, username: str, role: str = "member") -> Membership:
        self._mutate("set_organization_membership")

        membership = Membership(role=role, state="pending")
        self.memberships[(organization_id, username)] = membership

        return membership

    async def list_organization_members(self, organization_id: int, **params: Any) -> list[RemoteRepresentation]:  # pyright: ignore[reportAny]
        self._check("list_organization_members")

        return [{"login": login} for login in sorted(self.organization_members.get(organization_id, set()))]

    async def remove_organization_member(self, organization_id: int, username: str) -> bool:
        self._mutate("remove_organization_member")

        self.organization_members.get(organization_id, set()).discard(username)
        _ = self.memberships.pop((organization_id, username), None)

        return True

    async def create_organization_repository(self, organization_id: int, name: str, **options: Any) -> RemoteRepresentation:  # pyright: ignore[reportAny]
        self._mutate("create_organization_repository")

        organization: RemoteRepresentation = self.organizations[organization_id]

        repository: RemoteRepresentation = {
            **options,
            "id": self._next_id(),
            "name": name,
            "full_name": f"{organization['login']}/{name}",
            "private": options.get("private", False),
            "organization": {"id": organization_id, "login": organization["login"]},
        }

        self.repositories[repository["id"]] = repository

        if repository["private"]:
            organization["owned_private_repos"] += 1

        return deepcopy(repository)

    async def create_team(self, organization_id: int, name: str, description: str, permission: str = "push") -> RemoteRepresentation:
        self._mutate("create_team")

        team: RemoteRepresentation = {
            "id": self._next_id(),
            "name": name,
            "description": description,
            "permission": permission,
            "organization": {"id": organization_id},
        }

        self.teams[team["id"]] = team

        return deepcopy(team)

    async def delete_team(self, team_id: int) -> bool:
        self._mutate("delete_team")

        if team_id not in self.teams:
            raise ResourceNotFoundError(action="Delete team", resource=f"/teams/{team_id}")

        del self.teams[team_id]

        return True

    # Repositories

    async def get_repository(self, repository_id: int, no_cache: bool = False) -> RemoteRepresentation:
        self._check("get_repository")

        if repository_id not in self.repositories:
            raise ResourceNotFoundError(action="Get repository", resource=f"/repositories/{repository_id}")

        return deepcopy(self.repositories[repository_id])

    async def delete_repository(self, repository_id: int) -> bool:
        self._mutate("delete_repository")

        if repository_id not in self.repositories:
            raise ResourceNotFoundError(action="Delete repository", resource=f"/repositories/{repository_id}")

        repository: RemoteRepresentation = self.repositories.pop(repository_id)

        if repository.get("private") and (organization := repository.get("organization")):
            self.organizations[organization["id"]]["owned_private_repos"] -= 1

        return True

    async def add_collaborator(self, repository_id: int, username: str, permission: str = "push") -> bool:
        self._mutate("add_collaborator")

        self.collaborators.setdefault(repository_id, set()).add(username)

        return True

    async def start_source_import(
        self, repository_id: int, vcs_url: str, vcs_username: str, vcs_password: str, vcs: str = "git"
    ) -> RemoteRepresentation:
        self._mutate("start_source_import")

        source_import: RemoteRepresentation = {"vcs": vcs, "vcs_url": vcs_url, "vcs_username": vcs_username, "status": "importing"}
        self.source_imports[repository_id] = {**source_import, "vcs_password": vcs_password}

        return source_import

    # Teams

    async def get_team(self, team_id: int) -> RemoteRepresentation:
        self._check("get_team")

        if team_id not in self.teams:
            raise ResourceNotFoundError(action="Get team", resource=f"/teams/{team_id}")

        return deepcopy(self.teams[team_id])

    async def add_team_membership(self, team_id: int, username: str) -> Membership:
        self._mutate("add_team_membership")

        self.team_members.setdefault(team_id, set()).add(username)

        return Membership(role="member", state="active")

    async def remove_team_membership(self, team_id: int, username: str) -> bool:
        self._mutate("remove_team_membership")

        self.team_members.get(team_id, set()).discard(username)

        return True

    async def add_team_repository(self, team_id: int, full_name: str, permission: str = "push") -> bool:
        self._mutate("add_team_repository")

        self.team_repositories.setdefault(team_id, set()).add(full_name)

        return True

    async def is_team_repository(self, team_id: int, full_name: str) -> bool:
        self._check("is_team_repository")

        return full_name in self.team_repositories.get(team_id, set())

    # Users

    async def get_user(self, user_id: int, no_cache: bool = False) -> RemoteRepresentation:
        self._check("get_user")

        if user_id not in self.users:
            raise ResourceNotFoundError(action="Get user", resource=f"/user/{user_id}")

        return deepcopy(self.users[user_id])

    async def list_organization_memberships(self, state: str = "active") -> list[Membership]:
        self._check("list_organization_memberships")

        return [
            membership
            for (_, login), membership in self.memberships.items()
            if login == self.authenticated_login and membership.state == state
        ]

    async def get_authenticated_organization_membership(self, organization_login: str) -> Membership:
        self._check("get_authenticated_organization_membership")

        organization_id: int = self._organization_id_for(organization_login)

        if membership := self.memberships.get((organization_id, self.authenticated_login)):
            return membership

        raise ResourceNotFoundError(action="Get authenticated organization membership", resource=organization_login)

    async def activate_organization_membership(self, organization_login: str) -> Membership:
        self._mutate("activate_organization_membership")

        organization_id: int = self._organization_id_for(organization_login)
        current: Membership | None = self.memberships.get((organization_id, self.authenticated_login))

        membership = Membership(role=current.role if current else "member", state="active")
        self.add_membership(organization_id, self.authenticated_login, role=membership.role, state=membership.state)

        return membership

    async def get_token_scopes(self) -> list[str]:
        self._check("get_token_scopes")

        return list(self.token_scopes)

    async def check_application_authorization(self) -> bool:
        self._check("check_application_authorization")

        return self.access_token in self.authorized_tokens
