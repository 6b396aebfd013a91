from collections.abc import Awaitable, Callable
from logging import Logger, getLogger
from typing import Any, Literal, Self, overload

from githubkit import GitHub as GitHubKit
from githubkit import OAuthAppAuthStrategy
from githubkit.auth.token import TokenAuthStrategy
from githubkit.exception import GitHubException as GitHubKitGitHubException
from githubkit.exception import RequestFailed as GitHubKitRequestFailed
from githubkit.response import Response as GitHubKitResponse
from githubkit.retry import RetryChainDecision, RetryRateLimit, RetryServerError

from github_classroom.clients.errors.github import ClientError, ForbiddenError, RequestError, ResourceNotFoundError
from github_classroom.clients.models.github import Membership, RemoteRepresentation
from github_classroom.settings import get_github_client_id, get_github_client_secret, get_github_token

NOT_FOUND_ERROR = 404
FORBIDDEN_ERROR = 403
NO_CONTENT = 204
CREATED = 201

NO_CACHE_HEADERS: dict[str, str] = {"Cache-Control": "no-cache, no-store, max-age=0"}

# The source imports API is gated behind a preview media type.
SOURCE_IMPORT_PREVIEW_HEADERS: dict[str, str] = {"Accept": "application/vnd.github.barred-rock-preview"}

OAUTH_SCOPES_HEADER = "X-OAuth-Scopes"


def extract_representation(response: GitHubKitResponse[Any], /) -> Any:  # pyright: ignore[reportAny]
    """Extract the decoded JSON body from a response."""

    return response.json()  # pyright: ignore[reportAny]


def split_full_name(full_name: str) -> tuple[str, str]:
    owner, _, repo = full_name.partition("/")
    if not owner or not repo:
        msg = f"Expected a repository full name in the form owner/repo, got {full_name!r}"
        raise ValueError(msg)
    return owner, repo


def get_retry_chain() -> RetryChainDecision:
    # Retry server errors up to 3 times
    retry_server_error = RetryServerError()

    # Retry rate limit errors up to 3 times
    retry_rate_limit = RetryRateLimit(max_retry=3)

    return RetryChainDecision(
        retry_server_error,
        retry_rate_limit,
    )


def get_githubkit_client(token: str | None = None) -> GitHubKit[Any]:
    return GitHubKit[TokenAuthStrategy](auth=TokenAuthStrategy(token=token or get_github_token()), auto_retry=get_retry_chain())


def get_application_githubkit_client(client_id: str | None = None, client_secret: str | None = None) -> GitHubKit[Any] | None:
    """Build a client authenticated as the OAuth application, if application credentials are configured."""

    client_id = client_id or get_github_client_id()
    client_secret = client_secret or get_github_client_secret()

    if not client_id or not client_secret:
        return None

    return GitHubKit[OAuthAppAuthStrategy](
        auth=OAuthAppAuthStrategy(client_id=client_id, client_secret=client_secret), auto_retry=get_retry_chain()
    )


class GitHubClassroomClient:
    """An authenticated facade over the GitHub REST API.

    Every call is translated into the client error taxonomy: a 404 becomes a `ResourceNotFoundError` (or `None` when
    `error_on_not_found` is False), a 403 becomes a `ForbiddenError` and any other failure a `RequestError`.
    """

    githubkit_client: GitHubKit[Any]
    application_githubkit_client: GitHubKit[Any] | None
    access_token: str | None
    client_id: str | None
    logger: Logger

    log_requests: bool
    log_responses: bool
    log_on_error: bool

    def __init__(
        self,
        githubkit_client: GitHubKit[Any] | None = None,
        access_token: str | None = None,
        application_githubkit_client: GitHubKit[Any] | None = None,
        client_id: str | None = None,
        logger: Logger | None = None,
        log_requests: bool = True,
        log_responses: bool = False,
        log_on_error: bool = True,
    ):
        if githubkit_client is None:
            access_token = access_token or get_github_token()
            githubkit_client = get_githubkit_client(token=access_token)

        self.githubkit_client = githubkit_client
        self.access_token = access_token
        self.application_githubkit_client = application_githubkit_client
        self.client_id = client_id or get_github_client_id()
        self.logger = logger or getLogger(__name__)
        self.log_requests = log_requests
        self.log_responses = log_responses
        self.log_on_error = log_on_error

    @classmethod
    def for_access_token(cls, access_token: str, logger: Logger | None = None) -> Self:
        """Build a client acting on behalf of the owner of `access_token`, with application credentials from the environment."""

        return cls(
            githubkit_client=get_githubkit_client(token=access_token),
            access_token=access_token,
            application_githubkit_client=get_application_githubkit_client(),
            logger=logger,
        )

    def _get_loggers(
        self, log_request: bool | None = None, log_response: bool | None = None, log_on_error: bool | None = None
    ) -> tuple[Callable[[str], Any], Callable[[str], Any], Callable[[BaseException | str], Any]]:
        request_logger = self.logger.info if log_request or self.log_requests else self.logger.debug
        response_logger = self.logger.info if log_response or self.log_responses else self.logger.debug
        error_logger = self.logger.exception if log_on_error or self.log_on_error else self.logger.debug
        return request_logger, response_logger, error_logger

    @overload
    async def _perform_request(
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        error_on_not_found: Literal[False] = False,
        *,
        operation: Callable[..., Awaitable[GitHubKitResponse[Any]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> GitHubKitResponse[Any] | None: ...

    @overload
    async def _perform_request(
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        error_on_not_found: Literal[True] = True,
        *,
        operation: Callable[..., Awaitable[GitHubKitResponse[Any]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> GitHubKitResponse[Any]: ...

    async def _perform_request(
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        error_on_not_found: bool | None = None,
        *,
        operation: Callable[..., Awaitable[GitHubKitResponse[Any]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> GitHubKitResponse[Any] | None:
        """Perform a request and return the response.

        Args:
            action: The action being performed.
            log_request: Whether to log the request.
            log_response: Whether to log the response.
            log_on_error: Whether to log on error.
            error_on_not_found: Whether to raise an error if the resource is not found.
            operation: The githubkit coroutine function performing the request.

        Raises:
            ResourceNotFoundError: If the resource is not found and error_on_not_found is True.
            ForbiddenError: If the token lacks the scopes for the request.
            RequestError: If the request fails for any other reason.
        """

        request_logger, response_logger, error_logger = self._get_loggers(
            log_request=log_request, log_response=log_response, log_on_error=log_on_error
        )

        operation_name: str = getattr(operation, "__name__", repr(operation))

        request_logger(f"Performing {action} using {operation_name} with kwargs {_redact(request_args)}")

        try:
            response: GitHubKitResponse[Any] = await operation(**request_args)
        except GitHubKitRequestFailed as e:
            if e.response.status_code == NOT_FOUND_ERROR:
                if error_on_not_found:
                    raise ResourceNotFoundError(action=action, resource=e.request.url.path) from e

                return None

            if e.response.status_code == FORBIDDEN_ERROR:
                error_logger(f"Forbidden performing {action} using {operation_name}: {e}")

                raise ForbiddenError(action=action, resource=e.request.url.path) from e

            error_logger(f"RequestFailed error performing {action} using {operation_name} with kwargs {_redact(request_args)}: {e}")

            raise RequestError(action=action, message=str(e)) from e
        except GitHubKitGitHubException as e:
            error_logger(f"Error performing {action} using {operation_name} with kwargs {_redact(request_args)}: {e}")

            raise RequestError(action=action, message=str(e)) from e

        response_logger(f"Completed {action} using {operation_name} with status {response.status_code}")

        return response

    async def _perform_raw_request(
        self,
        action: str,
        http_method: str,
        url: str,
        error_on_not_found: bool = True,
        headers: dict[str, str] | None = None,
        json: Any | None = None,  # pyright: ignore[reportAny]
        params: dict[str, Any] | None = None,
    ) -> GitHubKitResponse[Any] | None:
        """Perform a request against an endpoint addressed by id, which githubkit has no typed operation for."""

        request_args: dict[str, Any] = {"method": http_method, "url": url}

        if headers:
            request_args["headers"] = headers
        if json is not None:
            request_args["json"] = json
        if params:
            request_args["params"] = params

        return await self._perform_request(
            action,
            error_on_not_found=error_on_not_found,
            operation=self.githubkit_client.arequest,
            **request_args,
        )

    # Organizations

    async def get_organization(self, organization_id: int, no_cache: bool = False) -> RemoteRepresentation:
        """Get the remote representation of an organization."""

        response = await self._perform_raw_request(
            action="Get organization",
            http_method="GET",
            url=f"/organizations/{organization_id}",
            headers=NO_CACHE_HEADERS if no_cache else None,
        )

        return _require(response, action="Get organization")

    async def is_organization_member(self, organization_id: int, username: str) -> bool:
        response = await self._perform_raw_request(
            action="Check organization membership",
            http_method="GET",
            url=f"/organizations/{organization_id}/members/{username}",
            error_on_not_found=False,
        )

        return response is not None and response.status_code == NO_CONTENT

    @overload
    async def get_organization_membership(
        self, organization_id: int, username: str, error_on_not_found: Literal[True]
    ) -> Membership: ...

    @overload
    async def get_organization_membership(
        self, organization_id: int, username: str, error_on_not_found: Literal[False] = False
    ) -> Membership | None: ...

    async def get_organization_membership(self, organization_id: int, username: str, error_on_not_found: bool = False) -> Membership | None:
        """Get the membership of a user in an organization."""

        if response := await self._perform_raw_request(
            action="Get organization membership",
            http_method="GET",
            url=f"/organizations/{organization_id}/memberships/{username}",
            error_on_not_found=error_on_not_found,
        ):
            return Membership.from_representation(extract_representation(response))

        return None

    async def set_organization_membership(self, organization_id: int, username: str, role: str = "member") -> Membership:
        """Invite a user to the organization, or update the role of an existing member."""

        response = await self._perform_raw_request(
            action="Set organization membership",
            http_method="PUT",
            url=f"/organizations/{organization_id}/memberships/{username}",
            json={"role": role},
        )

        return Membership.from_representation(_require(response, action="Set organization membership"))

    async def list_organization_members(self, organization_id: int, **params: Any) -> list[RemoteRepresentation]:  # pyright: ignore[reportAny]
        response = await self._perform_raw_request(
            action="List organization members",
            http_method="GET",
            url=f"/organizations/{organization_id}/members",
            params=params,
        )

        return _require(response, action="List organization members")

    async def remove_organization_member(self, organization_id: int, username: str) -> bool:
        response = await self._perform_raw_request(
            action="Remove organization member",
            http_method="DELETE",
            url=f"/organizations/{organization_id}/members/{username}",
        )

        return response is not None and response.status_code == NO_CONTENT

    async def create_organization_repository(self, organization_id: int, name: str, **options: Any) -> RemoteRepresentation:  # pyright: ignore[reportAny]
        """Create a repository owned by the organization."""

        response = await self._perform_raw_request(
            action="Create repository",
            http_method="POST",
            url=f"/organizations/{organization_id}/repos",
            json={"name": name, **options},
        )

        return _require(response, action="Create repository")

    async def create_team(self, organization_id: int, name: str, description: str, permission: str = "push") -> RemoteRepresentation:
        response = await self._perform_raw_request(
            action="Create team",
            http_method="POST",
            url=f"/organizations/{organization_id}/teams",
            json={"name": name, "description": description, "permission": permission},
        )

        return _require(response, action="Create team")

    async def delete_team(self, team_id: int) -> bool:
        response = await self._perform_request(
            action="Delete team",
            error_on_not_found=True,
            operation=self.githubkit_client.rest.teams.async_delete_legacy,
            team_id=team_id,
        )

        return response.status_code == NO_CONTENT

    # Repositories

    async def get_repository(self, repository_id: int, no_cache: bool = False) -> RemoteRepresentation:
        response = await self._perform_raw_request(
            action="Get repository",
            http_method="GET",
            url=f"/repositories/{repository_id}",
            headers=NO_CACHE_HEADERS if no_cache else None,
        )

        return _require(response, action="Get repository")

    async def delete_repository(self, repository_id: int) -> bool:
        response = await self._perform_raw_request(
            action="Delete repository",
            http_method="DELETE",
            url=f"/repositories/{repository_id}",
        )

        return response is not None and response.status_code == NO_CONTENT

    async def add_collaborator(self, repository_id: int, username: str, permission: str = "push") -> bool:
        """Add a collaborator to a repository. GitHub answers 201 for a new invitation and 204 for an existing collaborator."""

        response = await self._perform_raw_request(
            action="Add collaborator",
            http_method="PUT",
            url=f"/repositories/{repository_id}/collaborators/{username}",
            json={"permission": permission},
        )

        return response is not None and response.status_code in (CREATED, NO_CONTENT)

    async def start_source_import(
        self, repository_id: int, vcs_url: str, vcs_username: str, vcs_password: str, vcs: str = "git"
    ) -> RemoteRepresentation:
        """Start importing version control content from `vcs_url` into the repository."""

        response = await self._perform_raw_request(
            action="Start source import",
            http_method="PUT",
            url=f"/repositories/{repository_id}/import",
            headers=SOURCE_IMPORT_PREVIEW_HEADERS,
            json={"vcs": vcs, "vcs_url": vcs_url, "vcs_username": vcs_username, "vcs_password": vcs_password},
        )

        return _require(response, action="Start source import")

    # Teams

    async def get_team(self, team_id: int) -> RemoteRepresentation:
        response = await self._perform_request(
            action="Get team",
            error_on_not_found=True,
            operation=self.githubkit_client.rest.teams.async_get_legacy,
            team_id=team_id,
        )

        return extract_representation(response)

    async def add_team_membership(self, team_id: int, username: str) -> Membership:
        response = await self._perform_request(
            action="Add team membership",
            error_on_not_found=True,
            operation=self.githubkit_client.rest.teams.async_add_or_update_membership_for_user_legacy,
            team_id=team_id,
            username=username,
        )

        return Membership.from_representation(extract_representation(response))

    async def remove_team_membership(self, team_id: int, username: str) -> bool:
        response = await self._perform_request(
            action="Remove team membership",
            error_on_not_found=True,
            operation=self.githubkit_client.rest.teams.async_remove_membership_for_user_legacy,
            team_id=team_id,
            username=username,
        )

        return response.status_code == NO_CONTENT

    async def add_team_repository(self, team_id: int, full_name: str, permission: str = "push") -> bool:
        owner, repo = split_full_name(full_name)

        response = await self._perform_request(
            action="Add team repository",
            error_on_not_found=True,
            operation=self.githubkit_client.rest.teams.async_add_or_update_repo_permissions_legacy,
            team_id=team_id,
            owner=owner,
            repo=repo,
            permission=permission,
        )

        return response.status_code == NO_CONTENT

    async def is_team_repository(self, team_id: int, full_name: str) -> bool:
        owner, repo = split_full_name(full_name)

        response = await self._perform_request(
            action="Check team repository",
            error_on_not_found=False,
            operation=self.githubkit_client.rest.teams.async_check_permissions_for_repo_legacy,
            team_id=team_id,
            owner=owner,
            repo=repo,
        )

        return response is not None

    # Users

    async def get_user(self, user_id: int, no_cache: bool = False) -> RemoteRepresentation:
        response = await self._perform_raw_request(
            action="Get user",
            http_method="GET",
            url=f"/user/{user_id}",
            headers=NO_CACHE_HEADERS if no_cache else None,
        )

        return _require(response, action="Get user")

    async def list_organization_memberships(self, state: str = "active") -> list[Membership]:
        """List the organization memberships of the authenticated user, bypassing any cache."""

        response = await self._perform_request(
            action="List organization memberships",
            error_on_not_found=True,
            operation=self.githubkit_client.rest.orgs.async_list_memberships_for_authenticated_user,
            state=state,
            headers=NO_CACHE_HEADERS,
        )

        return [Membership.from_representation(membership) for membership in extract_representation(response)]

    async def get_authenticated_organization_membership(self, organization_login: str) -> Membership:
        response = await self._perform_request(
            action="Get authenticated organization membership",
            error_on_not_found=True,
            operation=self.githubkit_client.rest.orgs.async_get_membership_for_authenticated_user,
            org=organization_login,
        )

        return Membership.from_representation(extract_representation(response))

    async def activate_organization_membership(self, organization_login: str) -> Membership:
        response = await self._perform_request(
            action="Activate organization membership",
            error_on_not_found=True,
            operation=self.githubkit_client.rest.orgs.async_update_membership_for_authenticated_user,
            org=organization_login,
            state="active",
        )

        return Membership.from_representation(extract_representation(response))

    async def get_token_scopes(self) -> list[str]:
        """Get the OAuth scopes granted to the access token, from the scopes header GitHub returns on every request."""

        response = await self._perform_raw_request(
            action="Get token scopes",
            http_method="GET",
            url="/user",
            error_on_not_found=False,
            headers=NO_CACHE_HEADERS,
        )

        if response is None:
            return []

        scopes_header: str = response.headers.get(OAUTH_SCOPES_HEADER, "")

        return [scope.strip() for scope in scopes_header.split(",") if scope.strip()]

    async def check_application_authorization(self) -> bool:
        """Check that the access token is still authorized for the OAuth application."""

        if self.application_githubkit_client is None or not self.client_id:
            msg = "GITHUB_CLIENT_ID and GITHUB_CLIENT_SECRET must be set to check an access token"
            raise ClientError(msg)

        if not self.access_token:
            msg = "The client has no access token to check"
            raise ClientError(msg)

        response = await self._perform_request(
            action="Check application authorization",
            error_on_not_found=False,
            operation=self.application_githubkit_client.rest.apps.async_check_token,
            client_id=self.client_id,
            access_token=self.access_token,
            headers=NO_CACHE_HEADERS,
        )

        return response is not None


def _require(response: GitHubKitResponse[Any] | None, action: str) -> Any:  # pyright: ignore[reportAny]
    if response is None:
        raise ResourceNotFoundError(action=action)

    return extract_representation(response)


SECRET_REQUEST_ARGS: set[str] = {"vcs_password", "access_token"}


def _redact(request_args: dict[str, Any]) -> dict[str, Any]:
    """Hide credentials before request arguments are logged."""

    redacted: dict[str, Any] = {}

    for key, value in request_args.items():  # pyright: ignore[reportAny]
        if key in SECRET_REQUEST_ARGS:
            redacted[key] = "***"
        elif key == "json" and isinstance(value, dict):
            redacted[key] = _redact(value)  # pyright: ignore[reportUnknownArgumentType]
        else:
            redacted[key] = value

    return redacted
