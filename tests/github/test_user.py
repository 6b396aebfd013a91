import pytest
from inline_snapshot import snapshot

from github_classroom.clients.errors.github import ForbiddenError
from github_classroom.github import GitHubOrganization, GitHubUser
from tests.conftest import CREATOR_LOGIN, CREATOR_TOKEN, CREATOR_UID, ORGANIZATION_GITHUB_ID, dump_for_snapshot, dump_list_for_snapshot
from tests.fakes import FakeGitHubClassroomClient


@pytest.fixture
def github_creator(github_client: FakeGitHubClassroomClient) -> GitHubUser:
    return GitHubUser(client=github_client, id=CREATOR_UID)


@pytest.fixture
def github_organization(github_client: FakeGitHubClassroomClient) -> GitHubOrganization:
    return GitHubOrganization(client=github_client, id=ORGANIZATION_GITHUB_ID)


async def test_login(github_creator: GitHubUser):
    assert await github_creator.login() == CREATOR_LOGIN


class TestOrganizationMemberships:
    async def test_accept_pending_invitation(
        self, github_creator: GitHubUser, github_organization: GitHubOrganization, github_client: FakeGitHubClassroomClient
    ):
        github_client.add_membership(ORGANIZATION_GITHUB_ID, CREATOR_LOGIN, role="admin", state="pending")

        membership = await github_creator.accept_organization_membership(github_organization)

        assert dump_for_snapshot(membership, exclude_keys=["url"]) == snapshot({"role": "admin", "state": "active"})
        assert github_client.mutations == ["activate_organization_membership"]
        assert await github_organization.is_active_admin(github_creator)

    async def test_accept_existing_membership(
        self, github_creator: GitHubUser, github_organization: GitHubOrganization, github_client: FakeGitHubClassroomClient
    ):
        github_client.add_membership(ORGANIZATION_GITHUB_ID, CREATOR_LOGIN, role="member", state="active")

        membership = await github_creator.accept_organization_membership(github_organization)

        assert dump_for_snapshot(membership, exclude_keys=["url"]) == snapshot({"role": "member", "state": "active"})
        assert github_client.mutations == []

    async def test_active_organization_memberships(self, github_creator: GitHubUser, github_client: FakeGitHubClassroomClient):
        github_client.add_organization(1, login="hoth-rebels")
        github_client.add_membership(ORGANIZATION_GITHUB_ID, CREATOR_LOGIN, role="admin", state="active")
        github_client.add_membership(1, CREATOR_LOGIN, role="member", state="pending")

        memberships = await github_creator.active_organization_memberships()

        assert dump_list_for_snapshot(memberships, exclude_keys=["url"]) == snapshot([{"role": "admin", "state": "active"}])


class TestAccessToken:
    async def test_is_authorized_access_token(self, github_creator: GitHubUser, github_client: FakeGitHubClassroomClient):
        assert not await github_creator.is_authorized_access_token()

        github_client.authorized_tokens.add(CREATOR_TOKEN)

        assert await github_creator.is_authorized_access_token()

    async def test_client_scopes(self, github_creator: GitHubUser, github_client: FakeGitHubClassroomClient):
        github_client.token_scopes = ["admin:org", "delete_repo", "repo", "user:email"]

        assert await github_creator.client_scopes() == snapshot(["admin:org", "delete_repo", "repo", "user:email"])

    async def test_client_scopes_forbidden(self, github_creator: GitHubUser, github_client: FakeGitHubClassroomClient):
        github_client.fail_on("get_token_scopes", ForbiddenError(action="Get token scopes", resource="/user"))

        assert await github_creator.client_scopes() == []
