from github_classroom.builders.errors import RepositoryLimitReachedError
from github_classroom.clients.models.github import OrganizationPlan
from github_classroom.github.organization import GitHubOrganization


async def verify_organization_has_private_repos_available(github_organization: GitHubOrganization) -> OrganizationPlan:
    """Make sure the organization can own one more private repository.

    Raises:
        RepositoryLimitReachedError: If the organization already owns as many private repositories as its plan allows.
        PlanUnavailableError: If the token cannot read the plan.
    """

    plan: OrganizationPlan = await github_organization.plan()

    if plan.has_private_repos_available:
        return plan

    raise RepositoryLimitReachedError(private_repos=plan.private_repos)
