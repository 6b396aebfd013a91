import re
import unicodedata
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from logging import Logger

from github_classroom.builders.errors import RepositoryCreationFailedError
from github_classroom.clients.errors.github import ClientError
from github_classroom.github.organization import GitHubOrganization
from github_classroom.github.repository import GitHubRepository
from github_classroom.github.user import GitHubUser

REPOSITORY_DESCRIPTION_TEMPLATE = "{name} created by Classroom for GitHub"

MAX_REPOSITORY_NAME_LENGTH = 100

REPOSITORY_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
DISALLOWED_NAME_CHARACTERS = re.compile(r"[^a-z0-9_.-]+")


def slugify(text: str) -> str:
    """Transliterate `text` to ASCII, lowercase it and collapse anything GitHub does not allow in a repository name into
    dashes. Characters without an ASCII form are dropped, so the result can be empty."""

    ascii_text: str = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")

    return DISALLOWED_NAME_CHARACTERS.sub("-", ascii_text.lower()).strip("-")


def build_repository_name(slug: str, suffix: str) -> str:
    """Name a submission repository `{slug}-{suffix}`.

    Raises:
        RepositoryCreationFailedError: If the result is not a name GitHub accepts.
    """

    name = f"{slug}-{suffix}"

    if name in (".", "..") or len(name) > MAX_REPOSITORY_NAME_LENGTH or not REPOSITORY_NAME_PATTERN.match(name):
        raise RepositoryCreationFailedError(message="Invalid repository name", extra_info={"name": name})

    return name


async def create_github_repository(github_organization: GitHubOrganization, slug: str, suffix: str, private: bool) -> GitHubRepository:
    repo_name: str = build_repository_name(slug=slug, suffix=suffix)
    repo_description: str = REPOSITORY_DESCRIPTION_TEMPLATE.format(name=repo_name)

    return await github_organization.create_repository(repo_name, private=private, description=repo_description)


async def silently_destroy_github_repository(submission_repository: GitHubRepository, logger: Logger) -> str | None:
    """Delete the repository, logging instead of raising when GitHub refuses. Returns the failure, if any."""

    try:
        _ = await submission_repository.destroy()
    except ClientError as e:
        logger.warning(f"Could not delete {submission_repository!r}, it is left behind on GitHub: {e}")
        return f"Could not delete repository {submission_repository.id}: {e}"

    return None


@asynccontextmanager
async def delete_github_repository_on_failure(
    submission_repository: GitHubRepository,
    logger: Logger,
    failures: tuple[type[Exception], ...] = (ClientError,),
) -> AsyncIterator[None]:
    """Roll the repository back if the wrapped step fails.

    Raises:
        RepositoryCreationFailedError: Chained from the failure, once the repository has been deleted (best-effort).
    """

    try:
        yield
    except failures as e:
        logger.warning(f"Provisioning {submission_repository!r} failed, deleting it: {e}")

        _ = await silently_destroy_github_repository(submission_repository, logger=logger)

        raise RepositoryCreationFailedError(extra_info={"repository_id": str(submission_repository.id), "cause": str(e)}) from e


async def add_user_as_collaborator_to_submission_repository(
    submission_repository: GitHubRepository, github_user: GitHubUser, logger: Logger
) -> None:
    async with delete_github_repository_on_failure(submission_repository, logger=logger):
        _ = await submission_repository.add_collaborator(github_user)


async def push_starter_code_to(
    submission_repository: GitHubRepository,
    starter_code_repo_id: int | None,
    private: bool,
    creator: GitHubUser,
    logger: Logger,
) -> bool:
    """Import the starter code into a private submission repository. Returns whether an import was started."""

    if not private or starter_code_repo_id is None:
        return False

    starter_code_repository = GitHubRepository(client=creator.client, id=starter_code_repo_id)

    async with delete_github_repository_on_failure(submission_repository, logger=logger):
        _ = await submission_repository.get_starter_code_from(starter_code_repository, creator)

    return True
