from github_classroom.clients.errors.github import ClientError

EDUCATION_DISCOUNT_URL = "https://education.github.com/discount"


class BuilderError(ClientError):
    """A provisioning workflow failed."""


class RepositoryLimitReachedError(BuilderError):
    """The organization has used every private repository its plan allows."""

    def __init__(self, private_repos: int):
        repository_noun = "repository" if private_repos == 1 else "repositories"
        super().__init__(
            message=(
                f"Cannot make this private assignment, your limit of {private_repos} {repository_noun} has been reached. "
                f"You can request a larger plan for free at {EDUCATION_DISCOUNT_URL}"
            )
        )
        self.private_repos: int = private_repos


class RepositoryCreationFailedError(BuilderError):
    """The submission repository could not be provisioned and was rolled back."""

    def __init__(self, message: str = "Assignment failed to be created", extra_info: dict[str, str | None] | None = None):
        super().__init__(message=message, extra_info=extra_info)


class TeamCreationFailedError(BuilderError):
    """The team for a group could not be provisioned and was rolled back."""

    def __init__(self, message: str = "Group failed to be created", extra_info: dict[str, str | None] | None = None):
        super().__init__(message=message, extra_info=extra_info)
