from abc import ABC, abstractmethod
from typing import Any

from github_classroom.clients.errors.github import UnknownOperationError
from github_classroom.clients.github import GitHubClassroomClient
from github_classroom.clients.models.github import RemoteRepresentation


class GitHubResource(ABC):
    """A GitHub resource addressed by its id, acting through an authenticated client.

    Fields that are not modelled explicitly are read from the remote representation with `get_field`. Every lookup
    fetches the resource again, so avoid probing fields in loops.
    """

    client: GitHubClassroomClient
    id: int

    def __init__(self, client: GitHubClassroomClient, id: int):  # noqa: A002
        self.client = client
        self.id = id

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.id == self.id  # pyright: ignore[reportAttributeAccessIssue]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))

    @abstractmethod
    async def fetch(self) -> RemoteRepresentation:
        """Fetch the remote representation of the resource."""

    async def get_field(self, name: str) -> Any:  # pyright: ignore[reportAny]
        representation: RemoteRepresentation = await self.fetch()

        value = representation.get(name)  # pyright: ignore[reportAny]
        if value is None:
            raise UnknownOperationError(name=name, resource_type=type(self).__name__)

        return value  # pyright: ignore[reportAny]

    async def has_field(self, name: str) -> bool:
        representation: RemoteRepresentation = await self.fetch()

        return representation.get(name) is not None
