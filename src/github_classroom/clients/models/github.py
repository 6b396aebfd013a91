from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

RemoteRepresentation = dict[str, Any]


class Membership(BaseModel):
    """A user's membership in an organization or team."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    role: str = Field(description="The role of the user, for example `admin` or `member`.")
    state: str = Field(description="The state of the membership, `pending` or `active`.")
    url: str | None = Field(default=None, description="The API URL of the membership.")

    @property
    def is_active_admin(self) -> bool:
        return self.role == "admin" and self.state == "active"

    @classmethod
    def from_representation(cls, representation: RemoteRepresentation) -> Self:
        return cls.model_validate(representation)


class OrganizationPlan(BaseModel):
    """The private repository quota of an organization."""

    model_config = ConfigDict(frozen=True)

    owned_private_repos: int = Field(description="The number of private repositories the organization owns.")
    private_repos: int = Field(description="The number of private repositories the plan allows.")

    @property
    def has_private_repos_available(self) -> bool:
        return self.owned_private_repos < self.private_repos

    @classmethod
    def from_representation(cls, representation: RemoteRepresentation) -> Self | None:
        """Build the plan from an organization representation, or return None if the token cannot see it."""

        owned_private_repos = representation.get("owned_private_repos")
        plan = representation.get("plan")

        if owned_private_repos is None or not plan or plan.get("private_repos") is None:
            return None

        return cls(owned_private_repos=owned_private_repos, private_repos=plan["private_repos"])
