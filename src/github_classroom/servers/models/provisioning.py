from typing import Literal, Self

from pydantic import BaseModel, Field

from github_classroom.records.models import AssignmentRepo, GroupAssignmentRepo


class SubmissionRepository(BaseModel):
    """A submission repository provisioned on GitHub and recorded in the classroom database."""

    kind: Literal["assignment", "group_assignment"] = Field(description="Whether the repository belongs to a student or a group.")
    id: int = Field(description="The id of the submission repository record.")
    github_repo_id: int = Field(description="The id of the repository on GitHub.")
    assignment_title: str = Field(description="The title of the assignment the repository was provisioned for.")

    @classmethod
    def from_assignment_repo(cls, assignment_repo: AssignmentRepo) -> Self:
        return cls(
            kind="assignment",
            id=assignment_repo.id,
            github_repo_id=assignment_repo.github_repo_id,
            assignment_title=assignment_repo.assignment_title,
        )

    @classmethod
    def from_group_assignment_repo(cls, group_assignment_repo: GroupAssignmentRepo) -> Self:
        return cls(
            kind="group_assignment",
            id=group_assignment_repo.id,
            github_repo_id=group_assignment_repo.github_repo_id,
            assignment_title=group_assignment_repo.group_assignment_title,
        )
