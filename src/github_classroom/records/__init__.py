from github_classroom.records.models import (
    Assignment,
    AssignmentRepo,
    Base,
    Group,
    GroupAssignment,
    GroupAssignmentRepo,
    Grouping,
    Organization,
    RepoAccess,
    User,
)

__all__ = [
    "Assignment",
    "AssignmentRepo",
    "Base",
    "Group",
    "GroupAssignment",
    "GroupAssignmentRepo",
    "Grouping",
    "Organization",
    "RepoAccess",
    "User",
]
