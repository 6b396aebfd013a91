from github_classroom.builders.assignment_repo_builder import AssignmentRepoBuilder
from github_classroom.builders.base import TeardownReport
from github_classroom.builders.group_assignment_repo_builder import GroupAssignmentRepoBuilder
from github_classroom.builders.group_builder import GroupBuilder

__all__ = [
    "AssignmentRepoBuilder",
    "GroupAssignmentRepoBuilder",
    "GroupBuilder",
    "TeardownReport",
]
