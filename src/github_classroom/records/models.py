"""SQLAlchemy models mapping classroom objects to the GitHub resources provisioned for them."""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, Column, DateTime, ForeignKey, Integer, String, Table, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, validates

MAX_GROUP_TITLE_LENGTH = 39


class Base(DeclarativeBase):
    pass


groups_repo_accesses = Table(
    "groups_repo_accesses",
    Base.metadata,
    Column("group_id", Integer, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
    Column("repo_access_id", Integer, ForeignKey("repo_accesses.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    uid: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False, index=True)
    token: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    site_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @property
    def access_token(self) -> str:
        return self.token

    @property
    def is_staff(self) -> bool:
        return self.site_admin

    def __repr__(self) -> str:
        return f"<User(id={self.id}, uid={self.uid})>"


class Organization(Base):
    """An organization on GitHub that classrooms provision into. Soft deleted organizations keep their rows."""

    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    github_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class Assignment(Base):
    __tablename__ = "assignments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    public_repo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    starter_code_repo_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)
    creator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    organization: Mapped[Organization] = relationship(lazy="selectin")
    creator: Mapped[User] = relationship(lazy="selectin")

    @property
    def is_private(self) -> bool:
        return not self.public_repo


class Grouping(Base):
    """A set of groups students pick from when accepting a group assignment."""

    __tablename__ = "groupings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)

    organization: Mapped[Organization] = relationship(lazy="selectin")


class GroupAssignment(Base):
    __tablename__ = "group_assignments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    public_repo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    starter_code_repo_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)
    creator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    grouping_id: Mapped[int] = mapped_column(ForeignKey("groupings.id"), nullable=False)

    organization: Mapped[Organization] = relationship(lazy="selectin")
    creator: Mapped[User] = relationship(lazy="selectin")
    grouping: Mapped[Grouping] = relationship(lazy="selectin")

    @property
    def is_private(self) -> bool:
        return not self.public_repo


class RepoAccess(Base):
    """A user's access to the repositories of one organization."""

    __tablename__ = "repo_accesses"
    __table_args__ = (UniqueConstraint("user_id", "organization_id", name="uq_repo_accesses_user_organization"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)

    user: Mapped[User] = relationship(lazy="selectin")
    organization: Mapped[Organization] = relationship(lazy="selectin")


class Group(Base):
    """A group of students backed by a GitHub team."""

    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(MAX_GROUP_TITLE_LENGTH), nullable=False)
    github_team_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False, index=True)
    grouping_id: Mapped[int] = mapped_column(ForeignKey("groupings.id"), nullable=False, index=True)

    grouping: Mapped[Grouping] = relationship(lazy="selectin")
    repo_accesses: Mapped[list[RepoAccess]] = relationship(secondary=groups_repo_accesses, lazy="selectin")

    @validates("title")
    def validate_title(self, _key: str, title: str) -> str:
        if not title:
            msg = "Group title must be present"
            raise ValueError(msg)
        if len(title) > MAX_GROUP_TITLE_LENGTH:
            msg = f"Group title must be at most {MAX_GROUP_TITLE_LENGTH} characters"
            raise ValueError(msg)
        return title

    @property
    def organization(self) -> Organization:
        return self.grouping.organization


class AssignmentRepo(Base):
    """A student's submission repository for an assignment."""

    __tablename__ = "assignment_repos"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    github_repo_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False, index=True)
    assignment_id: Mapped[int] = mapped_column(ForeignKey("assignments.id"), nullable=False, index=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    repo_access_id: Mapped[int | None] = mapped_column(ForeignKey("repo_accesses.id"), nullable=True)

    assignment: Mapped[Assignment] = relationship(lazy="selectin")
    user: Mapped[User | None] = relationship(lazy="selectin")
    repo_access: Mapped[RepoAccess | None] = relationship(lazy="selectin")

    @property
    def github_team_id(self) -> int | None:
        # A student submission has no team of its own.
        return None

    @property
    def organization(self) -> Organization:
        return self.assignment.organization

    @property
    def assignment_title(self) -> str:
        return self.assignment.title

    @property
    def creator(self) -> User:
        return self.assignment.creator

    @property
    def is_private(self) -> bool:
        return self.assignment.is_private

    @property
    def starter_code_repo_id(self) -> int | None:
        return self.assignment.starter_code_repo_id


class GroupAssignmentRepo(Base):
    """A group's submission repository for a group assignment."""

    __tablename__ = "group_assignment_repos"
    __table_args__ = (UniqueConstraint("group_id", "group_assignment_id", name="uq_group_assignment_repos_group_assignment"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    github_repo_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False, index=True)
    group_assignment_id: Mapped[int] = mapped_column(ForeignKey("group_assignments.id"), nullable=False, index=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id"), nullable=False, index=True)

    group_assignment: Mapped[GroupAssignment] = relationship(lazy="selectin")
    group: Mapped[Group] = relationship(lazy="selectin")

    @property
    def organization(self) -> Organization:
        return self.group_assignment.organization

    @property
    def repo_accesses(self) -> list[RepoAccess]:
        return self.group.repo_accesses

    @property
    def group_assignment_title(self) -> str:
        return self.group_assignment.title

    @property
    def creator(self) -> User:
        return self.group_assignment.creator

    @property
    def is_private(self) -> bool:
        return self.group_assignment.is_private

    @property
    def starter_code_repo_id(self) -> int | None:
        return self.group_assignment.starter_code_repo_id

    @property
    def github_team_id(self) -> int:
        return self.group.github_team_id
