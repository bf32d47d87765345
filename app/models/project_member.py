import uuid
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Index, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.project import Project
    from app.models.user import User


class ProjectRole(str, Enum):
    """Roles within a specific project"""

    OWNER = "owner"  # Project creator, full control
    MANAGER = "manager"  # Can manage tasks and project settings
    MEMBER = "member"  # Read access, writes only to assigned tasks


class ProjectMember(Base):
    """
    Project membership with its role.
    Exactly one row per (project, user).
    """

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        comment="Project ID",
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="User ID",
    )

    role: Mapped[ProjectRole] = mapped_column(
        default=ProjectRole.MEMBER,
        nullable=False,
        comment="Role within this project",
    )

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="members")
    user: Mapped["User"] = relationship(
        "User", back_populates="memberships", foreign_keys=[user_id]
    )

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="unique_project_member"),
        Index("idx_project_members", "project_id", "role"),
        Index("idx_user_projects", "user_id", "role"),
    )

    @property
    def can_manage_tasks(self) -> bool:
        """Check if member can create and reassign tasks"""
        return self.role in [ProjectRole.OWNER, ProjectRole.MANAGER]

    def __repr__(self) -> str:
        return f"<ProjectMember(project_id={self.project_id}, user_id={self.user_id}, role={self.role})>"
