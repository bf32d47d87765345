import uuid
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import String, Text, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.project_member import ProjectMember
    from app.models.task import Task
    from app.models.user import User


class Project(Base):
    """
    Project model.
    Owns its tasks and memberships; the creator is fixed at creation and
    always holds the owner role.
    """

    name: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Project name"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="Project description"
    )

    created_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Project creator (owner); immutable",
    )

    # Relationships
    creator: Mapped["User"] = relationship("User", foreign_keys=[created_by])

    members: Mapped[List["ProjectMember"]] = relationship(
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
    )

    tasks: Mapped[List["Task"]] = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("idx_project_creator", "created_by", "created_at"),)

    def is_creator(self, user_id: uuid.UUID) -> bool:
        """Check if user created this project"""
        return self.created_by == user_id

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name={self.name})>"
