import uuid
from datetime import date, datetime
from typing import Optional, List, Set, TYPE_CHECKING
from enum import Enum

from sqlalchemy import (
    String,
    Date,
    DateTime,
    Text,
    Index,
    ForeignKey,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, utcnow

if TYPE_CHECKING:
    from app.models.comment import Comment
    from app.models.project import Project
    from app.models.user import User


class TaskStatus(str, Enum):
    """Task status options"""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, Enum):
    """Task priority levels"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(Base):
    """
    Task model.
    Belongs to exactly one project for its whole lifetime. Status and
    priority are independent attributes; any value may follow any other.
    """

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Project this task belongs to",
    )

    title: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Task title"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="Detailed task description"
    )

    status: Mapped[TaskStatus] = mapped_column(
        default=TaskStatus.TODO,
        nullable=False,
        index=True,
        comment="Current task status",
    )

    priority: Mapped[TaskPriority] = mapped_column(
        default=TaskPriority.LOW,
        nullable=False,
        index=True,
        comment="Task priority level",
    )

    due_date: Mapped[Optional[date]] = mapped_column(
        Date, nullable=True, comment="Task due date"
    )

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="tasks")

    assignees: Mapped[List["TaskAssignee"]] = relationship(
        "TaskAssignee",
        back_populates="task",
        cascade="all, delete-orphan",
    )

    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Comment.created_at.desc()",
    )

    __table_args__ = (
        Index("idx_task_project_status", "project_id", "status"),
        Index("idx_task_project_priority", "project_id", "priority"),
    )

    @property
    def assignee_ids(self) -> Set[uuid.UUID]:
        """IDs of users currently assigned to this task"""
        return {assignment.user_id for assignment in self.assignees}

    @property
    def assigned_users(self) -> List["User"]:
        """Users currently assigned to this task"""
        return [assignment.user for assignment in self.assignees]

    def is_assigned(self, user_id: uuid.UUID) -> bool:
        """Check if user is assigned to this task"""
        return any(assignment.user_id == user_id for assignment in self.assignees)

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title[:30]}, status={self.status})>"


class TaskAssignee(Base):
    """
    Junction table for task assignments (many-to-many relationship).
    Carries no role; project roles live on ProjectMember.
    """

    __tablename__ = "task_assignees"

    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        comment="Task ID",
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Assigned user ID",
    )

    assigned_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="User who made this assignment",
    )

    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        comment="When user was assigned",
    )

    # Relationships
    task: Mapped["Task"] = relationship("Task", back_populates="assignees")
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        UniqueConstraint("task_id", "user_id", name="unique_task_assignee"),
        Index("idx_task_assignee_user", "user_id"),
    )
