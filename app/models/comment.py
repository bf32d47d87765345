import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Text, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.task import Task
    from app.models.user import User


class Comment(Base):
    """
    Comments on tasks for collaboration and discussion.
    """

    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Task this comment belongs to",
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="User who wrote this comment",
    )

    message: Mapped[str] = mapped_column(Text, nullable=False, comment="Comment body")

    # Relationships
    task: Mapped["Task"] = relationship("Task", back_populates="comments")
    author: Mapped["User"] = relationship("User")

    __table_args__ = (
        Index("idx_comment_task", "task_id", "created_at"),
        Index("idx_comment_author", "user_id"),
    )

    def is_authored_by(self, user_id: uuid.UUID) -> bool:
        return self.user_id == user_id
