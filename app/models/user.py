from enum import Enum
from typing import List, TYPE_CHECKING

from sqlalchemy import String, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.notification import Notification
    from app.models.project_member import ProjectMember


class UserRole(str, Enum):
    """Global user roles"""

    ADMIN = "admin"
    USER = "user"


class User(Base):
    """
    User model representing application users.
    Identity and credentials are managed by the auth provider; this table
    only keeps what project and task rules need.
    """

    name: Mapped[str] = mapped_column(
        String(191), nullable=False, comment="User's display name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User's email address",
    )

    role: Mapped[UserRole] = mapped_column(
        default=UserRole.USER,
        nullable=False,
        comment="Global role; admin may delete any project",
    )

    # Relationships
    memberships: Mapped[List["ProjectMember"]] = relationship(
        "ProjectMember",
        back_populates="user",
        cascade="all, delete-orphan",
        foreign_keys="ProjectMember.user_id",
    )

    notifications: Mapped[List["Notification"]] = relationship(
        "Notification",
        back_populates="recipient",
        cascade="all, delete-orphan",
        order_by="Notification.created_at.desc()",
    )

    __table_args__ = (Index("idx_user_role", "role"),)

    @property
    def is_admin(self) -> bool:
        """Check if user holds the global admin role"""
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
