import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, DateTime, JSON, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, utcnow

if TYPE_CHECKING:
    from app.models.user import User


class Notification(Base):
    """
    Inbox entry for a single recipient.
    Payload shape depends on the kind (see app.core.notifications.events).
    """

    recipient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="User who receives this notification",
    )

    kind: Mapped[str] = mapped_column(
        String(50), nullable=False, comment="Notification kind tag"
    )

    data: Mapped[dict] = mapped_column(
        JSON, default=dict, nullable=False, comment="Notification payload"
    )

    read_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="When it was read"
    )

    # Relationships
    recipient: Mapped["User"] = relationship("User", back_populates="notifications")

    __table_args__ = (
        Index("idx_notification_recipient", "recipient_id", "created_at"),
        Index("idx_notification_unread", "recipient_id", "read_at"),
    )

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def mark_as_read(self) -> None:
        if self.read_at is None:
            self.read_at = utcnow()

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, recipient_id={self.recipient_id}, kind={self.kind})>"
