import re
import uuid
from datetime import datetime, UTC

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


def utcnow() -> datetime:
    return datetime.now(UTC)


def pluralize(name: str) -> str:
    """
    CamelCase class name to plural snake_case table name.
    ``ProjectMember`` becomes ``project_members``, ``Reply`` becomes ``replies``.
    """
    snake_case = re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()
    if snake_case.endswith("y") and snake_case[-2] not in "aeiou":
        return snake_case[:-1] + "ies"
    if snake_case.endswith(("s", "x", "z", "ch", "sh")):
        return snake_case + "es"
    return snake_case + "s"


class Base(DeclarativeBase):
    """
    Declarative base for Taskflow models.
    Every table gets a UUID primary key and UTC creation/update timestamps.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return pluralize(cls.__name__)

    # Portable UUID type: native on PostgreSQL, CHAR(32) elsewhere
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"
