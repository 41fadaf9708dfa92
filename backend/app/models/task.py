"""
CrudCamp Backend — Task SQLAlchemy Model
==========================================

What:  ORM model representing the `tasks` table, the course's CRUD resource.
Who:   Used by TaskService for all task operations and by Alembic.

Query Patterns:
    - List a user's tasks, newest first:
      SELECT ... WHERE owner_id = :uid ORDER BY created_at DESC LIMIT :n OFFSET :o
      → idx_tasks_owner_created (owner_id, created_at)
    - Fetch one task for its owner:
      SELECT ... WHERE id = :id AND owner_id = :uid
      → primary key lookup, owner filter applied on the row
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import utcnow

if TYPE_CHECKING:
    from app.models.user import User


class Task(Base):
    """A to-do item belonging to exactly one user."""

    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # ON DELETE CASCADE: removing a user removes their tasks at the DB level
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    owner: Mapped["User"] = relationship(back_populates="tasks", lazy="noload")

    __table_args__ = (
        Index("idx_tasks_owner_created", "owner_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Task(id={self.id}, owner_id={self.owner_id}, "
            f"completed={self.completed})>"
        )
