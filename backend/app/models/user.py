"""
CrudCamp Backend — User SQLAlchemy Model
==========================================

What:  ORM model representing the `users` table.
Who:   Used by AuthService for registration, login, and token resolution,
       and by Alembic for schema management.

Table Design:
    - UUID primary key: non-sequential, cannot be enumerated
    - email: unique, always stored lowercased (normalized by the DTO)
    - password_hash: bcrypt output ($2b$...), never the plain password
    - is_active: soft switch; inactive users cannot log in or use tokens
    - created_at / updated_at: UTC with timezone
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.task import Task


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A registered account.

    Lifecycle:
        1. Created by POST /api/auth/register (password hashed with bcrypt)
        2. Exchanges credentials for a JWT at POST /api/auth/login
        3. Owns zero or more tasks; deleting the user cascades to them
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Login identifier, stored lowercased",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the user's password",
    )

    display_name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        default=None,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
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

    tasks: Mapped[List["Task"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    def __repr__(self) -> str:
        # email is fine here; password_hash never goes into a repr
        return f"<User(id={self.id}, email='{self.email}', active={self.is_active})>"
