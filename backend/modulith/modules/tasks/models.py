"""
Modulith Backend — Task SQLAlchemy Model
=========================================

What:  ORM model representing the `tasks` table.
How:   Inherits from modulith.database.Base; Alembic reads this for migrations
       and the test suite creates the table from the same metadata.
Who:   Used by the tasks repository; never leaves the module as an ORM object
       (the controller serializes it through TaskResponse).

Column types are dialect-neutral so the same model runs on PostgreSQL
(asyncpg) in production and SQLite (aiosqlite) in tests.

Index on created_at DESC:
    Every list query orders by created_at newest first.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, String, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column

from modulith.database import Base


def _new_task_id() -> str:
    return str(uuid.uuid4())


class Task(Base):
    """
    A single to-do item.

    Invariants:
        - id is assigned once at insert and never changes
        - title is never empty (enforced by the create/update DTOs)
        - completed is never NULL
    """

    __tablename__ = "tasks"

    # ── Primary Key ───────────────────────────────────────────────────────
    # Opaque string; any path value is a valid lookup key, so an unknown id
    # is simply "not found"
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=_new_task_id,
    )

    # Unbounded; only emptiness is rejected (by the DTOs)
    title: Mapped[str] = mapped_column(Text, nullable=False)

    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    # Always UTC. Python-side default so the value is known right after flush
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    __table_args__ = (
        Index("idx_tasks_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Task(id={self.id}, title='{self.title}', "
            f"completed={self.completed})>"
        )
