"""Create tasks table

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

Creates `tasks` (see modulith/modules/tasks/models.py) and the created_at
DESC index used by every list query. Column types are dialect-neutral.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tasks",
        # UUID4 string, generated by the application on insert
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column(
            "completed",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(
        "idx_tasks_created_at",
        "tasks",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Destructive: drops every task."""
    op.drop_index("idx_tasks_created_at", table_name="tasks")
    op.drop_table("tasks")
