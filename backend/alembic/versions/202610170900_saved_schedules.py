"""Saved schedules and tasks."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "202610170900"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "saved_schedules",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("total_tasks", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("completed_tasks", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "metadata",
            sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_modified", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_saved_schedules_date", "saved_schedules", ["date"], unique=False)

    op.create_table(
        "saved_tasks",
        sa.Column("id", sa.String(length=96), primary_key=True, nullable=False),
        sa.Column("schedule_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["schedule_id"], ["saved_schedules.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_saved_tasks_schedule_id", "saved_tasks", ["schedule_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_saved_tasks_schedule_id", table_name="saved_tasks")
    op.drop_table("saved_tasks")
    op.drop_index("ix_saved_schedules_date", table_name="saved_schedules")
    op.drop_table("saved_schedules")
