"""Initial schema: admin settings, daily traffic, content items.

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "admin_settings",
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )

    op.create_table(
        "daily_metrics",
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("visits", sa.Integer(), nullable=False),
        sa.Column("pageviews", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("date"),
    )
    op.create_index("ix_daily_metrics_created_at", "daily_metrics", ["created_at"], unique=False)

    op.create_table(
        "content_items",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("source", sa.String(length=500), nullable=True),
        sa.Column("published", sa.Boolean(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False),
        sa.Column("likes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_content_items_author", "content_items", ["author"], unique=False)
    op.create_index("ix_content_items_category", "content_items", ["category"], unique=False)
    op.create_index("ix_content_items_created_at", "content_items", ["created_at"], unique=False)
    op.create_index("ix_content_items_published", "content_items", ["published"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_content_items_published", table_name="content_items")
    op.drop_index("ix_content_items_created_at", table_name="content_items")
    op.drop_index("ix_content_items_category", table_name="content_items")
    op.drop_index("ix_content_items_author", table_name="content_items")
    op.drop_table("content_items")
    op.drop_index("ix_daily_metrics_created_at", table_name="daily_metrics")
    op.drop_table("daily_metrics")
    op.drop_table("admin_settings")
