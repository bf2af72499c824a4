"""partnerships and sealed messages

Revision ID: 5b2c7e91a4d0
Revises:
Create Date: 2026-10-19 09:12:40.218331

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5b2c7e91a4d0"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create partnership, membership and sealed message tables."""
    op.create_table(
        "partnership",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_a", sa.String(length=128), nullable=False),
        sa.Column("user_b", sa.String(length=128), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("relationship_date", sa.Date(), nullable=True),
        sa.Column("current_streak", sa.Integer(), nullable=False),
        sa.Column("last_streak_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("user_a <> user_b", name="ck_partnership_distinct_users"),
        sa.CheckConstraint("status IN ('pending', 'accepted')", name="ck_partnership_status"),
        sa.CheckConstraint("current_streak >= 0", name="ck_partnership_streak_non_negative"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_partnership_user_a", "partnership", ["user_a"])
    op.create_index("ix_partnership_user_b", "partnership", ["user_b"])

    op.create_table(
        "partnership_member",
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("partnership_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["partnership_id"], ["partnership.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id"),
    )
    op.create_index(
        "ix_partnership_member_partnership_id", "partnership_member", ["partnership_id"]
    )

    op.create_table(
        "sealed_message",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sender", sa.String(length=128), nullable=False),
        sa.Column("receiver", sa.String(length=128), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("unlock_date", sa.Date(), nullable=False),
        sa.Column("opened", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sealed_message_sender", "sealed_message", ["sender"])
    op.create_index(
        "ix_sealed_message_receiver_unlock", "sealed_message", ["receiver", "unlock_date"]
    )
    op.create_index(
        "ix_sealed_message_pair_created",
        "sealed_message",
        ["sender", "receiver", "created_at"],
    )


def downgrade() -> None:
    """Drop the tables created by this revision."""
    op.drop_index("ix_sealed_message_pair_created", table_name="sealed_message")
    op.drop_index("ix_sealed_message_receiver_unlock", table_name="sealed_message")
    op.drop_index("ix_sealed_message_sender", table_name="sealed_message")
    op.drop_table("sealed_message")
    op.drop_index("ix_partnership_member_partnership_id", table_name="partnership_member")
    op.drop_table("partnership_member")
    op.drop_index("ix_partnership_user_b", table_name="partnership")
    op.drop_index("ix_partnership_user_a", table_name="partnership")
    op.drop_table("partnership")
