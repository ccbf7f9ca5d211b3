"""create matches table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "004"
down_revision = "003"
branch_labels = None
depends_on = None


def upgrade() -> None:
    matchtier = sa.Enum(
        "mutual_first", "second_reciprocal", "third_reciprocal",
        name="matchtier",
    )
    matchtier.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "matches",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("run_id", sa.String(50), nullable=False),
        sa.Column(
            "event_id", sa.String(64),
            sa.ForeignKey("events.id"), nullable=False,
        ),
        sa.Column("user_a", sa.String(128), nullable=False),
        sa.Column("user_b", sa.String(128), nullable=False),
        sa.Column("tier", matchtier, nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column(
            "matched_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
    )
    op.create_index("ix_matches_event_id", "matches", ["event_id"])


def downgrade() -> None:
    op.drop_index("ix_matches_event_id", table_name="matches")
    op.drop_table("matches")
    sa.Enum(name="matchtier").drop(op.get_bind(), checkfirst=True)
