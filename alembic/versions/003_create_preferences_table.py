"""create preferences table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "003"
down_revision = "002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "preferences",
        sa.Column(
            "event_id", sa.String(64),
            sa.ForeignKey("events.id"), primary_key=True,
        ),
        sa.Column("voter_id", sa.String(128), primary_key=True),
        sa.Column("first", sa.String(128), nullable=True),
        sa.Column("second", sa.String(128), nullable=True),
        sa.Column("third", sa.String(128), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )


def downgrade() -> None:
    op.drop_table("preferences")
