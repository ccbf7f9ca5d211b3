"""create applications table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    gender = sa.Enum("M", "F", name="gender")
    gender.create(op.get_bind(), checkfirst=True)

    applicationstatus = sa.Enum(
        "pending", "approved", "paid", "rejected",
        name="applicationstatus",
    )
    applicationstatus.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "applications",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("uid", sa.String(128), nullable=False),
        sa.Column(
            "event_id", sa.String(64),
            sa.ForeignKey("events.id"), nullable=False,
        ),
        sa.Column("gender", gender, nullable=False),
        sa.Column("status", applicationstatus, server_default="pending", nullable=False),
        sa.Column("nickname", sa.String(32), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("event_id", "uid", name="uq_applications_event_uid"),
    )
    op.create_index("ix_applications_uid", "applications", ["uid"])
    op.create_index("ix_applications_event_id", "applications", ["event_id"])

    # A nickname is held only while its application is paid
    op.create_index(
        "uq_applications_event_nickname_paid",
        "applications",
        ["event_id", "nickname"],
        unique=True,
        postgresql_where=sa.text("nickname IS NOT NULL AND status = 'paid'"),
    )


def downgrade() -> None:
    op.drop_index("uq_applications_event_nickname_paid", table_name="applications")
    op.drop_index("ix_applications_event_id", table_name="applications")
    op.drop_index("ix_applications_uid", table_name="applications")
    op.drop_table("applications")
    sa.Enum(name="applicationstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="gender").drop(op.get_bind(), checkfirst=True)
