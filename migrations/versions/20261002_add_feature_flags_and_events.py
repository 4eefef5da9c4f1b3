"""add feature_flags and events

Revision ID: 20261002_add_feature_flags_and_events
Revises: 20261001_create_profiles_and_stats
Create Date: 2026-10-02 10:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261002_add_feature_flags_and_events"
down_revision = "20261001_create_profiles_and_stats"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "feature_flags",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("key", sa.String(length=64), nullable=False, unique=True),
        sa.Column("value", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("description", sa.Text()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.Column("updated_by", sa.BigInteger()),
    )
    op.bulk_insert(
        sa.table(
            "feature_flags",
            sa.column("key", sa.String),
            sa.column("value", sa.Boolean),
            sa.column("description", sa.Text),
        ),
        [
            {
                "key": "is_free_mode",
                "value": False,
                "description": (
                    "When enabled, all users get full access without trial or "
                    "payment restrictions. Bypasses all paywall and subscription checks."
                ),
            }
        ],
    )

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.BigInteger()),
        sa.Column("event", sa.String(), nullable=False),
        sa.Column("ts", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )


def downgrade() -> None:
    op.drop_table("events")
    op.drop_table("feature_flags")
