"""create profiles and stat_entries

Revision ID: 20261001_create_profiles_and_stats
Revises:
Create Date: 2026-10-01 10:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261001_create_profiles_and_stats"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("trainer_name", sa.String(length=64), nullable=False),
        sa.Column("is_paid_user", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("subscription_type", sa.String(length=32)),
        sa.Column("subscription_expires_at", sa.DateTime(timezone=True)),
        sa.Column("start_date", sa.Date()),
        sa.Column("total_xp", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("pokemon_caught", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("distance_walked", sa.Float(), nullable=False, server_default="0"),
        sa.Column("pokestops_visited", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "unique_pokedex_entries", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("trainer_level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.UniqueConstraint("user_id", name="uq_profiles_user_id"),
    )

    op.create_table(
        "stat_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "profile_id",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("total_xp", sa.BigInteger()),
        sa.Column("pokemon_caught", sa.Integer()),
        sa.Column("distance_walked", sa.Float()),
        sa.Column("pokestops_visited", sa.Integer()),
        sa.Column("unique_pokedex_entries", sa.Integer()),
        sa.Column("trainer_level", sa.Integer()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint("profile_id", "entry_date", name="uq_stat_entries_profile_day"),
    )
    op.create_index(
        "ix_stat_entries_profile_date", "stat_entries", ["profile_id", "entry_date"]
    )


def downgrade() -> None:
    op.drop_index("ix_stat_entries_profile_date", table_name="stat_entries")
    op.drop_table("stat_entries")
    op.drop_table("profiles")
