"""add profile visibility columns and system_settings

Revision ID: 20261003_add_profile_visibility_and_settings
Revises: 20261002_add_feature_flags_and_events
Create Date: 2026-10-03 09:30:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261003_add_profile_visibility_and_settings"
down_revision = "20261002_add_feature_flags_and_events"
branch_labels = None
depends_on = None

SOCIAL_COLUMNS = (
    "instagram",
    "tiktok",
    "twitter",
    "youtube",
    "twitch",
    "reddit",
    "facebook",
    "snapchat",
    "github",
    "vimeo",
    "discord",
    "telegram",
    "whatsapp",
)


def upgrade() -> None:
    with op.batch_alter_table("profiles") as batch:
        batch.add_column(sa.Column("trainer_code", sa.String(length=32)))
        batch.add_column(
            sa.Column(
                "trainer_code_private",
                sa.Boolean(),
                nullable=False,
                server_default=sa.false(),
            )
        )
        batch.add_column(
            sa.Column(
                "social_links_private",
                sa.Boolean(),
                nullable=False,
                server_default=sa.false(),
            )
        )
        batch.add_column(sa.Column("country", sa.String(length=64)))
        batch.add_column(sa.Column("team_color", sa.String(length=16)))
        for name in SOCIAL_COLUMNS:
            batch.add_column(sa.Column(name, sa.String(length=255)))

    op.create_table(
        "system_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("key", sa.String(length=64), nullable=False, unique=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.Column("updated_by", sa.BigInteger()),
    )


def downgrade() -> None:
    op.drop_table("system_settings")
    with op.batch_alter_table("profiles") as batch:
        for name in reversed(SOCIAL_COLUMNS):
            batch.drop_column(name)
        batch.drop_column("team_color")
        batch.drop_column("country")
        batch.drop_column("social_links_private")
        batch.drop_column("trainer_code_private")
        batch.drop_column("trainer_code")
