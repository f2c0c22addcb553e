"""Create survey_responses and prompt_responses tables.

Revision ID: 20261018_survey_responses
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261018_survey_responses"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "survey_responses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        # Identity
        sa.Column("campaign_urn", sa.Text, nullable=False),
        sa.Column("username", sa.Text, nullable=False),
        sa.Column("survey_id", sa.Text, nullable=False),
        sa.Column("survey_key", sa.Text, nullable=True),
        # When
        sa.Column("epoch_millis", sa.BigInteger, nullable=False),
        sa.Column("client_timestamp", sa.Text, nullable=False),
        sa.Column("timezone", sa.Text, nullable=False),
        # Context
        sa.Column("client", sa.Text, nullable=False),
        sa.Column("location_status", sa.String(20), nullable=False),
        sa.Column("location", JSONB, nullable=True),
        sa.Column("launch_context", JSONB, nullable=True),
        sa.Column(
            "privacy_state",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'private'"),
        ),
        sa.Column(
            "uploaded_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("username", "campaign_urn", "survey_key", name="uq_survey_key"),
        sa.CheckConstraint(
            "privacy_state IN ('private', 'shared', 'invisible')",
            name="ck_privacy_state",
        ),
    )
    op.create_index(
        "ix_survey_responses_campaign_user",
        "survey_responses",
        ["campaign_urn", "username"],
    )
    op.create_index("ix_survey_responses_epoch", "survey_responses", ["epoch_millis"])

    op.create_table(
        "prompt_responses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "survey_response_id",
            UUID(as_uuid=True),
            sa.ForeignKey("survey_responses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("prompt_id", sa.Text, nullable=False),
        sa.Column("prompt_type", sa.String(32), nullable=False),
        sa.Column("repeatable_set_id", sa.Text, nullable=True),
        sa.Column("repeatable_set_iteration", sa.Integer, nullable=True),
        sa.Column("response", sa.Text, nullable=False),
        sa.CheckConstraint(
            "(repeatable_set_id IS NULL) = (repeatable_set_iteration IS NULL)",
            name="ck_iteration_matches_set",
        ),
        sa.CheckConstraint(
            "repeatable_set_iteration IS NULL OR repeatable_set_iteration >= 0",
            name="ck_iteration_non_negative",
        ),
    )
    op.create_index(
        "ix_prompt_responses_survey_response",
        "prompt_responses",
        ["survey_response_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_prompt_responses_survey_response", table_name="prompt_responses")
    op.drop_table("prompt_responses")
    op.drop_index("ix_survey_responses_epoch", table_name="survey_responses")
    op.drop_index("ix_survey_responses_campaign_user", table_name="survey_responses")
    op.drop_table("survey_responses")
