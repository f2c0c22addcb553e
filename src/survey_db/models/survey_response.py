"""Survey response ORM models — one parent row per upload, one child per answer.

``survey_responses`` holds the survey-level context of one uploaded survey
(who, when, where, which client).  ``prompt_responses`` holds one row per
answered prompt, including every repeatable-set iteration, with the raw
stored value written by ``PromptResponse.stored_value()``.

Joining the two yields the denormalized ``ResponseRow`` stream consumed by
the reconstruction pipeline.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from survey_db.models.base import Base
from survey_prompts.models.enums import PrivacyState


class SurveyResponseRecord(Base):
    """One uploaded survey instance."""

    __tablename__ = "survey_responses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # --- Identity ---
    campaign_urn: Mapped[str] = mapped_column(Text, nullable=False)
    username: Mapped[str] = mapped_column(Text, nullable=False)
    survey_id: Mapped[str] = mapped_column(Text, nullable=False)
    # Client-generated key; lets a retried upload be detected
    survey_key: Mapped[str | None] = mapped_column(Text, nullable=True)

    # --- When ---
    epoch_millis: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # Client-local "YYYY-MM-DD HH:MM:SS"
    client_timestamp: Mapped[str] = mapped_column(Text, nullable=False)
    timezone: Mapped[str] = mapped_column(Text, nullable=False)

    # --- Context ---
    client: Mapped[str] = mapped_column(Text, nullable=False)
    location_status: Mapped[str] = mapped_column(String(20), nullable=False)
    # {"latitude": ..., "longitude": ..., "accuracy": ..., "provider": ..., "time": ...}
    location: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    launch_context: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    privacy_state: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PrivacyState.PRIVATE.value,
    )

    uploaded_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    prompt_responses: Mapped[list["PromptResponseRecord"]] = relationship(
        back_populates="survey_response",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("username", "campaign_urn", "survey_key", name="uq_survey_key"),
        CheckConstraint(
            "privacy_state IN ('private', 'shared', 'invisible')",
            name="ck_privacy_state",
        ),
        Index("ix_survey_responses_campaign_user", "campaign_urn", "username"),
        Index("ix_survey_responses_epoch", "epoch_millis"),
    )


class PromptResponseRecord(Base):
    """One stored answer to one prompt (or one repeatable-set iteration of it)."""

    __tablename__ = "prompt_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    survey_response_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("survey_responses.id", ondelete="CASCADE"),
        nullable=False,
    )

    prompt_id: Mapped[str] = mapped_column(Text, nullable=False)
    prompt_type: Mapped[str] = mapped_column(String(32), nullable=False)
    repeatable_set_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    repeatable_set_iteration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Raw stored value: a scalar, a JSON array/object, or a NoResponse name
    response: Mapped[str] = mapped_column(Text, nullable=False)

    survey_response: Mapped[SurveyResponseRecord] = relationship(
        back_populates="prompt_responses"
    )

    __table_args__ = (
        # Iteration is present exactly when the prompt sits in a repeatable set
        CheckConstraint(
            "(repeatable_set_id IS NULL) = (repeatable_set_iteration IS NULL)",
            name="ck_iteration_matches_set",
        ),
        CheckConstraint(
            "repeatable_set_iteration IS NULL OR repeatable_set_iteration >= 0",
            name="ck_iteration_non_negative",
        ),
        Index("ix_prompt_responses_survey_response", "survey_response_id"),
    )
