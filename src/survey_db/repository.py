"""Async repository for stored survey responses.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries: methods ``flush()`` but never ``commit()``.

Writes take the ``PromptResponse`` objects built by
:class:`survey_prompts.ingest.SurveyResponseBuilder`; reads stream
``ResponseRow`` objects ready for
:class:`survey_prompts.reconstruction.SurveyResponseAssembler`.
"""

import logging
from datetime import datetime
from typing import AsyncIterator, Iterable

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from survey_db.models.survey_response import PromptResponseRecord, SurveyResponseRecord
from survey_prompts.models.enums import PrivacyState
from survey_prompts.models.read import ResponseRow
from survey_prompts.models.response import PromptResponse
from survey_prompts.models.upload import SurveySubmission

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Record <-> model mapping
# ---------------------------------------------------------------------------

def to_prompt_record(response: PromptResponse) -> PromptResponseRecord:
    """Build the child row storing one answer."""
    return PromptResponseRecord(
        prompt_id=response.prompt.id,
        prompt_type=response.prompt.prompt_type,
        repeatable_set_id=response.prompt.repeatable_set_id,
        repeatable_set_iteration=response.repeatable_set_iteration,
        response=response.stored_value(),
    )


def to_response_row(
    survey: SurveyResponseRecord, prompt: PromptResponseRecord
) -> ResponseRow:
    """Join one parent and one child record into a denormalized ResponseRow."""
    return ResponseRow(
        username=survey.username,
        timestamp=survey.client_timestamp,
        epoch_millis=survey.epoch_millis,
        timezone=survey.timezone,
        survey_id=survey.survey_id,
        repeatable_set_id=prompt.repeatable_set_id,
        repeatable_set_iteration=prompt.repeatable_set_iteration,
        prompt_id=prompt.prompt_id,
        prompt_type=prompt.prompt_type,
        response=prompt.response,
        client=survey.client,
        location_status=survey.location_status,
        location=survey.location,
        privacy_state=survey.privacy_state,
        launch_context=survey.launch_context,
    )


class SurveyResponseRepository:
    """Async read/write operations on ``survey_responses`` and ``prompt_responses``."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def record_submission(
        self,
        db: AsyncSession,
        *,
        campaign_urn: str,
        username: str,
        client: str,
        submission: SurveySubmission,
        responses: Iterable[PromptResponse],
        privacy_state: PrivacyState = PrivacyState.PRIVATE,
    ) -> SurveyResponseRecord:
        """Insert one survey row plus one child row per response.

        The submission's own ``privacy_state`` wins over *privacy_state*.
        The caller must ``await db.commit()`` to persist.
        """
        record = SurveyResponseRecord(
            campaign_urn=campaign_urn,
            username=username,
            survey_id=submission.survey_id,
            survey_key=submission.survey_key,
            epoch_millis=submission.time,
            client_timestamp=submission.local_timestamp,
            timezone=submission.timezone,
            client=client,
            location_status=submission.location_status.value,
            location=submission.location,
            launch_context=submission.survey_launch_context,
            privacy_state=(submission.privacy_state or privacy_state).value,
            prompt_responses=[to_prompt_record(r) for r in responses],
        )
        db.add(record)
        await db.flush()  # Populate id and server-side defaults
        logger.info(
            "Stored survey %s for %s with %d answers",
            submission.survey_id,
            username,
            len(record.prompt_responses),
        )
        return record

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_survey_key(
        self, db: AsyncSession, *, campaign_urn: str, username: str, survey_key: str
    ) -> SurveyResponseRecord | None:
        """Fetch a previously stored upload by its client-generated key."""
        stmt = select(SurveyResponseRecord).where(
            SurveyResponseRecord.campaign_urn == campaign_urn,
            SurveyResponseRecord.username == username,
            SurveyResponseRecord.survey_key == survey_key,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    def rows_query(
        self,
        campaign_urn: str,
        *,
        survey_id: str | None = None,
        username: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        privacy_states: Iterable[PrivacyState] | None = None,
    ) -> Select:
        """Build the parent/child join behind :meth:`stream_rows`.

        ``start`` / ``end`` bound the survey time (inclusive / exclusive).
        """
        stmt = (
            select(SurveyResponseRecord, PromptResponseRecord)
            .join(
                PromptResponseRecord,
                PromptResponseRecord.survey_response_id == SurveyResponseRecord.id,
            )
            .where(SurveyResponseRecord.campaign_urn == campaign_urn)
        )
        if survey_id is not None:
            stmt = stmt.where(SurveyResponseRecord.survey_id == survey_id)
        if username is not None:
            stmt = stmt.where(SurveyResponseRecord.username == username)
        if start is not None:
            stmt = stmt.where(SurveyResponseRecord.epoch_millis >= int(start.timestamp() * 1000))
        if end is not None:
            stmt = stmt.where(SurveyResponseRecord.epoch_millis < int(end.timestamp() * 1000))
        if privacy_states is not None:
            stmt = stmt.where(
                SurveyResponseRecord.privacy_state.in_([p.value for p in privacy_states])
            )
        return stmt.order_by(
            SurveyResponseRecord.epoch_millis,
            SurveyResponseRecord.username,
            PromptResponseRecord.id,
        )

    async def stream_rows(
        self,
        db: AsyncSession,
        campaign_urn: str,
        **filters,
    ) -> AsyncIterator[ResponseRow]:
        """Stream one ResponseRow per stored answer matching *filters*.

        Accepts the keyword filters of :meth:`rows_query`.  Database errors
        propagate to the consumer as they occur.
        """
        result = await db.stream(self.rows_query(campaign_urn, **filters))
        async for survey, prompt in result:
            yield to_response_row(survey, prompt)
