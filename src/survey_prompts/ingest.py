"""SurveyResponseBuilder — turns one uploaded survey into PromptResponses.

Every answer is matched to its prompt definition in the campaign
configuration and passed through :func:`create_response`.  Per-answer
failures are either collected (``collect_errors=True``) or raised together
as a :class:`SubmissionError`.

A submission must answer every top-level prompt of its survey exactly once,
and every iteration of a repeatable set must answer each of the set's
prompts exactly once.  Unanswered prompts are sent as ``NOT_DISPLAYED`` or
``SKIPPED`` by the client, never omitted.

Custom choices carried by valid answers are recorded in the configuration
so later glossary lookups include them.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict

from survey_prompts.campaign import CampaignConfiguration
from survey_prompts.errors import (
    InvalidResponseShapeError,
    PromptResponseError,
    SubmissionError,
    UnskippablePromptSkippedError,
)
from survey_prompts.models.campaign import SurveyDefinition
from survey_prompts.models.prompt import BasePrompt
from survey_prompts.models.response import PromptResponse
from survey_prompts.models.upload import (
    PromptAnswer,
    RepeatableSetAnswer,
    SurveySubmission,
)
from survey_prompts.responses import create_response

logger = logging.getLogger(__name__)


class SubmissionResult(BaseModel):
    """Responses built from one submission, plus any per-answer errors."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    submission: SurveySubmission
    responses: List[PromptResponse] = []
    errors: List[PromptResponseError] = []

    @property
    def ok(self) -> bool:
        return not self.errors


class SurveyResponseBuilder:
    """Builds PromptResponses for submissions against one campaign."""

    def __init__(self, configuration: CampaignConfiguration) -> None:
        self._configuration = configuration

    def build(
        self,
        submission: SurveySubmission,
        *,
        collect_errors: bool = False,
    ) -> SubmissionResult:
        """Validate every answer in *submission* and build its responses.

        Args:
            submission: the uploaded survey
            collect_errors: when True, invalid answers are returned in
                ``result.errors`` instead of raising

        Returns:
            SubmissionResult with the valid responses and any errors.

        Raises:
            KeyError: if the survey is not part of the campaign.
            SubmissionError: if any answer is invalid and *collect_errors*
                is False.
        """
        survey = self._configuration.get_survey(submission.survey_id)
        responses: list[PromptResponse] = []
        errors: list[PromptResponseError] = []

        top_level = [
            entry for entry in submission.responses if isinstance(entry, PromptAnswer)
        ]
        self._build_group(survey.prompts, None, None, top_level, responses, errors)

        for entry in submission.responses:
            if isinstance(entry, RepeatableSetAnswer):
                self._build_repeatable_set(survey, entry, responses, errors)

        if errors and not collect_errors:
            raise SubmissionError(errors)

        self._record_custom_choices(submission.survey_id, responses)
        logger.info(
            "Built %d responses for survey %s (%d rejected)",
            len(responses),
            submission.survey_id,
            len(errors),
        )
        return SubmissionResult(submission=submission, responses=responses, errors=errors)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _build_repeatable_set(
        self,
        survey: SurveyDefinition,
        entry: RepeatableSetAnswer,
        responses: list[PromptResponse],
        errors: list[PromptResponseError],
    ) -> None:
        rs = survey.get_repeatable_set(entry.repeatable_set_id)
        if rs is None:
            errors.append(
                InvalidResponseShapeError(
                    f"Survey '{survey.id}' has no repeatable set "
                    f"'{entry.repeatable_set_id}'"
                )
            )
            return
        if entry.skipped and not rs.skippable:
            errors.append(
                UnskippablePromptSkippedError(f"Repeatable set '{rs.id}' is not skippable")
            )
            return
        if entry.skipped or entry.not_displayed:
            return
        for iteration, answers in enumerate(entry.responses):
            self._build_group(rs.prompts, rs.id, iteration, answers, responses, errors)

    def _build_group(
        self,
        prompts: Iterable[BasePrompt],
        repeatable_set_id: Optional[str],
        iteration: Optional[int],
        answers: list[PromptAnswer],
        responses: list[PromptResponse],
        errors: list[PromptResponseError],
    ) -> None:
        """Build responses for one flat group of prompts (a survey or one iteration)."""
        by_id = {p.id: p for p in prompts}
        where = f" in iteration {iteration} of '{repeatable_set_id}'" if iteration is not None else ""
        seen: set[str] = set()

        for answer in answers:
            prompt = by_id.get(answer.prompt_id)
            if prompt is None:
                errors.append(
                    InvalidResponseShapeError(
                        f"Unknown prompt '{answer.prompt_id}'{where}", answer.prompt_id
                    )
                )
                continue
            if answer.prompt_id in seen:
                errors.append(
                    InvalidResponseShapeError(
                        f"Prompt '{answer.prompt_id}' answered twice{where}",
                        answer.prompt_id,
                    )
                )
                continue
            seen.add(answer.prompt_id)
            try:
                responses.append(
                    create_response(
                        prompt,
                        iteration,
                        answer.value,
                        custom_choices=answer.custom_choices,
                    )
                )
            except PromptResponseError as exc:
                logger.debug("Rejected answer for %s: %s", answer.prompt_id, exc)
                errors.append(exc)

        for prompt_id in by_id:
            if prompt_id not in seen:
                errors.append(
                    InvalidResponseShapeError(
                        f"Prompt '{prompt_id}' has no answer{where}", prompt_id
                    )
                )

    def _record_custom_choices(
        self, survey_id: str, responses: list[PromptResponse]
    ) -> None:
        for response in responses:
            if response.custom_choices:
                self._configuration.add_custom_choices(
                    survey_id,
                    response.prompt.repeatable_set_id,
                    response.prompt.id,
                    response.custom_choices,
                )
