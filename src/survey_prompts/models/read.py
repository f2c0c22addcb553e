"""Read-side models: stored response rows and reconstructed survey results.

Storage hands back one ``ResponseRow`` per stored prompt answer.  Rows that
share an ``IndexedResultKey`` belong to one logical survey instance (or one
repeatable-set iteration within it) and are folded into one
``IndexedResult`` by :class:`survey_prompts.reconstruction.SurveyResponseAssembler`.

``IndexedResultBuilder`` is the mutable accumulator owned by that fold;
``IndexedResult`` is the frozen value handed to consumers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from survey_prompts.models.enums import (
    DisplayType,
    LocationStatus,
    PrivacyState,
    PromptType,
)

logger = logging.getLogger(__name__)


class SurveyInfo(BaseModel):
    """Survey-level metadata from the campaign configuration."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: Optional[str] = None


class IndexedResultKey(BaseModel):
    """Composite identity of one logical survey instance."""

    model_config = ConfigDict(frozen=True)

    username: str
    timestamp: str
    epoch_millis: int
    survey_id: str
    repeatable_set_id: Optional[str] = None
    repeatable_set_iteration: Optional[int] = None


class ResponseRow(BaseModel):
    """One stored prompt answer, denormalized with its survey context.

    ``response`` is the raw stored value (usually the string written by
    :meth:`PromptResponse.stored_value`).
    """

    model_config = ConfigDict(frozen=True)

    username: str
    # Client-local time of the survey, as sent by the client
    timestamp: str
    epoch_millis: int
    timezone: str
    survey_id: str
    repeatable_set_id: Optional[str] = None
    repeatable_set_iteration: Optional[int] = None
    prompt_id: str
    prompt_type: PromptType
    response: Any
    client: str
    location_status: LocationStatus
    location: Optional[Dict[str, Any]] = None
    privacy_state: PrivacyState = PrivacyState.PRIVATE
    launch_context: Optional[Dict[str, Any]] = None

    @property
    def key(self) -> IndexedResultKey:
        return IndexedResultKey(
            username=self.username,
            timestamp=self.timestamp,
            epoch_millis=self.epoch_millis,
            survey_id=self.survey_id,
            repeatable_set_id=self.repeatable_set_id,
            repeatable_set_iteration=self.repeatable_set_iteration,
        )


class PromptMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    display_label: Optional[str] = None
    display_type: Optional[DisplayType] = None
    prompt_text: Optional[str] = None
    prompt_type: PromptType
    unit: Optional[str] = None


class SingleChoiceValueAndLabel(BaseModel):
    """CSV rendering of a single-choice answer: the choice value plus its label."""

    model_config = ConfigDict(frozen=True)

    value: Any
    label: Optional[str] = None


class IndexedResult(BaseModel):
    """One reconstructed survey instance (or repeatable-set iteration)."""

    model_config = ConfigDict(frozen=True)

    key: IndexedResultKey
    survey_title: Optional[str] = None
    survey_description: Optional[str] = None
    client: str
    timezone: str
    location_status: LocationStatus
    location: Optional[Dict[str, Any]] = None
    privacy_state: PrivacyState
    launch_context: Optional[Dict[str, Any]] = None
    prompt_responses: Dict[str, Any]
    prompt_metadata: Dict[str, PromptMetadata]
    choice_glossaries: Dict[str, Dict[int, str]]

    @property
    def username(self) -> str:
        return self.key.username

    @property
    def survey_id(self) -> str:
        return self.key.survey_id


class IndexedResultBuilder:
    """Mutable accumulator for one IndexedResult.

    Seeded from the first row seen for a key; every later row for that key
    only inserts or overwrites its prompt's entries in the three per-prompt
    maps.
    """

    def __init__(self, row: ResponseRow, survey_info: Optional[SurveyInfo]) -> None:
        self.key = row.key
        self.survey_title = survey_info.title if survey_info else None
        self.survey_description = survey_info.description if survey_info else None
        self.client = row.client
        self.timezone = row.timezone
        self.location_status = row.location_status
        self.location = row.location
        self.privacy_state = row.privacy_state
        self.launch_context = row.launch_context

        self.prompt_responses: dict[str, Any] = {}
        self.prompt_metadata: dict[str, PromptMetadata] = {}
        self.choice_glossaries: dict[str, dict[int, str]] = {}

    def add_prompt(
        self,
        prompt_id: str,
        display_value: Any,
        metadata: PromptMetadata,
        glossary: Optional[dict[int, str]] = None,
    ) -> None:
        """Insert (or overwrite, last write wins) one prompt's entries."""
        if prompt_id in self.prompt_responses:
            logger.debug(
                "Duplicate answer for prompt %s in %s; keeping the latest",
                prompt_id,
                self.key,
            )
        self.prompt_responses[prompt_id] = display_value
        self.prompt_metadata[prompt_id] = metadata
        if glossary is not None:
            self.choice_glossaries[prompt_id] = glossary
        else:
            self.choice_glossaries.pop(prompt_id, None)

    def freeze(self) -> IndexedResult:
        return IndexedResult(
            key=self.key,
            survey_title=self.survey_title,
            survey_description=self.survey_description,
            client=self.client,
            timezone=self.timezone,
            location_status=self.location_status,
            location=self.location,
            privacy_state=self.privacy_state,
            launch_context=self.launch_context,
            prompt_responses=dict(self.prompt_responses),
            prompt_metadata=dict(self.prompt_metadata),
            choice_glossaries={k: dict(v) for k, v in self.choice_glossaries.items()},
        )
