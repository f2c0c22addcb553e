"""Survey upload models — one survey as submitted by a client.

An upload carries survey-level context plus a ``responses`` list whose
entries are either a prompt answer::

    {"prompt_id": "mood", "value": "good"}
    {"prompt_id": "activity", "value": "hiking",
     "custom_choices": [{"choice_id": 10, "choice_value": "hiking"}]}

or a repeatable set, one inner list per iteration::

    {"repeatable_set_id": "naps",
     "responses": [[{"prompt_id": "nap_minutes", "value": 20}],
                   [{"prompt_id": "nap_minutes", "value": 45}]]}
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, field_validator, model_validator

from survey_prompts.models.enums import LocationStatus, PrivacyState

logger = logging.getLogger(__name__)

# Client-local timestamp format stored with every response row
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class PromptAnswer(BaseModel):
    prompt_id: str
    value: Any = None
    # Kept raw; structural checks happen during validation
    custom_choices: Optional[List[Any]] = None


class RepeatableSetAnswer(BaseModel):
    repeatable_set_id: str
    skipped: bool = False
    not_displayed: bool = False
    responses: List[List[PromptAnswer]] = []


class SurveySubmission(BaseModel):
    """One uploaded survey instance."""

    survey_key: Optional[str] = None
    survey_id: str
    # Epoch milliseconds
    time: int
    timezone: str
    location_status: LocationStatus
    location: Optional[Dict[str, Any]] = None
    survey_launch_context: Optional[Dict[str, Any]] = None
    privacy_state: Optional[PrivacyState] = None
    responses: List[Union[PromptAnswer, RepeatableSetAnswer]]

    @field_validator("location_status", mode="before")
    @classmethod
    def _normalize_status(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _check_location(self) -> "SurveySubmission":
        if self.location_status != LocationStatus.UNAVAILABLE and self.location is None:
            raise ValueError(
                f"location is required when location_status is {self.location_status.value}"
            )
        return self

    @property
    def local_timestamp(self) -> str:
        """``time`` rendered in the submission's timezone (UTC if unknown)."""
        try:
            tz = ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r; using UTC", self.timezone)
            tz = timezone.utc
        return datetime.fromtimestamp(self.time / 1000, tz).strftime(TIMESTAMP_FORMAT)
