"""Campaign configuration models, parsed from campaign YAML files.

A campaign groups surveys; a survey holds top-level prompts and repeatable
sets, each repeatable set holding its own prompts.  Prompt ids are unique
within a survey, repeatable sets included.

Example campaign file::

    urn: urn:campaign:sleep
    name: Sleep study
    surveys:
      - id: morning
        title: Morning survey
        prompts:
          - id: hours_slept
            prompt_type: number
            ...
        repeatable_sets:
          - id: naps
            prompts: [...]
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from survey_prompts.models.enums import PrivacyState
from survey_prompts.models.prompt import BasePrompt, Prompt


class RepeatableSet(BaseModel):
    """A group of prompts answered zero or more times within one survey.

    Every prompt parsed into the set has ``repeatable_set_id`` stamped with
    the set's id.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    condition: Optional[str] = None
    terminate_question: Optional[str] = None
    terminate_true_label: Optional[str] = None
    terminate_false_label: Optional[str] = None
    skippable: bool = False
    skip_label: Optional[str] = None
    prompts: List[Prompt]

    @model_validator(mode="before")
    @classmethod
    def _stamp_prompts(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "id" not in data:
            return data
        set_id = data["id"]
        stamped = []
        for prompt in data.get("prompts") or []:
            if isinstance(prompt, BasePrompt):
                stamped.append(prompt.model_copy(update={"repeatable_set_id": set_id}))
            elif isinstance(prompt, dict):
                stamped.append({**prompt, "repeatable_set_id": set_id})
            else:
                stamped.append(prompt)
        return {**data, "prompts": stamped}

    @model_validator(mode="after")
    def _check_set(self) -> "RepeatableSet":
        if self.skippable and not (self.skip_label or "").strip():
            raise ValueError(f"Repeatable set '{self.id}' is skippable but has no skip_label")
        return self


class SurveyDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: Optional[str] = None
    submit_text: Optional[str] = None
    anytime: bool = True
    prompts: List[Prompt] = []
    repeatable_sets: List[RepeatableSet] = []

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "SurveyDefinition":
        ids = [p.id for p in self.prompts]
        for rs in self.repeatable_sets:
            ids.extend(p.id for p in rs.prompts)
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Survey '{self.id}': duplicate prompt ids {duplicates}")
        set_ids = [rs.id for rs in self.repeatable_sets]
        if len(set_ids) != len(set(set_ids)):
            raise ValueError(f"Survey '{self.id}': duplicate repeatable set ids {set_ids}")
        return self

    def get_repeatable_set(self, repeatable_set_id: str) -> Optional[RepeatableSet]:
        for rs in self.repeatable_sets:
            if rs.id == repeatable_set_id:
                return rs
        return None


class CampaignDefinition(BaseModel):
    """A campaign and its surveys, as written in one campaign YAML file."""

    model_config = ConfigDict(frozen=True)

    urn: str
    name: str
    description: Optional[str] = None
    privacy_state: PrivacyState = PrivacyState.PRIVATE
    surveys: List[SurveyDefinition]

    @model_validator(mode="after")
    def _check_unique_surveys(self) -> "CampaignDefinition":
        ids = [s.id for s in self.surveys]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Campaign '{self.urn}': duplicate survey ids {ids}")
        return self
