"""PromptResponse — one validated answer bound to its prompt definition.

Responses are created once per submitted answer (see
:func:`survey_prompts.responses.create_response`) and never mutated.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from survey_prompts.constants import (
    CHOICE_TYPES,
    CUSTOM_CHOICE_TYPES,
    MEDIA_TYPES,
    MULTI_CHOICE_TYPES,
    NUMERIC_TYPES,
    SINGLE_CHOICE_TYPES,
)
from survey_prompts.models.answer import Answer, ValueAnswer
from survey_prompts.models.enums import NoResponse, PromptType
from survey_prompts.models.prompt import Choice, CustomChoice, Prompt
from survey_prompts.parsing import (
    activity_runs,
    parse_timestamp,
    parse_uuid,
    selected_items,
    to_number,
)


class PromptResponse(BaseModel):
    """An answer to one prompt, optionally within a repeatable-set iteration.

    ``repeatable_set_iteration`` is set iff the prompt belongs to a
    repeatable set, and is never negative.
    """

    model_config = ConfigDict(frozen=True)

    prompt: Prompt
    repeatable_set_iteration: Optional[int] = None
    answer: Answer
    custom_choices: Tuple[CustomChoice, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _check_iteration(self) -> "PromptResponse":
        if self.prompt.in_repeatable_set and self.repeatable_set_iteration is None:
            raise ValueError(
                f"Prompt '{self.prompt.id}' is in repeatable set "
                f"'{self.prompt.repeatable_set_id}' but has no iteration"
            )
        if not self.prompt.in_repeatable_set and self.repeatable_set_iteration is not None:
            raise ValueError(
                f"Prompt '{self.prompt.id}' is not in a repeatable set but has "
                f"iteration {self.repeatable_set_iteration}"
            )
        if self.repeatable_set_iteration is not None and self.repeatable_set_iteration < 0:
            raise ValueError(
                f"Prompt '{self.prompt.id}': iteration must not be negative"
            )
        return self

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def prompt_id(self) -> str:
        return self.prompt.id

    @property
    def value(self) -> Any:
        """The value exactly as submitted, or None for a NoResponse answer."""
        if isinstance(self.answer, ValueAnswer):
            return self.answer.value
        return None

    @property
    def no_response(self) -> Optional[NoResponse]:
        return self.answer.no_response

    @property
    def choice(self) -> Optional[Choice]:
        """The selected choice of a single-choice answer."""
        if self.prompt.prompt_type not in SINGLE_CHOICE_TYPES or self.no_response:
            return None
        return self.prompt.find_choice(self.value, list(self.custom_choices))

    @property
    def label(self) -> Optional[str]:
        """Label of the selected choice, resolved through the choice glossary."""
        choice = self.choice
        return choice.label if choice is not None else None

    def choice_glossary(self) -> dict[int, Choice]:
        """Static plus custom choices for choice prompts, else an empty dict."""
        if self.prompt.prompt_type not in CHOICE_TYPES:
            return {}
        return self.prompt.merged_choices(list(self.custom_choices))

    # ------------------------------------------------------------------
    # Storage encoding
    # ------------------------------------------------------------------

    def stored_value(self) -> str:
        """Encode the answer as the string persisted in a response row.

        Single choices store the selected key and multiple choices a JSON
        array of keys, each key once and in definition order.  Custom choice
        types store a JSON object carrying the submitted value (repeated
        selections dropped) and the custom choices.  NoResponse answers
        store the sentinel name.
        """
        if self.no_response is not None:
            return self.no_response.value

        kind = self.prompt.prompt_type
        value = self.value
        if kind in CUSTOM_CHOICE_TYPES:
            return json.dumps(
                {
                    "value": (
                        _unique(selected_items(value)) if kind in MULTI_CHOICE_TYPES else value
                    ),
                    "custom_choices": [c.model_dump() for c in self.custom_choices],
                }
            )
        if kind in SINGLE_CHOICE_TYPES:
            return str(self.choice.key)
        if kind in MULTI_CHOICE_TYPES:
            selected = {self.prompt.find_choice(item).key for item in selected_items(value)}
            return json.dumps([c.key for c in self.prompt.choices if c.key in selected])
        if kind == PromptType.REMOTE_ACTIVITY:
            return json.dumps(activity_runs(value))
        if kind == PromptType.TIMESTAMP:
            return parse_timestamp(value).isoformat()
        if kind in MEDIA_TYPES:
            return str(parse_uuid(value))
        if kind in NUMERIC_TYPES:
            return str(to_number(value))
        return str(value)


def _unique(items: list[Any]) -> list[Any]:
    """Drop repeated selections, keeping the first occurrence."""
    seen: list[Any] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen
