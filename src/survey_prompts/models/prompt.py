"""Prompt definition models for campaign surveys.

Each prompt type maps to a specific client widget and answer-handling rule:

  Bounded (numeric input between ``min`` and ``max``):
    - number: a plain number
    - hours_before_now: number of hours before the moment of answering

  Choice (answers drawn from a fixed choice set):
    - single_choice / multi_choice: static choices only
    - single_choice_custom / multi_choice_custom: the participant may add
      their own choices, recorded per submission

  Free-form:
    - text: string with length bounds
    - timestamp: ISO date or date-time

  Media references (the payload itself is stored elsewhere, the answer is its UUID):
    - photo, audio, video, document

  External:
    - remote_activity: an external app is launched and reports one or more
      scored runs

The discriminated ``Prompt`` union uses ``prompt_type`` as its discriminator.
The ``prompt_mapper`` dict maps type strings to their Pydantic classes.

Definitions are immutable once built.  Invalid constraint combinations fail
at construction with a pydantic ``ValidationError`` (a ``ValueError``).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from survey_prompts.constants import REMOTE_ACTIVITY_MAX_INPUT_LENGTH
from survey_prompts.models.enums import DisplayType, PromptType

Number = Union[int, float]


def is_number(value: Any) -> bool:
    """True for int/float/Decimal values; booleans are not numbers here."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def values_match(left: Any, right: Any) -> bool:
    """Compare a submitted value with a choice's match value.

    Numbers compare numerically; anything else compares by its string form,
    so ``1`` matches ``"1"``.
    """
    if is_number(left) and is_number(right):
        return left == right
    return str(left).strip() == str(right).strip()


# --- Shared choice models ---

class Choice(BaseModel):
    """One entry of a choice prompt's static choice set.

    The stored answer is the ``key``; the submitted answer is the *match
    value*, i.e. ``value`` when set, else ``label``.
    """

    model_config = ConfigDict(frozen=True)

    key: int = Field(ge=0)
    value: Optional[Union[int, float, str]] = None
    label: str

    @model_validator(mode="after")
    def _check_label(self) -> "Choice":
        if not self.label.strip():
            raise ValueError(f"Choice {self.key} has an empty label")
        return self

    @property
    def match_value(self) -> Any:
        return self.label if self.value is None else self.value


class CustomChoice(BaseModel):
    """A participant-defined choice recorded with one submission."""

    model_config = ConfigDict(frozen=True)

    choice_id: int = Field(ge=0)
    choice_value: str

    @model_validator(mode="after")
    def _check_value(self) -> "CustomChoice":
        if not self.choice_value.strip():
            raise ValueError(f"Custom choice {self.choice_id} has an empty label")
        return self

    def to_choice(self) -> Choice:
        return Choice(key=self.choice_id, label=self.choice_value)


# --- Base prompt type ---

class BasePrompt(BaseModel):
    """Fields shared by all prompt types."""

    model_config = ConfigDict(frozen=True)

    id: str
    # Client-side display condition; the server never evaluates it
    condition: Optional[str] = None
    unit: Optional[str] = None
    text: str
    abbreviated_text: Optional[str] = None
    explanation_text: Optional[str] = None
    skippable: bool = False
    skip_label: Optional[str] = None
    display_type: DisplayType
    display_label: str
    # Set by the campaign loader for prompts inside a repeatable set
    repeatable_set_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_common(self) -> "BasePrompt":
        if not self.id.strip():
            raise ValueError("Prompt id must not be blank")
        if not self.text.strip():
            raise ValueError(f"Prompt '{self.id}': text must not be blank")
        if not self.display_label.strip():
            raise ValueError(f"Prompt '{self.id}': display_label must not be blank")
        if self.skippable and not (self.skip_label or "").strip():
            raise ValueError(
                f"Prompt '{self.id}' is skippable but has no skip_label"
            )
        return self

    @property
    def kind(self) -> PromptType:
        """The prompt type as a :class:`PromptType` member."""
        return PromptType(self.prompt_type)

    @property
    def in_repeatable_set(self) -> bool:
        return self.repeatable_set_id is not None

    def to_json(self) -> dict[str, Any]:
        """Consumer-facing summary of this prompt (unit, types, constraints)."""
        return {
            "unit": self.unit,
            "prompt_type": self.prompt_type,
            "display_type": self.display_type.value,
        }


# --- Bounded prompt types ---

class BoundedPrompt(BasePrompt):
    """Numeric answer within ``[min, max]``.

    ``whole_number`` (default true) requires the bounds, the default and
    every answer to be integral.
    """

    min: Number
    max: Number
    default: Optional[Number] = None
    whole_number: bool = True

    @model_validator(mode="after")
    def _check_bounds(self) -> "BoundedPrompt":
        if self.whole_number:
            for name in ("min", "max", "default"):
                val = getattr(self, name)
                if val is not None and not float(val).is_integer():
                    raise ValueError(
                        f"Prompt '{self.id}': {name} must be a whole number, got {val}"
                    )
        if self.max < self.min:
            raise ValueError(
                f"Prompt '{self.id}': max ({self.max}) is less than min ({self.min})"
            )
        if self.default is not None and not self.min <= self.default <= self.max:
            raise ValueError(
                f"Prompt '{self.id}': default {self.default} is outside "
                f"[{self.min}, {self.max}]"
            )
        return self

    def to_json(self) -> dict[str, Any]:
        data = super().to_json()
        data.update(min=self.min, max=self.max, default=self.default)
        return data


class NumberPrompt(BoundedPrompt):
    prompt_type: Literal["number"]


class HoursBeforeNowPrompt(BoundedPrompt):
    prompt_type: Literal["hours_before_now"]


# --- Choice prompt types ---

class ChoicePrompt(BasePrompt):
    """Answer drawn from a static choice set.

    ``choices`` may be given as a list of :class:`Choice` or, as campaign
    files often do, a mapping ``{key: {label, value}}``.  Keys and labels
    must be unique within the prompt.
    """

    choices: List[Choice] = Field(min_length=1)

    @field_validator("choices", mode="before")
    @classmethod
    def _choices_from_mapping(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return [{"key": int(k), **body} for k, body in v.items()]
        return v

    @model_validator(mode="after")
    def _check_choices(self) -> "ChoicePrompt":
        keys = [c.key for c in self.choices]
        if len(keys) != len(set(keys)):
            raise ValueError(f"Prompt '{self.id}': duplicate choice keys {keys}")
        labels = [c.label for c in self.choices]
        if len(labels) != len(set(labels)):
            raise ValueError(f"Prompt '{self.id}': duplicate choice labels {labels}")
        return self

    def choice_glossary(self) -> dict[int, Choice]:
        """Static choices keyed by choice key, in definition order."""
        return {c.key: c for c in self.choices}

    def merged_choices(
        self, custom_choices: Optional[List[CustomChoice]] = None
    ) -> dict[int, Choice]:
        """Static choices plus *custom_choices*; static entries win on key clashes."""
        glossary = self.choice_glossary()
        for custom in custom_choices or []:
            glossary.setdefault(custom.choice_id, custom.to_choice())
        return glossary

    def find_choice(
        self, value: Any, custom_choices: Optional[List[CustomChoice]] = None
    ) -> Optional[Choice]:
        """Return the choice whose match value equals *value*.

        Static choices are searched first, then custom choices by label.
        """
        for choice in self.choices:
            if values_match(value, choice.match_value):
                return choice
        for custom in custom_choices or []:
            if values_match(value, custom.choice_value):
                return custom.to_choice()
        return None

    def to_json(self) -> dict[str, Any]:
        data = super().to_json()
        data["choice_glossary"] = {
            str(c.key): {"label": c.label, "value": c.value} for c in self.choices
        }
        return data


class _SingleChoiceBase(ChoicePrompt):
    default: Optional[int] = None

    @model_validator(mode="after")
    def _check_default(self) -> "_SingleChoiceBase":
        if self.default is not None and self.default not in self.choice_glossary():
            raise ValueError(
                f"Prompt '{self.id}': default key {self.default} is not a choice"
            )
        return self


class _MultiChoiceBase(ChoicePrompt):
    default: Optional[List[int]] = None

    @model_validator(mode="after")
    def _check_default(self) -> "_MultiChoiceBase":
        if self.default is not None:
            glossary = self.choice_glossary()
            missing = [k for k in self.default if k not in glossary]
            if missing:
                raise ValueError(
                    f"Prompt '{self.id}': default keys {missing} are not choices"
                )
        return self


class SingleChoicePrompt(_SingleChoiceBase):
    prompt_type: Literal["single_choice"]


class SingleChoiceCustomPrompt(_SingleChoiceBase):
    prompt_type: Literal["single_choice_custom"]


class MultiChoicePrompt(_MultiChoiceBase):
    prompt_type: Literal["multi_choice"]


class MultiChoiceCustomPrompt(_MultiChoiceBase):
    prompt_type: Literal["multi_choice_custom"]


# --- Free-form prompt types ---

class TextPrompt(BasePrompt):
    """String answer whose length lies within ``[min, max]``."""

    prompt_type: Literal["text"]
    min: int = Field(default=0, ge=0)
    max: int
    default: Optional[str] = None

    @model_validator(mode="after")
    def _check_lengths(self) -> "TextPrompt":
        if self.max < self.min:
            raise ValueError(
                f"Prompt '{self.id}': max length ({self.max}) is less than min ({self.min})"
            )
        if self.default is not None and not self.min <= len(self.default) <= self.max:
            raise ValueError(
                f"Prompt '{self.id}': default length {len(self.default)} is outside "
                f"[{self.min}, {self.max}]"
            )
        return self

    def to_json(self) -> dict[str, Any]:
        data = super().to_json()
        data.update(min=self.min, max=self.max, default=self.default)
        return data


class TimestampPrompt(BasePrompt):
    prompt_type: Literal["timestamp"]


# --- Media prompt types ---

class PhotoPrompt(BasePrompt):
    prompt_type: Literal["photo"]
    # Maximum vertical resolution requested from the client camera
    resolution: Optional[int] = Field(default=None, gt=0)


class AudioPrompt(BasePrompt):
    prompt_type: Literal["audio"]
    # Milliseconds
    max_duration: Optional[int] = Field(default=None, gt=0)


class VideoPrompt(BasePrompt):
    prompt_type: Literal["video"]
    max_seconds: Optional[int] = Field(default=None, gt=0)


class DocumentPrompt(BasePrompt):
    prompt_type: Literal["document"]
    # Bytes
    max_filesize: Optional[int] = Field(default=None, gt=0)


# --- External activity ---

class RemoteActivityPrompt(BasePrompt):
    """Launches an external activity that reports scored runs.

    A participant gets ``retries + 1`` attempts and must complete at least
    ``min_runs`` of them.
    """

    prompt_type: Literal["remote_activity"]
    package: str
    activity: str
    action: Optional[str] = None
    autolaunch: bool = False
    retries: int = Field(default=0, ge=0)
    min_runs: int = Field(default=0, ge=0)
    input: Optional[str] = None

    @model_validator(mode="after")
    def _check_activity(self) -> "RemoteActivityPrompt":
        if not self.package.strip() or not self.activity.strip():
            raise ValueError(
                f"Prompt '{self.id}': package and activity must not be blank"
            )
        if self.min_runs > self.retries + 1:
            raise ValueError(
                f"Prompt '{self.id}': min_runs ({self.min_runs}) exceeds the "
                f"{self.retries + 1} available runs"
            )
        if self.input is not None and len(self.input) > REMOTE_ACTIVITY_MAX_INPUT_LENGTH:
            raise ValueError(
                f"Prompt '{self.id}': input exceeds "
                f"{REMOTE_ACTIVITY_MAX_INPUT_LENGTH} characters"
            )
        return self

    @property
    def max_runs(self) -> int:
        return self.retries + 1


# --- Discriminated union ---

Prompt = Annotated[
    Union[
        NumberPrompt,
        HoursBeforeNowPrompt,
        SingleChoicePrompt,
        SingleChoiceCustomPrompt,
        MultiChoicePrompt,
        MultiChoiceCustomPrompt,
        TextPrompt,
        TimestampPrompt,
        PhotoPrompt,
        AudioPrompt,
        VideoPrompt,
        DocumentPrompt,
        RemoteActivityPrompt,
    ],
    Field(discriminator="prompt_type"),
]

prompt_mapper: dict[str, type[BasePrompt]] = {
    "number": NumberPrompt,
    "hours_before_now": HoursBeforeNowPrompt,
    "single_choice": SingleChoicePrompt,
    "single_choice_custom": SingleChoiceCustomPrompt,
    "multi_choice": MultiChoicePrompt,
    "multi_choice_custom": MultiChoiceCustomPrompt,
    "text": TextPrompt,
    "timestamp": TimestampPrompt,
    "photo": PhotoPrompt,
    "audio": AudioPrompt,
    "video": VideoPrompt,
    "document": DocumentPrompt,
    "remote_activity": RemoteActivityPrompt,
}
