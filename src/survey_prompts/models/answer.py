"""Answer models — what a participant submitted for one prompt.

An answer is exactly one of:

  - ``SkippedAnswer``: the participant skipped a skippable prompt
  - ``NotDisplayedAnswer``: the prompt's condition hid it on the client
  - ``ValueAnswer``: a typed value that passed validation

The ``Answer`` union uses ``kind`` as its discriminator.
"""

from __future__ import annotations

from typing import Any, Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from survey_prompts.models.enums import NoResponse


class SkippedAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["skipped"] = "skipped"

    @property
    def no_response(self) -> NoResponse:
        return NoResponse.SKIPPED


class NotDisplayedAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["not_displayed"] = "not_displayed"

    @property
    def no_response(self) -> NoResponse:
        return NoResponse.NOT_DISPLAYED


class ValueAnswer(BaseModel):
    """A submitted value, kept exactly as the client sent it."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["value"] = "value"
    value: Any

    @property
    def no_response(self) -> None:
        return None


Answer = Annotated[
    Union[SkippedAnswer, NotDisplayedAnswer, ValueAnswer],
    Field(discriminator="kind"),
]


def answer_for(value: Any) -> SkippedAnswer | NotDisplayedAnswer | ValueAnswer:
    """Wrap a raw submitted value (or sentinel) in the matching answer model."""
    sentinel = NoResponse.parse(value)
    if sentinel is NoResponse.SKIPPED:
        return SkippedAnswer()
    if sentinel is NoResponse.NOT_DISPLAYED:
        return NotDisplayedAnswer()
    return ValueAnswer(value=value)
