"""PromptValidator — checks a submitted value against its prompt definition.

Sentinels are handled first, the same way for every prompt type:

  - ``NOT_DISPLAYED`` is always valid (the client hid the prompt)
  - ``SKIPPED`` is valid only when the prompt is skippable

Any other value is then checked by the rule for the prompt's type:

  - **number / hours_before_now**: a number or numeric string in
    ``[min, max]``, integral when ``whole_number`` is set
  - **single_choice**: equals a choice's *value* (not its key)
  - **single_choice_custom / multi_choice_custom**: matches the static set
    or a label of the submission's custom choices
  - **multi_choice**: a collection, or a JSON / bracketed string, whose
    every element is a static choice value
  - **text**: a string whose length lies in ``[min, max]``
  - **timestamp**: an ISO date or date-time, or a date object
  - **remote_activity**: one run object or an array of them, each with a
    numeric ``score``, run count within ``[min_runs, retries + 1]``
  - **photo / audio / video / document**: a UUID
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from survey_prompts.constants import CUSTOM_CHOICE_TYPES, REMOTE_ACTIVITY_SCORE_KEY
from survey_prompts.errors import (
    CustomChoiceError,
    ResponseValidationError,
    UnskippablePromptSkippedError,
)
from survey_prompts.models.enums import NoResponse, PromptType
from survey_prompts.models.prompt import (
    BasePrompt,
    BoundedPrompt,
    ChoicePrompt,
    CustomChoice,
    RemoteActivityPrompt,
    TextPrompt,
    is_number,
)
from survey_prompts.parsing import (
    COLLECTION_TYPES,
    activity_runs,
    parse_number,
    parse_timestamp,
    parse_uuid,
    selected_items,
)

logger = logging.getLogger(__name__)


def normalize_custom_choices(
    raw: Optional[Iterable[Any]],
    prompt: Optional[ChoicePrompt] = None,
) -> list[CustomChoice]:
    """Structurally validate a custom choice set and return it as models.

    Each entry may be a :class:`CustomChoice` or a ``{choice_id,
    choice_value}`` mapping.  Keys must be unique non-negative integers,
    each with a non-empty label.  When *prompt* is given, a custom key that
    reuses a static key must carry the same label.

    Raises:
        CustomChoiceError: if the set is malformed.
    """
    if raw is None:
        return []
    prompt_id = prompt.id if prompt is not None else None
    if isinstance(raw, (str, bytes, dict)) or not isinstance(raw, Iterable):
        raise CustomChoiceError(
            f"custom_choices must be a list, got {type(raw).__name__}",
            prompt_id,
        )

    choices: list[CustomChoice] = []
    seen: set[int] = set()
    for entry in raw:
        if isinstance(entry, CustomChoice):
            choice = entry
        else:
            try:
                choice = CustomChoice.model_validate(entry)
            except ValidationError as exc:
                raise CustomChoiceError(
                    f"Malformed custom choice {entry!r}: {exc.errors()[0]['msg']}",
                    prompt_id,
                ) from exc
        if choice.choice_id in seen:
            raise CustomChoiceError(
                f"Duplicate custom choice id {choice.choice_id}", prompt_id
            )
        seen.add(choice.choice_id)
        choices.append(choice)

    if prompt is not None:
        static = prompt.choice_glossary()
        for choice in choices:
            existing = static.get(choice.choice_id)
            if existing is not None and existing.label != choice.choice_value:
                raise CustomChoiceError(
                    f"Custom choice id {choice.choice_id} clashes with static "
                    f"choice '{existing.label}'",
                    prompt_id,
                )
    return choices


class PromptValidator:
    """Validates raw submitted values; pure and safe to share across threads."""

    def validate(
        self,
        prompt: BasePrompt,
        value: Any,
        *,
        custom_choices: Optional[Iterable[Any]] = None,
    ) -> bool:
        """Return True if *value* is an acceptable answer to *prompt*."""
        try:
            self.check(prompt, value, custom_choices=custom_choices)
        except ResponseValidationError as exc:
            logger.debug("Rejected answer for prompt %s: %s", prompt.id, exc)
            return False
        return True

    def check(
        self,
        prompt: BasePrompt,
        value: Any,
        *,
        custom_choices: Optional[Iterable[Any]] = None,
    ) -> None:
        """Validate *value* against *prompt*, raising on failure.

        Args:
            prompt: the prompt definition being answered
            value: the raw submitted value or a NoResponse sentinel
            custom_choices: the submission's custom choices (custom choice
                prompt types only)

        Raises:
            UnskippablePromptSkippedError: SKIPPED for a non-skippable prompt.
            CustomChoiceError: malformed custom choices, or custom choices
                for a prompt type that does not accept them.
            ResponseValidationError: the value fails the type's rule.
        """
        sentinel = NoResponse.parse(value)
        if sentinel is NoResponse.NOT_DISPLAYED:
            return
        if sentinel is NoResponse.SKIPPED:
            if prompt.skippable:
                return
            raise UnskippablePromptSkippedError(
                f"Prompt '{prompt.id}' is not skippable", prompt.id
            )

        kind = prompt.kind
        if custom_choices is not None and kind.value not in CUSTOM_CHOICE_TYPES:
            raise CustomChoiceError(
                f"Prompt type {kind.value} does not accept custom choices",
                prompt.id,
            )

        if kind in (PromptType.NUMBER, PromptType.HOURS_BEFORE_NOW):
            self._check_bounded(prompt, value)
        elif kind == PromptType.SINGLE_CHOICE:
            self._check_single_choice(prompt, value, [])
        elif kind == PromptType.SINGLE_CHOICE_CUSTOM:
            custom = normalize_custom_choices(custom_choices, prompt)
            self._check_single_choice(prompt, value, custom)
        elif kind == PromptType.MULTI_CHOICE:
            self._check_multi_choice(prompt, value, [])
        elif kind == PromptType.MULTI_CHOICE_CUSTOM:
            custom = normalize_custom_choices(custom_choices, prompt)
            self._check_multi_choice(prompt, value, custom)
        elif kind == PromptType.TEXT:
            self._check_text(prompt, value)
        elif kind == PromptType.TIMESTAMP:
            self._check_timestamp(prompt, value)
        elif kind == PromptType.REMOTE_ACTIVITY:
            self._check_remote_activity(prompt, value)
        elif kind in (
            PromptType.PHOTO,
            PromptType.AUDIO,
            PromptType.VIDEO,
            PromptType.DOCUMENT,
        ):
            self._check_media(prompt, value)
        else:
            raise ResponseValidationError(
                f"No validation rule for prompt type {kind.value}", prompt.id
            )

    # ------------------------------------------------------------------
    # Type-specific checks
    # ------------------------------------------------------------------

    def _check_bounded(self, prompt: BoundedPrompt, value: Any) -> None:
        number = parse_number(value)
        if number is None:
            raise ResponseValidationError(
                f"Prompt '{prompt.id}' expects a number, got {value!r}", prompt.id
            )
        if prompt.whole_number and not float(number).is_integer():
            raise ResponseValidationError(
                f"Prompt '{prompt.id}' expects a whole number, got {value!r}",
                prompt.id,
            )
        if not prompt.min <= number <= prompt.max:
            raise ResponseValidationError(
                f"Prompt '{prompt.id}': {number} is outside "
                f"[{prompt.min}, {prompt.max}]",
                prompt.id,
            )

    def _check_single_choice(
        self, prompt: ChoicePrompt, value: Any, custom: list[CustomChoice]
    ) -> None:
        if isinstance(value, (bool, dict) + COLLECTION_TYPES) or value is None:
            raise ResponseValidationError(
                f"Prompt '{prompt.id}' expects a single choice value, got {value!r}",
                prompt.id,
            )
        if prompt.find_choice(value, custom) is None:
            raise ResponseValidationError(
                f"Prompt '{prompt.id}': {value!r} is not one of its choices",
                prompt.id,
            )

    def _check_multi_choice(
        self, prompt: ChoicePrompt, value: Any, custom: list[CustomChoice]
    ) -> None:
        items = selected_items(value)
        if items is None:
            raise ResponseValidationError(
                f"Prompt '{prompt.id}' expects a list of choices, got {value!r}",
                prompt.id,
            )
        unknown = [item for item in items if prompt.find_choice(item, custom) is None]
        if unknown:
            raise ResponseValidationError(
                f"Prompt '{prompt.id}': {unknown!r} are not among its choices",
                prompt.id,
            )

    def _check_text(self, prompt: TextPrompt, value: Any) -> None:
        if not isinstance(value, str):
            raise ResponseValidationError(
                f"Prompt '{prompt.id}' expects text, got {type(value).__name__}",
                prompt.id,
            )
        if not prompt.min <= len(value) <= prompt.max:
            raise ResponseValidationError(
                f"Prompt '{prompt.id}': length {len(value)} is outside "
                f"[{prompt.min}, {prompt.max}]",
                prompt.id,
            )

    def _check_timestamp(self, prompt: BasePrompt, value: Any) -> None:
        if parse_timestamp(value) is None:
            raise ResponseValidationError(
                f"Prompt '{prompt.id}': {value!r} is not a date or date-time",
                prompt.id,
            )

    def _check_media(self, prompt: BasePrompt, value: Any) -> None:
        if parse_uuid(value) is None:
            raise ResponseValidationError(
                f"Prompt '{prompt.id}': {value!r} is not a media UUID", prompt.id
            )

    def _check_remote_activity(self, prompt: RemoteActivityPrompt, value: Any) -> None:
        runs = activity_runs(value)
        if runs is None:
            raise ResponseValidationError(
                f"Prompt '{prompt.id}' expects a run object or an array of runs",
                prompt.id,
            )
        for index, run in enumerate(runs):
            if not isinstance(run, dict) or not is_number(
                run.get(REMOTE_ACTIVITY_SCORE_KEY)
            ):
                raise ResponseValidationError(
                    f"Prompt '{prompt.id}': run {index} has no numeric "
                    f"'{REMOTE_ACTIVITY_SCORE_KEY}'",
                    prompt.id,
                )
        if len(runs) > prompt.max_runs:
            raise ResponseValidationError(
                f"Prompt '{prompt.id}': {len(runs)} runs exceed the "
                f"{prompt.max_runs} allowed",
                prompt.id,
            )
        if len(runs) < prompt.min_runs:
            raise ResponseValidationError(
                f"Prompt '{prompt.id}': {len(runs)} runs, at least "
                f"{prompt.min_runs} required",
                prompt.id,
            )


