"""PromptResponse construction — shape check, value validation, iteration check.

Usage::

    response = create_response(prompt, None, 3)
    response.value          # 3
    response.stored_value() # "3"

The shape check runs before value validation: a list given to a
single-choice prompt is a structurally wrong answer
(``InvalidResponseShapeError``), whereas an unknown choice value is a
constraint violation (``ResponseValidationError``).  Both must pass.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

from survey_prompts.constants import CUSTOM_CHOICE_TYPES
from survey_prompts.errors import InvalidResponseShapeError
from survey_prompts.models.answer import answer_for
from survey_prompts.models.enums import NoResponse, PromptType
from survey_prompts.models.prompt import BasePrompt
from survey_prompts.models.response import PromptResponse
from survey_prompts.parsing import COLLECTION_TYPES
from survey_prompts.validator import PromptValidator, normalize_custom_choices

logger = logging.getLogger(__name__)

# Runtime types accepted per prompt type.  Booleans are never accepted.
_ACCEPTED_SHAPES: dict[PromptType, tuple[type, ...]] = {
    PromptType.NUMBER: (int, float, Decimal, str),
    PromptType.HOURS_BEFORE_NOW: (int, float, Decimal, str),
    PromptType.SINGLE_CHOICE: (str, int, float),
    PromptType.SINGLE_CHOICE_CUSTOM: (str, int, float),
    PromptType.MULTI_CHOICE: COLLECTION_TYPES + (str,),
    PromptType.MULTI_CHOICE_CUSTOM: COLLECTION_TYPES + (str,),
    PromptType.TEXT: (str,),
    # datetime is a subclass of date
    PromptType.TIMESTAMP: (str, date),
    PromptType.PHOTO: (str, uuid.UUID),
    PromptType.AUDIO: (str, uuid.UUID),
    PromptType.VIDEO: (str, uuid.UUID),
    PromptType.DOCUMENT: (str, uuid.UUID),
    PromptType.REMOTE_ACTIVITY: (str, dict, list),
}

_validator = PromptValidator()


def check_shape(prompt: BasePrompt, value: Any) -> None:
    """Raise InvalidResponseShapeError if *value*'s type does not fit *prompt*."""
    if NoResponse.parse(value) is not None:
        return
    accepted = _ACCEPTED_SHAPES[prompt.kind]
    if isinstance(value, bool) or not isinstance(value, accepted):
        raise InvalidResponseShapeError(
            f"Prompt '{prompt.id}' ({prompt.kind.value}) cannot take a "
            f"{type(value).__name__} value",
            prompt.id,
        )


def check_iteration(prompt: BasePrompt, repeatable_set_iteration: Optional[int]) -> None:
    """Raise InvalidResponseShapeError if the iteration does not fit *prompt*."""
    if prompt.in_repeatable_set and repeatable_set_iteration is None:
        raise InvalidResponseShapeError(
            f"Prompt '{prompt.id}' belongs to repeatable set "
            f"'{prompt.repeatable_set_id}' and needs an iteration",
            prompt.id,
        )
    if not prompt.in_repeatable_set and repeatable_set_iteration is not None:
        raise InvalidResponseShapeError(
            f"Prompt '{prompt.id}' is not in a repeatable set; "
            f"iteration {repeatable_set_iteration} is not allowed",
            prompt.id,
        )
    if repeatable_set_iteration is not None and repeatable_set_iteration < 0:
        raise InvalidResponseShapeError(
            f"Prompt '{prompt.id}': iteration {repeatable_set_iteration} is negative",
            prompt.id,
        )


def create_response(
    prompt: BasePrompt,
    repeatable_set_iteration: Optional[int],
    value: Any,
    *,
    custom_choices: Optional[Iterable[Any]] = None,
) -> PromptResponse:
    """Build an immutable PromptResponse from a raw submitted value.

    Args:
        prompt: the prompt definition being answered
        repeatable_set_iteration: iteration index for prompts inside a
            repeatable set, else None
        value: the raw value, or a NoResponse sentinel (enum or name)
        custom_choices: the submission's custom choices, for custom choice
            prompt types

    Returns:
        The constructed PromptResponse.

    Raises:
        InvalidResponseShapeError: wrong runtime shape or iteration.
        ResponseValidationError: the value fails its constraint check
            (including the UnskippablePromptSkippedError and
            CustomChoiceError subclasses).
    """
    check_shape(prompt, value)
    _validator.check(prompt, value, custom_choices=custom_choices)
    check_iteration(prompt, repeatable_set_iteration)

    custom = ()
    if prompt.prompt_type in CUSTOM_CHOICE_TYPES:
        custom = tuple(normalize_custom_choices(custom_choices, prompt))

    logger.debug("Built response for prompt %s", prompt.id)
    return PromptResponse(
        prompt=prompt,
        repeatable_set_iteration=repeatable_set_iteration,
        answer=answer_for(value),
        custom_choices=custom,
    )
