"""Exceptions raised while validating answers and building responses.

Every class subclasses ``ValueError`` so callers that only care about
"bad input" can catch a single type.
"""

from __future__ import annotations

from typing import Optional


class PromptResponseError(ValueError):
    """Base class for per-answer failures; carries the offending prompt id."""

    def __init__(self, message: str, prompt_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.prompt_id = prompt_id


class ResponseValidationError(PromptResponseError):
    """The submitted value failed its prompt type's constraint check."""


class UnskippablePromptSkippedError(ResponseValidationError):
    """SKIPPED was submitted for a prompt that is not skippable."""


class CustomChoiceError(ResponseValidationError):
    """A submitted custom choice set is structurally invalid."""


class InvalidResponseShapeError(PromptResponseError):
    """The value's runtime shape does not fit the prompt type.

    Also raised when a repeatable-set iteration is missing, unexpected or
    negative.  This signals structurally wrong input rather than an
    out-of-range value.
    """


class SubmissionError(ValueError):
    """A survey submission was rejected; ``errors`` lists each failure."""

    def __init__(self, errors: list[PromptResponseError]) -> None:
        details = "; ".join(
            f"{e.prompt_id}: {e}" if e.prompt_id else str(e) for e in errors
        )
        super().__init__(f"{len(errors)} invalid answer(s): {details}")
        self.errors = errors
