"""DisplayValueFormatter — turns a stored raw answer into its display value.

Display rules by prompt type:

  - **single_choice / single_choice_custom**: the stored choice key, coerced
    to a number when it parses as one
  - **multi_choice / multi_choice_custom**: the stored JSON array; the
    sentinels ``"SKIPPED"`` / ``"NOT_DISPLAYED"`` pass through; a bracketed
    comma list is split; anything else becomes ``[]``
  - **custom choice types stored as a JSON object**: the parsed object, or
    ``{}`` if it does not parse
  - **remote_activity**: mean ``score`` over the stored runs, skipping
    malformed runs; ``0.0`` when no run has a score
  - **number / hours_before_now**: integer, else decimal, else unchanged
  - **everything else**: unchanged

Formatting never raises.  Malformed stored data degrades to a safe default
and is logged as a warning.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from survey_prompts.constants import (
    CUSTOM_CHOICE_TYPES,
    MULTI_CHOICE_TYPES,
    NUMERIC_TYPES,
    REMOTE_ACTIVITY_SCORE_KEY,
    SINGLE_CHOICE_TYPES,
)
from survey_prompts.models.enums import NoResponse, PromptType
from survey_prompts.models.prompt import Choice, is_number
from survey_prompts.parsing import (
    parse_choice_list,
    parse_json,
    parse_number,
    to_number,
)

logger = logging.getLogger(__name__)


class DisplayValueFormatter:
    """Computes consumer-facing display values for stored answers."""

    def format(
        self,
        prompt_type: PromptType | str,
        raw: Any,
        choices: Optional[Mapping[int, Choice]] = None,
    ) -> Any:
        """Dispatch to the display rule for *prompt_type*.

        Args:
            prompt_type: the row's prompt type
            raw: the stored raw answer
            choices: the prompt's resolved choice set (choice types only);
                the display value itself does not depend on it

        Returns:
            The display value.  Never raises.
        """
        try:
            kind = PromptType(prompt_type).value
        except ValueError:
            logger.warning("Unknown prompt type %r; displaying raw value", prompt_type)
            return raw

        if kind in CUSTOM_CHOICE_TYPES and _is_object_storage(raw):
            return self._format_custom_object(raw)
        if kind in SINGLE_CHOICE_TYPES:
            return to_number(raw)
        elif kind in MULTI_CHOICE_TYPES:
            return self._format_multi_choice(raw)
        elif kind == PromptType.REMOTE_ACTIVITY:
            return self._format_remote_activity(raw)
        elif kind in NUMERIC_TYPES:
            return to_number(raw)
        return raw

    # ------------------------------------------------------------------
    # Single-choice helpers for CSV output
    # ------------------------------------------------------------------

    def single_choice_label(
        self, raw: Any, choices: Optional[Mapping[int, Choice]]
    ) -> Optional[str]:
        """Label of the choice whose key is stored in *raw*, if known."""
        choice = _lookup_choice(raw, choices)
        return choice.label if choice is not None else None

    def single_choice_value(
        self, raw: Any, choices: Optional[Mapping[int, Choice]]
    ) -> Any:
        """The selected choice's value coerced to a number.

        Falls back to the key when the choice has no value, and to the
        numerically coerced raw value when the key is unknown.
        """
        choice = _lookup_choice(raw, choices)
        if choice is None:
            return to_number(raw)
        if choice.value is None:
            return choice.key
        return to_number(choice.value)

    # ------------------------------------------------------------------
    # Type-specific formatters
    # ------------------------------------------------------------------

    def _format_multi_choice(self, raw: Any) -> Any:
        if isinstance(raw, list):
            return raw
        if not isinstance(raw, str):
            logger.warning("Malformed multi-choice value %r; using []", raw)
            return []
        parsed = parse_json(raw)
        if isinstance(parsed, list):
            return parsed
        if NoResponse.parse(raw.strip()) is not None:
            return raw.strip()
        items = parse_choice_list(raw)
        if items is not None:
            return [to_number(item) for item in items]
        logger.warning("Malformed multi-choice value %r; using []", raw)
        return []

    def _format_custom_object(self, raw: Any) -> dict:
        if isinstance(raw, dict):
            return raw
        parsed = parse_json(raw)
        if isinstance(parsed, dict):
            return parsed
        logger.warning("Malformed custom choice object %r; using {}", raw)
        return {}

    def _format_remote_activity(self, raw: Any) -> Any:
        runs = parse_json(raw) if isinstance(raw, str) else raw
        if not isinstance(runs, list):
            logger.warning("Remote activity value %r is not an array of runs", raw)
            return raw if isinstance(raw, str) else str(raw)

        scores: list[float] = []
        for index, run in enumerate(runs):
            score = run.get(REMOTE_ACTIVITY_SCORE_KEY) if isinstance(run, dict) else None
            if not is_number(score):
                logger.warning("Skipping malformed remote activity run %d: %r", index, run)
                continue
            scores.append(float(score))
        if not scores:
            return 0.0
        return sum(scores) / len(scores)


def _is_object_storage(raw: Any) -> bool:
    if isinstance(raw, dict):
        return True
    return isinstance(raw, str) and raw.lstrip().startswith("{")


def _lookup_choice(raw: Any, choices: Optional[Mapping[int, Choice]]) -> Optional[Choice]:
    if not choices:
        return None
    key = parse_number(raw)
    if key is None or not float(key).is_integer():
        return None
    return choices.get(int(key))
