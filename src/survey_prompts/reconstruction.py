"""SurveyResponseAssembler — folds stored response rows into survey results.

Storage returns one row per stored prompt answer, in whatever order its
query produced.  Rows sharing an :class:`IndexedResultKey` (user, survey
time, survey id and, for repeatable sets, set id and iteration) describe
one logical survey instance.  The assembler groups them, attaches prompt
metadata and choice glossaries from the campaign configuration, and
computes each answer's display value once, as the row is merged.

Usage::

    assembler = SurveyResponseAssembler(configuration)
    results = assembler.assemble(rows)                # any iterable
    results = await assembler.assemble_async(stream)  # any async iterable

Results come back in first-seen key order.  A row repeating a
(key, prompt_id) pair overwrites the earlier entry.  Errors raised by the
row source propagate unchanged; no partial result is returned.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterable, Iterable, Optional

from pydantic import ValidationError

from survey_prompts.constants import CHOICE_TYPES, CUSTOM_CHOICE_TYPES, SINGLE_CHOICE_TYPES
from survey_prompts.formatter import DisplayValueFormatter
from survey_prompts.interfaces import ConfigurationLookup
from survey_prompts.models.prompt import Choice, ChoicePrompt, CustomChoice, Prompt
from survey_prompts.models.read import (
    IndexedResult,
    IndexedResultBuilder,
    IndexedResultKey,
    PromptMetadata,
    ResponseRow,
    SingleChoiceValueAndLabel,
)
from survey_prompts.parsing import parse_json

logger = logging.getLogger(__name__)


class SurveyResponseAssembler:
    """Groups ResponseRows into IndexedResults for one campaign.

    Args:
        configuration: lookup for survey info, prompt definitions and
            choice glossaries
        formatter: display-value formatter (a default one if omitted)
        csv: when True, single-choice answers are rendered as
            :class:`SingleChoiceValueAndLabel` pairs instead of the key
    """

    def __init__(
        self,
        configuration: ConfigurationLookup,
        formatter: Optional[DisplayValueFormatter] = None,
        *,
        csv: bool = False,
    ) -> None:
        self._configuration = configuration
        self._formatter = formatter or DisplayValueFormatter()
        self._csv = csv

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def assemble(self, rows: Iterable[ResponseRow]) -> list[IndexedResult]:
        """Fold *rows* into one IndexedResult per distinct key."""
        builders: dict[IndexedResultKey, IndexedResultBuilder] = {}
        count = 0
        for row in rows:
            self._merge(builders, row)
            count += 1
        return self._finish(builders, count)

    async def assemble_async(
        self, rows: AsyncIterable[ResponseRow]
    ) -> list[IndexedResult]:
        """Same as :meth:`assemble`, consuming an async row stream."""
        builders: dict[IndexedResultKey, IndexedResultBuilder] = {}
        count = 0
        async for row in rows:
            self._merge(builders, row)
            count += 1
        return self._finish(builders, count)

    # ------------------------------------------------------------------
    # Fold steps
    # ------------------------------------------------------------------

    def _merge(
        self,
        builders: dict[IndexedResultKey, IndexedResultBuilder],
        row: ResponseRow,
    ) -> None:
        key = row.key
        builder = builders.get(key)
        if builder is None:
            survey_info = self._configuration.get_survey_info(row.survey_id)
            if survey_info is None:
                logger.warning("Survey %s not found in configuration", row.survey_id)
            builder = IndexedResultBuilder(row, survey_info)
            builders[key] = builder

        prompt = self._configuration.get_prompt(
            row.survey_id, row.repeatable_set_id, row.prompt_id
        )
        glossary: Optional[dict[int, Choice]] = None
        if row.prompt_type.value in CHOICE_TYPES:
            glossary = self._configuration.get_choice_glossary(
                row.survey_id, row.repeatable_set_id, row.prompt_id
            )
            if row.prompt_type.value in CUSTOM_CHOICE_TYPES:
                glossary = self._with_row_choices(row, prompt, glossary)

        builder.add_prompt(
            row.prompt_id,
            self._display_value(row, glossary),
            self._metadata(row, prompt),
            {k: c.label for k, c in glossary.items()} if glossary is not None else None,
        )

    def _with_row_choices(
        self, row: ResponseRow, prompt: Optional[Prompt], glossary: dict[int, Choice]
    ) -> dict[int, Choice]:
        # Static keys are fixed; the row's custom choices replace recorded ones.
        static = prompt.choice_glossary() if isinstance(prompt, ChoicePrompt) else {}
        merged = dict(glossary)
        for choice in _row_custom_choices(row):
            if choice.choice_id not in static:
                merged[choice.choice_id] = choice.to_choice()
        return merged

    def _metadata(self, row: ResponseRow, prompt: Optional[Prompt]) -> PromptMetadata:
        if prompt is None:
            logger.warning(
                "Prompt %s (survey %s, repeatable set %s) not found in configuration",
                row.prompt_id,
                row.survey_id,
                row.repeatable_set_id,
            )
            return PromptMetadata(prompt_type=row.prompt_type)
        return PromptMetadata(
            display_label=prompt.display_label,
            display_type=prompt.display_type,
            prompt_text=prompt.text,
            prompt_type=row.prompt_type,
            unit=prompt.unit,
        )

    def _display_value(
        self, row: ResponseRow, glossary: Optional[dict[int, Choice]]
    ) -> Any:
        value = self._formatter.format(row.prompt_type, row.response, glossary)
        if (
            self._csv
            and row.prompt_type.value in SINGLE_CHOICE_TYPES
            and not isinstance(value, (dict, str))
        ):
            return SingleChoiceValueAndLabel(
                value=self._formatter.single_choice_value(row.response, glossary),
                label=self._formatter.single_choice_label(row.response, glossary),
            )
        return value

    def _finish(
        self,
        builders: dict[IndexedResultKey, IndexedResultBuilder],
        row_count: int,
    ) -> list[IndexedResult]:
        results = [builder.freeze() for builder in builders.values()]
        logger.info("Assembled %d rows into %d survey results", row_count, len(results))
        return results


def _row_custom_choices(row: ResponseRow) -> list[CustomChoice]:
    """Custom choices stored with a custom-choice row.

    The row's own choices take precedence over those recorded on the
    configuration, since choice ids are only unique per participant.
    Malformed entries are logged and skipped.
    """
    raw = row.response
    stored = parse_json(raw) if isinstance(raw, str) else raw
    if not isinstance(stored, dict):
        return []
    entries = stored.get("custom_choices")
    if not isinstance(entries, list):
        return []

    choices: list[CustomChoice] = []
    for entry in entries:
        try:
            choices.append(CustomChoice.model_validate(entry))
        except ValidationError:
            logger.warning(
                "Skipping malformed custom choice %r for prompt %s", entry, row.prompt_id
            )
    return choices
