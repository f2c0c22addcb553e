"""Prompt and row builders shared by the test modules.

Each builder fills in the fields every prompt needs (text, display type,
display label) so tests only spell out what they exercise.
"""

from typing import Any

from survey_prompts.models.prompt import prompt_mapper
from survey_prompts.models.read import ResponseRow

SLEEP_URN = "urn:campaign:sleep_study"


def make_prompt(prompt_type: str, prompt_id: str = "p1", **fields: Any):
    """Build a prompt of *prompt_type* with sensible defaults for required fields."""
    data = {
        "id": prompt_id,
        "prompt_type": prompt_type,
        "text": f"Question {prompt_id}?",
        "display_type": "measurement",
        "display_label": prompt_id.upper(),
    }
    if fields.get("skippable") and "skip_label" not in fields:
        data["skip_label"] = "Skip"
    data.update(fields)
    return prompt_mapper[prompt_type](**data)


def number_prompt(prompt_id: str = "p1", **fields: Any):
    return make_prompt("number", prompt_id, **{"min": 1, "max": 10, **fields})


def single_choice_prompt(prompt_id: str = "p1", prompt_type: str = "single_choice", **fields: Any):
    choices = fields.pop(
        "choices",
        [
            {"key": 0, "label": "Low", "value": 1},
            {"key": 1, "label": "Medium", "value": 2},
            {"key": 2, "label": "High", "value": 3},
        ],
    )
    return make_prompt(prompt_type, prompt_id, choices=choices, **fields)


def multi_choice_prompt(prompt_id: str = "p1", prompt_type: str = "multi_choice", **fields: Any):
    choices = fields.pop(
        "choices",
        [
            {"key": 0, "label": "a"},
            {"key": 1, "label": "b"},
            {"key": 2, "label": "c"},
        ],
    )
    return make_prompt(prompt_type, prompt_id, choices=choices, **fields)


def make_row(prompt_id: str, prompt_type: str, response: Any, **overrides: Any) -> ResponseRow:
    """Build a stored response row for the sleep_study morning survey."""
    data = {
        "username": "alice",
        "timestamp": "2026-10-18 07:30:00",
        "epoch_millis": 1792309800000,
        "timezone": "UTC",
        "survey_id": "morning",
        "prompt_id": prompt_id,
        "prompt_type": prompt_type,
        "response": response,
        "client": "android",
        "location_status": "unavailable",
        "privacy_state": "private",
    }
    data.update(overrides)
    return ResponseRow(**data)
