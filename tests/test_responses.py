"""create_response tests — shape check, iteration rules and stored encoding.

A response keeps the submitted value exactly as given; the stored value is
the encoding a response row carries (choice keys, JSON arrays, sentinel
names).
"""

import json
import uuid
from datetime import datetime

import pytest
from pydantic import ValidationError

from helpers.factories import (
    make_prompt,
    multi_choice_prompt,
    number_prompt,
    single_choice_prompt,
)
from survey_prompts.errors import (
    InvalidResponseShapeError,
    ResponseValidationError,
    UnskippablePromptSkippedError,
)
from survey_prompts.models.answer import NotDisplayedAnswer, SkippedAnswer, ValueAnswer
from survey_prompts.models.enums import NoResponse
from survey_prompts.models.response import PromptResponse
from survey_prompts.responses import create_response


# =====================================================================
# Shape
# =====================================================================


class TestShape:
    """Structurally wrong values raise InvalidResponseShapeError."""

    def test_list_for_single_choice(self):
        """A list is the wrong shape for a single choice."""
        with pytest.raises(InvalidResponseShapeError) as exc_info:
            create_response(single_choice_prompt(), None, [1])
        assert exc_info.value.prompt_id == "p1"

    def test_boolean_for_number(self):
        """Booleans are rejected for every prompt type."""
        with pytest.raises(InvalidResponseShapeError):
            create_response(number_prompt(), None, True)

    def test_number_for_text(self):
        """Text prompts only take strings."""
        with pytest.raises(InvalidResponseShapeError):
            create_response(make_prompt("text", max=10), None, 5)

    def test_shape_checked_before_value(self):
        """A constraint violation with the right shape is a validation error."""
        with pytest.raises(ResponseValidationError):
            create_response(single_choice_prompt(), None, 9)

    def test_sentinels_pass_shape_check(self):
        """Sentinel names are accepted for every prompt type."""
        response = create_response(make_prompt("photo"), None, "NOT_DISPLAYED")
        assert isinstance(response.answer, NotDisplayedAnswer)


# =====================================================================
# Iteration
# =====================================================================


class TestIteration:
    """repeatable_set_iteration is present iff the prompt is in a set."""

    def test_top_level_with_iteration_rejected(self):
        """A top-level prompt cannot carry an iteration."""
        with pytest.raises(InvalidResponseShapeError, match="not in a repeatable set"):
            create_response(number_prompt(), 0, 5)

    def test_set_prompt_without_iteration_rejected(self):
        """A prompt inside a set needs an iteration."""
        prompt = number_prompt(repeatable_set_id="naps")
        with pytest.raises(InvalidResponseShapeError, match="needs an iteration"):
            create_response(prompt, None, 5)

    def test_negative_iteration_rejected(self):
        """Iterations start at zero."""
        prompt = number_prompt(repeatable_set_id="naps")
        with pytest.raises(InvalidResponseShapeError, match="negative"):
            create_response(prompt, -1, 5)

    def test_set_prompt_with_iteration(self):
        """A set prompt with a non-negative iteration builds fine."""
        response = create_response(number_prompt(repeatable_set_id="naps"), 2, 5)
        assert response.repeatable_set_iteration == 2

    def test_direct_construction_checks_iteration(self):
        """The model itself refuses an inconsistent iteration."""
        with pytest.raises(ValidationError):
            PromptResponse(
                prompt=number_prompt(),
                repeatable_set_iteration=1,
                answer=ValueAnswer(value=5),
            )


# =====================================================================
# Answers
# =====================================================================


class TestAnswers:
    """The submitted value round-trips unchanged through the response."""

    @pytest.mark.parametrize(
        "prompt,value",
        [
            (number_prompt(), "7"),
            (number_prompt(), 7),
            (single_choice_prompt(), 2),
            (multi_choice_prompt(), "[a, b]"),
            (make_prompt("text", max=20), "slept badly"),
            (make_prompt("timestamp"), "2026-10-18T22:15:00"),
        ],
        ids=["numeric-string", "int", "choice", "multi-string", "text", "timestamp"],
    )
    def test_value_identity(self, prompt, value):
        """value returns exactly what was submitted."""
        response = create_response(prompt, None, value)
        assert response.value == value
        assert type(response.value) is type(value)
        assert response.no_response is None

    def test_skipped(self):
        """SKIPPED on a skippable prompt becomes a SkippedAnswer."""
        response = create_response(number_prompt(skippable=True), None, NoResponse.SKIPPED)
        assert isinstance(response.answer, SkippedAnswer)
        assert response.value is None
        assert response.no_response is NoResponse.SKIPPED

    def test_unskippable_skip_rejected(self):
        """SKIPPED on an unskippable prompt is refused."""
        with pytest.raises(UnskippablePromptSkippedError):
            create_response(number_prompt(), None, "SKIPPED")

    def test_single_choice_label(self):
        """The label resolves through the choice glossary by value."""
        response = create_response(single_choice_prompt(), None, 2)
        assert response.choice.key == 1
        assert response.label == "Medium"

    def test_custom_choice_label(self):
        """A custom label resolves through the submission's custom choices."""
        prompt = single_choice_prompt(prompt_type="single_choice_custom")
        response = create_response(
            prompt, None, "Extreme",
            custom_choices=[{"choice_id": 10, "choice_value": "Extreme"}],
        )
        assert response.label == "Extreme"
        assert set(response.choice_glossary()) == {0, 1, 2, 10}

    def test_responses_are_frozen(self):
        """Responses cannot be mutated after construction."""
        response = create_response(number_prompt(), None, 3)
        with pytest.raises(ValidationError):
            response.repeatable_set_iteration = 1


# =====================================================================
# Stored encoding
# =====================================================================


class TestStoredValue:
    """stored_value() encodes answers for a response row."""

    def test_sentinel_names(self):
        """Sentinels store their names."""
        prompt = number_prompt(skippable=True)
        assert create_response(prompt, None, "SKIPPED").stored_value() == "SKIPPED"
        assert create_response(prompt, None, "NOT_DISPLAYED").stored_value() == "NOT_DISPLAYED"

    def test_number(self):
        """Numeric strings are stored as numbers."""
        assert create_response(number_prompt(), None, " 7 ").stored_value() == "7"

    def test_single_choice_stores_key(self):
        """The selected key, not the submitted value, is stored."""
        assert create_response(single_choice_prompt(), None, 3).stored_value() == "2"

    def test_multi_choice_stores_key_array(self):
        """Multiple choices store a JSON array of keys."""
        response = create_response(multi_choice_prompt(), None, "[a, c]")
        assert json.loads(response.stored_value()) == [0, 2]

    def test_multi_choice_repeated_selection_stored_once(self):
        """A choice selected twice is stored once, keys in definition order."""
        response = create_response(multi_choice_prompt(), None, ["c", "a", "c", "a"])
        assert json.loads(response.stored_value()) == [0, 2], "keys must be unique and ordered"

    def test_custom_multi_choice_repeated_selection_stored_once(self):
        """Repeated selections are dropped from the stored custom value list."""
        prompt = multi_choice_prompt(prompt_type="multi_choice_custom")
        response = create_response(
            prompt, None, ["d", "a", "d"],
            custom_choices=[{"choice_id": 7, "choice_value": "d"}],
        )
        assert json.loads(response.stored_value())["value"] == ["d", "a"]

    def test_custom_choice_object(self):
        """Custom types store the value together with the custom set."""
        prompt = multi_choice_prompt(prompt_type="multi_choice_custom")
        response = create_response(
            prompt, None, ["a", "d"],
            custom_choices=[{"choice_id": 7, "choice_value": "d"}],
        )
        assert json.loads(response.stored_value()) == {
            "value": ["a", "d"],
            "custom_choices": [{"choice_id": 7, "choice_value": "d"}],
        }

    def test_remote_activity_array(self):
        """A single run object is stored as a one-element array."""
        prompt = make_prompt(
            "remote_activity", package="org.example", activity="org.example.Game"
        )
        response = create_response(prompt, None, {"score": 4})
        assert json.loads(response.stored_value()) == [{"score": 4}]

    def test_timestamp_and_media(self):
        """Timestamps store ISO text and media their UUID."""
        stamp = datetime(2026, 10, 18, 22, 15)
        assert (
            create_response(make_prompt("timestamp"), None, stamp).stored_value()
            == "2026-10-18T22:15:00"
        )
        media_id = uuid.uuid4()
        assert create_response(make_prompt("audio"), None, media_id).stored_value() == str(media_id)
