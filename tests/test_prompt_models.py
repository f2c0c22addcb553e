"""Prompt definition model tests — construction-time constraint checks.

Every prompt type fails fast on invalid constraint combinations: blank
required text, missing skip label, inverted bounds, out-of-range defaults,
duplicate choices and impossible remote-activity run counts.  Definitions
are immutable once built.
"""

import pytest
from pydantic import TypeAdapter, ValidationError

from helpers.factories import (
    make_prompt,
    multi_choice_prompt,
    number_prompt,
    single_choice_prompt,
)
from survey_prompts.models.enums import NoResponse, PromptType
from survey_prompts.models.prompt import (
    Choice,
    CustomChoice,
    NumberPrompt,
    Prompt,
    RemoteActivityPrompt,
    prompt_mapper,
)


# =====================================================================
# Common fields
# =====================================================================


class TestCommonFields:
    """Fields and checks shared by every prompt type."""

    def test_blank_text_rejected(self):
        """A prompt with whitespace-only text cannot be built."""
        with pytest.raises(ValidationError, match="text must not be blank"):
            number_prompt(text="   ")

    def test_blank_display_label_rejected(self):
        """display_label is required and must not be blank."""
        with pytest.raises(ValidationError, match="display_label"):
            number_prompt(display_label="")

    def test_skippable_requires_skip_label(self):
        """skippable=True without a skip_label is an invalid definition."""
        with pytest.raises(ValidationError, match="skip_label"):
            number_prompt(skippable=True, skip_label=None)

    def test_unknown_display_type_rejected(self):
        """display_type must be one of the DisplayType values."""
        with pytest.raises(ValidationError):
            number_prompt(display_type="chart")

    def test_prompts_are_frozen(self):
        """Definitions are immutable once constructed."""
        prompt = number_prompt()
        with pytest.raises(ValidationError):
            prompt.min = 5

    def test_kind_property(self):
        """kind exposes the prompt type as a PromptType member."""
        assert number_prompt().kind is PromptType.NUMBER

    def test_mapper_covers_every_prompt_type(self):
        """prompt_mapper has one class per PromptType value."""
        assert set(prompt_mapper) == {t.value for t in PromptType}

    def test_discriminated_union_parses_by_prompt_type(self):
        """The Prompt union picks the class from the prompt_type field."""
        adapter = TypeAdapter(Prompt)
        prompt = adapter.validate_python(
            {
                "id": "ra",
                "prompt_type": "remote_activity",
                "text": "Play",
                "display_type": "measurement",
                "display_label": "Score",
                "package": "org.example",
                "activity": "org.example.Game",
            }
        )
        assert isinstance(prompt, RemoteActivityPrompt)


# =====================================================================
# Bounded prompts
# =====================================================================


class TestBoundedPrompt:
    """number / hours_before_now constraint combinations."""

    def test_valid_bounds(self):
        """min <= default <= max builds fine."""
        prompt = number_prompt(min=0, max=5, default=3)
        assert isinstance(prompt, NumberPrompt)
        assert prompt.whole_number is True, "whole_number defaults to True"

    def test_max_below_min_rejected(self):
        """max < min is an invalid combination."""
        with pytest.raises(ValidationError, match="less than min"):
            number_prompt(min=5, max=1)

    def test_default_out_of_range_rejected(self):
        """A default outside [min, max] is rejected."""
        with pytest.raises(ValidationError, match="outside"):
            number_prompt(min=1, max=10, default=11)

    def test_fractional_bound_rejected_for_whole_numbers(self):
        """whole_number prompts need integral bounds."""
        with pytest.raises(ValidationError, match="whole number"):
            number_prompt(min=0.5, max=10)

    def test_fractional_bounds_allowed_when_not_whole(self):
        """whole_number=False allows decimal bounds and defaults."""
        prompt = number_prompt(min=0.5, max=2.5, default=1.5, whole_number=False)
        assert prompt.default == 1.5

    def test_hours_before_now_shares_rules(self):
        """hours_before_now uses the same bounds checks."""
        with pytest.raises(ValidationError):
            make_prompt("hours_before_now", min=10, max=0)

    def test_to_json_includes_bounds(self):
        """to_json exposes bounds, default and unit for consumers."""
        data = number_prompt(min=1, max=9, default=2, unit="hours").to_json()
        assert data == {
            "unit": "hours",
            "prompt_type": "number",
            "display_type": "measurement",
            "min": 1,
            "max": 9,
            "default": 2,
        }


# =====================================================================
# Choice prompts
# =====================================================================


class TestChoicePrompt:
    """Choice set uniqueness and defaults."""

    def test_duplicate_keys_rejected(self):
        """Choice keys must be unique within a prompt."""
        with pytest.raises(ValidationError, match="duplicate choice keys"):
            single_choice_prompt(
                choices=[{"key": 0, "label": "a"}, {"key": 0, "label": "b"}]
            )

    def test_duplicate_labels_rejected(self):
        """Choice labels must be unique within a prompt."""
        with pytest.raises(ValidationError, match="duplicate choice labels"):
            multi_choice_prompt(
                choices=[{"key": 0, "label": "a"}, {"key": 1, "label": "a"}]
            )

    def test_negative_key_rejected(self):
        """Choice keys are non-negative integers."""
        with pytest.raises(ValidationError):
            Choice(key=-1, label="x")

    def test_empty_choice_set_rejected(self):
        """A choice prompt needs at least one choice."""
        with pytest.raises(ValidationError):
            single_choice_prompt(choices=[])

    def test_single_default_must_be_a_key(self):
        """A single-choice default is an existing choice key."""
        assert single_choice_prompt(default=1).default == 1
        with pytest.raises(ValidationError, match="default key"):
            single_choice_prompt(default=7)

    def test_multi_default_keys_must_exist(self):
        """Every multi-choice default key must be a choice."""
        assert multi_choice_prompt(default=[0, 2]).default == [0, 2]
        with pytest.raises(ValidationError, match="default keys"):
            multi_choice_prompt(default=[0, 9])

    def test_choices_from_mapping(self):
        """Choices may be written as a {key: {label, value}} mapping."""
        prompt = single_choice_prompt(
            choices={0: {"label": "No", "value": 0}, 1: {"label": "Yes", "value": 1}}
        )
        assert [c.key for c in prompt.choices] == [0, 1]
        assert prompt.choice_glossary()[1].label == "Yes"

    def test_match_value_falls_back_to_label(self):
        """A choice without a value is matched by its label."""
        assert Choice(key=0, label="Home").match_value == "Home"
        assert Choice(key=0, label="Home", value=5).match_value == 5

    def test_find_choice_uses_value_not_key(self):
        """find_choice matches on the choice value, never the key."""
        prompt = single_choice_prompt()
        assert prompt.find_choice(3).key == 2
        assert prompt.find_choice("2").key == 1, "numeric strings match numbers"
        assert prompt.find_choice(0) is None, "0 is a key, not a value"

    def test_merged_choices_include_custom(self):
        """Custom choices extend the static set; static keys win clashes."""
        prompt = single_choice_prompt(prompt_type="single_choice_custom")
        merged = prompt.merged_choices(
            [
                CustomChoice(choice_id=10, choice_value="Extreme"),
                CustomChoice(choice_id=0, choice_value="Ignored"),
            ]
        )
        assert merged[10].label == "Extreme"
        assert merged[0].label == "Low"

    def test_custom_choice_requires_label(self):
        """Custom choices need a non-empty label."""
        with pytest.raises(ValidationError):
            CustomChoice(choice_id=1, choice_value=" ")


# =====================================================================
# Text, media and remote activity prompts
# =====================================================================


class TestOtherPrompts:
    """Text bounds, media limits and remote-activity run counts."""

    def test_text_bounds(self):
        """Text length bounds must be ordered and the default must fit."""
        assert make_prompt("text", min=1, max=5, default="abc").default == "abc"
        with pytest.raises(ValidationError):
            make_prompt("text", min=5, max=1)
        with pytest.raises(ValidationError):
            make_prompt("text", min=1, max=2, default="too long")

    def test_media_limits_must_be_positive(self):
        """Media size/duration limits are positive when given."""
        assert make_prompt("photo", resolution=800).resolution == 800
        with pytest.raises(ValidationError):
            make_prompt("video", max_seconds=0)
        with pytest.raises(ValidationError):
            make_prompt("document", max_filesize=-1)

    def test_remote_activity_min_runs_limit(self):
        """min_runs greater than retries + 1 can never be satisfied."""
        base = {"package": "org.example", "activity": "org.example.Game"}
        prompt = make_prompt("remote_activity", retries=2, min_runs=3, **base)
        assert prompt.max_runs == 3
        with pytest.raises(ValidationError, match="min_runs"):
            make_prompt("remote_activity", retries=1, min_runs=3, **base)

    def test_remote_activity_requires_package(self):
        """package and activity must not be blank."""
        with pytest.raises(ValidationError):
            make_prompt("remote_activity", package="", activity="x")

    def test_remote_activity_input_length(self):
        """input longer than the configured limit is rejected."""
        with pytest.raises(ValidationError, match="input exceeds"):
            make_prompt(
                "remote_activity",
                package="org.example",
                activity="org.example.Game",
                input="x" * 65537,
            )


class TestNoResponse:
    """Parsing of NoResponse sentinels."""

    def test_parse_names(self):
        """Exact names and enum members parse; other values do not."""
        assert NoResponse.parse("SKIPPED") is NoResponse.SKIPPED
        assert NoResponse.parse(NoResponse.NOT_DISPLAYED) is NoResponse.NOT_DISPLAYED
        assert NoResponse.parse("skipped") is None
        assert NoResponse.parse(3) is None
