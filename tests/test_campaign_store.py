"""CampaignStore tests — loading campaign YAML and configuration lookups."""

import pytest
from pydantic import ValidationError

from helpers.factories import SLEEP_URN
from survey_prompts.campaign import CampaignConfiguration, CampaignStore
from survey_prompts.config import load_settings
from survey_prompts.models.campaign import CampaignDefinition, RepeatableSet
from survey_prompts.models.enums import PromptType
from survey_prompts.models.prompt import CustomChoice, NumberPrompt, SingleChoicePrompt

_PROMPT = """
      - id: {pid}
        prompt_type: number
        text: How many?
        display_type: count
        display_label: Count
        min: 0
        max: 5
"""


def _campaign_yaml(urn, prompt_ids=("a",)):
    prompts = "".join(_PROMPT.format(pid=pid) for pid in prompt_ids)
    return (
        f"urn: {urn}\n"
        "name: Test\n"
        "surveys:\n"
        "  - id: s1\n"
        "    title: Survey one\n"
        "    prompts:" + prompts
    )


# =====================================================================
# Loading
# =====================================================================


class TestLoading:
    """Directory scanning and definition errors."""

    def test_sample_campaign_loaded(self, store):
        """The bundled sample campaign is available by URN."""
        assert SLEEP_URN in store.urns
        config = store.get(SLEEP_URN)
        assert config.urn == SLEEP_URN
        assert [s.id for s in config.campaign.surveys] == ["morning"]

    def test_unknown_urn(self, store):
        """Unknown URNs raise KeyError."""
        with pytest.raises(KeyError, match="Unknown campaign"):
            store.get("urn:campaign:nope")

    def test_missing_directory(self, tmp_path):
        """Loading a missing directory fails loudly."""
        with pytest.raises(FileNotFoundError):
            CampaignStore(tmp_path / "missing").load()

    def test_duplicate_urn(self, tmp_path):
        """Two files declaring one URN are rejected."""
        (tmp_path / "a.yaml").write_text(_campaign_yaml("urn:x"), encoding="utf-8")
        (tmp_path / "b.yaml").write_text(_campaign_yaml("urn:x"), encoding="utf-8")
        with pytest.raises(ValueError, match="Duplicate campaign URN"):
            CampaignStore(tmp_path).load()

    def test_non_mapping_file(self, tmp_path):
        """A campaign file must hold a mapping."""
        (tmp_path / "a.yaml").write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ValueError, match="must contain a mapping"):
            CampaignStore(tmp_path).load()

    def test_duplicate_prompt_ids(self, tmp_path):
        """Prompt ids are unique within a survey."""
        (tmp_path / "a.yaml").write_text(_campaign_yaml("urn:x", ("a", "a")), encoding="utf-8")
        with pytest.raises(ValidationError, match="duplicate prompt ids"):
            CampaignStore(tmp_path).load()

    def test_add_definition(self, tmp_path):
        """Built definitions can be registered without a file."""
        (tmp_path / "a.yaml").write_text(_campaign_yaml("urn:x"), encoding="utf-8")
        store = CampaignStore(tmp_path)
        store.load()
        campaign = CampaignDefinition(urn="urn:y", name="Y", surveys=[])
        config = store.add(campaign)
        assert store.get("urn:y") is config
        assert sorted(store.urns) == ["urn:x", "urn:y"]


class TestRepeatableSets:
    """Prompts inside a repeatable set carry the set id."""

    def test_set_id_stamped_from_yaml(self, configuration):
        """Every set prompt has repeatable_set_id == the set id."""
        rs = configuration.get_survey("morning").get_repeatable_set("naps")
        assert {p.repeatable_set_id for p in rs.prompts} == {"naps"}
        top = configuration.get_survey("morning").prompts
        assert all(p.repeatable_set_id is None for p in top)

    def test_set_id_stamped_on_instances(self):
        """Prompt instances are copied with the set id."""
        prompt = NumberPrompt(
            id="n", text="How many?", display_type="count", display_label="N", min=0, max=3
        )
        rs = RepeatableSet(id="loop", prompts=[prompt])
        assert rs.prompts[0].repeatable_set_id == "loop"
        assert prompt.repeatable_set_id is None

    def test_skippable_set_needs_label(self):
        """A skippable set requires a skip label."""
        with pytest.raises(ValidationError, match="skip_label"):
            RepeatableSet(id="loop", skippable=True, prompts=[])


# =====================================================================
# Lookups
# =====================================================================


class TestLookups:
    """ConfigurationLookup operations on the sample campaign."""

    def test_survey_info(self, configuration):
        """Title and description of a survey, None for unknown ids."""
        info = configuration.get_survey_info("morning")
        assert info.title == "Morning check-in"
        assert info.description.startswith("Answer within")
        assert configuration.get_survey_info("evening") is None

    def test_get_prompt(self, configuration):
        """Prompts are found by survey, set and prompt id."""
        quality = configuration.get_prompt("morning", None, "quality")
        assert isinstance(quality, SingleChoicePrompt)
        assert configuration.get_prompt("morning", "naps", "nap_minutes").unit == "minutes"
        assert configuration.get_prompt("morning", None, "nap_minutes") is None
        assert configuration.prompt_type_for("morning", None, "reaction") is PromptType.REMOTE_ACTIVITY

    def test_choice_glossary(self, configuration):
        """The glossary maps keys to choices; non-choice prompts give {}."""
        glossary = configuration.get_choice_glossary("morning", None, "quality")
        assert {k: c.label for k, c in glossary.items()} == {0: "Poorly", 1: "Okay", 2: "Well"}
        assert glossary[2].value == 3
        assert configuration.get_choice_glossary("morning", None, "hours_slept") == {}

    def test_custom_choices_recorded(self, configuration):
        """Recorded custom choices join the glossary; the first label wins."""
        configuration.add_custom_choices(
            "morning", None, "aids",
            [CustomChoice(choice_id=4, choice_value="Tea")],
        )
        configuration.add_custom_choices(
            "morning", None, "aids",
            [CustomChoice(choice_id=4, choice_value="Coffee")],
        )
        glossary = configuration.get_choice_glossary("morning", None, "aids")
        assert glossary[4].label == "Tea"
        assert glossary[0].label == "Melatonin"

    def test_fixture_is_isolated(self, configuration):
        """Custom choices from other tests are not visible here."""
        assert 4 not in configuration.get_choice_glossary("morning", None, "aids")

    def test_get_survey_unknown(self, configuration):
        """get_survey raises KeyError for unknown surveys."""
        with pytest.raises(KeyError):
            configuration.get_survey("evening")

    def test_configuration_from_definition(self, store):
        """A configuration can wrap any campaign definition."""
        config = CampaignConfiguration(store.get(SLEEP_URN).campaign)
        assert config.get_prompt("morning", None, "notes").max == 500


class TestSettings:
    """SURVEY_* environment settings."""

    def test_defaults(self, monkeypatch):
        """Unset variables give the development defaults."""
        for name in ("SURVEY_CAMPAIGN_DIR", "SURVEY_LOG_LEVEL", "SURVEY_CSV_LABELS"):
            monkeypatch.delenv(name, raising=False)
        settings = load_settings()
        assert settings.campaign_dir is None
        assert settings.log_level == "INFO"
        assert settings.csv_single_choice_labels is False

    def test_overrides(self, monkeypatch):
        """Environment variables override the defaults."""
        monkeypatch.setenv("SURVEY_CAMPAIGN_DIR", "/srv/campaigns")
        monkeypatch.setenv("SURVEY_LOG_LEVEL", "debug")
        monkeypatch.setenv("SURVEY_CSV_LABELS", "yes")
        settings = load_settings()
        assert settings.campaign_dir == "/srv/campaigns"
        assert settings.log_level == "DEBUG"
        assert settings.csv_single_choice_labels is True
