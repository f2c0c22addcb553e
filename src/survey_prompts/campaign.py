"""CampaignStore — loads campaign YAML files into typed configuration lookups.

Each ``*.yaml`` file under the campaign directory holds one campaign.  The
store is loaded once at startup and hands out one
:class:`CampaignConfiguration` per campaign URN.

Usage::

    store = CampaignStore()          # defaults to campaigns/ under the repo root
    store.load()                     # parse all YAML files

    config = store.get("urn:campaign:sleep")
    prompt = config.get_prompt("morning", None, "hours_slept")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from survey_prompts.constants import CHOICE_TYPES
from survey_prompts.interfaces import ConfigurationLookup
from survey_prompts.models.campaign import CampaignDefinition, SurveyDefinition
from survey_prompts.models.enums import PromptType
from survey_prompts.models.prompt import BasePrompt, Choice, CustomChoice
from survey_prompts.models.read import SurveyInfo

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# CampaignConfiguration
# ---------------------------------------------------------------------------

class CampaignConfiguration(ConfigurationLookup):
    """Lookup over one campaign's surveys, prompts and recorded custom choices."""

    def __init__(self, campaign: CampaignDefinition) -> None:
        self.campaign = campaign
        self._surveys: dict[str, SurveyDefinition] = {s.id: s for s in campaign.surveys}
        # (survey_id, repeatable_set_id, prompt_id) -> prompt
        self._prompts: dict[tuple[str, Optional[str], str], BasePrompt] = {}
        for survey in campaign.surveys:
            for prompt in survey.prompts:
                self._prompts[(survey.id, None, prompt.id)] = prompt
            for rs in survey.repeatable_sets:
                for prompt in rs.prompts:
                    self._prompts[(survey.id, rs.id, prompt.id)] = prompt
        # Same key -> {choice_id: CustomChoice}
        self._custom_choices: dict[tuple[str, Optional[str], str], dict[int, CustomChoice]] = {}

    @property
    def urn(self) -> str:
        return self.campaign.urn

    # ------------------------------------------------------------------
    # ConfigurationLookup
    # ------------------------------------------------------------------

    def get_survey_info(self, survey_id: str) -> Optional[SurveyInfo]:
        survey = self._surveys.get(survey_id)
        if survey is None:
            return None
        return SurveyInfo(title=survey.title, description=survey.description)

    def get_prompt(
        self,
        survey_id: str,
        repeatable_set_id: Optional[str],
        prompt_id: str,
    ) -> Optional[BasePrompt]:
        return self._prompts.get((survey_id, repeatable_set_id, prompt_id))

    def get_choice_glossary(
        self,
        survey_id: str,
        repeatable_set_id: Optional[str],
        prompt_id: str,
    ) -> dict[int, Choice]:
        prompt = self.get_prompt(survey_id, repeatable_set_id, prompt_id)
        if prompt is None or prompt.prompt_type not in CHOICE_TYPES:
            return {}
        custom = self._custom_choices.get((survey_id, repeatable_set_id, prompt_id), {})
        return prompt.merged_choices(list(custom.values()))

    # ------------------------------------------------------------------
    # Extra lookups
    # ------------------------------------------------------------------

    def get_survey(self, survey_id: str) -> SurveyDefinition:
        """Return a survey definition.

        Raises:
            KeyError: if the campaign has no such survey.
        """
        return self._surveys[survey_id]

    def prompt_type_for(
        self,
        survey_id: str,
        repeatable_set_id: Optional[str],
        prompt_id: str,
    ) -> Optional[PromptType]:
        prompt = self.get_prompt(survey_id, repeatable_set_id, prompt_id)
        return prompt.kind if prompt is not None else None

    def add_custom_choices(
        self,
        survey_id: str,
        repeatable_set_id: Optional[str],
        prompt_id: str,
        choices: Iterable[CustomChoice],
    ) -> None:
        """Record custom choices so later glossary lookups include them.

        A choice id already recorded keeps its first label.  Ids are only
        unique per participant, so this is a fallback: choices stored with
        a response row take precedence when the row is reconstructed.
        """
        recorded = self._custom_choices.setdefault(
            (survey_id, repeatable_set_id, prompt_id), {}
        )
        for choice in choices:
            recorded.setdefault(choice.choice_id, choice)


# ---------------------------------------------------------------------------
# CampaignStore
# ---------------------------------------------------------------------------

class CampaignStore:
    """Loads every campaign YAML under a directory and provides lookup by URN.

    Attributes populated after :meth:`load`:

        campaigns — dict[urn, CampaignConfiguration]
    """

    def __init__(self, campaign_dir: str | Path | None = None) -> None:
        if campaign_dir is None:
            campaign_dir = find_repo_root() / "campaigns"
        self._base = Path(campaign_dir)

        # Populated by load()
        self.campaigns: dict[str, CampaignConfiguration] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse all ``*.yaml`` files under the campaign directory.

        Call this once at startup.  Raises ``FileNotFoundError`` if the
        directory is missing and ``ValueError`` on invalid definitions or
        duplicate URNs.
        """
        if not self._base.is_dir():
            raise FileNotFoundError(f"Missing campaign directory: {self._base}")
        for path in sorted(self._base.glob("*.yaml")):
            self._load_campaign(path)
        logger.info(
            "CampaignStore loaded: %d campaigns, %d surveys",
            len(self.campaigns),
            sum(len(c.campaign.surveys) for c in self.campaigns.values()),
        )

    def _load_campaign(self, path: Path) -> None:
        """Load one campaign file; the file must hold a single mapping."""
        raw = load_yaml(path)
        if not isinstance(raw, dict):
            raise ValueError(f"Campaign file {path.name} must contain a mapping")
        campaign = CampaignDefinition(**raw)
        if campaign.urn in self.campaigns:
            raise ValueError(f"Duplicate campaign URN '{campaign.urn}' in {path.name}")
        self.campaigns[campaign.urn] = CampaignConfiguration(campaign)

    def add(self, campaign: CampaignDefinition) -> CampaignConfiguration:
        """Register an already-built campaign definition (e.g. in tests)."""
        config = CampaignConfiguration(campaign)
        self.campaigns[campaign.urn] = config
        return config

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    @property
    def urns(self) -> list[str]:
        return list(self.campaigns)

    def get(self, urn: str) -> CampaignConfiguration:
        """Look up a campaign by URN.

        Args:
            urn: campaign URN, e.g. ``urn:campaign:sleep``

        Returns:
            The campaign's configuration lookup.

        Raises:
            KeyError: if no campaign with that URN was loaded.
        """
        if urn not in self.campaigns:
            raise KeyError(f"Unknown campaign '{urn}'")
        return self.campaigns[urn]
