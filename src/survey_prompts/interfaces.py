"""Abstract interface for the campaign configuration collaborator.

The reconstruction pipeline and the ingestion builder only need to look up
survey and prompt definitions; they do not care where those come from.
The SDK ships one implementation,
:class:`survey_prompts.campaign.CampaignConfiguration`, backed by YAML
campaign files.

Typical read flow::

    configuration: ConfigurationLookup = store.get(campaign_urn)
    assembler = SurveyResponseAssembler(configuration)
    results = assembler.assemble(rows)
"""

from abc import ABC, abstractmethod
from typing import Optional

from survey_prompts.models.prompt import BasePrompt, Choice
from survey_prompts.models.read import SurveyInfo


class ConfigurationLookup(ABC):
    """Read-only view of one campaign's survey definitions."""

    @abstractmethod
    def get_survey_info(self, survey_id: str) -> Optional[SurveyInfo]:
        """Return the survey's title and description.

        Parameters
        ----------
        survey_id:
            Identifier of a survey within the campaign.

        Returns
        -------
        SurveyInfo or None
            None when the campaign has no such survey.
        """

    @abstractmethod
    def get_prompt(
        self,
        survey_id: str,
        repeatable_set_id: Optional[str],
        prompt_id: str,
    ) -> Optional[BasePrompt]:
        """Return the prompt definition, or None if it is unknown.

        Parameters
        ----------
        survey_id:
            Identifier of the survey containing the prompt.
        repeatable_set_id:
            Identifier of the enclosing repeatable set, or None for a
            top-level prompt.
        prompt_id:
            Identifier of the prompt within the survey.
        """

    @abstractmethod
    def get_choice_glossary(
        self,
        survey_id: str,
        repeatable_set_id: Optional[str],
        prompt_id: str,
    ) -> dict[int, Choice]:
        """Return the full choice set for a choice prompt, keyed by choice key.

        Includes any custom choices recorded against the prompt.  Returns an
        empty dict for unknown or non-choice prompts.
        """
