"""survey_prompts — survey prompt definitions, answers and read-time reconstruction.

Public API:
    PromptValidator          — per-type validation of submitted values
    create_response          — builds an immutable PromptResponse from a raw value
    CampaignStore            — loads campaign YAML into typed configuration lookups
    CampaignConfiguration    — survey/prompt/choice lookup for one campaign
    SurveyResponseBuilder    — turns an uploaded survey into PromptResponses
    DisplayValueFormatter    — display values for stored raw answers
    SurveyResponseAssembler  — folds stored rows into IndexedResults

Interfaces:
    ConfigurationLookup      — ABC for campaign configuration lookups

Errors (all ``ValueError`` subclasses):
    PromptResponseError, ResponseValidationError, UnskippablePromptSkippedError,
    CustomChoiceError, InvalidResponseShapeError, SubmissionError
"""

from survey_prompts.campaign import CampaignConfiguration, CampaignStore
from survey_prompts.errors import (
    CustomChoiceError,
    InvalidResponseShapeError,
    PromptResponseError,
    ResponseValidationError,
    SubmissionError,
    UnskippablePromptSkippedError,
)
from survey_prompts.formatter import DisplayValueFormatter
from survey_prompts.ingest import SubmissionResult, SurveyResponseBuilder
from survey_prompts.interfaces import ConfigurationLookup
from survey_prompts.reconstruction import SurveyResponseAssembler
from survey_prompts.responses import create_response
from survey_prompts.validator import PromptValidator

__all__ = [
    # Validation & construction
    "PromptValidator",
    "create_response",
    # Configuration
    "CampaignConfiguration",
    "CampaignStore",
    "ConfigurationLookup",
    # Ingestion
    "SubmissionResult",
    "SurveyResponseBuilder",
    # Read side
    "DisplayValueFormatter",
    "SurveyResponseAssembler",
    # Errors
    "CustomChoiceError",
    "InvalidResponseShapeError",
    "PromptResponseError",
    "ResponseValidationError",
    "SubmissionError",
    "UnskippablePromptSkippedError",
]
