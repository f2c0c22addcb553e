"""Public model re-exports for survey_prompts.

Consumers should import from ``survey_prompts.models`` rather than
reaching into sub-modules directly.
"""

# --- Enums ---
from survey_prompts.models.enums import (
    DisplayType,
    LocationStatus,
    NoResponse,
    PrivacyState,
    PromptType,
)

# --- Prompts ---
from survey_prompts.models.prompt import (
    AudioPrompt,
    BasePrompt,
    BoundedPrompt,
    Choice,
    ChoicePrompt,
    CustomChoice,
    DocumentPrompt,
    HoursBeforeNowPrompt,
    MultiChoiceCustomPrompt,
    MultiChoicePrompt,
    NumberPrompt,
    PhotoPrompt,
    Prompt,
    RemoteActivityPrompt,
    SingleChoiceCustomPrompt,
    SingleChoicePrompt,
    TextPrompt,
    TimestampPrompt,
    VideoPrompt,
    prompt_mapper,
)

# --- Answers / responses ---
from survey_prompts.models.answer import (
    Answer,
    NotDisplayedAnswer,
    SkippedAnswer,
    ValueAnswer,
)
from survey_prompts.models.response import PromptResponse

# --- Campaign configuration ---
from survey_prompts.models.campaign import (
    CampaignDefinition,
    RepeatableSet,
    SurveyDefinition,
)

# --- Uploads ---
from survey_prompts.models.upload import (
    PromptAnswer,
    RepeatableSetAnswer,
    SurveySubmission,
)

# --- Read side ---
from survey_prompts.models.read import (
    IndexedResult,
    IndexedResultBuilder,
    IndexedResultKey,
    PromptMetadata,
    ResponseRow,
    SingleChoiceValueAndLabel,
    SurveyInfo,
)

__all__ = [
    # Enums
    "DisplayType",
    "LocationStatus",
    "NoResponse",
    "PrivacyState",
    "PromptType",
    # Prompts
    "AudioPrompt",
    "BasePrompt",
    "BoundedPrompt",
    "Choice",
    "ChoicePrompt",
    "CustomChoice",
    "DocumentPrompt",
    "HoursBeforeNowPrompt",
    "MultiChoiceCustomPrompt",
    "MultiChoicePrompt",
    "NumberPrompt",
    "PhotoPrompt",
    "Prompt",
    "RemoteActivityPrompt",
    "SingleChoiceCustomPrompt",
    "SingleChoicePrompt",
    "TextPrompt",
    "TimestampPrompt",
    "VideoPrompt",
    "prompt_mapper",
    # Answers / responses
    "Answer",
    "NotDisplayedAnswer",
    "SkippedAnswer",
    "ValueAnswer",
    "PromptResponse",
    # Campaign
    "CampaignDefinition",
    "RepeatableSet",
    "SurveyDefinition",
    # Uploads
    "PromptAnswer",
    "RepeatableSetAnswer",
    "SurveySubmission",
    # Read side
    "IndexedResult",
    "IndexedResultBuilder",
    "IndexedResultKey",
    "PromptMetadata",
    "ResponseRow",
    "SingleChoiceValueAndLabel",
    "SurveyInfo",
]
