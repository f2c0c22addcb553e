"""Constants shared across the survey SDK.

These values are referenced by the validator, formatter and reconstruction
pipeline.  Prompt types are listed by their string value, as written in
campaign files and stored rows.

Several constants can be overridden via environment variables so that
deployments can adjust limits without code changes.
"""

import os

# Maximum length of the ``input`` string handed to a remote activity.
# Overridable via REMOTE_ACTIVITY_MAX_INPUT_LENGTH env var.
REMOTE_ACTIVITY_MAX_INPUT_LENGTH = int(
    os.getenv("REMOTE_ACTIVITY_MAX_INPUT_LENGTH", "65536")
)

# JSON key holding a remote-activity run's numeric result.
REMOTE_ACTIVITY_SCORE_KEY = "score"

# Prompt types whose stored value is a single choice key.
SINGLE_CHOICE_TYPES: set[str] = {"single_choice", "single_choice_custom"}

# Prompt types whose stored value is an array of choice keys.
MULTI_CHOICE_TYPES: set[str] = {"multi_choice", "multi_choice_custom"}

# Choice types that accept per-submission custom choices.
CUSTOM_CHOICE_TYPES: set[str] = {"single_choice_custom", "multi_choice_custom"}

# Every prompt type that carries a choice glossary.
CHOICE_TYPES: set[str] = SINGLE_CHOICE_TYPES | MULTI_CHOICE_TYPES

# Bounded prompt types; their display value is numerically coerced.
NUMERIC_TYPES: set[str] = {"number", "hours_before_now"}

# Prompt types whose answer is a reference (UUID) to separately stored media.
MEDIA_TYPES: set[str] = {"photo", "audio", "video", "document"}
