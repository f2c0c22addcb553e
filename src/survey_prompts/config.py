"""SDK configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  Entry points
(e.g. ``scripts/reconstruct_rows.py``) call :func:`load_settings` once at
startup.
"""

import os
from dataclasses import dataclass

# Shared log format for entry points
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    """Immutable SDK configuration read from environment at startup."""

    # Campaign directory (None → CampaignStore default, campaigns/ under the repo root)
    campaign_dir: str | None = None

    # Logging
    log_level: str = "INFO"

    # Render single-choice answers as (value, label) pairs for CSV consumers
    csv_single_choice_labels: bool = False


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    """Build settings from ``SURVEY_*`` environment variables."""
    return Settings(
        campaign_dir=os.getenv("SURVEY_CAMPAIGN_DIR") or None,
        log_level=os.getenv("SURVEY_LOG_LEVEL", "INFO").upper(),
        csv_single_choice_labels=_env_flag("SURVEY_CSV_LABELS"),
    )
