#!/usr/bin/env python3
"""Reconstruct survey results offline from stored rows or a raw upload.

Loads the campaign YAML files, then either:

  - ``rows``: reads a YAML/JSON list of stored response rows and prints the
    reconstructed survey results, or
  - ``upload``: validates one uploaded survey (JSON), turns each answer into
    its stored row and prints the reconstructed result, showing exactly
    what the read path would return for that upload.

Usage::

    # Reconstruct rows exported from storage
    python scripts/reconstruct_rows.py rows urn:campaign:sleep_study rows.yaml

    # Same, rendering single choices as (value, label) pairs for CSV
    python scripts/reconstruct_rows.py rows urn:campaign:sleep_study rows.yaml --csv

    # Check an upload end to end
    python scripts/reconstruct_rows.py upload urn:campaign:sleep_study upload.json -u alice
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Ensure src/ is on sys.path so the script runs from a plain checkout.
# ---------------------------------------------------------------------------
_REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from survey_prompts.campaign import CampaignStore, load_yaml  # noqa: E402
from survey_prompts.config import LOG_FORMAT, load_settings  # noqa: E402
from survey_prompts.errors import SubmissionError  # noqa: E402
from survey_prompts.ingest import SurveyResponseBuilder  # noqa: E402
from survey_prompts.models.read import IndexedResult, ResponseRow  # noqa: E402
from survey_prompts.models.upload import SurveySubmission  # noqa: E402
from survey_prompts.reconstruction import SurveyResponseAssembler  # noqa: E402

logger = logging.getLogger("reconstruct_rows")


def _rows_from_upload(
    submission: SurveySubmission, responses: list, username: str, client: str
) -> list[ResponseRow]:
    """Render built responses as the rows storage would hand back."""
    return [
        ResponseRow(
            username=username,
            timestamp=submission.local_timestamp,
            epoch_millis=submission.time,
            timezone=submission.timezone,
            survey_id=submission.survey_id,
            repeatable_set_id=r.prompt.repeatable_set_id,
            repeatable_set_iteration=r.repeatable_set_iteration,
            prompt_id=r.prompt.id,
            prompt_type=r.prompt.prompt_type,
            response=r.stored_value(),
            client=client,
            location_status=submission.location_status,
            location=submission.location,
            launch_context=submission.survey_launch_context,
            **({"privacy_state": submission.privacy_state} if submission.privacy_state else {}),
        )
        for r in responses
    ]


def _print_results(results: list[IndexedResult]) -> None:
    payload: list[dict[str, Any]] = [r.model_dump(mode="json") for r in results]
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Reconstruct survey results from stored rows or an upload.",
    )
    parser.add_argument(
        "--campaign-dir",
        default=None,
        help="Directory of campaign YAML files (default: SURVEY_CAMPAIGN_DIR or campaigns/)",
    )
    parser.add_argument(
        "--csv",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Render single-choice answers as (value, label) pairs",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="mode", required=True)

    rows_cmd = sub.add_parser("rows", help="Reconstruct a YAML/JSON list of stored rows")
    rows_cmd.add_argument("campaign", help="Campaign URN")
    rows_cmd.add_argument("path", type=Path, help="Rows file (.yaml, .yml or .json)")

    upload_cmd = sub.add_parser("upload", help="Validate and reconstruct one upload")
    upload_cmd.add_argument("campaign", help="Campaign URN")
    upload_cmd.add_argument("path", type=Path, help="Upload JSON file")
    upload_cmd.add_argument("-u", "--username", default="local-user")
    upload_cmd.add_argument("--client", default="cli")

    args = parser.parse_args()

    settings = load_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
    )

    store = CampaignStore(args.campaign_dir or settings.campaign_dir)
    store.load()
    configuration = store.get(args.campaign)
    csv = settings.csv_single_choice_labels if args.csv is None else args.csv
    assembler = SurveyResponseAssembler(configuration, csv=csv)

    if args.mode == "rows":
        raw_rows = load_yaml(args.path)
        if not isinstance(raw_rows, list):
            parser.error(f"{args.path} must contain a list of rows")
        rows = [ResponseRow(**raw) for raw in raw_rows]
    else:
        submission = SurveySubmission(**json.loads(args.path.read_text(encoding="utf-8")))
        try:
            result = SurveyResponseBuilder(configuration).build(submission)
        except SubmissionError as exc:
            for error in exc.errors:
                logger.error("%s: %s", error.prompt_id or "-", error)
            sys.exit(1)
        rows = _rows_from_upload(submission, result.responses, args.username, args.client)

    _print_results(assembler.assemble(rows))


if __name__ == "__main__":
    main()
