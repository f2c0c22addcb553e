"""Pure parsing helpers shared by the validator and the display formatter.

None of these raise on malformed input; they return ``None`` (or the
original value, for :func:`to_number`) so callers decide how to react.
"""

from __future__ import annotations

import json
import re
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Union

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")

# Ordered numeric parse attempts; the first matching pattern wins.
_NUMBER_PARSERS = (
    (_INTEGER_RE, int),
    (_DECIMAL_RE, float),
)


def parse_number(value: Any) -> Optional[Union[int, float, Decimal]]:
    """Parse *value* as an integer, falling back to a decimal.

    Returns None when neither attempt succeeds.  Booleans are not numbers.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    for pattern, convert in _NUMBER_PARSERS:
        if pattern.match(text):
            return convert(text)
    return None


def to_number(value: Any) -> Any:
    """Best-effort numeric coercion: the parsed number, else *value* unchanged."""
    number = parse_number(value)
    return value if number is None else number


def parse_json(value: str) -> Any:
    """Decode a JSON document, returning None if it is malformed."""
    try:
        return json.loads(value)
    except ValueError:
        return None


def parse_choice_list(value: str) -> Optional[list[Any]]:
    """Parse a multi-choice string into its elements.

    A JSON array is tried first.  Otherwise the string must be enclosed in
    ``[`` and ``]``; the body is split on every comma, elements are stripped
    and empty elements dropped, so ``"[a, b]"`` gives ``["a", "b"]``.  Labels
    containing commas therefore need the JSON form.  Anything else is
    malformed and gives None.
    """
    text = value.strip()
    parsed = parse_json(text)
    if isinstance(parsed, list):
        return parsed
    if len(text) >= 2 and text[0] == "[" and text[-1] == "]":
        return [item.strip() for item in text[1:-1].split(",") if item.strip()]
    return None


def parse_timestamp(value: Any) -> Optional[Union[date, datetime]]:
    """Return *value* as a date or datetime, or None if it cannot be read.

    Strings are read as an ISO date-time first, then as an ISO date.  A
    trailing ``Z`` is accepted as UTC.
    """
    if isinstance(value, (date, datetime)):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def parse_uuid(value: Any) -> Optional[uuid.UUID]:
    """Return *value* as a UUID, or None if it is not one."""
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Answer shape readers
# ---------------------------------------------------------------------------

COLLECTION_TYPES = (list, tuple, set, frozenset)


def selected_items(value: Any) -> Optional[list[Any]]:
    """The elements of a multi-choice answer, or None if it is not a list."""
    if isinstance(value, COLLECTION_TYPES):
        return list(value)
    if isinstance(value, str):
        return parse_choice_list(value)
    return None


def activity_runs(value: Any) -> Optional[list[Any]]:
    """The runs of a remote-activity answer; a single object counts as one run."""
    if isinstance(value, str):
        value = parse_json(value)
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        return value
    return None
