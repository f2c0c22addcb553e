"""Enumerations shared by prompt definitions, responses and stored rows.

All enums subclass ``str`` so they serialize as plain strings in YAML, JSON
and database columns.
"""

import enum


class PromptType(str, enum.Enum):
    """The closed set of prompt kinds a survey may contain."""

    NUMBER = "number"
    HOURS_BEFORE_NOW = "hours_before_now"
    SINGLE_CHOICE = "single_choice"
    SINGLE_CHOICE_CUSTOM = "single_choice_custom"
    MULTI_CHOICE = "multi_choice"
    MULTI_CHOICE_CUSTOM = "multi_choice_custom"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    PHOTO = "photo"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    REMOTE_ACTIVITY = "remote_activity"


class DisplayType(str, enum.Enum):
    """How a consumer should chart or tabulate a prompt's answers."""

    MEASUREMENT = "measurement"
    EVENT = "event"
    COUNT = "count"
    CATEGORY = "category"
    METADATA = "metadata"


class NoResponse(str, enum.Enum):
    """Marker values standing in for an absent answer.

    SKIPPED is only legal for skippable prompts.  NOT_DISPLAYED is sent when
    the prompt's condition evaluated to false on the client; the server does
    not re-evaluate the condition.
    """

    SKIPPED = "SKIPPED"
    NOT_DISPLAYED = "NOT_DISPLAYED"

    @classmethod
    def parse(cls, value) -> "NoResponse | None":
        """Return the sentinel *value* names, or None if it is not one.

        Only an enum member or its exact string name is recognised.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value]
            except KeyError:
                return None
        return None


class PrivacyState(str, enum.Enum):
    """Visibility of a stored survey response."""

    PRIVATE = "private"
    SHARED = "shared"
    INVISIBLE = "invisible"


class LocationStatus(str, enum.Enum):
    """Quality of the location fix attached to an upload."""

    VALID = "valid"
    NETWORK = "network"
    INACCURATE = "inaccurate"
    STALE = "stale"
    UNAVAILABLE = "unavailable"
