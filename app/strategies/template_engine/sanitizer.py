"""Free-text sanitization.

Strips markup and control characters from submitted text before it is
written into a document. ``sanitize_text`` is idempotent: once a value
has been sanitized, sanitizing it again returns it unchanged.
"""

import re
from dataclasses import dataclass
from typing import Any

from app.strategies.template_engine.models import SANITIZED_TYPES, PlaceholderConfig

MAX_TEXT_LENGTH = 10_000
TRUNCATION_MARKER = "..."

_TAG_PATTERN = re.compile(r"<[^>]*>")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


@dataclass(frozen=True)
class SanitizedValue:
    """A value after sanitization and whether sanitization altered it."""

    value: Any
    changed: bool


def sanitize_text(text: str) -> str:
    """Remove tags and control characters and cap the length.

    Text longer than MAX_TEXT_LENGTH is cut so that the result, including
    the truncation marker, is exactly MAX_TEXT_LENGTH characters long.

    Args:
        text: Untrusted input.

    Returns:
        Sanitized text.
    """
    # A single pass leaves no "<" that is followed by a ">"
    sanitized = _TAG_PATTERN.sub("", text)
    sanitized = _CONTROL_CHARS.sub("", sanitized)

    if len(sanitized) > MAX_TEXT_LENGTH:
        sanitized = sanitized[: MAX_TEXT_LENGTH - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER

    return sanitized


def sanitize_value(value: Any, config: PlaceholderConfig) -> SanitizedValue:
    """Sanitize a submitted value if its placeholder holds free text.

    Args:
        value: Submitted value.
        config: Placeholder configuration.

    Returns:
        SanitizedValue; values of other kinds are returned untouched.
    """
    if value is None or config.type not in SANITIZED_TYPES:
        return SanitizedValue(value=value, changed=False)

    sanitized = sanitize_text(str(value))
    return SanitizedValue(value=sanitized, changed=sanitized != value)
