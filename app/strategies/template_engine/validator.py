"""User data validation.

Checks a submitted value bag against the placeholder schema. Every field
is checked and all problems are returned together; nothing here raises.
"""

import re
from collections.abc import Mapping
from typing import Any, assert_never

from app.interfaces.template import FieldError
from app.strategies.template_engine.formatter import parse_date, parse_number
from app.strategies.template_engine.models import (
    DataValidationResult,
    PlaceholderConfig,
    PlaceholderType,
    ValidationRules,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9\s\-()]{10,}$")


def is_missing(value: Any) -> bool:
    """Absent, None and the empty string all count as "not submitted"."""
    return value is None or value == ""


def _format_bound(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)


def _check_text(label: str, value: Any, rules: ValidationRules | None) -> list[str]:
    if not isinstance(value, str):
        return [f"Field '{label}' must be a string"]
    if rules is None:
        return []

    problems = []
    if rules.min_length is not None and len(value) < rules.min_length:
        problems.append(f"Field '{label}' must be at least {rules.min_length} characters")
    if rules.max_length is not None and len(value) > rules.max_length:
        problems.append(f"Field '{label}' must be at most {rules.max_length} characters")
    if rules.compiled_pattern is not None and not rules.compiled_pattern.search(value):
        problems.append(f"Field '{label}' format is invalid")
    return problems


def _check_number(label: str, value: Any, rules: ValidationRules | None) -> list[str]:
    number = parse_number(value)
    if number is None:
        return [f"Field '{label}' must be a valid number"]
    if rules is None:
        return []

    problems = []
    if rules.min_value is not None and number < rules.min_value:
        problems.append(f"Field '{label}' must be at least {_format_bound(rules.min_value)}")
    if rules.max_value is not None and number > rules.max_value:
        problems.append(f"Field '{label}' must be at most {_format_bound(rules.max_value)}")
    return problems


def validate_field_value(key: str, config: PlaceholderConfig, value: Any) -> tuple[FieldError, ...]:
    """Validate one submitted (non-missing) value against its placeholder.

    Args:
        key: Placeholder name.
        config: Placeholder configuration.
        value: Submitted value.

    Returns:
        Problems with the value, attributed to the key.
    """
    label = config.label
    rules = config.validation
    kind = config.type

    match kind:
        case PlaceholderType.STRING | PlaceholderType.TEXT | PlaceholderType.TEXTAREA:
            problems = _check_text(label, value, rules)
        case PlaceholderType.NUMBER:
            problems = _check_number(label, value, rules)
        case PlaceholderType.DATE:
            problems = [] if parse_date(value) else [f"Field '{label}' must be a valid date"]
        case PlaceholderType.EMAIL:
            valid = isinstance(value, str) and EMAIL_PATTERN.match(value)
            problems = [] if valid else [f"Field '{label}' must be a valid email address"]
        case PlaceholderType.PHONE:
            valid = isinstance(value, str) and PHONE_PATTERN.match(value)
            problems = [] if valid else [f"Field '{label}' must be a valid phone number"]
        case PlaceholderType.SELECT | PlaceholderType.RADIO:
            valid = isinstance(value, str) and value in (config.options or [])
            problems = [] if valid else [f"Field '{label}' must be one of the available options"]
        case PlaceholderType.CHECKBOX:
            problems = [] if isinstance(value, bool) else [f"Field '{label}' must be true or false"]
        case _:
            assert_never(kind)

    return tuple(FieldError(field=key, message=message) for message in problems)


def validate_user_data(
    placeholders: Mapping[str, PlaceholderConfig],
    user_data: Mapping[str, Any],
) -> DataValidationResult:
    """Validate a submitted value bag against a placeholder schema.

    Required placeholders without a value are errors; optional ones are
    recorded as skipped. Keys in ``user_data`` that match no placeholder are
    ignored.

    Args:
        placeholders: Typed placeholder schema.
        user_data: Submitted values keyed by placeholder name.

    Returns:
        DataValidationResult with every error and the skipped keys.
    """
    errors: tuple[FieldError, ...] = ()
    skipped: tuple[str, ...] = ()

    for key, config in placeholders.items():
        value = user_data.get(key)

        if is_missing(value):
            if config.required:
                errors += (FieldError(field=key, message=f"Field '{config.label}' is required"),)
            else:
                skipped += (key,)
            continue

        errors += validate_field_value(key, config, value)

    return DataValidationResult(errors=errors, skipped=skipped)
