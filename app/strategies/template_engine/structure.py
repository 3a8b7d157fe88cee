"""Template structure validation.

Cross-checks a template body against its declared placeholder schema and
validates the configuration of every placeholder. Every violation is
reported in a single pass so a form editor can show all problems at once.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from app.interfaces.template import FieldError, TemplateStructureError
from app.strategies.template_engine.models import (
    IDENTIFIER_PATTERN,
    PlaceholderConfig,
    StructureValidationResult,
)

logger = logging.getLogger(__name__)

# Only identifier-shaped tokens are placeholders; other braces are literal text
TOKEN_PATTERN = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def extract_tokens(body: str) -> list[str]:
    """Return the distinct placeholder tokens of a body in order of first use.

    Args:
        body: Template body text.

    Returns:
        Token names without braces, de-duplicated.
    """
    return list(dict.fromkeys(TOKEN_PATTERN.findall(body)))


def _describe(key: str, error: Mapping[str, Any]) -> str:
    """Turn one pydantic error into a message naming the placeholder."""
    loc = [str(part) for part in error.get("loc", ())]
    path = ".".join(loc)
    kind = error.get("type", "")

    if kind == "missing":
        if loc == ["label"]:
            return f"Placeholder '{key}' must have a label"
        if loc == ["order"]:
            return f"Placeholder '{key}' must have a valid order (non-negative number)"
        return f"Placeholder '{key}' is missing '{path}'"
    if loc == ["type"]:
        return f"Invalid placeholder type '{error.get('input')}' for '{key}'"
    if loc == ["order"]:
        return f"Placeholder '{key}' must have a valid order (non-negative number)"
    if kind == "extra_forbidden":
        return f"Placeholder '{key}' has unknown attribute '{path}'"
    if kind in {"empty_label", "missing_options"} or not path:
        return f"Placeholder '{key}' {error['msg']}"
    return f"Placeholder '{key}' {path} {error['msg']}"


def validate_placeholder_config(key: str, config: Any) -> tuple[FieldError, ...]:
    """Validate one placeholder key and its configuration.

    Args:
        key: Placeholder name as declared in the schema.
        config: A PlaceholderConfig or its raw mapping form.

    Returns:
        Every problem found, attributed to the key.
    """
    errors: list[FieldError] = []

    if not key or not key.strip():
        errors.append(FieldError(field=key, message="Placeholder key cannot be empty"))
    elif not IDENTIFIER_PATTERN.match(key):
        errors.append(
            FieldError(
                field=key,
                message=(
                    f"Placeholder key '{key}' must start with letter or underscore "
                    "and contain only letters, numbers, and underscores"
                ),
            )
        )

    if isinstance(config, PlaceholderConfig):
        return tuple(errors)

    if not isinstance(config, Mapping):
        errors.append(
            FieldError(field=key, message=f"Invalid placeholder configuration for '{key}'")
        )
        return tuple(errors)

    try:
        PlaceholderConfig.model_validate(config)
    except ValidationError as exc:
        errors.extend(FieldError(field=key, message=_describe(key, e)) for e in exc.errors())

    return tuple(errors)


def validate_template_structure(
    body: str,
    placeholders: Mapping[str, Any],
) -> StructureValidationResult:
    """Check that body tokens and declared placeholders match one to one.

    Args:
        body: Template body text containing ``{identifier}`` tokens.
        placeholders: Mapping of placeholder name to configuration.

    Returns:
        StructureValidationResult listing every violation.
    """
    tokens = extract_tokens(body)
    token_set = set(tokens)

    undefined = tuple(
        FieldError(
            field=token,
            message=f"Placeholder '{{{token}}}' used in body but not defined in placeholders",
        )
        for token in tokens
        if token not in placeholders
    )
    unused = tuple(
        FieldError(field=key, message=f"Placeholder '{key}' defined but not used in body")
        for key in placeholders
        if key not in token_set
    )
    config_errors = tuple(
        error
        for key, config in placeholders.items()
        for error in validate_placeholder_config(key, config)
    )

    result = StructureValidationResult(errors=undefined + unused + config_errors)
    if not result.is_valid:
        logger.debug(f"Template structure invalid: {len(result.errors)} errors")
    return result


def parse_placeholders(placeholders: Mapping[str, Any]) -> dict[str, PlaceholderConfig]:
    """Convert a stored placeholder mapping into typed configurations.

    Args:
        placeholders: Mapping of name to PlaceholderConfig or raw mapping.

    Returns:
        Mapping of name to PlaceholderConfig, in declaration order.

    Raises:
        TemplateStructureError: If any configuration is malformed.
    """
    errors = tuple(
        error
        for key, config in placeholders.items()
        for error in validate_placeholder_config(key, config)
    )
    if errors:
        raise TemplateStructureError(errors, prefix="Stored placeholder schema is invalid")

    return {
        key: config if isinstance(config, PlaceholderConfig) else PlaceholderConfig.model_validate(config)
        for key, config in placeholders.items()
    }


def dump_placeholders(placeholders: Mapping[str, PlaceholderConfig]) -> dict[str, Any]:
    """Serialize typed configurations for JSON storage."""
    return {
        key: config.model_dump(mode="json", exclude_none=True)
        for key, config in placeholders.items()
    }
