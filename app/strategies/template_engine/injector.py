"""Template data injection.

Renders a template body with submitted values. Per placeholder the
pipeline runs validation, sanitization, formatting and substitution, in
that order. Validation happens for all placeholders before the first
substitution so that a failing request never produces a partial body.
"""

import logging
from collections.abc import Mapping
from typing import Any

from app.interfaces.template import (
    DataValidationError,
    FieldError,
    TemplateSource,
    TemplateStructureError,
)
from app.strategies.template_engine.formatter import format_value
from app.strategies.template_engine.models import (
    InjectionMetadata,
    PreviewResult,
    ProcessedTemplate,
)
from app.strategies.template_engine.sanitizer import sanitize_value
from app.strategies.template_engine.structure import (
    TOKEN_PATTERN,
    extract_tokens,
    parse_placeholders,
)
from app.strategies.template_engine.validator import is_missing, validate_user_data

logger = logging.getLogger(__name__)


def process_template(
    template: TemplateSource,
    user_data: Mapping[str, Any],
    *,
    strict: bool = False,
) -> ProcessedTemplate:
    """Inject submitted values into a template body.

    Optional placeholders without a value keep their token in the body and
    are reported as skipped. Tokens that remain for any other reason mean
    the stored schema drifted from the body after it was validated; they
    are logged and reported in the metadata, or raised when ``strict``.

    Args:
        template: Template to render.
        user_data: Submitted values keyed by placeholder name.
        strict: Raise instead of warning on unresolved tokens.

    Returns:
        ProcessedTemplate with the rendered body and injection metadata.

    Raises:
        DataValidationError: If any submitted value is missing or invalid.
        TemplateStructureError: If the stored schema is malformed, or if
            ``strict`` and tokens remain unresolved.
    """
    placeholders = parse_placeholders(template.placeholders)

    validation = validate_user_data(placeholders, user_data)
    if not validation.is_valid:
        logger.info(
            f"Rejected data for template {template.id}: {len(validation.errors)} errors"
        )
        raise DataValidationError(validation.errors)

    metadata = InjectionMetadata(placeholders_skipped=list(validation.skipped))
    emptied: list[FieldError] = []

    for key, config in placeholders.items():
        value = user_data.get(key)
        if is_missing(value):
            continue

        sanitized = sanitize_value(value, config)
        if is_missing(sanitized.value):
            # Markup-only input leaves nothing to render
            if config.required:
                emptied.append(FieldError(field=key, message=f"Field '{config.label}' is required"))
            else:
                metadata.placeholders_skipped.append(key)
            continue

        metadata.formatted_fields[key] = format_value(sanitized.value, config)
        metadata.placeholders_processed += 1
        if sanitized.changed:
            metadata.sanitized_fields.append(key)

    if emptied:
        logger.info(
            f"Rejected data for template {template.id}: {len(emptied)} fields empty after sanitizing"
        )
        raise DataValidationError(emptied)

    # Single pass, so braces inside submitted values are never substituted
    formatted = metadata.formatted_fields
    processed_body = TOKEN_PATTERN.sub(
        lambda match: formatted.get(match.group(1), match.group(0)),
        template.body,
    )

    skipped = set(metadata.placeholders_skipped)
    unresolved = [
        token
        for token in extract_tokens(template.body)
        if token not in formatted and token not in skipped
    ]
    if unresolved:
        if strict:
            raise TemplateStructureError(
                (
                    FieldError(field=token, message=f"Placeholder '{{{token}}}' was not resolved")
                    for token in unresolved
                ),
                prefix="Template body has unresolved placeholders",
            )
        logger.warning(
            f"Unprocessed placeholders found in template {template.id}: {', '.join(unresolved)}"
        )
        metadata.unresolved_placeholders = unresolved

    return ProcessedTemplate(
        template_id=str(template.id),
        processed_body=processed_body,
        injection_metadata=metadata,
    )


def generate_preview(
    template: TemplateSource,
    user_data: Mapping[str, Any],
) -> PreviewResult:
    """Render a preview that reports problems instead of raising.

    Args:
        template: Template to render.
        user_data: Submitted values keyed by placeholder name.

    Returns:
        PreviewResult with the rendered body and warnings, or a failure
        text plus the field errors when the data is invalid.
    """
    try:
        processed = process_template(template, user_data)
    except (DataValidationError, TemplateStructureError) as e:
        return PreviewResult(
            preview=f"Önizleme oluşturulamadı: {e}",
            warnings=["Önizleme hatası"],
            errors=list(e.errors),
        )

    metadata = processed.injection_metadata
    warnings = []
    if metadata.placeholders_skipped:
        warnings.append(f"Boş bırakılan alanlar: {', '.join(metadata.placeholders_skipped)}")
    if metadata.sanitized_fields:
        warnings.append(
            f"Güvenlik nedeniyle temizlenen alanlar: {', '.join(metadata.sanitized_fields)}"
        )
    if metadata.unresolved_placeholders:
        warnings.append(
            f"Çözümlenemeyen alanlar: {', '.join(metadata.unresolved_placeholders)}"
        )

    return PreviewResult(preview=processed.processed_body, warnings=warnings)
