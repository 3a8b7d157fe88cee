"""Template engine strategies.

Placeholder schema validation, form generation and data injection for
text templates with ``{identifier}`` tokens.
"""

from app.strategies.template_engine.forms import generate_form_config
from app.strategies.template_engine.formatter import format_value, parse_formatted_number
from app.strategies.template_engine.injector import generate_preview, process_template
from app.strategies.template_engine.models import (
    FormConfig,
    PlaceholderConfig,
    PlaceholderType,
    PreviewResult,
    ProcessedTemplate,
)
from app.strategies.template_engine.sanitizer import sanitize_text, sanitize_value
from app.strategies.template_engine.structure import (
    extract_tokens,
    parse_placeholders,
    validate_template_structure,
)
from app.strategies.template_engine.validator import validate_user_data

__all__ = [
    "FormConfig",
    "PlaceholderConfig",
    "PlaceholderType",
    "PreviewResult",
    "ProcessedTemplate",
    "extract_tokens",
    "format_value",
    "generate_form_config",
    "generate_preview",
    "parse_formatted_number",
    "parse_placeholders",
    "process_template",
    "sanitize_text",
    "sanitize_value",
    "validate_template_structure",
    "validate_user_data",
]
