"""Form configuration generator.

Projects a validated placeholder schema into the ordered field list a
client renders as a fill-in form.
"""

import datetime
from typing import assert_never

from app.interfaces.template import TemplateSource
from app.strategies.template_engine.models import (
    CHOICE_TYPES,
    TODAY_SENTINEL,
    FormConfig,
    FormField,
    FormFieldType,
    FormOption,
    PlaceholderConfig,
    PlaceholderType,
)
from app.strategies.template_engine.structure import parse_placeholders


def form_field_type(kind: PlaceholderType) -> FormFieldType:
    """Map a placeholder kind to the widget used to collect it."""
    match kind:
        case PlaceholderType.STRING:
            return FormFieldType.TEXT
        case PlaceholderType.TEXT | PlaceholderType.TEXTAREA:
            return FormFieldType.TEXTAREA
        case PlaceholderType.DATE:
            return FormFieldType.DATE
        case PlaceholderType.NUMBER:
            return FormFieldType.NUMBER
        case PlaceholderType.PHONE:
            return FormFieldType.PHONE
        case PlaceholderType.EMAIL:
            return FormFieldType.EMAIL
        case PlaceholderType.SELECT:
            return FormFieldType.SELECT
        case PlaceholderType.CHECKBOX:
            return FormFieldType.CHECKBOX
        case PlaceholderType.RADIO:
            return FormFieldType.RADIO
        case _:
            assert_never(kind)


def resolve_default(config: PlaceholderConfig, today: datetime.date) -> object:
    """Expand the "today" sentinel of date fields; other defaults pass through."""
    if config.type is PlaceholderType.DATE and config.default_value == TODAY_SENTINEL:
        return today.isoformat()
    return config.default_value


def create_form_field(key: str, config: PlaceholderConfig, today: datetime.date) -> FormField:
    """Build the descriptor of one placeholder."""
    options = None
    if config.type in CHOICE_TYPES and config.options:
        options = [
            FormOption(value=option, label=option, order=index)
            for index, option in enumerate(config.options)
        ]

    return FormField(
        key=key,
        type=form_field_type(config.type),
        label=config.label,
        required=config.required,
        order=config.order,
        validation=config.validation,
        default_value=resolve_default(config, today),
        options=options,
    )


def generate_form_config(
    template: TemplateSource,
    today: datetime.date | None = None,
) -> FormConfig:
    """Generate the ordered form description of a template.

    Fields are sorted by ``order``; ties keep declaration order.

    Args:
        template: Template whose placeholders describe the form.
        today: Date used for the "today" default. Defaults to the current date.

    Returns:
        FormConfig with one field per placeholder.

    Raises:
        TemplateStructureError: If the stored placeholder schema is malformed.
    """
    today = today or datetime.date.today()
    placeholders = parse_placeholders(template.placeholders)

    ordered = sorted(placeholders.items(), key=lambda item: item[1].order)

    return FormConfig(
        template_id=str(template.id),
        title=template.title,
        fields=[create_form_field(key, config, today) for key, config in ordered],
    )
