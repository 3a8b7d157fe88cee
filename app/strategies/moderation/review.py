"""Template quality review.

Checks an admin runs before approving a template. The review is advisory:
it does not change the template's status.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, Field

from app.strategies.template_engine.structure import validate_template_structure

TITLE_MIN_LENGTH = 5
TITLE_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 20
DESCRIPTION_WARN_LENGTH = 1000
BODY_MIN_LENGTH = 50

MIN_PAID_PRICE = Decimal("5")
MAX_PRICE = Decimal("500")

_UNSAFE_CONTENT = re.compile(r"<script|javascript:", re.IGNORECASE)


class QualityReport(BaseModel):
    """Outcome of a quality review."""

    is_valid: bool
    issues: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


def is_valid_price(price: Any) -> bool:
    """Free templates cost 0; paid ones cost between 5 and 500."""
    try:
        amount = Decimal(str(price))
    except InvalidOperation:
        return False
    return amount == 0 or MIN_PAID_PRICE <= amount <= MAX_PRICE


def review_template_quality(template: Any) -> QualityReport:
    """Review a template's content and metadata.

    Args:
        template: Any object with title, description, body, price and
            placeholders attributes.

    Returns:
        QualityReport; ``is_valid`` is False when any issue was found.
    """
    issues: list[str] = []
    warnings: list[str] = []

    title = (template.title or "").strip()
    if not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
        issues.append(
            f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters"
        )

    description = (template.description or "").strip()
    if len(description) < DESCRIPTION_MIN_LENGTH:
        issues.append(f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters")
    elif len(description) > DESCRIPTION_WARN_LENGTH:
        warnings.append("Description is very long and may overwhelm buyers")

    body = template.body or ""
    if len(body.strip()) < BODY_MIN_LENGTH:
        issues.append(f"Template content must be at least {BODY_MIN_LENGTH} characters")
    if _UNSAFE_CONTENT.search(body):
        issues.append("Template content contains potentially unsafe code")

    if not is_valid_price(template.price):
        issues.append(f"Price must be 0 (free) or between {MIN_PAID_PRICE} and {MAX_PRICE}")

    placeholders = template.placeholders or {}
    if not placeholders:
        warnings.append("Template has no placeholders; buyers cannot customize it")

    structure = validate_template_structure(body, placeholders)
    issues.extend(error.message for error in structure.errors)

    return QualityReport(is_valid=not issues, issues=issues, warnings=warnings)
