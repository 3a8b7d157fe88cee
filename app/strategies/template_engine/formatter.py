"""Value formatting for template injection.

Renders typed values into tr-TR display text: dates as DD.MM.YYYY,
numbers with "." thousands and "," decimal separators, checkboxes as
Evet/Hayır and Turkish phone numbers as (XXX) XXX XX XX.
"""

import datetime
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, assert_never

from app.strategies.template_engine.models import PlaceholderConfig, PlaceholderType

CHECKBOX_TRUE = "Evet"
CHECKBOX_FALSE = "Hayır"

# Intl.NumberFormat default for tr-TR
MAX_FRACTION_DIGITS = 3

# Largest accepted decimal exponent; bigger values are rejected as invalid numbers
MAX_NUMBER_EXPONENT = 15

COUNTRY_CODE = "90"
TRUNK_PREFIX = "0"
NATIONAL_NUMBER_LENGTH = 10

_DATE_FORMATS = ("%d.%m.%Y", "%d/%m/%Y")
_NON_DIGITS = re.compile(r"\D")


# =============================================================================
# Parsing helpers (shared with the user data validator)
# =============================================================================


def parse_date(value: Any) -> datetime.date | None:
    """Parse a submitted date string.

    Accepts ISO 8601 dates and datetimes (the date part is kept as written,
    without timezone conversion) as well as DD.MM.YYYY and DD/MM/YYYY.

    Returns:
        The parsed date, or None if the value is not a parseable string.
    """
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return datetime.date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_number(value: Any) -> Decimal | None:
    """Parse a submitted number.

    Booleans, NaN, infinities and magnitudes of 10**16 or more are
    rejected.

    Returns:
        The value as a Decimal, or None if it is not an accepted number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        text = str(value)
    elif isinstance(value, str):
        text = value.strip()
    else:
        return None

    try:
        number = Decimal(text)
    except InvalidOperation:
        return None

    if number.is_nan() or number.is_infinite():
        return None
    if number.is_zero():
        return Decimal(0)
    if number.adjusted() > MAX_NUMBER_EXPONENT:
        return None
    return number


def parse_formatted_number(text: str) -> Decimal:
    """Reverse format_number: "1.234,5" -> Decimal("1234.5").

    Raises:
        InvalidOperation: If the text is not a formatted number.
    """
    return Decimal(text.replace(".", "").replace(",", "."))


# =============================================================================
# Formatters
# =============================================================================


def format_date(value: Any) -> str:
    """Format a date as DD.MM.YYYY; unparseable input passes through."""
    if isinstance(value, datetime.date):
        parsed = value
    else:
        parsed = parse_date(value)
    if parsed is None:
        return str(value)
    return f"{parsed.day:02d}.{parsed.month:02d}.{parsed.year:04d}"


def format_checkbox(value: Any) -> str:
    return CHECKBOX_TRUE if value else CHECKBOX_FALSE


def _group_thousands(digits: str) -> str:
    head = len(digits) % 3 or 3
    groups = [digits[:head]] + [digits[i : i + 3] for i in range(head, len(digits), 3)]
    return ".".join(groups)


def format_number(value: Any) -> str:
    """Format a number with tr-TR grouping and at most three fraction digits.

    Examples:
        1500 -> "1.500", 1234.5 -> "1.234,5", -0.0004 -> "0"
    """
    number = parse_number(value)
    if number is None:
        return str(value)

    with localcontext() as ctx:
        ctx.prec = max(28, number.adjusted() + MAX_FRACTION_DIGITS + 2)
        quantized = number.quantize(
            Decimal(1).scaleb(-MAX_FRACTION_DIGITS), rounding=ROUND_HALF_UP
        )

    if quantized.is_zero():
        quantized = abs(quantized)

    sign = "-" if quantized < 0 else ""
    integer, _, fraction = f"{abs(quantized):f}".partition(".")
    grouped = _group_thousands(integer)
    fraction = fraction.rstrip("0")

    return f"{sign}{grouped},{fraction}" if fraction else f"{sign}{grouped}"


def format_phone(value: Any) -> str:
    """Format a Turkish phone number as (XXX) XXX XX XX.

    Non-digits are stripped and a leading country code or trunk prefix is
    dropped. Anything that does not leave exactly ten digits is returned
    unchanged.
    """
    raw = str(value)
    digits = _NON_DIGITS.sub("", raw)

    if len(digits) == NATIONAL_NUMBER_LENGTH + len(COUNTRY_CODE) and digits.startswith(COUNTRY_CODE):
        digits = digits[len(COUNTRY_CODE):]
    elif len(digits) == NATIONAL_NUMBER_LENGTH + len(TRUNK_PREFIX) and digits.startswith(TRUNK_PREFIX):
        digits = digits[len(TRUNK_PREFIX):]

    if len(digits) != NATIONAL_NUMBER_LENGTH:
        return raw
    return f"({digits[:3]}) {digits[3:6]} {digits[6:8]} {digits[8:]}"


def format_value(value: Any, config: PlaceholderConfig) -> str:
    """Render a validated value as the text substituted into the body.

    Args:
        value: Submitted (and sanitized) value.
        config: Placeholder configuration that decides the format.

    Returns:
        Display text. None renders as an empty string.
    """
    if value is None:
        return ""

    kind = config.type
    match kind:
        case PlaceholderType.DATE:
            return format_date(value)
        case PlaceholderType.CHECKBOX:
            return format_checkbox(value)
        case PlaceholderType.NUMBER:
            return format_number(value)
        case PlaceholderType.PHONE:
            return format_phone(value)
        case (
            PlaceholderType.STRING
            | PlaceholderType.TEXT
            | PlaceholderType.TEXTAREA
            | PlaceholderType.EMAIL
            | PlaceholderType.SELECT
            | PlaceholderType.RADIO
        ):
            return str(value)
        case _:
            assert_never(kind)
