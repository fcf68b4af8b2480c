"""Coerce-or-default primitives.

Every normalization rule goes through one of these three functions. None
of them raise: unusable input yields the supplied default.
"""

import logging
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

ZERO = Decimal('0')

# largest decimal exponent a weight or saving may carry; beyond it, amounts
# no longer fit the default 28-digit context once multiplied and quantized
MAX_EXPONENT = 12


def coerce_decimal(value: Any, default: Decimal = ZERO, minimum: Optional[Decimal] = ZERO) -> Decimal:
    """
    Parse a number permissively.

    Accepts ints, floats, Decimals and numeric strings (commas and
    surrounding whitespace are ignored). Anything else, including NaN,
    infinities and magnitudes of 10**13 or more, yields ``default``.
    Values below ``minimum`` are clamped.

    Args:
        value: Raw value
        default: Result for missing or unparseable input
        minimum: Lower bound, or None for no bound

    Returns:
        Decimal value
    """
    if value is None or isinstance(value, bool):
        return default

    try:
        if isinstance(value, float):
            number = Decimal(repr(value))
        elif isinstance(value, (int, Decimal)):
            number = Decimal(value)
        else:
            cleaned = re.sub(r'[,\s]', '', str(value))
            if not cleaned:
                return default
            number = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        logger.debug(f"Non-numeric value {value!r}, using {default}")
        return default

    if not number.is_finite():
        return default
    if number.is_zero():
        # drops the sign of -0
        return abs(number)
    if number.adjusted() > MAX_EXPONENT:
        logger.warning(f"Value {value!r} out of range, using {default}")
        return default

    if minimum is not None and number < minimum:
        logger.warning(f"Negative value {value!r} clamped to {minimum}")
        return minimum

    return number


def coerce_datetime(value: Any, now: Callable[[], datetime] = datetime.now) -> datetime:
    """
    Parse a load date permissively.

    Handles datetime/date objects, epoch milliseconds (read as UTC) and any string
    python-dateutil understands (ISO 8601 included). Missing or
    unparseable input yields the current instant.

    Args:
        value: Raw date value
        now: Clock used for the fallback

    Returns:
        Parsed datetime
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.warning(f"Epoch value out of range: {value!r}")
            return now()

    if isinstance(value, str) and value.strip():
        try:
            return date_parser.parse(value.strip())
        except (ValueError, OverflowError) as e:
            logger.warning(f"Could not parse date {value!r}: {e}")
            return now()

    return now()


def coerce_string(value: Any, default: str = "") -> str:
    """Return ``value`` as a stripped string, or ``default`` when empty."""
    if value is None:
        return default
    if isinstance(value, float) and value.is_integer():
        # JSON ids such as 1234.0 print as 1234
        value = int(value)
    text = str(value).strip()
    return text if text else default
