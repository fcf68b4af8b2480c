"""Helpers shared by the interchange serializers."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

# QuickBooks requires CRLF after every record, the last one included
CRLF = "\r\n"


def fixed(value: Decimal, places: int) -> str:
    """Fixed-point text with exactly ``places`` decimals, rounded half-up."""
    quantum = Decimal(1).scaleb(-places)
    return str(value.quantize(quantum, rounding=ROUND_HALF_UP))


def join_lines(lines: Iterable[str]) -> str:
    return "".join(f"{line}{CRLF}" for line in lines)
