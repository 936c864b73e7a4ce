"""Shared validation utilities"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Union

from ..exceptions import ValidationError

WEEKDAY_CODES = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")

_AMOUNT_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")

# Amount columns are Numeric(10, 2)
CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("99999999.99")


def parse_amount(value: Union[Decimal, int, float, str, None], field: str = "amount") -> Decimal:
    """
    Parse a monetary amount into a Decimal.

    Args:
        value: Number or numeric string as received in a request body
        field: Field name used in the error message

    Returns:
        Decimal at cent scale; floats go through their shortest repr so 149.99 == "149.99"

    Raises:
        ValidationError: If the value is missing, boolean, non-numeric, not finite,
            has sub-cent digits or does not fit the amount columns
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not _AMOUNT_PATTERN.match(text):
            raise ValidationError(f"{field} must be a number, got {value!r}")
        try:
            amount = Decimal(text)
        except InvalidOperation as e:
            raise ValidationError(f"{field} must be a number, got {value!r}") from e
    else:
        raise ValidationError(f"{field} must be a number")

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if abs(amount) > MAX_AMOUNT:
        raise ValidationError(f"{field} must not exceed {MAX_AMOUNT}")
    cents = amount.quantize(CENT)
    if cents != amount:
        raise ValidationError(f"{field} must not have more than 2 decimal places, got {value!r}")
    return cents


def validate_weekday_codes(codes: list[str]) -> list[str]:
    """
    Normalize two-letter weekday codes, keeping the caller's order.

    Raises:
        ValidationError: If any code is not one of SU, MO, TU, WE, TH, FR, SA
    """
    normalized = []
    for code in codes:
        upper = code.strip().upper()
        if upper not in WEEKDAY_CODES:
            raise ValidationError(f"Invalid weekday code: {code!r}")
        normalized.append(upper)
    return normalized


def parse_calendar_date(value: Union[date, datetime, str]) -> date:
    """
    Read the calendar date out of a date, datetime or ISO string.

    The date fields are used as written; no timezone conversion is applied.

    Raises:
        ValidationError: If the string is not an ISO date or datetime
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
    except (ValueError, AttributeError) as e:
        raise ValidationError(f"Invalid date: {value!r}") from e
