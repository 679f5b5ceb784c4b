"""Argument normalization for market data tools.

Each function accepts an untrusted value, returns its canonical form and raises
ArgumentValidationError with a message naming the field and the allowed values.
"""

import re
from datetime import date, datetime, timezone
from typing import Any

from .exceptions import ArgumentValidationError

SYMBOL_PATTERN = re.compile(r"^[A-Z0-9.\-]{1,20}$")
ISO_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

FREQUENCIES = {"annual": "Annual", "quarterly": "Quarterly"}
STATEMENT_TYPES = ("IS", "BS", "CF")

MIN_STATEMENT_YEAR = 1990


def max_statement_year() -> int:
    """Latest accepted statement year: next calendar year in UTC."""
    return datetime.now(timezone.utc).year + 1


def normalize_symbol(value: Any) -> str:
    if not isinstance(value, str):
        raise ArgumentValidationError("symbol must be a string.")

    normalized = value.strip().upper()
    if not SYMBOL_PATTERN.match(normalized):
        raise ArgumentValidationError("symbol must contain only letters, digits, dot, or dash.")
    return normalized


def normalize_frequency(value: Any) -> str:
    if isinstance(value, str):
        canonical = FREQUENCIES.get(value.strip().lower())
        if canonical:
            return canonical
    raise ArgumentValidationError("frequency must be Annual or Quarterly.")


def normalize_statement_type(value: Any) -> str:
    if isinstance(value, str):
        upper = value.strip().upper()
        if upper in STATEMENT_TYPES:
            return upper
    raise ArgumentValidationError("statement_type must be IS, BS, or CF.")


def normalize_bounded_int(value: Any, *, minimum: int, maximum: int, label: str) -> int:
    """Accept a real integer (integral floats included) inside [minimum, maximum].

    Booleans are rejected even though Python treats them as ints.
    """
    if isinstance(value, bool):
        raise ArgumentValidationError(f"{label} must be an integer.")
    if isinstance(value, float):
        if not value.is_integer():
            raise ArgumentValidationError(f"{label} must be an integer.")
        value = int(value)
    if not isinstance(value, int):
        raise ArgumentValidationError(f"{label} must be an integer.")

    if value < minimum or value > maximum:
        raise ArgumentValidationError(f"{label} must be between {minimum} and {maximum}.")
    return value


def normalize_iso_date(value: Any, label: str) -> str:
    if not isinstance(value, str):
        raise ArgumentValidationError(f"{label} must be YYYY-MM-DD.")

    trimmed = value.strip()
    if not ISO_DATE_PATTERN.match(trimmed):
        raise ArgumentValidationError(f"{label} must be YYYY-MM-DD.")

    try:
        date.fromisoformat(trimmed)
    except ValueError as exc:
        raise ArgumentValidationError(f"{label} is not a valid date.") from exc
    return trimmed
