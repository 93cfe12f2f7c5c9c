"""
Input normalization for the ledger filter row and inline cell edits.
"""

import logging
import re
from typing import Optional, Union
from models.filters import Constraint, Unconstrained, ExactMatch, SubstringMatch
from config.settings import (
    FILTER_FIELDS,
    TRANSACTION_TYPES,
    TRANSACTION_STATUSES,
    AMOUNT_FALLBACK,
    VEHICLE_FALLBACK
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ["date", "description", "vehicle", "type", "amount", "status"]

_LEADING_INT = re.compile(r"^[+-]?\d+")
_LEADING_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")

def parse_leading_int(text: str) -> Optional[int]:
    """
    Parse the integer at the start of a string ("12abc" -> 12).

    Returns:
        The parsed integer, or None if the string does not start with one
    """
    match = _LEADING_INT.match(text.strip())
    return int(match.group(0)) if match else None

def parse_leading_number(text: str) -> Optional[float]:
    """Parse the decimal number at the start of a string ("55.5kg" -> 55.5)."""
    match = _LEADING_NUMBER.match(text.strip())
    return float(match.group(0)) if match else None

def normalize_filter_value(field: str, raw: Optional[str]) -> Constraint:
    """
    Turn raw filter input into a constraint for one column.

    Blank input clears the filter. Numeric columns (vehicle, amount) take the
    leading integer of the input; unparseable numeric input leaves the column
    unconstrained rather than failing.

    Args:
        field: One of the filterable columns
        raw: Raw widget value (None is treated as blank)

    Returns:
        Constraint for the column

    Raises:
        ValueError: If the field is not filterable
    """
    if field not in FILTER_FIELDS:
        raise ValueError(f"Unknown filter field: {field}")

    trimmed = "" if raw is None else str(raw).strip()
    if not trimmed:
        return Unconstrained()

    if field in ("vehicle", "amount"):
        parsed = parse_leading_int(trimmed)
        if parsed is None:
            logger.warning(f"Ignoring non-numeric {field} filter: '{trimmed}'")
            return Unconstrained()
        return ExactMatch(value=parsed)

    if field == "description":
        return SubstringMatch(value=trimmed)

    # date, type
    return ExactMatch(value=trimmed)

def coerce_edit_value(field: str, raw) -> Union[str, int, float, None]:
    """
    Coerce a raw cell value to the type stored in the Transactions table.

    amount falls back to 0 when it cannot be parsed (or is negative),
    vehicle falls back to 1. type and status must be one of their
    enumeration values.

    Raises:
        ValueError: For unknown fields or out-of-enumeration type/status
    """
    if field not in EDITABLE_FIELDS:
        raise ValueError(f"Field is not editable: {field}")

    if field == "amount":
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            value = float(raw)
        else:
            value = parse_leading_number("" if raw is None else str(raw))
        if value is None or value != value or value < 0:
            logger.warning(f"Amount '{raw}' is not a valid amount, using {AMOUNT_FALLBACK}")
            return AMOUNT_FALLBACK
        return value

    if field == "vehicle":
        if isinstance(raw, int) and not isinstance(raw, bool):
            return raw
        value = parse_leading_int("" if raw is None else str(raw))
        if value is None:
            logger.warning(f"Vehicle '{raw}' is not a valid id, using {VEHICLE_FALLBACK}")
            return VEHICLE_FALLBACK
        return value

    if field == "type":
        if raw not in TRANSACTION_TYPES:
            raise ValueError(f"Invalid transaction type: {raw}")
        return raw

    if field == "status":
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None
        if raw not in TRANSACTION_STATUSES:
            raise ValueError(f"Invalid status: {raw}")
        return raw

    if field == "date":
        return "" if raw is None else str(raw).strip()

    # description
    return "" if raw is None else str(raw)
