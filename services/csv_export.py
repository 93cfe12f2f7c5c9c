"""
CSV export of the ledger rows currently on screen.
"""

import logging
from typing import List, Optional
from models.transaction import Transaction
from config.settings import CSV_FILENAME, CSV_HEADERS, CSV_LEGACY_LAYOUT

logger = logging.getLogger(__name__)

def quote(value: Optional[str]) -> str:
    """Wrap a value in double quotes, doubling any embedded quotes."""
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'

def format_number(value: Optional[float]) -> str:
    """Print amounts in plain decimal notation (100.0 -> '100', 1e-05 -> '0.00001')."""
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return format(float(value), ".10f").rstrip("0").rstrip(".")

def row_to_fields(row: Transaction, legacy: bool = False) -> List[str]:
    if legacy:
        # Historical layout: the type is written under both Category and Expense
        return [row.date, quote(row.description), quote(row.type), format_number(row.amount), row.type]
    return [
        row.date,
        quote(row.description),
        quote(row.type),
        format_number(row.income_amount()),
        format_number(row.expense_amount())
    ]

def build_csv(rows: List[Transaction], legacy: Optional[bool] = None) -> str:
    """
    Serialize ledger rows to a CSV document.

    Args:
        rows: Rows in display order
        legacy: Use the historical column mapping (defaults to CSV_LEGACY_LAYOUT)

    Returns:
        CSV text with a Date,Description,Category,Income,Expense header
    """
    if legacy is None:
        legacy = CSV_LEGACY_LAYOUT
    lines = [",".join(CSV_HEADERS)]
    lines.extend(",".join(row_to_fields(row, legacy)) for row in rows)
    logger.info(f"Exported {len(rows)} transactions as CSV")
    return "\n".join(lines)

def export_filename() -> str:
    return CSV_FILENAME
