"""
Display formatting helpers.
"""

from typing import Optional
from config.settings import CURRENCY_SYMBOL

def format_currency(amount: Optional[float], symbol: str = CURRENCY_SYMBOL) -> str:
    """
    Format an amount as currency with thousands separators.

    Examples:
        1234.5 -> '₱1,234.50', -60 -> '-₱60.00'
    """
    value = float(amount or 0)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
