"""
Analytics service for ledger totals.
"""

import pandas as pd
from typing import List, NamedTuple
from models.transaction import Transaction
from config.settings import INCOME, EXPENSE

class Totals(NamedTuple):
    income: float
    expense: float
    balance: float

def transactions_frame(rows: List[Transaction]) -> pd.DataFrame:
    """Build a DataFrame of the ledger rows (columns follow Transaction)."""
    if not rows:
        return pd.DataFrame(columns=list(Transaction.model_fields))
    return pd.DataFrame([row.model_dump() for row in rows])

def compute_totals(rows: List[Transaction]) -> Totals:
    """
    Sum amounts per transaction type.

    Args:
        rows: Current (possibly filtered) ledger rows

    Returns:
        Totals with income, expense and balance = income - expense
    """
    df = transactions_frame(rows)
    if df.empty:
        return Totals(0.0, 0.0, 0.0)

    amounts = pd.to_numeric(df['amount'], errors='coerce').fillna(0.0)
    by_type = amounts.groupby(df['type']).sum()

    income = float(by_type.get(INCOME, 0.0))
    expense = float(by_type.get(EXPENSE, 0.0))
    return Totals(income, expense, income - expense)
