"""
Data model for ledger transactions.
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, Literal
from config.settings import INCOME, EXPENSE

class Transaction(BaseModel):
    """One row of the Transactions table, in the shape the ledger renders."""

    id: int
    amount: float = Field(0.0, ge=0)
    date: str = ""
    description: Optional[str] = None
    status: Optional[str] = None
    type: Literal["Income", "Expense"] = INCOME
    vehicle: Optional[int] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Transaction":
        """
        Map a raw Transactions row to the canonical shape.

        Args:
            record: Row dictionary as returned by Supabase

        Returns:
            Transaction with a null date normalized to an empty string
        """
        return cls(
            id=record["id"],
            amount=record.get("amount") or 0,
            date=record.get("date") or "",
            description=record.get("description"),
            status=record.get("status"),
            type=record.get("type") or INCOME,
            vehicle=record.get("vehicle")
        )

    def to_payload(self) -> Dict[str, Any]:
        """Convert transaction to the full-row payload used for updates."""
        return {
            "id": self.id,
            "vehicle": self.vehicle,
            "amount": self.amount,
            "type": self.type,
            "status": self.status,
            "description": self.description,
            "date": self.date or None
        }

    def is_income(self) -> bool:
        return self.type == INCOME

    def is_expense(self) -> bool:
        return self.type == EXPENSE

    def income_amount(self) -> Optional[float]:
        """Amount shown in the Income column (only for Income rows)."""
        return self.amount if self.is_income() else None

    def expense_amount(self) -> Optional[float]:
        """Amount shown in the Expense column (only for Expense rows)."""
        return self.amount if self.is_expense() else None
