"""
Dropdown reference data for the ledger grid and filter row.
"""

from pydantic import BaseModel
from typing import List, Dict, Any
from config.settings import TRANSACTION_TYPES

class VehicleOption(BaseModel):
    """Selectable vehicle (id + display name)."""

    value: int
    name: str

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "VehicleOption":
        # Joined color/model/brand columns are ignored
        return cls(value=record["id"], name=record.get("name") or f"Vehicle {record['id']}")

class TypeOption(BaseModel):
    """Selectable transaction type."""

    value: str
    name: str

def build_type_options() -> List[TypeOption]:
    """Static Income/Expense list, built in code rather than fetched."""
    return [TypeOption(value=t, name=t) for t in TRANSACTION_TYPES]
