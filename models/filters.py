"""
Filter predicate models for the ledger filter row.

Each filterable column carries exactly one constraint variant:
Unconstrained, ExactMatch(value) or SubstringMatch(value).
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Iterator, Literal, Tuple, Union
from config.settings import FILTER_FIELDS

class Unconstrained(BaseModel):
    """No constraint on the column."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unconstrained"] = "unconstrained"

    def is_active(self) -> bool:
        return False

class ExactMatch(BaseModel):
    """Column must equal the value."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["exact"] = "exact"
    value: Union[int, str]

    def is_active(self) -> bool:
        return True

class SubstringMatch(BaseModel):
    """Column must contain the value (case-insensitive)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["substring"] = "substring"
    value: str

    def is_active(self) -> bool:
        return True

Constraint = Union[Unconstrained, ExactMatch, SubstringMatch]

class FilterSet(BaseModel):
    """Sparse predicate set: one constraint per filterable column."""

    model_config = ConfigDict(frozen=True)

    date: Constraint = Field(default_factory=Unconstrained, discriminator="kind")
    description: Constraint = Field(default_factory=Unconstrained, discriminator="kind")
    vehicle: Constraint = Field(default_factory=Unconstrained, discriminator="kind")
    type: Constraint = Field(default_factory=Unconstrained, discriminator="kind")
    amount: Constraint = Field(default_factory=Unconstrained, discriminator="kind")

    def with_field(self, field: str, constraint: Constraint) -> "FilterSet":
        """
        Return a new set with one column's constraint replaced.

        Raises:
            ValueError: If the field is not one of the filterable columns
        """
        if field not in FILTER_FIELDS:
            raise ValueError(f"Unknown filter field: {field}")
        return self.model_copy(update={field: constraint})

    def active(self) -> Iterator[Tuple[str, Constraint]]:
        """Yield (field, constraint) for every column that is constrained."""
        for field in FILTER_FIELDS:
            constraint = getattr(self, field)
            if constraint.is_active():
                yield field, constraint

    def is_empty(self) -> bool:
        return not any(True for _ in self.active())
