"""
Ledger state and its synchronization with the remote Transactions table.

LedgerStore owns the row store, the filter set and the dropdown reference
data. Each operation translates a UI intent (load, filter, edit, add,
delete) into a gateway call and reconciles local state with the result.
Gateway failures are logged and recorded in ``last_error``; they never
propagate to the caller.
"""

import logging
from typing import Dict, List, Optional, Set
from pydantic import ValidationError
from database.operations import GatewayError
from models.transaction import Transaction
from models.reference import VehicleOption, TypeOption, build_type_options
from models.filters import FilterSet
from services.analytics import Totals, compute_totals
from services.filter_engine import normalize_filter_value, coerce_edit_value
from config.settings import (
    DEFAULT_VEHICLE_ID,
    DEFAULT_AMOUNT,
    DEFAULT_TYPE,
    DEFAULT_STATUS,
    DEFAULT_DESCRIPTION
)

logger = logging.getLogger(__name__)

def new_row_defaults() -> Dict:
    """Field values for a freshly added transaction."""
    return {
        "vehicle": DEFAULT_VEHICLE_ID,
        "amount": DEFAULT_AMOUNT,
        "type": DEFAULT_TYPE,
        "status": DEFAULT_STATUS,
        "description": DEFAULT_DESCRIPTION
    }

class LedgerStore:
    """In-memory mirror of the Transactions table for one ledger page."""

    def __init__(self, gateway):
        """
        Args:
            gateway: Object exposing the DatabaseOperations coroutines
        """
        self.gateway = gateway
        self.rows: List[Transaction] = []
        self.filters = FilterSet()
        self.vehicle_options: List[VehicleOption] = []
        self.type_options: List[TypeOption] = build_type_options()
        self.loading = False
        self.last_error: Optional[str] = None
        self.pending_writes: Dict[int, int] = {}
        self.failed_rows: Set[int] = set()
        # Last row state the table confirmed (fetched, inserted or written)
        self._confirmed: Dict[int, Transaction] = {}
        self._fetch_generation = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def totals(self) -> Totals:
        return compute_totals(self.rows)

    def get_row(self, row_id: int) -> Optional[Transaction]:
        return next((row for row in self.rows if row.id == row_id), None)

    def is_pending(self, row_id: int) -> bool:
        return self.pending_writes.get(row_id, 0) > 0

    def dismiss_error(self):
        self.last_error = None

    def _report(self, message: str, error: Exception):
        logger.error(f"{message}: {str(error)}")
        self.last_error = f"{message}: {str(error)}"

    def _replace_row(self, transaction: Transaction):
        self.rows = [transaction if r.id == transaction.id else r for r in self.rows]

    def _map_records(self, records: List[Dict]) -> List[Transaction]:
        """Map remote rows, skipping (and reporting) rows that break the model."""
        transactions = []
        for record in records:
            try:
                transactions.append(Transaction.from_record(record))
            except ValidationError as e:
                self._report(f"Skipping invalid transaction {record.get('id')}", e)
        return transactions

    # ------------------------------------------------------------------
    # Loading and filtering
    # ------------------------------------------------------------------

    async def _fetch(self, filters: Optional[FilterSet]) -> bool:
        """Fetch rows and replace the store, unless a newer fetch was started meanwhile."""
        self._fetch_generation += 1
        generation = self._fetch_generation
        self.loading = True

        try:
            records = await self.gateway.fetch_transactions(filters)
        except GatewayError as e:
            if generation == self._fetch_generation:
                self.loading = False
            self._report("Error fetching transactions", e)
            return False

        if generation != self._fetch_generation:
            logger.debug(f"Discarding superseded fetch #{generation}")
            return False

        self.rows = self._map_records(records)
        self._confirmed.update((row.id, row) for row in self.rows)
        self.loading = False
        logger.info(f"Loaded {len(self.rows)} transactions")
        return True

    async def load(self) -> bool:
        """Fetch every transaction, newest first, ignoring the filter set."""
        return await self._fetch(None)

    async def refresh(self) -> bool:
        """Re-run the fetch for the current filter set."""
        return await self._fetch(None if self.filters.is_empty() else self.filters)

    async def apply_filter(self, field: str, raw: Optional[str]) -> bool:
        """
        Update one column's filter from raw input and re-query.

        Args:
            field: Filterable column name
            raw: Raw widget value; blank clears the column's filter

        Returns:
            True if the filtered rows replaced the store
        """
        constraint = normalize_filter_value(field, raw)
        self.filters = self.filters.with_field(field, constraint)
        return await self._fetch(self.filters)

    async def clear_filters(self) -> bool:
        self.filters = FilterSet()
        return await self.load()

    async def load_reference_data(self) -> bool:
        """Load the vehicle dropdown once and build the static type dropdown."""
        self.type_options = build_type_options()
        self.loading = True
        try:
            records = await self.gateway.fetch_vehicles()
        except GatewayError as e:
            self._report("Error fetching vehicles", e)
            return False
        finally:
            self.loading = False

        self.vehicle_options = [VehicleOption.from_record(record) for record in records]
        return True

    # ------------------------------------------------------------------
    # Write-through operations
    # ------------------------------------------------------------------

    async def edit_cell(self, row_id: int, field: str, raw) -> bool:
        """
        Apply an edit locally, then write the whole row through to the table.

        The local row changes before the first suspension point. If the write
        fails the row is flagged in ``failed_rows``. Once no other write for
        the row is still in flight, the row is rolled back to the last state
        the table confirmed.

        Returns:
            True if the write succeeded
        """
        row = self.get_row(row_id)
        if row is None:
            logger.warning(f"Edit ignored: transaction {row_id} is not loaded")
            return False

        try:
            value = coerce_edit_value(field, raw)
        except ValueError as e:
            logger.warning(f"Edit ignored for transaction {row_id}: {str(e)}")
            return False

        updated = row.model_copy(update={field: value})
        self._replace_row(updated)

        self.pending_writes[row_id] = self.pending_writes.get(row_id, 0) + 1
        failure = None
        try:
            await self.gateway.update_transaction(row_id, updated.to_payload())
        except GatewayError as e:
            failure = e
        finally:
            remaining = self.pending_writes.get(row_id, 1) - 1
            if remaining > 0:
                self.pending_writes[row_id] = remaining
            else:
                self.pending_writes.pop(row_id, None)

        if failure is not None:
            self.failed_rows.add(row_id)
            confirmed = self._confirmed.get(row_id)
            # A write still in flight may yet confirm the current local value
            if not self.is_pending(row_id) and confirmed is not None and self.get_row(row_id) is not None:
                self._replace_row(confirmed)
            self._report(f"Error updating transaction {row_id}", failure)
            return False

        if self.get_row(row_id) is not None:
            self._confirmed[row_id] = updated
        self.failed_rows.discard(row_id)
        return True

    async def add_row(self) -> Optional[Transaction]:
        """
        Insert a transaction with default values and prepend it.

        Returns:
            The stored transaction, or None if the insert failed
        """
        try:
            record = await self.gateway.insert_transaction(new_row_defaults())
        except GatewayError as e:
            self._report("Error adding row", e)
            return None

        try:
            transaction = Transaction.from_record(record)
        except ValidationError as e:
            self._report("Error adding row", e)
            return None

        self.rows = [transaction] + self.rows
        self._confirmed[transaction.id] = transaction
        return transaction

    async def delete_row(self, row_id: int) -> bool:
        """Delete a transaction; the local row is removed only after the table confirms."""
        try:
            await self.gateway.delete_transaction(row_id)
        except GatewayError as e:
            self._report(f"Error deleting transaction {row_id}", e)
            return False

        self.rows = [row for row in self.rows if row.id != row_id]
        self.failed_rows.discard(row_id)
        self._confirmed.pop(row_id, None)
        return True
