"""
Remote table gateway for the Transactions and Vehicles tables.

Every method issues a single-table call and resolves to plain row
dictionaries. Failures of any kind surface as GatewayError.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional
from database.connection import get_supabase_client
from models.filters import FilterSet, ExactMatch, SubstringMatch
from config.settings import TRANSACTIONS_TABLE, VEHICLES_TABLE, VEHICLES_SELECT, ORDER_COLUMN

logger = logging.getLogger(__name__)

class GatewayError(Exception):
    """A Supabase call failed (transport, API or missing configuration)."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        message = f"{operation} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)

def apply_filters(query, filters: FilterSet):
    """
    Add one predicate per constrained column to a Supabase query.

    ExactMatch becomes eq, SubstringMatch becomes a case-insensitive ilike.
    """
    for field, constraint in filters.active():
        if isinstance(constraint, ExactMatch):
            query = query.eq(field, constraint.value)
        elif isinstance(constraint, SubstringMatch):
            query = query.ilike(field, f"%{constraint.value}%")
        else:
            raise TypeError(f"Unsupported constraint for {field}: {constraint!r}")
    return query

class DatabaseOperations:
    """Handle all ledger CRUD operations against Supabase."""

    def __init__(self, client_factory: Callable[[], Awaitable[Any]] = get_supabase_client):
        self._client_factory = client_factory
        self._client = None
        self._loop = None

    async def _get_client(self):
        # The async client is bound to the loop it was created on
        loop = asyncio.get_running_loop()
        if self._client is None or self._loop is not loop:
            self._client = await self._client_factory()
            self._loop = loop
        if self._client is None:
            raise GatewayError("connect", RuntimeError("Supabase client is not configured"))
        return self._client

    async def _execute(self, operation: str, build) -> List[Dict]:
        client = await self._get_client()
        try:
            response = await build(client).execute()
        except Exception as e:
            raise GatewayError(operation, e) from e
        return response.data or []

    # ========================================================================
    # TRANSACTION OPERATIONS
    # ========================================================================

    async def fetch_transactions(self, filters: Optional[FilterSet] = None) -> List[Dict]:
        """
        Retrieve transactions, newest first, with optional filters.

        Args:
            filters: Predicate set to apply (None or empty fetches everything)

        Returns:
            List of transaction row dictionaries
        """
        def build(client):
            query = client.table(TRANSACTIONS_TABLE).select("*")
            if filters is not None:
                query = apply_filters(query, filters)
            return query.order(ORDER_COLUMN, desc=True)

        return await self._execute("fetch transactions", build)

    async def insert_transaction(self, row: Dict) -> Dict:
        """
        Insert one transaction and return the stored row.

        Raises:
            GatewayError: If the insert fails or returns no row
        """
        data = await self._execute(
            "insert transaction",
            lambda client: client.table(TRANSACTIONS_TABLE).insert(row)
        )
        if not data:
            raise GatewayError("insert transaction", RuntimeError("no row returned"))
        return data[0]

    async def update_transaction(self, transaction_id: int, payload: Dict) -> List[Dict]:
        """Write a full-row payload for one transaction."""
        return await self._execute(
            "update transaction",
            lambda client: client.table(TRANSACTIONS_TABLE).update(payload).eq("id", transaction_id)
        )

    async def delete_transaction(self, transaction_id: int) -> List[Dict]:
        """
        Delete a transaction.

        Returns:
            The deleted rows (empty if the id did not exist)
        """
        return await self._execute(
            "delete transaction",
            lambda client: client.table(TRANSACTIONS_TABLE).delete().eq("id", transaction_id)
        )

    # ========================================================================
    # REFERENCE DATA
    # ========================================================================

    async def fetch_vehicles(self) -> List[Dict]:
        """Retrieve all vehicles (with joined color/model/brand), oldest first."""
        return await self._execute(
            "fetch vehicles",
            lambda client: client.table(VEHICLES_TABLE).select(VEHICLES_SELECT).order(ORDER_COLUMN, desc=False)
        )
