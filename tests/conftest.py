"""Pytest configuration and shared fixtures for ledger tests.

Provides an in-memory async gateway (with hooks to hold or fail individual
calls) and a recording fake of the Supabase query builder, so sync operations
can be tested without a real Supabase project.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict, deque
from types import SimpleNamespace

import pytest

from database.operations import GatewayError
from models.filters import ExactMatch, SubstringMatch
from services.ledger_store import LedgerStore


class FakeGateway:
    """In-memory stand-in for DatabaseOperations.

    ``hold(op)`` queues a gate for the next call of ``op``: the call blocks until
    the returned event is set. ``hold(op, fail=True)`` also makes that call fail.
    ``fail_always`` makes every call of an operation fail.
    """

    def __init__(self, rows=None, vehicles=None):
        self.table = []
        self._clock = 0
        for row in rows or []:
            self._store(dict(row))
        self.vehicles = list(vehicles or [])
        self.next_id = max((r["id"] for r in self.table), default=0) + 1
        self.calls = []
        self.fail_always = set()
        self._holds = defaultdict(deque)

    def _store(self, record):
        self._clock += 1
        record.setdefault("created_at", self._clock)
        record.setdefault("date", None)
        record.setdefault("description", None)
        record.setdefault("status", None)
        record.setdefault("vehicle", None)
        self.table.append(record)

    def hold(self, op, fail=False):
        event = asyncio.Event()
        self._holds[op].append((event, fail))
        return event

    async def _enter(self, op, *args):
        self.calls.append((op, *args))
        fail = op in self.fail_always
        if self._holds[op]:
            event, held_fail = self._holds[op].popleft()
            await event.wait()
            fail = fail or held_fail
        if fail:
            raise GatewayError(op, RuntimeError("simulated outage"))

    def find(self, row_id):
        return next((r for r in self.table if r["id"] == row_id), None)

    async def fetch_transactions(self, filters=None):
        # The read happens when the request is issued; the response may arrive later
        snapshot = [dict(r) for r in self.table]
        await self._enter("fetch", filters)
        rows = snapshot
        if filters is not None:
            for field, constraint in filters.active():
                if isinstance(constraint, ExactMatch):
                    rows = [r for r in rows if r.get(field) == constraint.value]
                elif isinstance(constraint, SubstringMatch):
                    needle = constraint.value.lower()
                    rows = [r for r in rows if needle in (r.get(field) or "").lower()]
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    async def fetch_vehicles(self):
        await self._enter("vehicles")
        return [dict(v) for v in self.vehicles]

    async def insert_transaction(self, row):
        await self._enter("insert", row)
        record = dict(row, id=self.next_id, date=None)
        self.next_id += 1
        self._store(record)
        return dict(record)

    async def update_transaction(self, transaction_id, payload):
        await self._enter("update", transaction_id, payload)
        record = self.find(transaction_id)
        if record is None:
            return []
        record.update(payload)
        return [dict(record)]

    async def delete_transaction(self, transaction_id):
        await self._enter("delete", transaction_id)
        record = self.find(transaction_id)
        if record is None:
            return []
        self.table.remove(record)
        return [record]


class FakeQuery:
    """Records the Supabase query-builder chain and returns canned data."""

    def __init__(self, client, table):
        self.client = client
        self.chain = [("table", table)]
        client.queries.append(self)

    def _add(self, *call):
        self.chain.append(call)
        return self

    def select(self, columns):
        return self._add("select", columns)

    def insert(self, row):
        return self._add("insert", row)

    def update(self, payload):
        return self._add("update", payload)

    def delete(self):
        return self._add("delete")

    def eq(self, column, value):
        return self._add("eq", column, value)

    def ilike(self, column, pattern):
        return self._add("ilike", column, pattern)

    def order(self, column, desc=False):
        return self._add("order", column, desc)

    async def execute(self):
        if self.client.error is not None:
            raise self.client.error
        return SimpleNamespace(data=self.client.data)


class FakeSupabaseClient:
    def __init__(self, data=None, error=None):
        self.data = data if data is not None else []
        self.error = error
        self.queries = []

    def table(self, name):
        return FakeQuery(self, name)


def settle():
    """Let every runnable task advance to its next real suspension point."""
    async def _settle():
        for _ in range(10):
            await asyncio.sleep(0)
    return _settle()


@pytest.fixture
def sample_records():
    return [
        {"id": 1, "type": "Income", "amount": 100, "date": "2024-05-01",
         "description": "Weekly rental", "status": "Completed", "vehicle": 1},
        {"id": 2, "type": "Expense", "amount": 40, "date": None,
         "description": "Fuel top-up", "status": "Pending", "vehicle": 2},
    ]


@pytest.fixture
def vehicles():
    return [
        {"id": 1, "name": "Vios", "color": {"name": "White"}, "model": {"name": "Vios", "brand": {"name": "Toyota"}}},
        {"id": 2, "name": "Click 125", "color": None, "model": None},
    ]


@pytest.fixture
def gateway(sample_records, vehicles):
    return FakeGateway(rows=sample_records, vehicles=vehicles)


@pytest.fixture
def store(gateway):
    return LedgerStore(gateway)


@pytest.fixture
def loaded_store(store):
    asyncio.run(store.load())
    return store
