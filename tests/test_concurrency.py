"""Interleaving tests: optimistic edits, racing writes and reads issued mid-write."""

from __future__ import annotations

import asyncio

from conftest import settle


def test_edit_is_visible_locally_before_write_completes(loaded_store, gateway):
    async def scenario():
        gate = gateway.hold("update")
        task = asyncio.create_task(loaded_store.edit_cell(2, "amount", "55.5"))
        await settle()

        assert loaded_store.get_row(2).amount == 55.5
        assert loaded_store.is_pending(2)
        assert gateway.find(2)["amount"] == 40

        gate.set()
        assert await task is True

    asyncio.run(scenario())

    assert not loaded_store.is_pending(2)
    assert gateway.find(2)["amount"] == 55.5


def test_racing_writes_last_response_wins_remotely(loaded_store, gateway):
    async def scenario():
        first_gate = gateway.hold("update")
        second_gate = gateway.hold("update")
        first = asyncio.create_task(loaded_store.edit_cell(1, "amount", "10"))
        await settle()
        second = asyncio.create_task(loaded_store.edit_cell(1, "amount", "20"))
        await settle()

        assert loaded_store.pending_writes[1] == 2

        # The newer write lands first, the older one overwrites it
        second_gate.set()
        await second
        first_gate.set()
        await first

    asyncio.run(scenario())

    assert loaded_store.get_row(1).amount == 20.0
    assert gateway.find(1)["amount"] == 10.0
    assert loaded_store.pending_writes == {}


def test_failed_older_write_does_not_undo_newer_edit(loaded_store, gateway):
    async def scenario():
        failing_gate = gateway.hold("update", fail=True)
        older = asyncio.create_task(loaded_store.edit_cell(1, "description", "First"))
        await settle()
        assert await loaded_store.edit_cell(1, "description", "Second") is True

        failing_gate.set()
        assert await older is False

    asyncio.run(scenario())

    assert loaded_store.get_row(1).description == "Second"
    assert 1 in loaded_store.failed_rows


def test_overlapping_failed_writes_roll_back_to_confirmed_value(loaded_store, gateway):
    async def scenario():
        first_gate = gateway.hold("update", fail=True)
        second_gate = gateway.hold("update", fail=True)
        first = asyncio.create_task(loaded_store.edit_cell(1, "description", "First"))
        await settle()
        second = asyncio.create_task(loaded_store.edit_cell(1, "description", "Second"))
        await settle()

        # The newer write fails while the older one is still in flight
        second_gate.set()
        assert await second is False
        assert loaded_store.is_pending(1)
        assert loaded_store.get_row(1).description == "Second"

        first_gate.set()
        assert await first is False

    asyncio.run(scenario())

    assert loaded_store.get_row(1).description == "Weekly rental"
    assert gateway.find(1)["description"] == "Weekly rental"
    assert 1 in loaded_store.failed_rows
    assert loaded_store.pending_writes == {}


def test_failed_write_rolls_back_to_value_fetched_mid_write(loaded_store, gateway):
    async def scenario():
        gate = gateway.hold("update", fail=True)
        edit = asyncio.create_task(loaded_store.edit_cell(1, "amount", "75"))
        await settle()

        gateway.find(1)["amount"] = 120
        await loaded_store.refresh()

        gate.set()
        assert await edit is False

    asyncio.run(scenario())

    assert loaded_store.get_row(1).amount == 120.0


def test_filter_read_issued_mid_write_can_show_pre_edit_value(loaded_store, gateway):
    async def scenario():
        gate = gateway.hold("update")
        edit = asyncio.create_task(loaded_store.edit_cell(1, "amount", "75"))
        await settle()
        assert loaded_store.get_row(1).amount == 75.0

        await loaded_store.apply_filter("type", "Income")
        # Reads are not sequenced behind in-flight writes
        assert loaded_store.get_row(1).amount == 100.0

        gate.set()
        await edit

    asyncio.run(scenario())

    assert gateway.find(1)["amount"] == 75.0
    assert loaded_store.get_row(1).amount == 100.0


def test_superseded_filter_response_is_discarded(loaded_store, gateway):
    async def scenario():
        slow_gate = gateway.hold("fetch")
        slow = asyncio.create_task(loaded_store.apply_filter("type", "Income"))
        await settle()

        await loaded_store.apply_filter("type", "Expense")
        assert [r.id for r in loaded_store.rows] == [2]

        slow_gate.set()
        assert await slow is False

    asyncio.run(scenario())

    assert [r.id for r in loaded_store.rows] == [2]
    assert loaded_store.loading is False


def test_delete_while_edit_in_flight(loaded_store, gateway):
    async def scenario():
        gate = gateway.hold("update")
        edit = asyncio.create_task(loaded_store.edit_cell(1, "description", "Late"))
        await settle()

        assert await loaded_store.delete_row(1) is True
        gate.set()
        assert await edit is True

    asyncio.run(scenario())

    assert loaded_store.get_row(1) is None
    assert gateway.find(1) is None
