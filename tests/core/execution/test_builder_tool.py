"""
Tests for the build_transaction agent tool and its read-once pending store.
"""

import json

import pytest

from defipilot.core.execution import PendingTransactions, TransactionBuilderTool
from defipilot.types import TransactionParams


def _tx(description: str = "step") -> TransactionParams:
    return TransactionParams(to="0x" + "1" * 40, data="0x00", description=description)


class TestPendingTransactions:

    def test_take_empties_slot(self):
        pending = PendingTransactions()
        pending.put("req-1", [_tx()])

        assert len(pending.take("req-1")) == 1
        assert pending.take("req-1") is None
        assert "req-1" not in pending

    def test_slots_are_independent_per_request(self):
        pending = PendingTransactions()
        pending.put("req-1", [_tx("one")])
        pending.put("req-2", [_tx("two"), _tx("three")])

        assert [tx.description for tx in pending.take("req-2")] == ["two", "three"]
        assert [tx.description for tx in pending.take("req-1")] == ["one"]

    def test_put_overwrites(self):
        pending = PendingTransactions()
        pending.put("req-1", [_tx("old")])
        pending.put("req-1", [_tx("new")])

        assert [tx.description for tx in pending.take("req-1")] == ["new"]

    def test_clear_unknown_key_is_noop(self):
        pending = PendingTransactions()
        pending.clear("missing")

        assert len(pending) == 0


class TestTransactionBuilderTool:

    @pytest.mark.asyncio
    async def test_successful_build_fills_slot(self):
        pending = PendingTransactions()
        tool = TransactionBuilderTool(pending, "req-1")

        result = json.loads(await tool(action="deposit", amount="100", protocol="Morpho", strategy="Lending"))

        assert result["success"] is True
        assert result["message"] == "Built 2 transaction(s) for deposit"
        assert len(result["transactions"]) == 2

        transactions = tool.take_transactions()
        assert [tx.description for tx in transactions] == [
            "Approve 100 USDC for vault",
            "Deposit 100 USDC to Morpho (Lending)",
        ]
        assert tool.take_transactions() is None

    @pytest.mark.asyncio
    async def test_numeric_amount_is_accepted(self):
        pending = PendingTransactions()
        tool = TransactionBuilderTool(pending, "req-1")

        result = json.loads(await tool(action="deposit", amount=100, protocol="Morpho", strategy="Lending"))

        assert result["success"] is True
        assert [tx.description for tx in pending.take("req-1")] == [
            "Approve 100 USDC for vault",
            "Deposit 100 USDC to Morpho (Lending)",
        ]

    @pytest.mark.asyncio
    async def test_float_amount_is_accepted(self):
        pending = PendingTransactions()
        tool = TransactionBuilderTool(pending, "req-1")

        result = json.loads(await tool(action="deposit", amount=12.5, protocol="Aave", strategy="Lending"))

        assert result["success"] is True
        assert pending.take("req-1")[0].description == "Approve 12.5 USDC for vault"

    @pytest.mark.asyncio
    async def test_withdraw_accepts_wire_position_id(self):
        pending = PendingTransactions()
        tool = TransactionBuilderTool(pending, "req-1")

        result = json.loads(await tool(action="withdraw", positionId=4))

        assert result["success"] is True
        assert pending.take("req-1")[0].description == "Withdraw from position 4"

    @pytest.mark.asyncio
    async def test_failed_build_clears_slot(self):
        pending = PendingTransactions()
        pending.put("req-1", [_tx("stale")])
        tool = TransactionBuilderTool(pending, "req-1")

        result = json.loads(await tool(action="deposit", amount="100"))

        assert result["success"] is False
        assert result["message"] == "Failed to build transaction parameters"
        assert "req-1" not in pending

    @pytest.mark.asyncio
    async def test_unknown_action_is_reported_not_raised(self):
        pending = PendingTransactions()
        tool = TransactionBuilderTool(pending, "req-1")

        result = json.loads(await tool(action="swap", amount="1"))

        assert result["success"] is False
        assert pending.take("req-1") is None

    @pytest.mark.asyncio
    async def test_tools_for_different_requests_do_not_interfere(self):
        pending = PendingTransactions()
        first = TransactionBuilderTool(pending, "req-1")
        second = TransactionBuilderTool(pending, "req-2")

        await first(action="deposit", amount="1", protocol="Morpho", strategy="Lending")
        await second(action="withdraw", positionId=9)

        assert len(first.take_transactions()) == 2
        assert len(second.take_transactions()) == 1
