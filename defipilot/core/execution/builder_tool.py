"""
Agent-facing adapter around the transaction builder.

Built transactions are parked in a PendingTransactions store under the id of
the request that triggered the build, so the HTTP layer can collect them once
the agent finishes. Each key holds at most one list and is emptied on read.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ...providers.llm.base import ToolDefinition, ToolParameter, ToolParameterType
from ...types import StrategyAction, TransactionParams
from .tx_builder import TransactionBuildError, build_transaction_params

logger = logging.getLogger(__name__)

BUILD_TRANSACTION_TOOL = ToolDefinition(
    name="build_transaction",
    description=(
        "Builds transaction parameters for executing DeFi strategies. "
        "Returns to, data, value for frontend execution."
    ),
    parameters=[
        ToolParameter(
            name="action",
            type=ToolParameterType.STRING,
            description="The action to perform",
            enum=["deposit", "withdraw"],
        ),
        ToolParameter(
            name="amount",
            type=ToolParameterType.STRING,
            description='Amount in human-readable format (e.g., "100" for 100 USDC)',
            required=False,
        ),
        ToolParameter(
            name="protocol",
            type=ToolParameterType.STRING,
            description='Protocol name (e.g., "Morpho", "Aave")',
            required=False,
        ),
        ToolParameter(
            name="strategy",
            type=ToolParameterType.STRING,
            description='Strategy type (e.g., "Lending", "Staking")',
            required=False,
        ),
        ToolParameter(
            name="positionId",
            type=ToolParameterType.INTEGER,
            description="Position ID for withdrawals",
            required=False,
        ),
    ],
)


class PendingTransactions:
    """Read-once slots of built transactions, keyed by request id."""

    def __init__(self) -> None:
        self._slots: Dict[str, List[TransactionParams]] = {}

    def put(self, key: str, transactions: List[TransactionParams]) -> None:
        self._slots[key] = list(transactions)

    def take(self, key: str) -> Optional[List[TransactionParams]]:
        """Return and clear the slot; None means no transactions pending."""
        return self._slots.pop(key, None)

    def clear(self, key: str) -> None:
        self._slots.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._slots

    def __len__(self) -> int:
        return len(self._slots)


class TransactionBuilderTool:
    """The ``build_transaction`` tool bound to one request's pending slot."""

    definition = BUILD_TRANSACTION_TOOL

    def __init__(self, pending: PendingTransactions, request_key: str):
        self.pending = pending
        self.request_key = request_key

    async def __call__(self, **arguments: Any) -> str:
        logger.info(f"build_transaction called for request {self.request_key}: {arguments}")

        try:
            action = StrategyAction.model_validate(arguments)
            transactions = build_transaction_params(action)
        except (ValidationError, TransactionBuildError) as e:
            self.pending.clear(self.request_key)
            message = e.message if isinstance(e, TransactionBuildError) else str(e)
            logger.warning(f"Transaction build failed for request {self.request_key}: {message}")
            return json.dumps({
                "success": False,
                "error": message,
                "message": "Failed to build transaction parameters",
            })

        self.pending.put(self.request_key, transactions)

        return json.dumps({
            "success": True,
            "transactions": [tx.model_dump() for tx in transactions],
            "message": f"Built {len(transactions)} transaction(s) for {action.action}",
        }, indent=2)

    def take_transactions(self) -> Optional[List[TransactionParams]]:
        return self.pending.take(self.request_key)
