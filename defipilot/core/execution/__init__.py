"""
Transaction building for the mock vault.

Deterministic call-data builders plus the agent tool adapter that hands
built transactions back to the HTTP layer.
"""

from .builder_tool import BUILD_TRANSACTION_TOOL, PendingTransactions, TransactionBuilderTool
from .tx_builder import (
    TransactionBuildError,
    build_transaction_params,
    scale_amount,
    validate_transaction_params,
)

__all__ = [
    "BUILD_TRANSACTION_TOOL",
    "PendingTransactions",
    "TransactionBuilderTool",
    "TransactionBuildError",
    "build_transaction_params",
    "scale_amount",
    "validate_transaction_params",
]
