"""
Transaction builder for the mock vault.

Turns a StrategyAction into the ordered list of unsigned calls the wallet
executes: approve + deposit for deposits, a single withdraw for withdrawals.
"""

import logging
import re
from typing import List, Optional

from eth_abi import encode
from eth_utils import is_address, to_checksum_address

from ...config import settings
from ...types import StrategyAction, TransactionParams
from .abis import (
    ERC20_APPROVE_SELECTOR,
    ERC20_APPROVE_TYPES,
    MAX_UINT256,
    VAULT_DEPOSIT_SELECTOR,
    VAULT_DEPOSIT_TYPES,
    VAULT_WITHDRAW_SELECTOR,
    VAULT_WITHDRAW_TYPES,
)

logger = logging.getLogger(__name__)

_AMOUNT_RE = re.compile(r"^\d+(?:\.\d+)?$")
_HEX_DATA_RE = re.compile(r"^0x(?:[0-9a-fA-F]{2})+$")


class TransactionBuildError(ValueError):
    """Raised when a StrategyAction cannot be turned into transactions."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


def _encode_call(selector: bytes, types: List[str], args: list) -> str:
    return "0x" + (selector + encode(types, args)).hex()


def scale_amount(amount: str, decimals: int) -> int:
    """Convert a human amount ("100.5") to base units, rejecting anything lossy."""
    text = amount.strip()
    if not _AMOUNT_RE.match(text):
        raise TransactionBuildError(f"Invalid amount: {amount!r}", field="amount")

    whole, _, fraction = text.partition(".")
    if len(fraction) > decimals:
        raise TransactionBuildError(
            f"Amount {amount} has more than {decimals} decimal places",
            field="amount",
        )

    scaled = int(whole) * 10**decimals + int(fraction.ljust(decimals, "0") or "0")
    if scaled <= 0:
        raise TransactionBuildError("Amount must be greater than zero", field="amount")
    if scaled > MAX_UINT256:
        raise TransactionBuildError(f"Amount {amount} overflows uint256", field="amount")
    return scaled


def _build_approve(
    amount: str,
    scaled: int,
    token_address: str,
    vault_address: str,
) -> TransactionParams:
    return TransactionParams(
        to=token_address,
        data=_encode_call(ERC20_APPROVE_SELECTOR, ERC20_APPROVE_TYPES, [vault_address, scaled]),
        value="0",
        description=f"Approve {amount} USDC for vault",
    )


def build_transaction_params(
    action: StrategyAction,
    token_address: Optional[str] = None,
    vault_address: Optional[str] = None,
    decimals: Optional[int] = None,
) -> List[TransactionParams]:
    """
    Build the unsigned transactions for a strategy action.

    Args:
        action: The validated intent
        token_address: Asset token contract (default: settings.mock_usdc_address)
        vault_address: Vault contract (default: settings.mock_vault_address)
        decimals: Asset decimals used to scale ``amount`` (default: settings.asset_decimals)

    Returns:
        A fresh list of TransactionParams in execution order

    Raises:
        TransactionBuildError: required fields are missing or invalid
    """
    token = to_checksum_address(token_address or settings.mock_usdc_address)
    vault = to_checksum_address(vault_address or settings.mock_vault_address)
    decimals = settings.asset_decimals if decimals is None else decimals

    logger.debug(f"Building transaction params for {action.action}: {action.model_dump()}")

    transactions: List[TransactionParams] = []

    if action.action == "deposit":
        missing = [
            name for name in ("amount", "protocol", "strategy")
            if not getattr(action, name)
        ]
        if missing:
            raise TransactionBuildError(
                "Missing required fields for deposit: amount, protocol, strategy",
                field=missing[0],
            )

        scaled = scale_amount(action.amount, decimals)

        # Approve must come first: the deposit pulls funds via the allowance
        transactions.append(_build_approve(action.amount, scaled, token, vault))
        transactions.append(
            TransactionParams(
                to=vault,
                data=_encode_call(
                    VAULT_DEPOSIT_SELECTOR,
                    VAULT_DEPOSIT_TYPES,
                    [scaled, action.protocol, action.strategy],
                ),
                value="0",
                description=f"Deposit {action.amount} USDC to {action.protocol} ({action.strategy})",
            )
        )

    elif action.action == "withdraw":
        if action.position_id is None:
            raise TransactionBuildError("Missing positionId for withdraw", field="positionId")
        if action.position_id < 0:
            raise TransactionBuildError("positionId must be non-negative", field="positionId")

        transactions.append(
            TransactionParams(
                to=vault,
                data=_encode_call(VAULT_WITHDRAW_SELECTOR, VAULT_WITHDRAW_TYPES, [action.position_id]),
                value="0",
                description=f"Withdraw from position {action.position_id}",
            )
        )

    elif action.action == "approve":
        if not action.amount:
            raise TransactionBuildError("Missing required field for approve: amount", field="amount")
        scaled = scale_amount(action.amount, decimals)
        transactions.append(_build_approve(action.amount, scaled, token, vault))

    else:
        raise TransactionBuildError(f"Unsupported action: {action.action}", field="action")

    logger.info(f"Built {len(transactions)} transaction(s) for {action.action}")
    return transactions


def validate_transaction_params(params: TransactionParams) -> bool:
    """Advisory well-formedness check for a descriptor."""
    if not params.to or not is_address(params.to):
        logger.error(f"Invalid 'to' address: {params.to}")
        return False

    if not params.data or not _HEX_DATA_RE.match(params.data):
        logger.error("Invalid 'data' field")
        return False

    if not params.value or not params.value.isdigit():
        logger.error(f"Invalid 'value' field: {params.value}")
        return False

    return True
