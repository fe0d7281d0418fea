"""Function signatures of the mock USDC / mock vault calls the backend encodes."""

from eth_utils import function_signature_to_4byte_selector

ERC20_APPROVE_SIGNATURE = "approve(address,uint256)"
VAULT_DEPOSIT_SIGNATURE = "deposit(uint256,string,string)"
VAULT_WITHDRAW_SIGNATURE = "withdraw(uint256)"

ERC20_APPROVE_SELECTOR = function_signature_to_4byte_selector(ERC20_APPROVE_SIGNATURE)  # 0x095ea7b3
VAULT_DEPOSIT_SELECTOR = function_signature_to_4byte_selector(VAULT_DEPOSIT_SIGNATURE)
VAULT_WITHDRAW_SELECTOR = function_signature_to_4byte_selector(VAULT_WITHDRAW_SIGNATURE)

ERC20_APPROVE_TYPES = ["address", "uint256"]
VAULT_DEPOSIT_TYPES = ["uint256", "string", "string"]
VAULT_WITHDRAW_TYPES = ["uint256"]

MAX_UINT256 = 2**256 - 1
