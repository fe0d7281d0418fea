from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


StrategyActionType = Literal["deposit", "withdraw", "approve"]


class StrategyAction(BaseModel):
    """Intent that the transaction builder turns into on-chain calls."""

    model_config = ConfigDict(populate_by_name=True)

    action: StrategyActionType = Field(description="deposit, withdraw or approve")
    amount: Optional[str] = Field(
        default=None,
        coerce_numbers_to_str=True,
        description="Amount in token units, e.g. '100' for 100 USDC",
    )
    protocol: Optional[str] = Field(default=None, description="Protocol name, e.g. 'Morpho'")
    strategy: Optional[str] = Field(default=None, description="Strategy label, e.g. 'Lending'")
    position_id: Optional[int] = Field(default=None, alias="positionId", description="Vault position for withdrawals")


class TransactionParams(BaseModel):
    """One unsigned call descriptor handed to the wallet for signing."""

    to: str = Field(description="Target contract address")
    data: str = Field(description="Hex-encoded ABI call data")
    value: str = Field(default="0", description="Native value in wei, as a decimal string")
    description: str = Field(description="Human-readable label for the step")
