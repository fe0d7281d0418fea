from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def model_post_init(self, __context: Any) -> None:
        """Normalize contract addresses once so every consumer sees the same form."""

        super().model_post_init(__context)

        object.__setattr__(self, "mock_usdc_address", self.mock_usdc_address.strip())
        object.__setattr__(self, "mock_vault_address", self.mock_vault_address.strip())

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=3001, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # LLM Provider Settings
    llm_provider: str = Field(default="anthropic", description="Default LLM provider")
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    llm_model: str = Field(default="claude-sonnet-4-20250514", description="Default LLM model")
    max_tokens: int = Field(default=1500, description="Maximum tokens for LLM response")
    temperature: float = Field(default=0.3, description="LLM temperature setting")
    max_tool_iterations: int = Field(
        default=6,
        ge=1,
        description="Maximum LLM turns per agent before the loop gives up on tool calls",
    )

    # Mock contracts (Base Sepolia demo deployment)
    mock_usdc_address: str = Field(
        default="0xC9F312121CFB15885a5b5F138A6584844FB89ff0",
        description="Mock USDC token contract",
        validation_alias=AliasChoices("mock_usdc_address", "MOCK_USDC_ADDRESS"),
    )
    mock_vault_address: str = Field(
        default="0xB3eF80edDC7b9AB9318678dc75323DF5cC16a579",
        description="Mock vault contract",
        validation_alias=AliasChoices("mock_vault_address", "MOCK_VAULT_ADDRESS"),
    )
    asset_decimals: int = Field(default=6, ge=0, le=36, description="Decimals of the vault asset token")

    # Agent resilience
    agent_max_retries: int = Field(
        default=3,
        ge=0,
        description="Extra attempts for transient agent failures",
    )
    agent_retry_initial_delay_seconds: float = Field(default=1.0, ge=0, description="First backoff delay")
    agent_retry_exponential_base: float = Field(default=2.0, ge=1, description="Backoff multiplier per attempt")
    circuit_breaker_threshold: int = Field(
        default=5,
        ge=1,
        description="Failures before agent calls fail fast",
    )
    circuit_breaker_decay_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Seconds after which a recorded failure is forgotten",
    )
    agent_init_attempts: int = Field(default=3, ge=1, description="Agent runtime initialization attempts")
    agent_init_retry_delay_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Base pause between initialization attempts (multiplied by attempt number)",
    )

    # External data providers
    defillama_base_url: str = Field(default="https://api.llama.fi", description="DeFiLlama API")
    defillama_yields_url: str = Field(default="https://yields.llama.fi", description="DeFiLlama yields API")
    coingecko_base_url: str = Field(default="https://api.coingecko.com/api/v3", description="CoinGecko API")
    coingecko_api_key: str = Field(default="", description="Coingecko API key")
    explorer_base_url: str = Field(
        default="https://api-sepolia.basescan.org/api",
        description="Etherscan-compatible explorer API",
    )
    etherscan_api_key: str = Field(
        default="",
        description="Explorer API key",
        validation_alias=AliasChoices("etherscan_api_key", "ETHERSCAN_API_KEY", "BASESCAN_API_KEY"),
    )
    request_timeout_seconds: int = Field(default=10, description="Outbound request timeout")

    @property
    def has_anthropic_key(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def has_coingecko_key(self) -> bool:
        return bool(self.coingecko_api_key)

    @property
    def has_llm_key(self) -> bool:
        """Check if we have an API key for the configured LLM provider"""
        if self.llm_provider.lower() in ["anthropic", "claude"]:
            return self.has_anthropic_key
        return False


# Global settings instance
settings = Settings()
