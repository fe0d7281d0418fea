from defipilot.config import Settings


def test_mock_contract_aliases(monkeypatch):
    """Contract addresses load from their legacy upper-case names and are trimmed."""

    monkeypatch.setenv("MOCK_USDC_ADDRESS", "  0x1111111111111111111111111111111111111111 ")
    monkeypatch.setenv("MOCK_VAULT_ADDRESS", "0x2222222222222222222222222222222222222222")

    settings = Settings()

    assert settings.mock_usdc_address == "0x1111111111111111111111111111111111111111"
    assert settings.mock_vault_address == "0x2222222222222222222222222222222222222222"


def test_basescan_key_alias(monkeypatch):
    """Explorer key falls back to the BASESCAN_API_KEY name."""

    monkeypatch.delenv("ETHERSCAN_API_KEY", raising=False)
    monkeypatch.setenv("BASESCAN_API_KEY", "scan-key")

    settings = Settings()

    assert settings.etherscan_api_key == "scan-key"


def test_port_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "4000")

    assert Settings().port == 4000


def test_defaults(monkeypatch):
    for name in ("PORT", "AGENT_MAX_RETRIES", "CIRCUIT_BREAKER_THRESHOLD", "ASSET_DECIMALS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.port == 3001
    assert settings.agent_max_retries == 3
    assert settings.circuit_breaker_threshold == 5
    assert settings.asset_decimals == 6


def test_has_llm_key(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    assert Settings().has_llm_key is False

    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    assert Settings().has_llm_key is True

    monkeypatch.setenv("LLM_PROVIDER", "unknown")
    assert Settings().has_llm_key is False
