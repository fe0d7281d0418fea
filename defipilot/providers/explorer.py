from typing import Any, Optional

import httpx

from ..config import settings
from .base import Provider


class ExplorerProvider(Provider):
    """Etherscan-compatible account queries (Base Sepolia by default)."""

    name = "explorer"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(transport)
        self.base_url = settings.explorer_base_url
        self.api_key = settings.etherscan_api_key
        self.timeout_s = settings.request_timeout_seconds

    async def account(self, action: str, address: str) -> Any:
        """Run ``module=account`` with ``action`` in balance, txlist, tokentx."""
        data = await self._get_json(
            self.base_url,
            params={
                "module": "account",
                "action": action,
                "address": address,
                "apikey": self.api_key,
            },
        )
        return data.get("result") if isinstance(data, dict) else data
