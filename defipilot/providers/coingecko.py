from typing import Any, Dict, Optional

import httpx

from ..config import settings
from .base import Provider


class CoingeckoProvider(Provider):
    """Coingecko market data: spot price, 7-day chart, trending coins."""

    name = "coingecko"
    timeout_s = 15

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(transport)
        self.api_key = settings.coingecko_api_key
        self.base_url = settings.coingecko_base_url.rstrip("/")

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["X-CG-Demo-API-Key"] = self.api_key
        return headers

    async def get_price(self, coin_id: str = "ethereum") -> Dict[str, Any]:
        return await self._get_json(
            f"{self.base_url}/simple/price",
            params={"ids": coin_id, "vs_currencies": "usd", "include_24hr_change": "true"},
            headers=self._build_headers(),
        )

    async def get_market_chart(self, coin_id: str = "ethereum", days: int = 7) -> Dict[str, Any]:
        return await self._get_json(
            f"{self.base_url}/coins/{coin_id}/market_chart",
            params={"vs_currency": "usd", "days": days},
            headers=self._build_headers(),
        )

    async def get_trending(self) -> Dict[str, Any]:
        return await self._get_json(f"{self.base_url}/search/trending", headers=self._build_headers())
