from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from .base import Provider

TOP_N = 10


class DefiLlamaProvider(Provider):
    """DeFiLlama protocol TVL and yield pools."""

    name = "defillama"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(transport)
        self.base_url = settings.defillama_base_url.rstrip("/")
        self.yields_url = settings.defillama_yields_url.rstrip("/")
        self.timeout_s = settings.request_timeout_seconds

    async def get_protocols(self, chain: Optional[str] = None) -> List[Dict[str, Any]]:
        """All protocols, or the first ten deployed on ``chain``."""
        data = await self._get_json(f"{self.base_url}/protocols")
        if not isinstance(data, list):
            return []
        if chain:
            target = chain.lower()
            data = [
                item for item in data
                if isinstance(item, dict) and (
                    str(item.get("chain") or "").lower() == target
                    or target in [str(c).lower() for c in item.get("chains") or []]
                )
            ][:TOP_N]
        return data

    async def get_protocol(self, protocol: str) -> Dict[str, Any]:
        return await self._get_json(f"{self.base_url}/protocol/{protocol.lower()}")

    async def get_pools(self, chain: Optional[str] = None, top: bool = False) -> List[Dict[str, Any]]:
        """Yield pools; with ``top`` and a chain, that chain's ten largest by TVL."""
        data = await self._get_json(f"{self.yields_url}/pools")
        pools = data.get("data", []) if isinstance(data, dict) else []
        if top and chain:
            target = chain.lower()
            pools = [p for p in pools if str(p.get("chain") or "").lower() == target]
            pools.sort(key=lambda p: p.get("tvlUsd") or 0, reverse=True)
            pools = pools[:TOP_N]
        return pools
