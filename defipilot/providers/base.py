from abc import ABC
from typing import Any, Dict, Optional

import httpx


class Provider(ABC):
    """Base read-only HTTP data provider.

    Tests inject ``transport`` (e.g. ``httpx.MockTransport``) to avoid the network.
    """

    name: str
    timeout_s: int = 10

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport)

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                        headers: Optional[Dict[str, str]] = None) -> Any:
        async with self._client() as client:
            response = await client.get(url, params=params, headers=headers)
            response.raise_for_status()
            return response.json()
