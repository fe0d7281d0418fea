from .base import Provider
from .coingecko import CoingeckoProvider
from .defillama import DefiLlamaProvider
from .explorer import ExplorerProvider

__all__ = [
    "Provider",
    "CoingeckoProvider",
    "DefiLlamaProvider",
    "ExplorerProvider",
]
