"""
Tool Registry and Executor for LLM-driven tool calling.

A registry is assembled per request: the read-only data tools are shared,
while ``build_transaction`` is bound to the request's pending-transaction slot.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, Dict, List, Optional

from ...providers import CoingeckoProvider, DefiLlamaProvider, ExplorerProvider
from ...providers.llm.base import (
    LLMProviderError,
    ToolCall,
    ToolDefinition,
    ToolParameter,
    ToolParameterType,
    ToolResult,
)
from ..execution import PendingTransactions, TransactionBuilderTool


@dataclass
class RegisteredTool:
    """A tool registered in the registry with its definition and handler."""
    definition: ToolDefinition
    handler: Callable[..., Coroutine[Any, Any, Any]]


class ToolRegistry:
    """
    Registry of available tools that the LLM can call.

    Each tool has a definition (name, description, parameters) and a handler function.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._tools: Dict[str, RegisteredTool] = {}
        self.logger = logger or logging.getLogger(__name__)

    def register(
        self,
        name: str,
        definition: ToolDefinition,
        handler: Callable[..., Coroutine[Any, Any, Any]],
    ) -> None:
        """Register a tool with its definition and handler."""
        self._tools[name] = RegisteredTool(definition=definition, handler=handler)

    def get_definitions(self, names: Optional[List[str]] = None) -> List[ToolDefinition]:
        """Definitions for passing to the LLM, optionally restricted to ``names``."""
        if names is None:
            return [tool.definition for tool in self._tools.values()]
        return [self._tools[name].definition for name in names if name in self._tools]

    def get_tool(self, name: str) -> Optional[RegisteredTool]:
        return self._tools.get(name)

    def has_tool(self, name: str) -> bool:
        return name in self._tools


class DataTools:
    """Handlers for the read-only market data tools."""

    def __init__(
        self,
        defillama: Optional[DefiLlamaProvider] = None,
        coingecko: Optional[CoingeckoProvider] = None,
        explorer: Optional[ExplorerProvider] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.defillama = defillama or DefiLlamaProvider()
        self.coingecko = coingecko or CoingeckoProvider()
        self.explorer = explorer or ExplorerProvider()
        self.logger = logger or logging.getLogger(__name__)

    def register_all(self, registry: ToolRegistry) -> None:
        registry.register(
            "query_defi_protocol",
            ToolDefinition(
                name="query_defi_protocol",
                description=(
                    "Query DeFi protocol data including TVL, yields, and pool "
                    "information from DeFiLlama"
                ),
                parameters=[
                    ToolParameter(
                        name="action",
                        type=ToolParameterType.STRING,
                        description="Type of data to retrieve",
                        enum=["tvl", "yields", "pools"],
                    ),
                    ToolParameter(
                        name="protocol",
                        type=ToolParameterType.STRING,
                        description="Specific protocol name to query",
                        required=False,
                    ),
                    ToolParameter(
                        name="chain",
                        type=ToolParameterType.STRING,
                        description='Blockchain network (e.g., "base", "ethereum")',
                        required=False,
                    ),
                ],
            ),
            self.query_defi_protocol,
        )
        registry.register(
            "query_market_data",
            ToolDefinition(
                name="query_market_data",
                description=(
                    "Query cryptocurrency market data including prices, charts, "
                    "and trending coins from CoinGecko"
                ),
                parameters=[
                    ToolParameter(
                        name="action",
                        type=ToolParameterType.STRING,
                        description="Type of market data to retrieve",
                        enum=["price", "market_chart", "trending"],
                    ),
                    ToolParameter(
                        name="coinId",
                        type=ToolParameterType.STRING,
                        description='CoinGecko coin ID (e.g., "ethereum", "bitcoin")',
                        required=False,
                    ),
                ],
            ),
            self.query_market_data,
        )
        registry.register(
            "query_blockchain",
            ToolDefinition(
                name="query_blockchain",
                description=(
                    "Query blockchain data including balances, transactions, and "
                    "token transfers via the block explorer API"
                ),
                parameters=[
                    ToolParameter(
                        name="action",
                        type=ToolParameterType.STRING,
                        description="Type of data to retrieve",
                        enum=["balance", "txlist", "tokentx"],
                    ),
                    ToolParameter(
                        name="address",
                        type=ToolParameterType.STRING,
                        description="Wallet address to query",
                        required=False,
                    ),
                ],
            ),
            self.query_blockchain,
        )

    async def query_defi_protocol(
        self,
        action: str,
        protocol: Optional[str] = None,
        chain: Optional[str] = None,
    ) -> Dict[str, Any]:
        try:
            if action == "tvl":
                if protocol:
                    data: Any = await self.defillama.get_protocol(protocol)
                else:
                    data = await self.defillama.get_protocols(chain=chain)
            elif action in ("yields", "pools"):
                data = await self.defillama.get_pools(chain=chain, top=action == "yields")
            else:
                return {"success": False, "error": f"Unsupported action: {action}"}

            return {
                "success": True,
                "data": data,
                "source": "DeFiLlama API",
                "chain": chain,
                "action": action,
            }
        except Exception as e:
            self.logger.warning(f"DeFiLlama query failed: {e}")
            return {
                "success": False,
                "error": str(e),
                "details": "DeFiLlama API may be temporarily unavailable",
            }

    async def query_market_data(self, action: str, coinId: Optional[str] = None) -> Dict[str, Any]:
        coin_id = coinId or "ethereum"
        try:
            if action == "price":
                data = await self.coingecko.get_price(coin_id)
            elif action == "market_chart":
                data = await self.coingecko.get_market_chart(coin_id)
            elif action == "trending":
                data = await self.coingecko.get_trending()
            else:
                return {"success": False, "error": f"Unsupported action: {action}"}
            return {"success": True, "data": data, "source": "CoinGecko API"}
        except Exception as e:
            self.logger.warning(f"CoinGecko query failed: {e}")
            return {"success": False, "error": str(e)}

    async def query_blockchain(self, action: str, address: Optional[str] = None) -> Dict[str, Any]:
        if action not in ("balance", "txlist", "tokentx"):
            return {"success": False, "error": f"Unsupported action: {action}"}
        if not address:
            return {"success": False, "error": "address is required"}
        try:
            data = await self.explorer.account(action, address)
            return {"success": True, "data": data, "source": "Etherscan API"}
        except Exception as e:
            self.logger.warning(f"Explorer query failed: {e}")
            return {"success": False, "error": str(e)}


def build_request_registry(
    data_tools: DataTools,
    pending: PendingTransactions,
    request_key: str,
) -> ToolRegistry:
    """Registry for one request: shared data tools plus a request-bound builder."""
    registry = ToolRegistry()
    data_tools.register_all(registry)
    builder = TransactionBuilderTool(pending, request_key)
    registry.register(builder.definition.name, builder.definition, builder)
    return registry


class ToolExecutor:
    """
    Executes tool calls requested by the LLM.

    Supports parallel execution of independent tool calls. Handler errors
    become error results, except LLM provider errors raised by delegated
    agents, which propagate.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry
        self.logger = logger or logging.getLogger(__name__)

    async def execute_single(self, tool_call: ToolCall) -> ToolResult:
        """Execute a single tool call and return the result."""
        tool = self.registry.get_tool(tool_call.name)

        if not tool:
            return ToolResult(
                tool_call_id=tool_call.id,
                result=None,
                error=f"Unknown tool: {tool_call.name}",
            )

        try:
            result = await tool.handler(**tool_call.arguments)
            return ToolResult(
                tool_call_id=tool_call.id,
                result=result,
                error=None,
            )
        except LLMProviderError:
            # Sub-agent LLM failures go to the caller's recovery executor
            raise
        except Exception as e:
            self.logger.error(f"Tool execution error for {tool_call.name}: {e}")
            return ToolResult(
                tool_call_id=tool_call.id,
                result=None,
                error=str(e),
            )

    async def execute_parallel(self, tool_calls: List[ToolCall]) -> List[ToolResult]:
        """Execute multiple tool calls in parallel."""
        if not tool_calls:
            return []

        tasks = [self.execute_single(tc) for tc in tool_calls]
        return list(await asyncio.gather(*tasks))
