"""
Agent Runtime

Runs an agent profile as a bounded tool-calling loop against an LLM provider.
Sub-agents are exposed to their parent as tools that take a single
``request`` string and run their own loop with their own tools.
"""

import logging
from typing import Any, Dict, List, Optional

from ...providers.llm import LLMMessage, LLMProvider, get_llm_provider
from ...providers.llm.base import ToolDefinition, ToolParameter, ToolParameterType
from .profiles import COORDINATOR, DEFAULT_PROFILES, AgentProfile
from .tools import ToolExecutor, ToolRegistry

INCOMPLETE_REPLY = "I wasn't able to finish that request. Please try rephrasing it."


class AgentRuntime:
    """Drives agent profiles through an LLM provider with tool calling."""

    def __init__(
        self,
        provider: LLMProvider,
        profiles: Optional[Dict[str, AgentProfile]] = None,
        max_tool_iterations: int = 6,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.provider = provider
        self.profiles = profiles or DEFAULT_PROFILES
        self.max_tool_iterations = max_tool_iterations
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.logger = logger or logging.getLogger(__name__)

    async def ask(self, instruction: str, *, agent: str = COORDINATOR, tools: ToolRegistry) -> str:
        """Run ``agent`` on ``instruction`` and return its final text."""
        profile = self.profiles.get(agent)
        if profile is None:
            raise ValueError(f"Unknown agent: {agent}")
        return await self._run(profile, instruction, tools)

    async def _run(self, profile: AgentProfile, instruction: str, tools: ToolRegistry) -> str:
        registry = self._scoped_registry(profile, tools)
        executor = ToolExecutor(registry, logger=self.logger)
        definitions = registry.get_definitions()

        messages: List[LLMMessage] = [
            LLMMessage(role="system", content=profile.instruction),
            LLMMessage(role="user", content=instruction),
        ]
        last_text: Optional[str] = None

        for iteration in range(self.max_tool_iterations):
            response = await self.provider.generate_response(
                messages,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                tools=definitions or None,
            )
            if response.content:
                last_text = response.content

            if not response.tool_calls:
                return response.content or ""

            self.logger.info(
                f"Agent {profile.name} turn {iteration + 1}: "
                f"{[tc.name for tc in response.tool_calls]}"
            )
            messages.append(LLMMessage(
                role="assistant",
                content=response.content,
                tool_calls=response.tool_calls,
            ))
            results = await executor.execute_parallel(response.tool_calls)
            for result in results:
                messages.append(LLMMessage(role="tool_result", tool_result=result))

        self.logger.warning(
            f"Agent {profile.name} hit the tool iteration limit ({self.max_tool_iterations})"
        )
        return last_text or INCOMPLETE_REPLY

    def _scoped_registry(self, profile: AgentProfile, tools: ToolRegistry) -> ToolRegistry:
        """Tools visible to ``profile``: its own data tools plus its sub-agents."""
        scoped = ToolRegistry(logger=self.logger)

        for name in profile.tool_names:
            tool = tools.get_tool(name)
            if tool is not None:
                scoped.register(name, tool.definition, tool.handler)

        for sub_name in profile.sub_agents:
            sub_profile = self.profiles.get(sub_name)
            if sub_profile is None:
                continue
            scoped.register(sub_name, _sub_agent_definition(sub_profile), self._delegate(sub_profile, tools))

        return scoped

    def _delegate(self, profile: AgentProfile, tools: ToolRegistry):
        async def handler(request: str = "", **_: Any) -> str:
            self.logger.info(f"Delegating to {profile.name}")
            return await self._run(profile, request, tools)

        return handler


def _sub_agent_definition(profile: AgentProfile) -> ToolDefinition:
    return ToolDefinition(
        name=profile.name,
        description=profile.description,
        parameters=[
            ToolParameter(
                name="request",
                type=ToolParameterType.STRING,
                description=f"What {profile.name} should do, in plain language",
            ),
        ],
    )


def create_agent_runtime(settings: Any) -> AgentRuntime:
    """Build the runtime for the configured provider.

    Raises:
        ValueError: no API key configured for the provider
    """
    if not settings.has_llm_key:
        raise ValueError(f"No API key configured for provider: {settings.llm_provider}")

    provider = get_llm_provider(settings.llm_provider, settings.llm_model)
    return AgentRuntime(
        provider,
        max_tool_iterations=settings.max_tool_iterations,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
    )
