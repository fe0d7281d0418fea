from typing import List, Dict, Any, Optional
import time

import anthropic
from anthropic import AsyncAnthropic

from .base import (
    LLMProvider, LLMMessage, LLMResponse,
    LLMProviderError, LLMProviderAPIError, LLMProviderAuthError, LLMProviderRateLimitError,
    LLMProviderOverloadedError, LLMProviderConnectionError,
    ToolDefinition, ToolCall,
)


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM Provider implementation with native tool calling support"""

    def __init__(self, api_key: str, model: Optional[str] = None, **kwargs):
        if not model:
            raise ValueError("AnthropicProvider requires a model to be specified")

        super().__init__(api_key, model, **kwargs)

    def _setup_client(self, **kwargs) -> None:
        """Initialize the Anthropic client.

        Retries are owned by the recovery executor, so the SDK's own retry
        loop is disabled.
        """
        try:
            self.client = AsyncAnthropic(
                api_key=self.api_key,
                max_retries=0,
                timeout=kwargs.get("timeout", 60.0),
            )
        except Exception as e:
            self.logger.error(f"Failed to initialize Anthropic client: {e}")
            raise LLMProviderAuthError(f"Failed to initialize Anthropic client: {e}")

    def _convert_message_to_anthropic(self, msg: LLMMessage) -> Optional[Dict[str, Any]]:
        """Convert a single LLMMessage to Anthropic format"""
        if msg.role == "system":
            return None  # System messages handled separately

        if msg.role == "tool_result" and msg.tool_result:
            return {
                "role": "user",
                "content": [msg.tool_result.to_anthropic_format()]
            }

        if msg.role == "assistant" and msg.tool_calls:
            content = []
            if msg.content:
                content.append({"type": "text", "text": msg.content})
            for tc in msg.tool_calls:
                content.append({
                    "type": "tool_use",
                    "id": tc.id,
                    "name": tc.name,
                    "input": tc.arguments
                })
            return {"role": "assistant", "content": content}

        return {
            "role": msg.role,
            "content": msg.content or ""
        }

    def _merge_tool_results(self, converted: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Anthropic expects all tool results for one turn in a single user message."""
        merged: List[Dict[str, Any]] = []
        for message in converted:
            previous = merged[-1] if merged else None
            if (
                previous is not None
                and message["role"] == "user"
                and previous["role"] == "user"
                and isinstance(message["content"], list)
                and isinstance(previous["content"], list)
            ):
                previous["content"].extend(message["content"])
            else:
                merged.append(message)
        return merged

    async def generate_response(
        self,
        messages: List[LLMMessage],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        tools: Optional[List[ToolDefinition]] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate a response from Claude with optional tool calling"""
        start_time = time.time()

        try:
            anthropic_messages = []
            system_message = None

            for msg in messages:
                if msg.role == "system":
                    system_message = msg.content
                else:
                    converted = self._convert_message_to_anthropic(msg)
                    if converted:
                        anthropic_messages.append(converted)

            request_params = {
                "model": self.model,
                "messages": self._merge_tool_results(anthropic_messages),
                "max_tokens": max_tokens or 1500,
            }

            if system_message:
                request_params["system"] = system_message

            if temperature is not None:
                request_params["temperature"] = temperature

            if tools:
                request_params["tools"] = [t.to_anthropic_format() for t in tools]

            kwargs.pop('tools', None)
            request_params.update(kwargs)

            response = await self.client.messages.create(**request_params)

            content = ""
            tool_calls = []

            if response.content:
                for block in response.content:
                    if getattr(block, "type", None) == "tool_use":
                        tool_calls.append(ToolCall(
                            id=block.id,
                            name=block.name,
                            arguments=block.input if hasattr(block, 'input') else {}
                        ))
                    elif hasattr(block, 'text'):
                        content += block.text

            return LLMResponse(
                content=content if content else None,
                tool_calls=tool_calls if tool_calls else None,
                tokens_used=response.usage.output_tokens if hasattr(response, 'usage') else None,
                model=self.model,
                finish_reason=getattr(response, "stop_reason", None),
                response_time_ms=self._measure_time(start_time),
            )

        except anthropic.AuthenticationError as e:
            await self._handle_error(LLMProviderAuthError(f"Authentication failed: {e}"), "generate_response")
        except anthropic.RateLimitError as e:
            await self._handle_error(LLMProviderRateLimitError(f"Rate limit exceeded (429): {e}"), "generate_response")
        except anthropic.APITimeoutError as e:
            await self._handle_error(LLMProviderConnectionError(f"Request timeout: {e}"), "generate_response")
        except anthropic.APIConnectionError as e:
            await self._handle_error(LLMProviderConnectionError(f"Connection error: {e}"), "generate_response")
        except anthropic.InternalServerError as e:
            await self._handle_error(LLMProviderOverloadedError(f"Service overloaded: {e}"), "generate_response")
        except anthropic.APIError as e:
            await self._handle_error(LLMProviderAPIError(f"API error: {e}"), "generate_response")
        except Exception as e:
            await self._handle_error(LLMProviderError(f"Unexpected error: {e}"), "generate_response")
