"""Upstream chat-completion provider using litellm."""

import asyncio
import os
from dataclasses import dataclass
from typing import Any, Protocol

import litellm
from loguru import logger

from .config import Settings
from .exceptions import (
    ConfigurationError,
    ProxyError,
    RateLimitedError,
    UpstreamAuthError,
    UpstreamTimeoutError,
)
from .types import TokenUsage


def setup_litellm() -> None:
    """Setup litellm configuration."""
    litellm.set_verbose = False
    litellm.drop_params = True
    litellm.suppress_debug_info = True

    os.environ["LITELLM_LOG"] = "INFO"


@dataclass
class LLMConfig:
    """Configuration for the completion provider."""

    model: str
    api_key: str | None = None
    api_base: str | None = None
    timeout: int = 30
    temperature: float = 0.1
    max_tokens: int = 1000


@dataclass
class LLMResponse:
    """Standard response from the completion provider."""

    text: str | None
    model: str
    usage: TokenUsage


class LLMProvider(Protocol):
    """Protocol for completion providers."""

    async def complete(self, messages: list[dict[str, str]]) -> LLMResponse: ...


def map_upstream_error(error: Exception) -> ProxyError:
    """Translate an upstream failure into the matching proxy error."""
    if isinstance(error, TimeoutError | litellm.Timeout):
        return UpstreamTimeoutError()

    match getattr(error, "status_code", None):
        case 401:
            return UpstreamAuthError()
        case 429:
            return RateLimitedError()
        case 408 | 504:
            return UpstreamTimeoutError()
        case _:
            return ProxyError()


class SimpleLLMProvider:
    """Single-shot chat completion through litellm, without retries."""

    def __init__(self, config: LLMConfig, provider_name: str = "OpenAI") -> None:
        """Initialize the provider.

        Args:
            config: LLM configuration
            provider_name: Name of the provider for logging
        """
        self.config = config
        self.provider_name = provider_name

        if not config.api_key:
            raise ConfigurationError(f"{provider_name} API key is required")

        setup_litellm()

    async def complete(self, messages: list[dict[str, str]]) -> LLMResponse:
        """Send a chat completion request and return the first choice.

        Raises:
            ProxyError: Or one of its subclasses, depending on how the call failed.
        """
        try:
            response = await asyncio.wait_for(
                litellm.acompletion(
                    model=self.config.model,
                    messages=messages,
                    timeout=self.config.timeout,
                    api_key=self.config.api_key,
                    api_base=self.config.api_base,
                    temperature=self.config.temperature,
                    max_tokens=self.config.max_tokens,
                ),
                timeout=self.config.timeout,
            )
        except Exception as e:
            error = map_upstream_error(e)
            logger.error(
                f"{self.provider_name} completion failed ({error.__class__.__name__}): {e}"
            )
            raise error from e

        usage = self._extract_usage(response)
        if usage:
            logger.info(
                "Token usage",
                model=response.model,
                prompt_tokens=usage.get("prompt_tokens"),
                completion_tokens=usage.get("completion_tokens"),
                total_tokens=usage.get("total_tokens"),
            )

        choices = getattr(response, "choices", None) or []
        return LLMResponse(
            text=choices[0].message.content if choices else None,
            model=response.model,
            usage=usage,
        )

    def _extract_usage(self, response: Any) -> TokenUsage:
        """Extract usage data from response."""
        typed_usage: TokenUsage = {}

        usage = getattr(response, "usage", None)
        if usage:
            usage_data = usage.model_dump()
            for field in ["prompt_tokens", "completion_tokens", "total_tokens"]:
                if field in usage_data:
                    typed_usage[field] = usage_data[field]  # type: ignore

        return typed_usage


def create_llm_provider(settings: Settings) -> LLMProvider:
    """Create the completion provider from settings."""
    if not settings.openai_api_key:
        raise ConfigurationError(
            "No LLM provider configured. Set the GRAMMAR_OPENAI_API_KEY environment variable."
        )

    logger.info(f"Using completion model {settings.llm_model}")
    config = LLMConfig(
        model=settings.llm_model,
        api_key=settings.openai_api_key,
        api_base=settings.llm_api_base,
        timeout=settings.llm_timeout,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )
    return SimpleLLMProvider(config)
