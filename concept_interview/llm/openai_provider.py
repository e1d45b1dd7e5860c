"""
OpenAI Provider for LLM operations.

Talks to the chat completions API with the official SDK. Also used by the
web app's /api/llm route to forward browser requests upstream.
"""

import logging
import os
from typing import Optional, List

from openai import OpenAI

from .base import LLMProvider, LLMConfig, LLMResponse, LLMProviderError, Message, ProviderStatus, status_code_of

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions provider."""

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        base_url: Optional[str] = None,
        **kwargs
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (or set OPENAI_API_KEY env var)
            model: Model to use (gpt-4o-mini, gpt-4o, ...)
            base_url: Custom base URL for compatible endpoints
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")

        config = LLMConfig(
            provider_name="openai",
            model=model,
            api_key=self.api_key,
            base_url=base_url or os.getenv("OPENAI_BASE_URL"),
            **kwargs
        )
        super().__init__(config)

        self._client = None
        self._init_client()

    def _init_client(self):
        if not self.api_key:
            self._status = ProviderStatus.NOT_CONFIGURED
            return

        client_kwargs = {"api_key": self.api_key, "timeout": self.config.timeout}
        if self.config.base_url:
            client_kwargs["base_url"] = self.config.base_url

        self._client = OpenAI(**client_kwargs)
        self._status = ProviderStatus.AVAILABLE

    def is_available(self) -> bool:
        return self._client is not None

    def chat(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> LLMResponse:
        """Send a chat completion request to OpenAI."""
        if not self.is_available():
            raise LLMProviderError("OpenAI API key not configured", status_code=500)

        request = {
            "model": model or self.config.model,
            "messages": [Message.coerce(m).to_dict() for m in messages],
            "temperature": temperature if temperature is not None else self.config.temperature,
        }
        tokens = max_tokens or self.config.max_tokens
        if tokens:
            request["max_tokens"] = tokens

        logger.debug("openai request: model=%s messages=%d", request["model"], len(request["messages"]))
        try:
            response = self._client.chat.completions.create(**request)
        except Exception as e:
            self._mark_failure(e)
            raise LLMProviderError(str(e), status_code=status_code_of(e)) from e

        choice = response.choices[0]
        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }
        self._status = ProviderStatus.AVAILABLE

        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            provider="openai",
            usage=usage,
            finish_reason=choice.finish_reason or "stop",
        )
