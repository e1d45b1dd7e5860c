"""
Groq LLM Provider.

Groq serves open models behind an OpenAI-compatible API with a free tier:
- 1,000 requests/day
- 6,000 tokens/minute

Sign up at: https://console.groq.com
"""

import logging
import os
from typing import Optional, List

from groq import Groq

from .base import LLMProvider, LLMConfig, LLMResponse, LLMProviderError, Message, ProviderStatus, status_code_of

logger = logging.getLogger(__name__)


class GroqProvider(LLMProvider):
    """Groq provider using their Python SDK."""

    DEFAULT_MODEL = "llama-3.3-70b-versatile"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        **kwargs
    ):
        self.api_key = api_key or os.environ.get("GROQ_API_KEY")

        config = LLMConfig(
            provider_name="groq",
            model=model,
            api_key=self.api_key,
            base_url="https://api.groq.com/openai/v1",
            **kwargs
        )
        super().__init__(config)

        self._client = None
        if self.api_key:
            self._client = Groq(api_key=self.api_key, timeout=self.config.timeout)
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
        """Send a chat completion request to Groq."""
        if not self.is_available():
            raise LLMProviderError(
                "Groq not available. Set GROQ_API_KEY environment variable.",
                status_code=500
            )

        request = {
            "model": model or self.config.model,
            "messages": [Message.coerce(m).to_dict() for m in messages],
            "temperature": temperature if temperature is not None else self.config.temperature,
        }
        tokens = max_tokens or self.config.max_tokens
        if tokens:
            request["max_tokens"] = tokens

        logger.debug("groq request: model=%s messages=%d", request["model"], len(request["messages"]))
        try:
            response = self._client.chat.completions.create(**request)
        except Exception as e:
            self._mark_failure(e)
            raise LLMProviderError(str(e), status_code=status_code_of(e)) from e

        choice = response.choices[0]
        self._status = ProviderStatus.AVAILABLE
        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            provider="groq",
            usage={
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            } if response.usage else {},
            finish_reason=choice.finish_reason or "stop",
        )
