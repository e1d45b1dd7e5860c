"""
Proxy provider.

Sends chat requests to the /api/llm route of a running web app instead of
calling the model vendor directly, so the API key stays on the server.
"""

import logging
import os
from typing import Optional, List

import requests

from .base import LLMProvider, LLMConfig, LLMResponse, LLMProviderError, Message, ProviderStatus

logger = logging.getLogger(__name__)


class ProxyProvider(LLMProvider):
    """Chat through a one-hop HTTP proxy that returns the first completion choice."""

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        url: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        session: Optional[requests.Session] = None,
        **kwargs
    ):
        url = url or os.getenv("LLM_PROXY_URL")
        config = LLMConfig(provider_name="proxy", model=model, base_url=url, **kwargs)
        super().__init__(config)
        self._session = session or requests.Session()
        if url:
            self._status = ProviderStatus.AVAILABLE

    def is_available(self) -> bool:
        return bool(self.config.base_url)

    def chat(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> LLMResponse:
        if not self.is_available():
            raise LLMProviderError("LLM_PROXY_URL is not set", status_code=500)

        payload = {
            "model": model or self.config.model,
            "messages": [Message.coerce(m).to_dict() for m in messages],
        }
        tokens = max_tokens or self.config.max_tokens
        if tokens:
            payload["max_tokens"] = tokens

        try:
            response = self._session.post(
                self.config.base_url,
                json=payload,
                timeout=self.config.timeout
            )
        except requests.RequestException as e:
            self._status = ProviderStatus.ERROR
            raise LLMProviderError(f"Proxy request failed: {e}", status_code=502) from e

        if response.status_code >= 400:
            try:
                error = response.json().get("error", response.text)
            except ValueError:
                error = response.text
            self._status = (
                ProviderStatus.RATE_LIMITED if response.status_code == 429 else ProviderStatus.ERROR
            )
            raise LLMProviderError(f"Proxy error {response.status_code}: {error}", status_code=response.status_code)

        try:
            data = response.json()
            content = data["message"]["content"]
        except (ValueError, KeyError, TypeError) as e:
            self._status = ProviderStatus.ERROR
            raise LLMProviderError(f"Unexpected proxy response: {e}", status_code=502) from e

        self._status = ProviderStatus.AVAILABLE
        return LLMResponse(
            content=content or "",
            model=payload["model"],
            provider="proxy",
            finish_reason=data.get("finish_reason") or "stop",
        )
