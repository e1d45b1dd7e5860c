"""
LLM Manager - Unified interface over the configured LLM providers.

Picks the first available provider in priority order and tracks usage.
Failed calls are reported to the caller as-is; the manager never retries.
"""

import logging
from typing import Optional, List, Dict, Any
from dataclasses import dataclass, field
from datetime import datetime

from .base import LLMProvider, LLMResponse, LLMProviderError, Message
from .openai_provider import OpenAIProvider
from .groq_provider import GroqProvider
from .proxy_provider import ProxyProvider

logger = logging.getLogger(__name__)


@dataclass
class ProviderUsage:
    """Per-provider request counters."""
    requests: int = 0
    tokens: int = 0
    errors: int = 0
    last_request: Optional[datetime] = None
    last_error: Optional[str] = None


@dataclass
class LLMManagerConfig:
    """Configuration for the LLM Manager."""
    provider_priority: List[str] = field(default_factory=lambda: ["openai", "groq", "proxy"])
    default_models: Dict[str, str] = field(default_factory=lambda: {
        "openai": "gpt-4o-mini",
        "groq": "llama-3.3-70b-versatile",
        "proxy": "gpt-4o-mini",
    })
    max_tokens: Optional[int] = None


class LLMManager:
    """
    Chooses a provider and forwards chat calls to it.

    Usage:
        manager = LLMManager(providers=[OpenAIProvider()])
        response = manager.chat([Message(role="user", content="Hello")])
    """

    def __init__(
        self,
        providers: Optional[List[LLMProvider]] = None,
        config: Optional[LLMManagerConfig] = None
    ):
        self.config = config or LLMManagerConfig()
        self._providers: Dict[str, LLMProvider] = {}
        self._usage: Dict[str, ProviderUsage] = {}

        for provider in providers or []:
            self.register(provider)

    def register(self, provider: LLMProvider):
        """Add a provider; unavailable ones are kept out of rotation."""
        if not provider.is_available():
            logger.info("LLM provider %s is not configured, skipping", provider.name)
            return
        self._providers[provider.name] = provider
        self._usage[provider.name] = ProviderUsage()
        logger.info("LLM provider %s initialized (model %s)", provider.name, provider.model)

    def _select_provider(self) -> Optional[str]:
        ordered = list(self.config.provider_priority) + [
            name for name in self._providers if name not in self.config.provider_priority
        ]
        for name in ordered:
            provider = self._providers.get(name)
            if provider is not None and provider.is_available():
                return name
        return None

    @property
    def current_provider(self) -> Optional[LLMProvider]:
        name = self._select_provider()
        return self._providers.get(name) if name else None

    @property
    def available_providers(self) -> List[str]:
        return list(self._providers.keys())

    @property
    def is_available(self) -> bool:
        return self._select_provider() is not None

    def get_status(self) -> Dict[str, Any]:
        """Status of all registered providers."""
        status = {
            "current_provider": self._select_provider(),
            "providers": {}
        }
        for name, provider in self._providers.items():
            usage = self._usage[name]
            status["providers"][name] = {
                "status": provider.status.value,
                "model": provider.model,
                "requests": usage.requests,
                "tokens": usage.tokens,
                "errors": usage.errors,
                "last_error": usage.last_error,
            }
        return status

    def chat(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
        provider: Optional[str] = None,
    ) -> LLMResponse:
        """
        Send a chat completion request to the selected provider.

        Args:
            messages: List of conversation messages
            temperature: Override default temperature
            max_tokens: Override default max tokens
            model: Override the provider's model
            provider: Force a specific provider

        Raises:
            LLMProviderError: if no provider is available or the call fails
        """
        target = provider or self._select_provider()
        if not target or target not in self._providers:
            raise LLMProviderError(
                "No LLM providers available. Set OPENAI_API_KEY, GROQ_API_KEY or LLM_PROXY_URL.",
                status_code=500
            )

        llm = self._providers[target]
        usage = self._usage[target]
        usage.last_request = datetime.now()
        usage.requests += 1

        try:
            response = llm.chat(
                messages,
                temperature=temperature,
                max_tokens=max_tokens or self.config.max_tokens,
                model=model,
            )
        except Exception as e:
            usage.errors += 1
            usage.last_error = str(e)[:200]
            logger.warning("LLM call on %s failed: %s", target, e)
            raise

        usage.tokens += response.tokens_used
        return response


def create_llm_manager(settings) -> LLMManager:
    """
    Build a manager from Settings.

    When settings.provider is set only that backend is registered; otherwise
    every backend with credentials is registered in priority order.
    """
    config = LLMManagerConfig(max_tokens=settings.max_tokens)
    model = settings.model

    builders = {
        "openai": lambda: OpenAIProvider(
            api_key=settings.openai_api_key,
            model=model or config.default_models["openai"],
            base_url=settings.openai_base_url,
        ),
        "groq": lambda: GroqProvider(
            api_key=settings.groq_api_key,
            model=model if model and settings.provider == "groq" else config.default_models["groq"],
        ),
        "proxy": lambda: ProxyProvider(
            url=settings.proxy_url,
            model=model or config.default_models["proxy"],
        ),
    }

    if settings.provider:
        if settings.provider not in builders:
            raise ValueError(f"Unknown LLM provider: {settings.provider}")
        names = [settings.provider]
        config.provider_priority = names
    else:
        names = config.provider_priority

    manager = LLMManager(config=config)
    for name in names:
        manager.register(builders[name]())
    return manager
