"""
Base classes for LLM providers.

Every backend exposes the same chat() call taking role-tagged messages, so
the gateway never needs to know which service answers it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Union
from enum import Enum


class ProviderStatus(str, Enum):
    """Status of an LLM provider."""
    AVAILABLE = "available"
    RATE_LIMITED = "rate_limited"
    ERROR = "error"
    NOT_CONFIGURED = "not_configured"


@dataclass
class LLMConfig:
    """Configuration for an LLM provider."""
    provider_name: str
    model: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    timeout: int = 60


@dataclass
class Message:
    """A single message in a conversation."""
    role: str  # "system", "user", "assistant"
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def coerce(cls, value: Union["Message", Dict[str, str]]) -> "Message":
        if isinstance(value, Message):
            return value
        return cls(role=value["role"], content=value["content"])


@dataclass
class LLMResponse:
    """Response from an LLM provider."""
    content: str
    model: str
    provider: str
    usage: Dict[str, int] = field(default_factory=dict)
    finish_reason: str = "stop"

    @property
    def tokens_used(self) -> int:
        return self.usage.get("total_tokens", 0)

    def to_choice(self) -> Dict[str, Any]:
        """First-choice shape of a chat completion, as returned by the proxy route."""
        return {
            "index": 0,
            "message": {"role": "assistant", "content": self.content},
            "finish_reason": self.finish_reason,
        }


class LLMProviderError(RuntimeError):
    """Provider call failed; status_code mirrors the upstream HTTP status when known."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Subclasses implement is_available() and chat().
    """

    def __init__(self, config: LLMConfig):
        self.config = config
        self._status = ProviderStatus.NOT_CONFIGURED

    @property
    def name(self) -> str:
        return self.config.provider_name

    @property
    def model(self) -> str:
        return self.config.model

    @property
    def status(self) -> ProviderStatus:
        return self._status

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is configured and usable."""

    @abstractmethod
    def chat(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> LLMResponse:
        """
        Send a chat completion request.

        Args:
            messages: Conversation so far, system prompt first
            temperature: Override default temperature
            max_tokens: Override default max tokens
            model: Override the configured model for this call

        Returns:
            LLMResponse with the model's reply
        """

    def _mark_failure(self, error: Exception):
        text = str(error).lower()
        if "rate_limit" in text or "429" in text or "quota" in text:
            self._status = ProviderStatus.RATE_LIMITED
        else:
            self._status = ProviderStatus.ERROR


def status_code_of(error: Exception, default: int = 500) -> int:
    """HTTP status carried by an SDK or provider exception, if any."""
    code = getattr(error, "status_code", None)
    if isinstance(code, int) and 400 <= code < 600:
        return code
    response = getattr(error, "response", None)
    code = getattr(response, "status_code", None)
    if isinstance(code, int) and 400 <= code < 600:
        return code
    return default
