"""
LLM provider modules for the App Concept Interviewer.

Supported backends:
- OpenAI (primary, chat completions API)
- Groq (OpenAI-compatible, free tier)
- Proxy (forwards to the POST /api/llm route of a running web app)
"""

from .base import LLMProvider, LLMResponse, LLMConfig, Message, ProviderStatus
from .openai_provider import OpenAIProvider
from .groq_provider import GroqProvider
from .proxy_provider import ProxyProvider
from .manager import LLMManager, LLMManagerConfig

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "LLMConfig",
    "Message",
    "ProviderStatus",
    "OpenAIProvider",
    "GroqProvider",
    "ProxyProvider",
    "LLMManager",
    "LLMManagerConfig",
]
