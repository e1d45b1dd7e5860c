"""
Tests for the LLM provider layer: manager selection, the proxy client,
the OpenAI and Groq wrappers and settings loading.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from concept_interview.config import Settings
from concept_interview.llm.base import LLMProviderError, LLMResponse, Message, ProviderStatus, status_code_of
from concept_interview.llm.groq_provider import GroqProvider
from concept_interview.llm.manager import LLMManager, LLMManagerConfig, create_llm_manager
from concept_interview.llm.openai_provider import OpenAIProvider
from concept_interview.llm.proxy_provider import ProxyProvider


def _provider(name, available=True, content="ok"):
    provider = MagicMock()
    provider.name = name
    provider.model = f"{name}-model"
    provider.status = ProviderStatus.AVAILABLE
    provider.is_available.return_value = available
    provider.chat.return_value = LLMResponse(
        content=content, model=f"{name}-model", provider=name, usage={"total_tokens": 12}
    )
    return provider


class TestLLMManager:
    def test_picks_first_in_priority(self):
        manager = LLMManager(providers=[_provider("groq"), _provider("openai")])
        assert manager.current_provider.name == "openai"

    def test_skips_unconfigured(self):
        manager = LLMManager(providers=[_provider("openai", available=False), _provider("groq")])
        assert manager.available_providers == ["groq"]
        assert manager.current_provider.name == "groq"

    def test_chat_tracks_usage(self):
        openai = _provider("openai")
        manager = LLMManager(providers=[openai], config=LLMManagerConfig(max_tokens=300))

        response = manager.chat([Message(role="user", content="hi")], model="gpt-4o")

        assert response.content == "ok"
        assert openai.chat.call_args[1]["max_tokens"] == 300
        assert openai.chat.call_args[1]["model"] == "gpt-4o"
        status = manager.get_status()
        assert status["current_provider"] == "openai"
        assert status["providers"]["openai"]["requests"] == 1
        assert status["providers"]["openai"]["tokens"] == 12

    def test_failure_is_not_retried(self):
        openai = _provider("openai")
        openai.chat.side_effect = LLMProviderError("boom", status_code=503)
        groq = _provider("groq")
        manager = LLMManager(providers=[openai, groq])

        with pytest.raises(LLMProviderError):
            manager.chat([Message(role="user", content="hi")])

        assert openai.chat.call_count == 1
        groq.chat.assert_not_called()
        assert manager.get_status()["providers"]["openai"]["errors"] == 1

    def test_no_providers(self):
        manager = LLMManager()
        assert manager.is_available is False
        with pytest.raises(LLMProviderError, match="No LLM providers"):
            manager.chat([Message(role="user", content="hi")])


class TestProxyProvider:
    def _response(self, status_code, payload):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = payload
        response.text = str(payload)
        return response

    def test_posts_gateway_call_shape(self):
        session = MagicMock()
        session.post.return_value = self._response(200, {
            "index": 0,
            "message": {"role": "assistant", "content": "VALID"},
            "finish_reason": "stop",
        })
        provider = ProxyProvider(url="http://localhost:5001/api/llm", session=session)

        response = provider.chat([Message(role="user", content="a fitness app")], max_tokens=50)

        assert response.content == "VALID"
        url = session.post.call_args[0][0]
        payload = session.post.call_args[1]["json"]
        assert url == "http://localhost:5001/api/llm"
        assert payload == {
            "model": "gpt-4o-mini",
            "messages": [{"role": "user", "content": "a fitness app"}],
            "max_tokens": 50,
        }

    def test_error_body_raised_with_status(self):
        session = MagicMock()
        session.post.return_value = self._response(429, {"error": "Rate limit"})
        provider = ProxyProvider(url="http://proxy/api/llm", session=session)

        with pytest.raises(LLMProviderError) as exc:
            provider.chat([Message(role="user", content="x")])

        assert exc.value.status_code == 429
        assert "Rate limit" in str(exc.value)
        assert provider.status == ProviderStatus.RATE_LIMITED

    def test_network_error(self):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("refused")
        provider = ProxyProvider(url="http://proxy/api/llm", session=session)

        with pytest.raises(LLMProviderError) as exc:
            provider.chat([Message(role="user", content="x")])
        assert exc.value.status_code == 502

    def test_unconfigured(self, monkeypatch):
        monkeypatch.delenv("LLM_PROXY_URL", raising=False)
        provider = ProxyProvider()
        assert provider.is_available() is False
        with pytest.raises(LLMProviderError):
            provider.chat([Message(role="user", content="x")])


class TestOpenAIProvider:
    def test_not_configured_without_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        provider = OpenAIProvider()
        assert provider.is_available() is False
        assert provider.status == ProviderStatus.NOT_CONFIGURED

    def test_chat_maps_completion(self):
        with patch("concept_interview.llm.openai_provider.OpenAI") as mock_openai:
            completion = MagicMock()
            completion.model = "gpt-4o-mini"
            completion.choices[0].message.content = '{"question": "Q"}'
            completion.choices[0].finish_reason = "stop"
            completion.usage.prompt_tokens = 10
            completion.usage.completion_tokens = 5
            completion.usage.total_tokens = 15
            mock_openai.return_value.chat.completions.create.return_value = completion

            provider = OpenAIProvider(api_key="sk-test")
            response = provider.chat([Message(role="user", content="hi")], model="gpt-4o")

        create_kwargs = mock_openai.return_value.chat.completions.create.call_args[1]
        assert create_kwargs["model"] == "gpt-4o"
        assert create_kwargs["messages"] == [{"role": "user", "content": "hi"}]
        assert "max_tokens" not in create_kwargs
        assert response.content == '{"question": "Q"}'
        assert response.tokens_used == 15
        assert response.to_choice()["message"]["content"] == '{"question": "Q"}'

    def test_sdk_error_carries_status(self):
        with patch("concept_interview.llm.openai_provider.OpenAI") as mock_openai:
            error = Exception("Error code: 429 - rate_limit_exceeded")
            error.status_code = 429
            mock_openai.return_value.chat.completions.create.side_effect = error

            provider = OpenAIProvider(api_key="sk-test")
            with pytest.raises(LLMProviderError) as exc:
                provider.chat([Message(role="user", content="hi")])

        assert exc.value.status_code == 429
        assert provider.status == ProviderStatus.RATE_LIMITED

    def test_client_built_from_key_and_base_url(self):
        with patch("concept_interview.llm.openai_provider.OpenAI") as mock_openai:
            OpenAIProvider(api_key="sk-test", base_url="http://localhost:8080/v1")

        assert mock_openai.call_args[1] == {
            "api_key": "sk-test",
            "timeout": 60,
            "base_url": "http://localhost:8080/v1",
        }


class TestGroqProvider:
    def test_not_configured_without_key(self, monkeypatch):
        monkeypatch.delenv("GROQ_API_KEY", raising=False)
        provider = GroqProvider()
        assert provider.is_available() is False
        assert provider.status == ProviderStatus.NOT_CONFIGURED

    def test_chat_maps_completion(self):
        with patch("concept_interview.llm.groq_provider.Groq") as mock_groq:
            completion = MagicMock()
            completion.model = "llama-3.3-70b-versatile"
            completion.choices[0].message.content = "VALID"
            completion.choices[0].finish_reason = "stop"
            completion.usage.prompt_tokens = 20
            completion.usage.completion_tokens = 1
            completion.usage.total_tokens = 21
            mock_groq.return_value.chat.completions.create.return_value = completion

            provider = GroqProvider(api_key="gsk-test")
            response = provider.chat([Message(role="user", content="a fitness app")], max_tokens=10)

        create_kwargs = mock_groq.return_value.chat.completions.create.call_args[1]
        assert create_kwargs["model"] == "llama-3.3-70b-versatile"
        assert create_kwargs["messages"] == [{"role": "user", "content": "a fitness app"}]
        assert create_kwargs["max_tokens"] == 10
        assert response.content == "VALID"
        assert response.provider == "groq"
        assert response.tokens_used == 21

    def test_sdk_error_carries_status(self):
        with patch("concept_interview.llm.groq_provider.Groq") as mock_groq:
            error = Exception("Error code: 429 - rate_limit_exceeded")
            error.status_code = 429
            mock_groq.return_value.chat.completions.create.side_effect = error

            provider = GroqProvider(api_key="gsk-test")
            with pytest.raises(LLMProviderError) as exc:
                provider.chat([Message(role="user", content="hi")])

        assert exc.value.status_code == 429
        assert provider.status == ProviderStatus.RATE_LIMITED


class TestStatusCodeOf:
    def test_reads_response_status(self):
        error = Exception("bad")
        error.response = MagicMock(status_code=401)
        assert status_code_of(error) == 401

    def test_default(self):
        assert status_code_of(ValueError("x")) == 500


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "LLM_PROVIDER", "LLM_MODEL", "LLM_MAX_TOKENS", "INTERVIEW_MAX_ROUNDS",
            "INTERVIEW_OPTION_COUNT", "INTERVIEW_CLASSIFY_PROMPT", "PORT", "LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env()
        assert settings.provider is None
        assert settings.max_rounds == 5
        assert settings.option_count == 5
        assert settings.classify_prompt is True
        assert settings.port == 5001

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "groq")
        monkeypatch.setenv("LLM_MAX_TOKENS", "900")
        monkeypatch.setenv("INTERVIEW_MAX_ROUNDS", "3")
        monkeypatch.setenv("INTERVIEW_CLASSIFY_PROMPT", "false")
        settings = Settings.from_env()
        assert settings.provider == "groq"
        assert settings.max_tokens == 900
        assert settings.max_rounds == 3
        assert settings.classify_prompt is False

    def test_bad_integer(self, monkeypatch):
        monkeypatch.setenv("INTERVIEW_MAX_ROUNDS", "five")
        with pytest.raises(ValueError, match="INTERVIEW_MAX_ROUNDS"):
            Settings.from_env()


class TestCreateLLMManager:
    def test_only_requested_provider(self):
        settings = Settings(provider="proxy", proxy_url="http://proxy/api/llm", openai_api_key="sk-test")
        manager = create_llm_manager(settings)
        assert manager.available_providers == ["proxy"]

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            create_llm_manager(Settings(provider="bard"))

    def test_registers_configured_backends(self, monkeypatch):
        monkeypatch.delenv("LLM_PROXY_URL", raising=False)
        monkeypatch.delenv("GROQ_API_KEY", raising=False)
        with patch("concept_interview.llm.openai_provider.OpenAI"):
            manager = create_llm_manager(Settings(openai_api_key="sk-test", model="gpt-4o"))
        assert manager.available_providers == ["openai"]
        assert manager.current_provider.model == "gpt-4o"
