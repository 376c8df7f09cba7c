"""
Unit tests for LLMCompletionClient and the model provider factory
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.helpers.llm_helper import LLMCompletionClient
from src.providers.base_provider import ModelError
from src.providers.ollama_provider import OllamaModelProvider
from src.providers.openai_provider import OpenAIModelProvider, convert_params_for_model
from src.providers.provider_factory import ModelProviderFactory
from src.utils.config import Settings


# ============================================================================
# TEST FIXTURES
# ============================================================================

@pytest.fixture
def provider():
    provider = MagicMock()
    provider.initialize = AsyncMock()
    provider.generate = AsyncMock(return_value={"content": "Hello."})
    provider.close = AsyncMock()
    provider.model_name = "test-model"
    return provider


# ============================================================================
# COMPLETION CLIENT
# ============================================================================

class TestLLMCompletionClient:

    @pytest.mark.asyncio
    async def test_complete_returns_content(self, provider):
        client = LLMCompletionClient(provider, timeout=1.0)
        assert await client.complete("Say hello", system="Be brief") == "Hello."

        messages = provider.generate.call_args.args[0]
        assert messages == [
            {"role": "system", "content": "Be brief"},
            {"role": "user", "content": "Say hello"},
        ]

    @pytest.mark.asyncio
    async def test_initializes_once(self, provider):
        client = LLMCompletionClient(provider)
        await client.complete("a")
        await client.complete("b")
        provider.initialize.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_strips_thinking_blocks(self, provider):
        provider.generate.return_value = {"content": "<think>hmm</think> Answer."}
        assert await LLMCompletionClient(provider).complete("q") == "Answer."

    @pytest.mark.asyncio
    async def test_empty_output_raises(self, provider):
        provider.generate.return_value = {"content": "   "}
        with pytest.raises(ModelError):
            await LLMCompletionClient(provider).complete("q")

    @pytest.mark.asyncio
    async def test_timeout_raises_model_error(self, provider):
        async def slow(*args, **kwargs):
            await asyncio.sleep(1)
            return {"content": "late"}

        provider.generate = AsyncMock(side_effect=slow)
        with pytest.raises(ModelError, match="timed out"):
            await LLMCompletionClient(provider, timeout=0.01).complete("q")

    @pytest.mark.asyncio
    async def test_transport_error_raises_model_error(self, provider):
        provider.generate.side_effect = ConnectionError("refused")
        with pytest.raises(ModelError):
            await LLMCompletionClient(provider).complete("q")

    @pytest.mark.asyncio
    async def test_ping(self, provider):
        assert await LLMCompletionClient(provider).ping() is True
        provider.generate.side_effect = ModelError("down")
        assert await LLMCompletionClient(provider).ping() is False


# ============================================================================
# PROVIDER FACTORY
# ============================================================================

class TestModelProviderFactory:

    def test_none_disables_model(self):
        assert LLMCompletionClient.from_settings(Settings(LLM_PROVIDER="none")) is None

    def test_ollama(self):
        settings = Settings(LLM_PROVIDER="ollama", OLLAMA_ENDPOINT="http://ollama:11434/", OLLAMA_MODEL="mistral")
        client = LLMCompletionClient.from_settings(settings)

        assert isinstance(client.provider, OllamaModelProvider)
        assert client.provider.base_url == "http://ollama:11434"
        assert client.name == "mistral"

    def test_openai_requires_key(self):
        with pytest.raises(ValueError):
            ModelProviderFactory.create_provider("openai", Settings(OPENAI_API_KEY=""))

    def test_openai(self):
        provider = ModelProviderFactory.create_provider("OpenAI", Settings(OPENAI_API_KEY="sk-test"))
        assert isinstance(provider, OpenAIModelProvider)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            ModelProviderFactory.create_provider("gemini", Settings())


class TestProviderParams:

    def test_reasoning_models_use_max_completion_tokens(self):
        params = convert_params_for_model("o3-mini", {"max_tokens": 10, "temperature": 0.1})
        assert params == {"max_completion_tokens": 10, "temperature": 0.1}

    def test_fixed_temperature_models_drop_temperature(self):
        assert convert_params_for_model("gpt-4.1-nano", {"temperature": 0.3}) == {}

    def test_ollama_option_mapping(self):
        provider = OllamaModelProvider(model_name="mistral", base_url="http://localhost:11434")
        assert provider._convert_params({"temperature": 0.2, "max_tokens": 50}) == {
            "temperature": 0.2,
            "num_predict": 50,
        }
        assert provider._format_response({"message": {"content": "hi"}, "model": "mistral"})["content"] == "hi"
