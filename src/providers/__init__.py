from src.providers.base_provider import ModelProvider, ModelError
from src.providers.openai_provider import OpenAIModelProvider
from src.providers.ollama_provider import OllamaModelProvider
from src.providers.provider_factory import ModelProviderFactory, ProviderType

__all__ = [
    "ModelProvider",
    "ModelError",
    "OpenAIModelProvider",
    "OllamaModelProvider",
    "ModelProviderFactory",
    "ProviderType",
]
