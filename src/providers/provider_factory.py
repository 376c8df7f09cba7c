from enum import Enum
from typing import Optional

from src.providers.base_provider import ModelProvider
from src.providers.openai_provider import OpenAIModelProvider
from src.providers.ollama_provider import OllamaModelProvider
from src.utils.config import Settings


class ProviderType(str, Enum):
    """
    Supported LLM provider types.

    - OLLAMA: Local/self-hosted models
    - OPENAI: OpenAI's hosted models
    - NONE: No model; every enrichment stage uses its offline fallback
    """
    OLLAMA = "ollama"
    OPENAI = "openai"
    NONE = "none"

    @classmethod
    def list(cls):
        """Get list of all provider type values."""
        return list(map(lambda c: c.value, cls))


class ModelProviderFactory:
    """Creates the configured model provider from settings."""

    @staticmethod
    def create_provider(
        provider_type: str,
        settings: Settings,
        timeout: Optional[float] = None,
    ) -> Optional[ModelProvider]:
        """
        Args:
            provider_type: One of ProviderType values
            settings: Application settings (endpoints, model names, keys)
            timeout: Transport-level timeout in seconds

        Returns:
            ModelProvider, or None when the model is disabled

        Raises:
            ValueError: If provider type is unsupported or its API key is missing
        """
        provider_type_lower = (provider_type or "").lower()

        if provider_type_lower in ("", ProviderType.NONE.value):
            return None
        if provider_type_lower == ProviderType.OLLAMA.value:
            return OllamaModelProvider(
                model_name=settings.OLLAMA_MODEL,
                base_url=settings.OLLAMA_ENDPOINT,
                timeout=timeout,
            )
        if provider_type_lower == ProviderType.OPENAI.value:
            if not settings.OPENAI_API_KEY:
                raise ValueError(
                    "API key is required for OpenAI provider. "
                    "Set OPENAI_API_KEY environment variable."
                )
            return OpenAIModelProvider(
                api_key=settings.OPENAI_API_KEY,
                model_name=settings.OPENAI_MODEL,
                timeout=timeout,
            )

        raise ValueError(
            f"Unsupported provider type: {provider_type}. "
            f"Supported providers: {ProviderType.list()}"
        )
