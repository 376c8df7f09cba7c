import openai
from openai import AsyncOpenAI
from typing import Dict, Any, List, Optional

from src.providers.base_provider import ModelProvider, ModelError
from src.utils.logger.custom_logging import LoggerMixin


# Models that require max_completion_tokens instead of max_tokens
NEW_API_MODELS = ["o1", "o3", "gpt-5"]

# Models that don't support the temperature parameter (only default=1)
MODELS_WITHOUT_TEMPERATURE = ["gpt-5-nano", "gpt-4.1-nano"]


def convert_params_for_model(model_name: str, kwargs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Adapt sampling parameters to what the model accepts:
    - max_tokens -> max_completion_tokens for o1/o3/gpt-5 families
    - temperature dropped for models that only accept the default
    """
    params = kwargs.copy()
    model_lower = model_name.lower()

    if any(model_lower.startswith(prefix) for prefix in NEW_API_MODELS) and "max_tokens" in params:
        params["max_completion_tokens"] = params.pop("max_tokens")

    if any(model_lower.startswith(prefix) for prefix in MODELS_WITHOUT_TEMPERATURE):
        params.pop("temperature", None)

    return params


class OpenAIModelProvider(ModelProvider, LoggerMixin):
    """Provider for OpenAI chat models using the official SDK"""

    def __init__(self, api_key: str, model_name: str = "gpt-4.1-mini", timeout: Optional[float] = None):
        super().__init__()
        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout
        self.client: Optional[AsyncOpenAI] = None

    async def initialize(self) -> None:
        """Initialize the OpenAI client"""
        if self.client is None:
            self.client = AsyncOpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
            self.logger.info(f"Initialized OpenAI provider with model {self.model_name}")

    async def generate(self, messages: List[Dict[str, str]], **kwargs) -> Dict[str, Any]:
        """Generate text completion (non-streaming)"""
        await self.initialize()

        model = kwargs.pop("model", self.model_name)
        converted_kwargs = convert_params_for_model(model, kwargs)

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                **converted_kwargs
            )
        except openai.OpenAIError as e:
            self.logger.error(f"Error generating OpenAI completion: {str(e)}")
            raise ModelError(f"OpenAI request failed: {e}") from e

        choice = response.choices[0] if response.choices else None
        return {
            "content": (choice.message.content or "") if choice else "",
            "model": response.model,
            "finish_reason": choice.finish_reason if choice else None,
        }

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
