import aiohttp
from typing import Dict, Any, List, Optional

from src.providers.base_provider import ModelProvider, ModelError
from src.utils.logger.custom_logging import LoggerMixin


class OllamaModelProvider(ModelProvider, LoggerMixin):
    """Provider for models served by a local or remote Ollama instance"""

    def __init__(self, model_name: str, base_url: str, timeout: Optional[float] = None):
        super().__init__()
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def initialize(self) -> None:
        """Open the HTTP session used for all calls"""
        if self._session is None or self._session.closed:
            client_timeout = aiohttp.ClientTimeout(total=self.timeout) if self.timeout else None
            self._session = aiohttp.ClientSession(timeout=client_timeout)
            self.logger.info(f"Initialized Ollama provider with model {self.model_name} at {self.base_url}")

    async def generate(self, messages: List[Dict[str, str]], **kwargs) -> Dict[str, Any]:
        """Generate text completion via /api/chat (non-streaming)"""
        await self.initialize()

        payload = {
            "model": self.model_name,
            "messages": messages,
            "stream": False,
            "options": self._convert_params(kwargs),
        }

        try:
            async with self._session.post(f"{self.base_url}/api/chat", json=payload) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise ModelError(f"Ollama API returned {response.status}: {error_text[:200]}")
                result = await response.json()
                return self._format_response(result)
        except aiohttp.ClientError as e:
            self.logger.error(f"Error generating Ollama completion: {str(e)}")
            raise ModelError(f"Ollama request failed: {e}") from e

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    def _convert_params(self, openai_params: Dict[str, Any]) -> Dict[str, Any]:
        """Convert OpenAI-style parameters to Ollama options"""
        ollama_params = {}
        if "temperature" in openai_params:
            ollama_params["temperature"] = openai_params["temperature"]
        if "top_p" in openai_params:
            ollama_params["top_p"] = openai_params["top_p"]
        if "max_tokens" in openai_params:
            ollama_params["num_predict"] = openai_params["max_tokens"]
        return ollama_params

    def _format_response(self, response: Dict[str, Any]) -> Dict[str, Any]:
        """Format Ollama response to common structure"""
        return {
            "content": response.get("message", {}).get("content", ""),
            "model": response.get("model", self.model_name),
            "finish_reason": response.get("done_reason", "stop"),
        }
