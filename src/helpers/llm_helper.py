"""
LLM Helper - Provides the single text-completion capability used by the
enrichment stages.

PRODUCTION NOTES:
- One LLMCompletionClient per coordinator; the underlying provider is
  created lazily and initialized once
- Every failure mode (timeout, transport error, empty output) surfaces as
  ModelError so callers only need one except clause
"""

import asyncio
import re
from typing import Optional, Dict, List

from src.providers.base_provider import ModelProvider, ModelError
from src.providers.provider_factory import ModelProviderFactory
from src.utils.config import Settings
from src.utils.logger.custom_logging import LoggerMixin


class LLMCompletionClient(LoggerMixin):
    def __init__(self, provider: ModelProvider, timeout: Optional[float] = 10.0):
        super().__init__()
        self.provider = provider
        self.timeout = timeout
        self._initialized = False

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["LLMCompletionClient"]:
        """Build the client for LLM_PROVIDER, or None when the model is disabled."""
        provider = ModelProviderFactory.create_provider(
            provider_type=settings.LLM_PROVIDER,
            settings=settings,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )
        if provider is None:
            return None
        return cls(provider, timeout=settings.LLM_TIMEOUT_SECONDS)

    @property
    def name(self) -> str:
        return getattr(self.provider, "model_name", type(self.provider).__name__)

    def clean_thinking(self, content: str) -> str:
        return re.sub(r"<think>.*?</think>", "", content, flags=re.DOTALL).strip()

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Run a single-turn completion.

        Args:
            prompt: User prompt
            system: Optional system instruction
            temperature: Sampling temperature
            max_tokens: Optional output cap

        Returns:
            Non-empty response text

        Raises:
            ModelError: On timeout, provider failure or empty output
        """
        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs = {"temperature": temperature}
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        try:
            if not self._initialized:
                await self.provider.initialize()
                self._initialized = True

            if self.timeout:
                response = await asyncio.wait_for(
                    self.provider.generate(messages, **kwargs), timeout=self.timeout
                )
            else:
                response = await self.provider.generate(messages, **kwargs)
        except ModelError:
            raise
        except asyncio.TimeoutError as e:
            self.logger.warning(f"[LLM] {self.name} timed out after {self.timeout}s")
            raise ModelError(f"Model call timed out after {self.timeout}s") from e
        except Exception as e:
            self.logger.warning(f"[LLM] {self.name} failed: {e}")
            raise ModelError(f"Model call failed: {e}") from e

        content = self.clean_thinking((response or {}).get("content") or "")
        if not content:
            raise ModelError("Model returned an empty response")
        return content

    async def ping(self) -> bool:
        """Lightweight probe used by health checks."""
        try:
            await self.complete("Reply with the single word: ok", max_tokens=5, temperature=0)
            return True
        except ModelError:
            return False

    async def close(self) -> None:
        await self.provider.close()
