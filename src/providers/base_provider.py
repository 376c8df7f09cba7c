from abc import ABC, abstractmethod
from typing import Dict, Any, List


class ModelError(Exception):
    """Language-model call failed, timed out, or returned nothing usable."""


class ModelProvider(ABC):
    """Base interface for model providers"""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the provider"""
        pass

    @abstractmethod
    async def generate(self, messages: List[Dict[str, str]], **kwargs) -> Dict[str, Any]:
        """
        Generate a chat completion.

        Returns:
            Dict with at least a "content" key holding the response text
        """
        pass

    async def close(self) -> None:
        """Release network resources held by the provider"""
        return None
