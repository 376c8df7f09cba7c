# src/news_briefing/exceptions.py
"""
Error hierarchy for the briefing pipeline.

Only EmptyResultError, NoSourcesEnabledError and InvalidKeywordError reach
callers of the coordinator. ProviderError and ModelError are absorbed by
the fetcher and the enrichment stages respectively.
"""

from src.providers.base_provider import ModelError


class NewsBriefingError(Exception):
    """Base class for briefing errors"""


class ProviderError(NewsBriefingError):
    """An article source failed (network, HTTP status, malformed payload)."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"{provider}: {message}")


class EmptyResultError(NewsBriefingError):
    """No articles were found for the keyword."""

    def __init__(self, keyword: str):
        self.keyword = keyword
        super().__init__(f'No articles found for keyword "{keyword}"')


class NoSourcesEnabledError(NewsBriefingError):
    """No article source is configured."""

    def __init__(self, message: str = "No news sources are enabled; set at least one provider API key"):
        super().__init__(message)


class InvalidKeywordError(NewsBriefingError, ValueError):
    """Keyword is missing or blank."""

    def __init__(self, message: str = "Keyword is required"):
        super().__init__(message)


__all__ = [
    "NewsBriefingError",
    "ProviderError",
    "EmptyResultError",
    "ModelError",
    "NoSourcesEnabledError",
    "InvalidKeywordError",
]
