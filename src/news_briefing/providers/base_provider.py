from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import httpx

from src.news_briefing.exceptions import ProviderError
from src.news_briefing.schemas.article import Article, NewsProvider
from src.news_briefing.schemas.query import QueryOptions
from src.utils.logger.custom_logging import LoggerMixin


class BaseNewsProvider(ABC, LoggerMixin):
    """
    Abstract base class for article sources.

    Each provider must:
    1. Query its search endpoint for a keyword
    2. Convert items to Article
    3. Raise ProviderError on network, HTTP or payload failures
       (zero matches is an empty list, not an error)
    """

    def __init__(self, api_key: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        super().__init__()
        if not api_key:
            raise ValueError(f"{type(self).__name__} requires an API key")
        self.api_key = api_key
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    @abstractmethod
    def provider_name(self) -> NewsProvider:
        """Return the provider identifier"""
        pass

    @abstractmethod
    async def fetch_articles(self, keyword: str, options: QueryOptions) -> List[Article]:
        """
        Search the provider for keyword.

        Args:
            keyword: Search term
            options: Query options (language, dates, page size, ordering)

        Returns:
            List of Article, possibly empty

        Raises:
            ProviderError: On any network, HTTP or parse failure
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Issue a lightweight request; True when the provider answers."""
        pass

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self):
        """Close HTTP client"""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """GET url and decode a JSON object, mapping every failure to ProviderError."""
        name = self.provider_name.value
        try:
            client = await self._get_client()
            response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(name, f"HTTP {e.response.status_code} from {url}") from e
        except httpx.RequestError as e:
            raise ProviderError(name, f"Request error: {e}") from e
        except ValueError as e:
            raise ProviderError(name, f"Invalid JSON payload: {e}") from e

        if not isinstance(data, dict):
            raise ProviderError(name, f"Unexpected payload type {type(data).__name__}")
        return data

    async def _probe(self, url: str, params: Dict[str, Any]) -> bool:
        try:
            await self._get_json(url, params)
            return True
        except ProviderError as e:
            self.logger.warning(f"[{self.provider_name.value}] Health check failed: {e.message}")
            return False

    def _parse_datetime(self, value: Any) -> Optional[datetime]:
        """Parse an ISO-8601 timestamp; None when missing or malformed."""
        if not value or not isinstance(value, str):
            return None
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # NYT uses +0000 offsets
        if len(text) > 5 and text[-5] in "+-" and text[-4:].isdigit():
            text = f"{text[:-2]}:{text[-2:]}"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None

    def _convert_items(self, items: List[Any]) -> List[Article]:
        articles = []
        for item in items:
            if not isinstance(item, dict):
                continue
            article = self._convert_item(item)
            if article is not None:
                articles.append(article)
        return articles

    @abstractmethod
    def _convert_item(self, item: Dict[str, Any]) -> Optional[Article]:
        """Convert one raw item, or None when it lacks title, URL/id or a valid date."""
        pass

    def _log_fetch_start(self, keyword: str, start: date, end: date):
        self.logger.info(f"[{self.provider_name.value}] Searching '{keyword}' {start}..{end}")

    def _log_fetch_complete(self, count: int, time_ms: int):
        self.logger.info(f"[{self.provider_name.value}] Fetched {count} articles in {time_ms}ms")

    def _skip(self, reason: str, item: Dict[str, Any]) -> None:
        self.logger.debug(f"[{self.provider_name.value}] Skipping item ({reason}): {str(item)[:120]}")
        return None
