# src/news_briefing/providers/newsapi_provider.py
"""
NewsAPI Provider
Searches the NewsAPI /everything endpoint
"""

import time
from typing import Any, Dict, List, Optional

import httpx

from src.news_briefing.exceptions import ProviderError
from src.news_briefing.providers.base_provider import BaseNewsProvider
from src.news_briefing.schemas.article import Article, NewsProvider
from src.news_briefing.schemas.query import QueryOptions


class NewsAPIProvider(BaseNewsProvider):
    """NewsAPI.org adapter. Its article id is the article URL."""

    DEFAULT_BASE_URL = "https://newsapi.org/v2"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(api_key=api_key, timeout=timeout, client=client)
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")

    @property
    def provider_name(self) -> NewsProvider:
        return NewsProvider.NEWSAPI

    async def fetch_articles(self, keyword: str, options: QueryOptions) -> List[Article]:
        start_time = time.time()
        from_date, to_date = options.resolved_date_range()
        self._log_fetch_start(keyword, from_date, to_date)

        params = {
            "q": keyword,
            "apiKey": self.api_key,
            "language": options.language,
            "sortBy": options.sort_by.value,
            "pageSize": options.page_size,
            "from": from_date.isoformat(),
            "to": to_date.isoformat(),
        }
        data = await self._get_json(f"{self.base_url}/everything", params)

        if data.get("status") != "ok":
            raise ProviderError(
                self.provider_name.value,
                data.get("message") or f"status={data.get('status')!r}",
            )

        raw_articles = data.get("articles") or []
        if not isinstance(raw_articles, list):
            raise ProviderError(self.provider_name.value, "'articles' is not a list")

        articles = self._convert_items(raw_articles)
        self._log_fetch_complete(len(articles), int((time.time() - start_time) * 1000))
        return articles

    def _convert_item(self, item: Dict[str, Any]) -> Optional[Article]:
        url = item.get("url")
        title = item.get("title")
        if not title or not url:
            return self._skip("missing title or url", item)

        published_at = self._parse_datetime(item.get("publishedAt"))
        if published_at is None:
            return self._skip("unparseable publishedAt", item)

        source = item.get("source") or {}
        return Article(
            id=url,
            title=title,
            description=item.get("description"),
            content=item.get("content"),
            url=url,
            source=source.get("name") or "NewsAPI",
            author=item.get("author"),
            published_at=published_at,
            image_url=item.get("urlToImage") or None,
            provider=self.provider_name,
        )

    async def health_check(self) -> bool:
        return await self._probe(
            f"{self.base_url}/top-headlines",
            {"country": "us", "pageSize": 1, "apiKey": self.api_key},
        )
