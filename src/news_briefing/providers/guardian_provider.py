# src/news_briefing/providers/guardian_provider.py
"""
Guardian Provider
Searches the Guardian Open Platform content API
"""

import time
from typing import Any, Dict, List, Optional

from src.news_briefing.exceptions import ProviderError
from src.news_briefing.providers.base_provider import BaseNewsProvider
from src.news_briefing.schemas.article import Article, NewsProvider
from src.news_briefing.schemas.query import QueryOptions


class GuardianProvider(BaseNewsProvider):

    SEARCH_URL = "https://content.guardianapis.com/search"
    SOURCE_NAME = "The Guardian"
    SHOW_FIELDS = "headline,trailText,bodyText,byline,thumbnail"

    @property
    def provider_name(self) -> NewsProvider:
        return NewsProvider.GUARDIAN

    async def fetch_articles(self, keyword: str, options: QueryOptions) -> List[Article]:
        start_time = time.time()
        from_date, to_date = options.resolved_date_range()
        self._log_fetch_start(keyword, from_date, to_date)

        params = {
            "q": keyword,
            "api-key": self.api_key,
            "from-date": from_date.isoformat(),
            "to-date": to_date.isoformat(),
            "show-fields": self.SHOW_FIELDS,
            "show-tags": "contributor",
            "page-size": options.page_size,
        }
        data = await self._get_json(self.SEARCH_URL, params)

        body = data.get("response")
        if not isinstance(body, dict):
            raise ProviderError(self.provider_name.value, "missing 'response' object")
        if body.get("status") not in (None, "ok"):
            raise ProviderError(self.provider_name.value, body.get("message") or f"status={body.get('status')!r}")

        results = body.get("results") or []
        articles = self._convert_items(results)
        self._log_fetch_complete(len(articles), int((time.time() - start_time) * 1000))
        return articles

    def _convert_item(self, item: Dict[str, Any]) -> Optional[Article]:
        title = item.get("webTitle")
        url = item.get("webUrl")
        item_id = item.get("id") or url
        if not title or not item_id:
            return self._skip("missing title or id", item)

        published_at = self._parse_datetime(item.get("webPublicationDate"))
        if published_at is None:
            return self._skip("unparseable webPublicationDate", item)

        fields = item.get("fields") or {}
        return Article(
            id=item_id,
            title=title,
            description=fields.get("trailText") or "",
            content=fields.get("bodyText") or "",
            url=url,
            source=self.SOURCE_NAME,
            author=fields.get("byline") or "",
            published_at=published_at,
            image_url=fields.get("thumbnail") or None,
            provider=self.provider_name,
        )

    async def health_check(self) -> bool:
        return await self._probe(self.SEARCH_URL, {"q": "news", "page-size": 1, "api-key": self.api_key})
