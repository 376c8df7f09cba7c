# src/news_briefing/providers/nyt_provider.py
"""
New York Times Provider
Searches the NYT Article Search API (v2)
"""

import time
from typing import Any, Dict, List, Optional

from src.news_briefing.exceptions import ProviderError
from src.news_briefing.providers.base_provider import BaseNewsProvider
from src.news_briefing.schemas.article import Article, NewsProvider
from src.news_briefing.schemas.query import QueryOptions, SortOrder


class NYTProvider(BaseNewsProvider):

    SEARCH_URL = "https://api.nytimes.com/svc/search/v2/articlesearch.json"
    SITE_URL = "https://www.nytimes.com/"
    SOURCE_NAME = "The New York Times"
    FIELD_LIST = "_id,headline,abstract,lead_paragraph,web_url,byline,multimedia,pub_date"

    # NYT only knows newest/oldest/relevance
    SORT_MAPPING = {
        SortOrder.PUBLISHED_AT: "newest",
        SortOrder.RELEVANCY: "relevance",
        SortOrder.POPULARITY: "relevance",
    }

    @property
    def provider_name(self) -> NewsProvider:
        return NewsProvider.NYT

    async def fetch_articles(self, keyword: str, options: QueryOptions) -> List[Article]:
        start_time = time.time()
        from_date, to_date = options.resolved_date_range()
        self._log_fetch_start(keyword, from_date, to_date)

        params = {
            "q": keyword,
            "api-key": self.api_key,
            "begin_date": from_date.strftime("%Y%m%d"),
            "end_date": to_date.strftime("%Y%m%d"),
            "fl": self.FIELD_LIST,
            "sort": self.SORT_MAPPING[options.sort_by],
        }
        data = await self._get_json(self.SEARCH_URL, params)

        body = data.get("response")
        if not isinstance(body, dict):
            fault = (data.get("fault") or {}).get("faultstring")
            raise ProviderError(self.provider_name.value, fault or "missing 'response' object")

        docs = body.get("docs") or []
        articles = self._convert_items(docs)
        self._log_fetch_complete(len(articles), int((time.time() - start_time) * 1000))
        return articles

    def _convert_item(self, item: Dict[str, Any]) -> Optional[Article]:
        headline = item.get("headline") or {}
        title = headline.get("main") if isinstance(headline, dict) else None
        url = item.get("web_url")
        item_id = item.get("_id") or url
        if not title or not item_id:
            return self._skip("missing headline or id", item)

        published_at = self._parse_datetime(item.get("pub_date"))
        if published_at is None:
            return self._skip("unparseable pub_date", item)

        byline = item.get("byline") or {}
        return Article(
            id=item_id,
            title=title,
            description=item.get("abstract") or "",
            content=item.get("lead_paragraph") or "",
            url=url,
            source=self.SOURCE_NAME,
            author=(byline.get("original") if isinstance(byline, dict) else None) or "",
            published_at=published_at,
            image_url=self._image_url(item.get("multimedia")),
            provider=self.provider_name,
        )

    def _image_url(self, multimedia: Any) -> Optional[str]:
        if not isinstance(multimedia, list) or not multimedia:
            return None
        first = multimedia[0]
        url = first.get("url") if isinstance(first, dict) else None
        if not url:
            return None
        if url.startswith("http://") or url.startswith("https://"):
            return url
        return f"{self.SITE_URL}{url.lstrip('/')}"

    async def health_check(self) -> bool:
        return await self._probe(self.SEARCH_URL, {"q": "news", "api-key": self.api_key})
