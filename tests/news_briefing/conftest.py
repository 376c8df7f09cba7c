"""
Shared fixtures for the news briefing tests
"""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, List, Optional

import pytest
from unittest.mock import AsyncMock

from src.news_briefing.exceptions import ModelError, ProviderError
from src.news_briefing.providers.base_provider import BaseNewsProvider
from src.news_briefing.schemas.article import Article, NewsProvider
from src.news_briefing.schemas.enrichment import (
    Confidence,
    EnrichedArticle,
    SentimentMethod,
    SentimentResult,
)
from src.news_briefing.schemas.query import QueryOptions
from src.news_briefing.services.sentiment_analyzer import sentiment_label_for_score


BASE_TIME = datetime(2024, 3, 1, 12, 0, 0)


class FakeNewsProvider(BaseNewsProvider):
    """In-memory provider that records calls and can fail or stall."""

    def __init__(
        self,
        name: NewsProvider,
        articles: Optional[List[Article]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        healthy: bool = True,
    ):
        super().__init__(api_key="test-key")
        self._name = name
        self.articles = list(articles or [])
        self.error = error
        self.delay = delay
        self.healthy = healthy
        self.calls = 0
        self.closed = False

    @property
    def provider_name(self) -> NewsProvider:
        return self._name

    async def fetch_articles(self, keyword: str, options: QueryOptions) -> List[Article]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.articles)

    async def health_check(self) -> bool:
        return self.healthy

    def _convert_item(self, item):
        return None

    async def close(self):
        self.closed = True


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


# ============================================================================
# FACTORIES
# ============================================================================

@pytest.fixture
def make_article() -> Callable[..., Article]:
    counter = {"n": 0}

    def _make(
        title: Optional[str] = None,
        url: Optional[str] = None,
        content: Optional[str] = "Some article content that is long enough to summarize.",
        source: str = "Reuters",
        author: Optional[str] = None,
        published_at: Optional[datetime] = None,
        provider: NewsProvider = NewsProvider.NEWSAPI,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
        hours_ago: int = 0,
    ) -> Article:
        counter["n"] += 1
        n = counter["n"]
        url = url if url is not None else f"https://example.com/news/{n}"
        return Article(
            id=url or f"{provider.value}-{n}",
            title=title or f"Article {n}",
            description=description,
            content=content,
            url=url or None,
            source=source,
            author=author,
            published_at=published_at or (BASE_TIME - timedelta(hours=hours_ago)),
            image_url=image_url,
            provider=provider,
        )

    return _make


@pytest.fixture
def make_enriched(make_article) -> Callable[..., EnrichedArticle]:
    def _make(score: Optional[int] = None, **article_kwargs) -> EnrichedArticle:
        enriched = EnrichedArticle.from_article(make_article(**article_kwargs))
        if score is None:
            return enriched
        return enriched.model_copy(update={
            "summary": "summary",
            "sentiment": SentimentResult(
                label=sentiment_label_for_score(score),
                score=score,
                confidence=Confidence.MEDIUM,
                method=SentimentMethod.LEXICAL,
            ),
        })

    return _make


@pytest.fixture
def fake_provider_cls():
    return FakeNewsProvider


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def failing_llm():
    """LLM client whose every call fails"""
    llm = AsyncMock()
    llm.complete = AsyncMock(side_effect=ModelError("model unavailable"))
    llm.ping = AsyncMock(return_value=False)
    return llm


@pytest.fixture
def provider_error():
    return ProviderError("newsapi", "HTTP 500")
