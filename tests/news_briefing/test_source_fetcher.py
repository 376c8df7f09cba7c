"""
Unit tests for SourceFetcher (fan-out, merge, dedupe, ranking)
"""

import asyncio

import pytest

from src.news_briefing.exceptions import NoSourcesEnabledError
from src.news_briefing.schemas.article import NewsProvider
from src.news_briefing.schemas.query import QueryOptions
from src.news_briefing.services.deduplication import DeduplicationService
from src.news_briefing.services.source_fetcher import SourceFetcher


class TestDeduplication:

    def test_first_occurrence_wins(self, make_article):
        first = make_article(url="https://example.com/story?utm_source=feed", source="Reuters")
        second = make_article(url="https://EXAMPLE.com/story/", source="AP")
        other = make_article()

        result = DeduplicationService().deduplicate([first, second, other])

        assert result == [first, other]

    def test_reusable_between_calls(self, make_article):
        service = DeduplicationService()
        article = make_article()
        assert service.deduplicate([article]) == [article]
        assert service.deduplicate([article]) == [article]


class TestSourceFetcher:

    @pytest.mark.asyncio
    async def test_no_providers_raises(self):
        with pytest.raises(NoSourcesEnabledError):
            await SourceFetcher([]).fetch("ai", QueryOptions())

    @pytest.mark.asyncio
    async def test_merges_and_sorts_newest_first(self, make_article, fake_provider_cls):
        old = make_article(hours_ago=5)
        new = make_article(hours_ago=1, provider=NewsProvider.GUARDIAN)
        middle = make_article(hours_ago=3, provider=NewsProvider.NYT)

        fetcher = SourceFetcher([
            fake_provider_cls(NewsProvider.NEWSAPI, [old]),
            fake_provider_cls(NewsProvider.GUARDIAN, [new]),
            fake_provider_cls(NewsProvider.NYT, [middle]),
        ])
        result = await fetcher.fetch("ai", QueryOptions())

        assert result == [new, middle, old]

    @pytest.mark.asyncio
    async def test_duplicate_across_providers_kept_once(self, make_article, fake_provider_cls):
        from_newsapi = make_article(url="https://example.com/shared", source="Reuters")
        from_guardian = make_article(url="https://example.com/shared", source="The Guardian", provider=NewsProvider.GUARDIAN)

        fetcher = SourceFetcher([
            fake_provider_cls(NewsProvider.NEWSAPI, [from_newsapi]),
            fake_provider_cls(NewsProvider.GUARDIAN, [from_guardian]),
        ])
        result = await fetcher.fetch("ai", QueryOptions())

        assert len(result) == 1
        assert result[0].source == "Reuters"

    @pytest.mark.asyncio
    async def test_concurrent_fetches_share_deduplicator(self, make_article, fake_provider_cls):
        shared = make_article(url="https://example.com/shared")
        fetcher = SourceFetcher([
            fake_provider_cls(NewsProvider.NEWSAPI, [shared], delay=0.01),
            fake_provider_cls(NewsProvider.GUARDIAN, [shared], delay=0.02),
        ])

        first, second = await asyncio.gather(
            fetcher.fetch("ai", QueryOptions()),
            fetcher.fetch("ai", QueryOptions()),
        )

        assert first == [shared]
        assert second == [shared]

    @pytest.mark.asyncio
    async def test_stable_order_for_equal_timestamps(self, make_article, fake_provider_cls):
        a = make_article(title="A")
        b = make_article(title="B", provider=NewsProvider.GUARDIAN)

        fetcher = SourceFetcher([
            fake_provider_cls(NewsProvider.NEWSAPI, [a]),
            fake_provider_cls(NewsProvider.GUARDIAN, [b]),
        ])
        assert await fetcher.fetch("ai", QueryOptions()) == [a, b]

    @pytest.mark.asyncio
    async def test_truncates_to_page_size(self, make_article, fake_provider_cls):
        articles = [make_article(hours_ago=i) for i in range(8)]
        fetcher = SourceFetcher([fake_provider_cls(NewsProvider.NEWSAPI, articles)])

        result = await fetcher.fetch("ai", QueryOptions(page_size=3))

        assert result == articles[:3]

    @pytest.mark.asyncio
    async def test_partial_failure_tolerated(self, make_article, fake_provider_cls, provider_error):
        good = [make_article(), make_article()]
        fetcher = SourceFetcher([
            fake_provider_cls(NewsProvider.NEWSAPI, error=provider_error),
            fake_provider_cls(NewsProvider.GUARDIAN, good),
        ])

        result = await fetcher.fetch("ai", QueryOptions())

        assert result == good

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self, make_article, fake_provider_cls):
        fast = [make_article()]
        fetcher = SourceFetcher(
            [
                fake_provider_cls(NewsProvider.NEWSAPI, [make_article()], delay=1.0),
                fake_provider_cls(NewsProvider.GUARDIAN, fast),
            ],
            timeout=0.05,
        )

        assert await fetcher.fetch("ai", QueryOptions()) == fast

    @pytest.mark.asyncio
    async def test_all_failed_returns_empty(self, fake_provider_cls, provider_error):
        fetcher = SourceFetcher([
            fake_provider_cls(NewsProvider.NEWSAPI, error=provider_error),
            fake_provider_cls(NewsProvider.NYT, error=RuntimeError("boom")),
        ])
        assert await fetcher.fetch("ai", QueryOptions()) == []

    @pytest.mark.asyncio
    async def test_health_check_reports_each_provider(self, fake_provider_cls):
        fetcher = SourceFetcher([
            fake_provider_cls(NewsProvider.NEWSAPI, healthy=False),
            fake_provider_cls(NewsProvider.NYT, healthy=True),
        ])
        assert await fetcher.health_check() == {"newsapi": False, "nyt": True}
