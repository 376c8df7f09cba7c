# src/news_briefing/services/source_fetcher.py
"""
Source Fetcher
Fans a keyword out to every enabled provider and merges the results

Flow:
    Providers (parallel, settle-all) -> Merge in adapter order -> Dedupe
        -> Sort newest first -> Truncate to page_size
"""

import time
from typing import List, Optional

from src.news_briefing.exceptions import NoSourcesEnabledError
from src.news_briefing.providers.base_provider import BaseNewsProvider
from src.news_briefing.schemas.article import Article
from src.news_briefing.schemas.query import QueryOptions
from src.news_briefing.services.deduplication import DeduplicationService
from src.utils.graceful_degradation import (
    DegradationConfig,
    DegradationStrategy,
    execute_with_degradation,
)
from src.utils.logger.custom_logging import LoggerMixin


class SourceFetcher(LoggerMixin):
    """
    Partial failure is tolerated: a provider that errors or times out
    contributes nothing and the rest of the result stands.
    """

    def __init__(
        self,
        providers: List[BaseNewsProvider],
        timeout: float = 10.0,
        deduplicator: Optional[DeduplicationService] = None,
    ):
        super().__init__()
        self.providers = list(providers)
        self.timeout = timeout
        self.deduplicator = deduplicator or DeduplicationService()

    @property
    def provider_names(self) -> List[str]:
        return [p.provider_name.value for p in self.providers]

    async def fetch(self, keyword: str, options: Optional[QueryOptions] = None) -> List[Article]:
        """
        Fetch, merge and rank articles for keyword.

        Raises:
            NoSourcesEnabledError: When no provider is configured
        """
        if not self.providers:
            raise NoSourcesEnabledError()

        options = options or QueryOptions()
        start_time = time.time()
        self.logger.info(f"[Fetcher] Searching '{keyword}' across {len(self.providers)} sources")

        outcome = await execute_with_degradation(
            tasks=[
                (lambda p=provider: p.fetch_articles(keyword, options))
                for provider in self.providers
            ],
            config=DegradationConfig(
                strategy=DegradationStrategy.BEST_EFFORT,
                task_timeout=self.timeout,
                log_failures=False,
            ),
            task_names=self.provider_names,
        )

        merged: List[Article] = []
        for task_result in outcome.all_results:
            if task_result.success:
                articles = task_result.result or []
                self.logger.info(f"[Fetcher] {task_result.task_name}: {len(articles)} articles")
                merged.extend(articles)
            elif task_result.timed_out:
                self.logger.warning(f"[Fetcher] {task_result.task_name}: timed out after {self.timeout}s")
            else:
                self.logger.warning(f"[Fetcher] {task_result.task_name}: failed - {task_result.error}")

        unique = self.deduplicator.deduplicate(merged)
        # sorted() is stable, so equal timestamps keep merge order
        ranked = sorted(unique, key=lambda a: a.published_ts, reverse=True)
        result = ranked[:options.page_size]

        elapsed_ms = int((time.time() - start_time) * 1000)
        self.logger.info(
            f"[Fetcher] '{keyword}': {len(result)} articles "
            f"({outcome.success_count}/{outcome.total_count} sources ok, {elapsed_ms}ms)"
        )
        return result

    async def health_check(self) -> dict:
        """Probe every provider; name -> bool."""
        checks = {}
        for provider in self.providers:
            try:
                checks[provider.provider_name.value] = await provider.health_check()
            except Exception as e:
                self.logger.warning(f"[Fetcher] Health probe for {provider.provider_name.value} raised: {e}")
                checks[provider.provider_name.value] = False
        return checks

    async def close(self):
        for provider in self.providers:
            await provider.close()
