# src/news_briefing/services/coordinator.py
"""
Keyword Processing Coordinator

Request -> Cache hit? ──yes──> cached Report
              │ no
              ▼
        In flight? ──yes──> attach to the running pipeline
              │ no
              ▼
        Fetch -> Summarize -> Sentiment -> Present -> Report -> Cache

At most one pipeline runs per cache key. Every caller attached to a run
receives the same Report object, or the same exception.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Set, Union

from src.core.logging import RequestContext, generate_request_id
from src.helpers.llm_helper import LLMCompletionClient
from src.news_briefing.exceptions import EmptyResultError, InvalidKeywordError
from src.news_briefing.schemas.query import QueryOptions, build_cache_key
from src.news_briefing.schemas.report import (
    CacheStats,
    ComponentHealth,
    HealthState,
    HealthStatus,
    ProcessingStatus,
    ProgressEvent,
    ProgressStage,
    RecentSearch,
    Report,
    utc_now,
)
from src.news_briefing.services.presenter import PresenterService
from src.news_briefing.services.request_tracker import RequestTracker
from src.news_briefing.services.sentiment_analyzer import SentimentAnalyzer
from src.news_briefing.services.source_fetcher import SourceFetcher
from src.news_briefing.services.summarizer import SummarizerService
from src.utils.logger.custom_logging import LoggerMixin


DEFAULT_CACHE_TTL_SECONDS = 30 * 60

ProgressCallback = Callable[[ProgressEvent], Awaitable[None]]


@dataclass
class CacheEntry:
    key: str
    report: Report
    created_at: float


@dataclass
class InFlightEntry:
    key: str
    future: "asyncio.Future[Report]"
    request_id: str
    started_at: float
    keyword: str = ""


class KeywordProcessingCoordinator(LoggerMixin):
    """
    Single-flight, TTL-cached driver of the briefing pipeline.

    The cache and in-flight tables share one asyncio.Lock, so the
    check-then-insert on a key is a single critical section.
    """

    def __init__(
        self,
        fetcher: SourceFetcher,
        summarizer: SummarizerService,
        sentiment: SentimentAnalyzer,
        presenter: PresenterService,
        cache_ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        tracker: Optional[RequestTracker] = None,
        progress_callback: Optional[ProgressCallback] = None,
        llm: Optional[LLMCompletionClient] = None,
    ):
        super().__init__()
        self.fetcher = fetcher
        self.summarizer = summarizer
        self.sentiment = sentiment
        self.presenter = presenter
        self.cache_ttl = cache_ttl
        self.clock = clock
        self.tracker = tracker or RequestTracker()
        self.progress_callback = progress_callback
        self.llm = llm

        self._lock = asyncio.Lock()
        self._cache: Dict[str, CacheEntry] = {}
        self._in_flight: Dict[str, InFlightEntry] = {}
        self._tasks: Set[asyncio.Task] = set()

    # =========================================================================
    # Public API
    # =========================================================================

    async def process(
        self,
        keyword: str,
        options: Optional[Union[QueryOptions, Mapping[str, Any]]] = None,
    ) -> Report:
        """
        Produce the report for keyword, reusing a cached or running result.

        Raises:
            InvalidKeywordError: Keyword is blank
            EmptyResultError: No provider returned any article
            NoSourcesEnabledError: No provider is configured
        """
        if not isinstance(keyword, str) or not keyword.strip():
            raise InvalidKeywordError()

        keyword = keyword.strip()
        if not isinstance(options, QueryOptions):
            options = QueryOptions.from_mapping(options)
        key = build_cache_key(keyword, options)

        async with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                if self._is_expired(entry):
                    del self._cache[key]
                    self.logger.info(f"[Coordinator] Cache expired for '{keyword}'")
                else:
                    self.logger.info(f"[Coordinator] Cache hit for '{keyword}' ({entry.report.request_id})")
                    return entry.report

            in_flight = self._in_flight.get(key)
            if in_flight is not None:
                self.logger.info(
                    f"[Coordinator] Attaching to in-flight request {in_flight.request_id} for '{keyword}'"
                )
            else:
                in_flight = InFlightEntry(
                    key=key,
                    future=asyncio.get_running_loop().create_future(),
                    request_id=generate_request_id(),
                    started_at=self.clock(),
                    keyword=keyword,
                )
                # Mark a failure as retrieved even if every waiter went away
                in_flight.future.add_done_callback(
                    lambda f: f.cancelled() or f.exception()
                )
                self._in_flight[key] = in_flight
                self.tracker.start(in_flight.request_id, keyword)

                task = asyncio.create_task(self._run(in_flight, keyword, options))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

        return await asyncio.shield(in_flight.future)

    def get_cache_stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._cache),
            in_flight_count=len(self._in_flight),
            keys=list(self._cache.keys()),
        )

    def clear_cache(self) -> None:
        """
        Empty the cache and in-flight tables.

        Running pipelines are not cancelled; they still deliver to their
        attached callers but do not repopulate the cache.
        """
        cleared, detached = len(self._cache), len(self._in_flight)
        self._cache.clear()
        self._in_flight.clear()
        self.logger.info(f"[Coordinator] Cache cleared ({cleared} entries, {detached} in-flight detached)")

    def get_processing_status(self, request_id: str) -> Optional[ProcessingStatus]:
        return self.tracker.get(request_id)

    def get_recent_searches(self, limit: int = 10) -> List[RecentSearch]:
        return self.tracker.recent(limit)

    async def health_check(self) -> HealthStatus:
        components = {
            "fetcher": await self._check_component("fetcher", self._fetcher_health),
            "summarizer": await self._check_component("summarizer", self._summarizer_health),
            "sentiment": await self._check_component("sentiment", self._sentiment_health),
            "presenter": await self._check_component("presenter", self._presenter_health),
        }
        overall = (
            HealthState.HEALTHY
            if all(c.status == HealthState.HEALTHY for c in components.values())
            else HealthState.UNHEALTHY
        )
        return HealthStatus(status=overall, components=components)

    async def close(self) -> None:
        await self.fetcher.close()
        if self.llm is not None:
            await self.llm.close()

    # =========================================================================
    # Pipeline
    # =========================================================================

    def _is_expired(self, entry: CacheEntry) -> bool:
        return self.clock() - entry.created_at > self.cache_ttl

    async def _run(self, in_flight: InFlightEntry, keyword: str, options: QueryOptions) -> None:
        report: Optional[Report] = None
        error: Optional[BaseException] = None

        try:
            async with RequestContext(in_flight.request_id):
                report = await self._execute_pipeline(in_flight.request_id, keyword, options)
        except asyncio.CancelledError as e:
            error = e
            raise
        except Exception as e:
            error = e
        finally:
            async with self._lock:
                # A clear_cache() during the run detaches this entry: deliver, don't cache
                still_registered = self._in_flight.get(in_flight.key) is in_flight
                if report is not None and still_registered:
                    self._cache[in_flight.key] = CacheEntry(
                        key=in_flight.key,
                        report=report,
                        created_at=self.clock(),
                    )
                if still_registered:
                    del self._in_flight[in_flight.key]

            if not in_flight.future.done():
                if report is not None:
                    in_flight.future.set_result(report)
                elif isinstance(error, asyncio.CancelledError) or error is None:
                    in_flight.future.cancel()
                else:
                    in_flight.future.set_exception(error)

    async def _execute_pipeline(self, request_id: str, keyword: str, options: QueryOptions) -> Report:
        start_time = time.time()
        self.logger.info(f"[Coordinator] Processing '{keyword}'")
        await self._emit(request_id, keyword, ProgressStage.STARTED, f"Searching news for '{keyword}'")

        try:
            articles = await self.fetcher.fetch(keyword, options)
            if not articles:
                raise EmptyResultError(keyword)
            await self._emit(
                request_id, keyword, ProgressStage.FETCHED,
                f"Found {len(articles)} articles", {"article_count": len(articles)},
            )

            summarized = await self.summarizer.summarize_articles(articles)
            await self._emit(request_id, keyword, ProgressStage.SUMMARIZED, "Articles summarized")

            analyzed = await self.sentiment.analyze_articles(summarized)
            await self._emit(request_id, keyword, ProgressStage.ANALYZED, "Sentiment analyzed")

            presentation = await self.presenter.format_results(analyzed, keyword)
        except Exception as e:
            self.tracker.fail(request_id, str(e))
            self.logger.warning(f"[Coordinator] '{keyword}' failed: {e}")
            await self._emit(request_id, keyword, ProgressStage.FAILED, str(e))
            raise

        report = Report(
            keyword=keyword,
            request_id=request_id,
            timestamp=utc_now(),
            summary=presentation.summary,
            articles=analyzed,
            statistics=presentation.statistics,
            sentiment=presentation.sentiment,
            insights=presentation.insights,
        )

        self.tracker.complete(request_id, len(analyzed))
        elapsed_ms = int((time.time() - start_time) * 1000)
        self.logger.info(f"[Coordinator] '{keyword}' completed: {len(analyzed)} articles in {elapsed_ms}ms")
        await self._emit(
            request_id, keyword, ProgressStage.COMPLETED, "Processing complete",
            {"article_count": len(analyzed), "elapsed_ms": elapsed_ms},
        )
        return report

    async def _emit(
        self,
        request_id: str,
        keyword: str,
        stage: ProgressStage,
        message: str = "",
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        if self.progress_callback is None:
            return
        event = ProgressEvent(request_id=request_id, keyword=keyword, stage=stage, message=message, data=data or {})
        try:
            await self.progress_callback(event)
        except Exception as e:
            self.logger.warning(f"[Coordinator] Progress callback failed at {stage.value}: {e}")

    # =========================================================================
    # Health
    # =========================================================================

    async def _check_component(
        self,
        name: str,
        check: Callable[[], Awaitable[ComponentHealth]],
    ) -> ComponentHealth:
        try:
            return await check()
        except Exception as e:
            self.logger.warning(f"[Coordinator] Health check for {name} raised: {e}")
            return ComponentHealth(status=HealthState.UNHEALTHY, detail=str(e))

    async def _fetcher_health(self) -> ComponentHealth:
        checks = await self.fetcher.health_check()
        healthy = any(checks.values())
        return ComponentHealth(
            status=HealthState.HEALTHY if healthy else HealthState.UNHEALTHY,
            checks=checks,
            detail=None if checks else "No news sources are enabled",
        )

    async def _summarizer_health(self) -> ComponentHealth:
        return ComponentHealth(status=HealthState.HEALTHY, checks=await self.summarizer.health_check())

    async def _sentiment_health(self) -> ComponentHealth:
        checks = await self.sentiment.health_check()
        healthy = checks.pop("healthy")
        return ComponentHealth(
            status=HealthState.HEALTHY if healthy else HealthState.UNHEALTHY,
            checks=checks,
        )

    async def _presenter_health(self) -> ComponentHealth:
        checks = await self.presenter.health_check()
        return ComponentHealth(
            status=HealthState.HEALTHY if checks["formatting"] else HealthState.UNHEALTHY,
            checks=checks,
        )
