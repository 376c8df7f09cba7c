"""
Keyword -> NewsAPI  ──┐
           Guardian ──┼→ Merge → Dedupe → Sort → Summarize → Sentiment → Present → Report
           NYT      ──┘
"""
from typing import Optional

from src.news_briefing.exceptions import (
    NewsBriefingError,
    ProviderError,
    EmptyResultError,
    ModelError,
    NoSourcesEnabledError,
    InvalidKeywordError,
)
from src.news_briefing.schemas.article import Article, NewsProvider
from src.news_briefing.schemas.query import QueryOptions, SortOrder, build_cache_key
from src.news_briefing.schemas.enrichment import EnrichedArticle, SentimentLabel, SentimentResult
from src.news_briefing.schemas.report import Report, CacheStats, HealthStatus, ProgressEvent

from src.news_briefing.services.source_fetcher import SourceFetcher
from src.news_briefing.services.summarizer import SummarizerService
from src.news_briefing.services.sentiment_analyzer import SentimentAnalyzer
from src.news_briefing.services.presenter import PresenterService
from src.news_briefing.services.request_tracker import RequestTracker
from src.news_briefing.services.coordinator import KeywordProcessingCoordinator, ProgressCallback

from src.news_briefing.providers import (
    NewsAPIProvider,
    GuardianProvider,
    NYTProvider,
    build_default_providers,
)

from src.helpers.llm_helper import LLMCompletionClient
from src.utils.config import Settings, get_settings


def build_coordinator(
    settings: Optional[Settings] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> KeywordProcessingCoordinator:
    """Wire providers, model client and stages from settings."""
    settings = settings or get_settings()
    llm = LLMCompletionClient.from_settings(settings)
    concurrency = settings.ENRICHMENT_CONCURRENCY

    return KeywordProcessingCoordinator(
        fetcher=SourceFetcher(build_default_providers(settings), timeout=settings.PROVIDER_TIMEOUT_SECONDS),
        summarizer=SummarizerService(llm, concurrency=concurrency),
        sentiment=SentimentAnalyzer(llm, concurrency=concurrency),
        presenter=PresenterService(llm),
        cache_ttl=settings.CACHE_TTL_SECONDS,
        tracker=RequestTracker(max_recent=settings.RECENT_SEARCHES_LIMIT),
        progress_callback=progress_callback,
        llm=llm,
    )


__version__ = "1.0.0"
__all__ = [
    # Errors
    "NewsBriefingError",
    "ProviderError",
    "EmptyResultError",
    "ModelError",
    "NoSourcesEnabledError",
    "InvalidKeywordError",
    # Schemas
    "Article",
    "NewsProvider",
    "QueryOptions",
    "SortOrder",
    "build_cache_key",
    "EnrichedArticle",
    "SentimentLabel",
    "SentimentResult",
    "Report",
    "CacheStats",
    "HealthStatus",
    "ProgressEvent",
    # Services
    "SourceFetcher",
    "SummarizerService",
    "SentimentAnalyzer",
    "PresenterService",
    "RequestTracker",
    "KeywordProcessingCoordinator",
    # Providers
    "NewsAPIProvider",
    "GuardianProvider",
    "NYTProvider",
    "build_default_providers",
    # Wiring
    "build_coordinator",
]
