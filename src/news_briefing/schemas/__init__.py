from src.news_briefing.schemas.article import Article, NewsProvider, canonicalize_url
from src.news_briefing.schemas.query import (
    QueryOptions,
    SortOrder,
    build_cache_key,
    normalize_keyword,
)
from src.news_briefing.schemas.enrichment import (
    ArticleMetadata,
    Confidence,
    EnrichedArticle,
    SentimentLabel,
    SentimentMethod,
    SentimentResult,
    SummaryMethod,
)
from src.news_briefing.schemas.report import (
    CacheStats,
    ComponentHealth,
    ExecutiveSummary,
    HealthState,
    HealthStatus,
    ProcessingState,
    ProcessingStatus,
    ProgressEvent,
    ProgressStage,
    RecentSearch,
    Report,
    SentimentBreakdown,
    SentimentTrends,
    Statistics,
    SummarySource,
)
