# src/news_briefing/schemas/report.py
"""
Aggregated report and service status models
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.news_briefing.schemas.enrichment import EnrichedArticle, SentimentLabel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def empty_distribution() -> Dict[SentimentLabel, int]:
    return {label: 0 for label in SentimentLabel}


class SummarySource(str, Enum):
    LLM = "llm"
    TEMPLATE = "template"


class ExecutiveSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    method: SummarySource
    generated_at: datetime = Field(default_factory=utc_now)


class DateRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None


class SourceCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    count: int


class AuthorCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    author: str
    count: int


class Statistics(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_articles: int = 0
    sources: Dict[str, int] = Field(default_factory=dict)
    sentiment_distribution: Dict[SentimentLabel, int] = Field(default_factory=empty_distribution)
    average_sentiment_score: int = 0
    date_range: DateRange = Field(default_factory=DateRange)
    top_sources: List[SourceCount] = Field(default_factory=list)
    top_authors: List[AuthorCount] = Field(default_factory=list)


class SentimentBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    dominant: SentimentLabel
    average_score: int
    distribution: Dict[SentimentLabel, int] = Field(default_factory=empty_distribution)


class SentimentTrends(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall: SentimentBreakdown
    by_source: Dict[str, SentimentBreakdown] = Field(default_factory=dict)
    by_date: Dict[str, int] = Field(default_factory=dict, description="YYYY-MM-DD -> average score")
    trends: List[str] = Field(default_factory=list)


class Report(BaseModel):
    """
    Final output of one keyword run.

    Cached and shared by reference between every caller attached to the run.
    """
    model_config = ConfigDict(frozen=True)

    keyword: str
    request_id: str
    timestamp: datetime = Field(default_factory=utc_now)
    summary: ExecutiveSummary
    articles: List[EnrichedArticle]
    statistics: Statistics
    sentiment: SentimentTrends
    insights: List[str] = Field(default_factory=list)


class CacheStats(BaseModel):
    size: int
    in_flight_count: int
    keys: List[str] = Field(default_factory=list)


class HealthState(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    status: HealthState
    checks: Dict[str, Any] = Field(default_factory=dict)
    detail: Optional[str] = None


class HealthStatus(BaseModel):
    status: HealthState
    timestamp: datetime = Field(default_factory=utc_now)
    components: Dict[str, ComponentHealth] = Field(default_factory=dict)


class ProcessingState(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ProcessingStatus(BaseModel):
    request_id: str
    keyword: str
    status: ProcessingState = ProcessingState.PROCESSING
    started_at: datetime = Field(default_factory=utc_now)
    finished_at: Optional[datetime] = None
    article_count: Optional[int] = None
    error: Optional[str] = None


class RecentSearch(BaseModel):
    keyword: str
    timestamp: datetime
    article_count: int
    request_id: str


class ProgressStage(str, Enum):
    STARTED = "started"
    FETCHED = "fetched"
    SUMMARIZED = "summarized"
    ANALYZED = "analyzed"
    COMPLETED = "completed"
    FAILED = "failed"


class ProgressEvent(BaseModel):
    request_id: str
    keyword: str
    stage: ProgressStage
    message: str = ""
    data: Dict[str, Any] = Field(default_factory=dict)
