# src/news_briefing/schemas/enrichment.py
"""
Per-article enrichment results (summary, sentiment, metadata)
"""

import math
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.news_briefing.schemas.article import Article


WORDS_PER_MINUTE = 200


class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    MIXED = "mixed"


class SentimentMethod(str, Enum):
    LLM = "llm"
    LEXICAL = "lexical"
    KEYWORD = "keyword"


class SummaryMethod(str, Enum):
    LLM = "llm"
    EXTRACTIVE = "extractive"
    TEMPLATE = "template"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SentimentResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: SentimentLabel
    score: int = Field(..., ge=0, le=100, description="0 = very negative, 100 = very positive")
    confidence: Confidence = Confidence.MEDIUM
    method: SentimentMethod
    indicators: List[str] = Field(default_factory=list)
    explanation: Optional[str] = None


class ArticleMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_type: str
    word_count: int
    reading_time_minutes: int
    has_image: bool

    @classmethod
    def for_article(cls, article: Article) -> "ArticleMetadata":
        text = f"{article.title} {article.text_body}"
        word_count = len(text.split())
        return cls(
            source_type=article.provider.display_name,
            word_count=word_count,
            reading_time_minutes=math.ceil(word_count / WORDS_PER_MINUTE),
            has_image=bool(article.image_url),
        )


class EnrichedArticle(BaseModel):
    """
    An article plus everything the pipeline stages attached to it.

    Stages return new instances through model_copy(update=...).
    """
    model_config = ConfigDict(frozen=True)

    article: Article
    summary: str = ""
    summary_method: Optional[SummaryMethod] = None
    summary_error: Optional[str] = None
    sentiment: Optional[SentimentResult] = None
    sentiment_error: Optional[str] = None
    metadata: ArticleMetadata

    @classmethod
    def from_article(cls, article: Article) -> "EnrichedArticle":
        return cls(article=article, metadata=ArticleMetadata.for_article(article))
