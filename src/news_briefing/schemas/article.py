# src/news_briefing/schemas/article.py
"""
Article Schema
Normalized format that every provider adapter converts to
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

from pydantic import BaseModel, ConfigDict, Field


class NewsProvider(str, Enum):
    """Article sources"""
    NEWSAPI = "newsapi"
    GUARDIAN = "guardian"
    NYT = "nyt"

    @property
    def display_name(self) -> str:
        return _PROVIDER_DISPLAY_NAMES[self]


_PROVIDER_DISPLAY_NAMES = {
    NewsProvider.NEWSAPI: "NewsAPI",
    NewsProvider.GUARDIAN: "Guardian",
    NewsProvider.NYT: "NYT",
}


def canonicalize_url(url: Optional[str]) -> Optional[str]:
    """
    Canonical form of an article URL used for identity.

    Lower-cases scheme and host, drops the fragment and utm_* tracking
    parameters, strips a trailing slash from the path.
    """
    if not url or not url.strip():
        return None

    parts = urlsplit(url.strip())
    if not parts.scheme or not parts.netloc:
        return url.strip()

    query = [
        (k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if not k.lower().startswith("utm_")
    ]
    path = parts.path.rstrip("/")

    return urlunsplit((
        parts.scheme.lower(),
        parts.netloc.lower(),
        path,
        urlencode(query),
        "",
    ))


class Article(BaseModel):
    """
    A news article as delivered by one provider, after normalization.

    Immutable: downstream stages wrap it, they never modify it.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Provider-side identifier (URL for NewsAPI)")
    title: str = Field(..., description="Headline")
    description: Optional[str] = Field(None, description="Short abstract / trail text")
    content: Optional[str] = Field(None, description="Body text or lead paragraph")
    url: Optional[str] = Field(None, description="Article URL")
    source: str = Field(..., description="Display source name, e.g. 'The Guardian'")
    author: Optional[str] = Field(None, description="Byline")
    published_at: datetime = Field(..., description="Publication time as given by the provider")
    image_url: Optional[str] = Field(None, description="Thumbnail/image URL")
    provider: NewsProvider = Field(..., description="Which adapter produced the article")

    @property
    def identity_key(self) -> str:
        """Canonical URL when present, otherwise the provider id."""
        return canonicalize_url(self.url) or self.id

    @property
    def published_ts(self) -> float:
        """POSIX timestamp; naive datetimes are read as UTC so mixed feeds compare."""
        published = self.published_at
        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)
        return published.timestamp()

    @property
    def text_body(self) -> str:
        return self.content or self.description or ""
