# src/news_briefing/schemas/query.py
"""
Query options and cache-key derivation
"""

import hashlib
import json
import re
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


DEFAULT_LOOKBACK_DAYS = 7


class SortOrder(str, Enum):
    PUBLISHED_AT = "publishedAt"
    RELEVANCY = "relevancy"
    POPULARITY = "popularity"


class QueryOptions(BaseModel):
    """
    Search options for a keyword request.

    Example:
    {
        "language": "en",
        "sort_by": "publishedAt",
        "page_size": 20,
        "from_date": "2024-01-01",
        "to_date": "2024-01-07"
    }
    """
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    language: str = Field(
        default="en",
        min_length=2,
        max_length=2,
        description="Two-letter language code",
    )
    sort_by: SortOrder = Field(
        default=SortOrder.PUBLISHED_AT,
        alias="sortBy",
        description="Provider-side ordering",
    )
    page_size: int = Field(
        default=20,
        ge=1,
        le=50,
        alias="pageSize",
        description="Maximum number of articles in the result",
    )
    from_date: Optional[date] = Field(default=None, alias="fromDate")
    to_date: Optional[date] = Field(default=None, alias="toDate")

    @model_validator(mode="after")
    def _check_date_range(self) -> "QueryOptions":
        if self.from_date and self.to_date and self.from_date > self.to_date:
            raise ValueError("from_date must not be after to_date")
        return self

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "QueryOptions":
        """Build options from a plain dict; accepts snake_case or camelCase keys."""
        return cls.model_validate(dict(data or {}))

    def canonical(self) -> Dict[str, Any]:
        """Sorted-key, JSON-serialisable representation."""
        data = self.model_dump(mode="json")
        return {key: data[key] for key in sorted(data)}

    def resolved_date_range(self, today: Optional[date] = None) -> Tuple[date, date]:
        """(from, to) with defaults of the last seven days."""
        today = today or date.today()
        start = self.from_date or (today - timedelta(days=DEFAULT_LOOKBACK_DAYS))
        end = self.to_date or today
        return start, end


_WHITESPACE = re.compile(r"\s+")


def normalize_keyword(keyword: str) -> str:
    """Strip, collapse inner whitespace and case-fold."""
    return _WHITESPACE.sub(" ", (keyword or "").strip()).casefold()


def build_cache_key(keyword: str, options: Optional[QueryOptions] = None) -> str:
    """
    Deterministic key for (keyword, options).

    Two requests equal in keyword (modulo case and outer whitespace) and in
    option values produce the same key.
    """
    options = options or QueryOptions()
    payload = json.dumps(options.canonical(), sort_keys=True, separators=(",", ":"))
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return f"{normalize_keyword(keyword)}|{digest}"
