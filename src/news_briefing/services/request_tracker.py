# src/news_briefing/services/request_tracker.py
"""
In-memory request history: per-request processing status and the list of
recently completed searches. Bounded; nothing survives a restart.
"""

from collections import OrderedDict, deque
from typing import Deque, List, Optional

from src.news_briefing.schemas.report import (
    ProcessingState,
    ProcessingStatus,
    RecentSearch,
    utc_now,
)


class RequestTracker:
    def __init__(self, max_requests: int = 200, max_recent: int = 50):
        self.max_requests = max_requests
        self._statuses: "OrderedDict[str, ProcessingStatus]" = OrderedDict()
        self._recent: Deque[RecentSearch] = deque(maxlen=max_recent)

    def start(self, request_id: str, keyword: str) -> ProcessingStatus:
        status = ProcessingStatus(request_id=request_id, keyword=keyword)
        self._statuses[request_id] = status
        while len(self._statuses) > self.max_requests:
            self._statuses.popitem(last=False)
        return status

    def complete(self, request_id: str, article_count: int) -> None:
        status = self._statuses.get(request_id)
        if status is None:
            return
        finished = status.model_copy(update={
            "status": ProcessingState.COMPLETED,
            "finished_at": utc_now(),
            "article_count": article_count,
        })
        self._statuses[request_id] = finished
        self._recent.appendleft(RecentSearch(
            keyword=status.keyword,
            timestamp=finished.finished_at,
            article_count=article_count,
            request_id=request_id,
        ))

    def fail(self, request_id: str, error: str) -> None:
        status = self._statuses.get(request_id)
        if status is None:
            return
        self._statuses[request_id] = status.model_copy(update={
            "status": ProcessingState.FAILED,
            "finished_at": utc_now(),
            "error": error,
        })

    def get(self, request_id: str) -> Optional[ProcessingStatus]:
        return self._statuses.get(request_id)

    def recent(self, limit: int = 10) -> List[RecentSearch]:
        """Newest first."""
        if limit <= 0:
            return []
        return list(self._recent)[:limit]
