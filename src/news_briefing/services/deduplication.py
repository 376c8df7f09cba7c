# src/news_briefing/services/deduplication.py
"""
Deduplication Service
Removes duplicate articles by identity key (canonical URL, else provider id)
"""

import logging
from typing import Iterable, List, Set

from src.news_briefing.schemas.article import Article

logger = logging.getLogger(__name__)


class DeduplicationService:
    """
    Keeps the first occurrence of every identity key.

    Callers pass articles in adapter order, so an article reported by two
    sources is attributed to the earlier adapter. Holds no state between
    calls, so one instance can serve concurrent fetches.
    """

    def deduplicate(self, articles: Iterable[Article]) -> List[Article]:
        """
        Remove duplicate articles, preserving order.

        Args:
            articles: Articles in merge order

        Returns:
            Articles with unique identity keys
        """
        seen_keys: Set[str] = set()
        result: List[Article] = []
        total = 0

        for article in articles:
            total += 1
            key = article.identity_key
            if key in seen_keys:
                logger.debug(f"[Dedup] Duplicate: {article.title[:50]}...")
                continue
            seen_keys.add(key)
            result.append(article)

        if total != len(result):
            logger.info(f"[Dedup] {total} -> {len(result)} (removed {total - len(result)})")
        return result


def deduplicate_articles(articles: Iterable[Article]) -> List[Article]:
    return DeduplicationService().deduplicate(articles)
