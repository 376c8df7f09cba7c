# src/news_briefing/services/summarizer.py
"""
Summarizer Service
Attaches a short summary to every article

Strategies (per article, independently):
1. LLM summary (2-4 sentences)
2. Extractive summary (first sentences of the body)
3. Template naming source, date and title (only if 2 raised)
"""

import re
from typing import Any, Dict, List, Optional

from src.helpers.llm_helper import LLMCompletionClient
from src.news_briefing.exceptions import ModelError
from src.news_briefing.schemas.article import Article
from src.news_briefing.schemas.enrichment import EnrichedArticle, SummaryMethod
from src.news_briefing.services.strategy import TwoStrategyResolver, run_per_item
from src.utils.logger.custom_logging import LoggerMixin


SUMMARY_PROMPT = (
    "Summarize the following news article in 2-4 sentences.\n\n"
    "Title: {title}\n"
    "Content: {content}"
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
MIN_SENTENCE_LENGTH = 10
MAX_EXTRACTIVE_SENTENCES = 3


def extractive_summary(title: str, content: str) -> str:
    """
    First three meaningful sentences of content.

    Fragments of 10 characters or fewer are ignored.
    """
    sentences = [
        s.strip() for s in _SENTENCE_SPLIT.split(content or "")
        if len(s.strip()) > MIN_SENTENCE_LENGTH
    ]
    if not sentences:
        return f"Article about {title}. No detailed content available."

    summary = ". ".join(sentences[:MAX_EXTRACTIVE_SENTENCES]).strip()
    if not summary.endswith("."):
        summary += "."
    return summary


def template_summary(article: Article) -> str:
    title = article.title or "Unknown title"
    source = article.source or "Unknown source"
    published = article.published_at.strftime("%Y-%m-%d") if article.published_at else "Unknown date"
    return (
        f"Article from {source} published on {published} about {title}. "
        f"This article discusses developments and news related to the topic."
    )


class SummarizerService(LoggerMixin):
    def __init__(self, llm: Optional[LLMCompletionClient] = None, concurrency: int = 5):
        super().__init__()
        self.llm = llm
        self.concurrency = concurrency
        self.resolver: TwoStrategyResolver[Article, str] = TwoStrategyResolver(
            primary=self._llm_summary if llm else None,
            fallback=self._extractive_summary,
            name="Summarizer",
        )

    @property
    def method(self) -> str:
        return "llm" if self.llm else "extractive"

    async def _llm_summary(self, article: Article) -> str:
        prompt = SUMMARY_PROMPT.format(title=article.title, content=article.text_body)
        summary = (await self.llm.complete(prompt, temperature=0.3)).strip()
        if not summary:
            raise ModelError("Empty summary")
        return summary

    async def _extractive_summary(self, article: Article) -> str:
        return extractive_summary(article.title, article.text_body)

    async def summarize_article(self, article: Article) -> EnrichedArticle:
        enriched = EnrichedArticle.from_article(article)
        try:
            outcome = await self.resolver.resolve(article)
        except Exception as e:
            self.logger.warning(f"[Summarizer] All strategies failed for '{article.title[:60]}': {e}")
            return enriched.model_copy(update={
                "summary": template_summary(article),
                "summary_method": SummaryMethod.TEMPLATE,
                "summary_error": str(e),
            })

        update: Dict[str, Any] = {
            "summary": outcome.value,
            "summary_method": SummaryMethod.EXTRACTIVE if outcome.used_fallback else SummaryMethod.LLM,
        }
        if outcome.error is not None:
            update["summary_error"] = outcome.error_message
        return enriched.model_copy(update=update)

    async def summarize_articles(self, articles: List[Article]) -> List[EnrichedArticle]:
        """Summarize every article; output order matches input order."""
        self.logger.info(f"[Summarizer] Summarizing {len(articles)} articles (method={self.method})")
        results = await run_per_item(articles, self.summarize_article, self.concurrency)

        fallbacks = sum(1 for r in results if r.summary_method != SummaryMethod.LLM)
        if self.llm and fallbacks:
            self.logger.info(f"[Summarizer] {fallbacks}/{len(results)} articles used a fallback summary")
        return results

    async def health_check(self) -> Dict[str, Any]:
        return {"method": self.method}
