# src/news_briefing/services/presenter.py
"""
Presenter Service
Turns enriched articles into the aggregated parts of a report

Statistics, sentiment trends, time period, themes and insights are pure
functions of the article list. Only the executive summary may call the
language model, with a template fallback.
"""

import math
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from src.helpers.llm_helper import LLMCompletionClient
from src.news_briefing.exceptions import ModelError
from src.news_briefing.schemas.article import Article, NewsProvider
from src.news_briefing.schemas.enrichment import EnrichedArticle, SentimentLabel
from src.news_briefing.schemas.report import (
    AuthorCount,
    DateRange,
    ExecutiveSummary,
    SentimentBreakdown,
    SentimentTrends,
    SourceCount,
    Statistics,
    SummarySource,
    empty_distribution,
)
from src.news_briefing.services.sentiment_analyzer import sentiment_label_for_score
from src.news_briefing.services.strategy import TwoStrategyResolver
from src.utils.logger.custom_logging import LoggerMixin


THEME_KEYWORDS = [
    "technology", "politics", "business", "health",
    "science", "environment", "economy", "society",
]
MAX_SUMMARY_THEMES = 3
TOP_N = 5
TREND_THRESHOLD = 10

# Fixed scan order for dominant-label ties
LABEL_ORDER = [
    SentimentLabel.POSITIVE,
    SentimentLabel.NEGATIVE,
    SentimentLabel.NEUTRAL,
    SentimentLabel.MIXED,
]

TREND_IMPROVED = "Sentiment has improved over time"
TREND_DECLINED = "Sentiment has declined over time"
TREND_STABLE = "Sentiment has remained relatively stable"

INSIGHT_POSITIVE = "Overall positive sentiment suggests optimistic coverage"
INSIGHT_NEGATIVE = "Overall negative sentiment indicates concerning developments"
INSIGHT_DIVERSITY = "Good source diversity provides balanced perspective"
INSIGHT_VOLUME = "High article volume indicates significant public interest"
INSIGHT_MIXED = "Mixed sentiment suggests complex or controversial topic"

EXECUTIVE_SUMMARY_PROMPT = """You are an expert news analyst and presenter. Create a comprehensive summary of the following news articles about "{keyword}".

Articles analyzed: {article_count}
Time period: {time_period}

Headlines:
{headlines}

Please provide:
1. A compelling executive summary (2-3 sentences)
2. Key themes and patterns across the articles
3. Notable developments or trends
4. Potential implications or significance
5. A brief conclusion

Make it engaging and informative for a general audience.

Summary:"""

MAX_PROMPT_HEADLINES = 15


class Presentation(BaseModel):
    """Aggregated parts of a report, before request metadata is attached."""
    model_config = ConfigDict(frozen=True)

    summary: ExecutiveSummary
    statistics: Statistics
    sentiment: SentimentTrends
    insights: List[str]


# =============================================================================
# Pure aggregation helpers
# =============================================================================

def round_half_up(value: float) -> int:
    return int(value + 0.5)


def _source_name(article: Article) -> str:
    return article.source or "Unknown"


def dominant_label(distribution: Dict[SentimentLabel, int]) -> SentimentLabel:
    """First label in LABEL_ORDER holding the strict maximum; neutral if all empty."""
    best: Optional[SentimentLabel] = None
    for label in LABEL_ORDER:
        count = distribution.get(label, 0)
        if count > 0 and (best is None or count > distribution.get(best, 0)):
            best = label
    return best or SentimentLabel.NEUTRAL


def _top_counts(counter: Counter, limit: int = TOP_N) -> List[tuple]:
    # sorted() is stable and Counter keeps insertion order, so ties stay first-seen
    return sorted(counter.items(), key=lambda kv: kv[1], reverse=True)[:limit]


def calculate_statistics(articles: List[EnrichedArticle]) -> Statistics:
    total = len(articles)
    sources: Counter = Counter()
    authors: Counter = Counter()
    distribution = empty_distribution()
    score_sum = 0
    earliest: Optional[Article] = None
    latest: Optional[Article] = None

    for item in articles:
        article = item.article
        sources[_source_name(article)] += 1

        if item.sentiment is not None:
            distribution[item.sentiment.label] += 1
            score_sum += item.sentiment.score

        if earliest is None or article.published_ts < earliest.published_ts:
            earliest = article
        if latest is None or article.published_ts > latest.published_ts:
            latest = article

        if article.author:
            authors[article.author] += 1

    return Statistics(
        total_articles=total,
        sources=dict(sources),
        sentiment_distribution=distribution,
        average_sentiment_score=round_half_up(score_sum / total) if total else 0,
        date_range=DateRange(
            earliest=earliest.published_at if earliest else None,
            latest=latest.published_at if latest else None,
        ),
        top_sources=[SourceCount(source=s, count=c) for s, c in _top_counts(sources)],
        top_authors=[AuthorCount(author=a, count=c) for a, c in _top_counts(authors)],
    )


def trend_statements(by_date: Dict[str, int]) -> List[str]:
    """Compare the earliest and latest day averages (needs two distinct days)."""
    days = sorted(by_date)
    if len(days) < 2:
        return []

    first, last = by_date[days[0]], by_date[days[-1]]
    if last - first >= TREND_THRESHOLD:
        return [TREND_IMPROVED]
    if first - last >= TREND_THRESHOLD:
        return [TREND_DECLINED]
    return [TREND_STABLE]


def analyze_sentiment_trends(articles: List[EnrichedArticle]) -> SentimentTrends:
    total = len(articles)
    overall = empty_distribution()
    score_sum = 0
    per_source: Dict[str, Dict[str, Any]] = {}
    per_date: Dict[str, List[int]] = {}

    for item in articles:
        if item.sentiment is None:
            continue
        label, score = item.sentiment.label, item.sentiment.score
        score_sum += score
        overall[label] += 1

        bucket = per_source.setdefault(
            _source_name(item.article),
            {"total": 0, "count": 0, "distribution": empty_distribution()},
        )
        bucket["total"] += score
        bucket["count"] += 1
        bucket["distribution"][label] += 1

        day = item.article.published_at.date().isoformat()
        per_date.setdefault(day, []).append(score)

    by_source = {
        source: SentimentBreakdown(
            dominant=dominant_label(data["distribution"]),
            average_score=round_half_up(data["total"] / data["count"]),
            distribution=data["distribution"],
        )
        for source, data in per_source.items()
    }
    by_date = {day: round_half_up(sum(scores) / len(scores)) for day, scores in per_date.items()}

    return SentimentTrends(
        overall=SentimentBreakdown(
            dominant=dominant_label(overall),
            average_score=round_half_up(score_sum / total) if total else 0,
            distribution=overall,
        ),
        by_source=by_source,
        by_date=by_date,
        trends=trend_statements(by_date),
    )


def generate_insights(
    articles: List[EnrichedArticle],
    statistics: Statistics,
    sentiment: SentimentTrends,
) -> List[str]:
    insights = []

    if sentiment.overall.average_score > 70:
        insights.append(INSIGHT_POSITIVE)
    elif sentiment.overall.average_score < 30:
        insights.append(INSIGHT_NEGATIVE)

    if len(statistics.top_sources) > 3:
        insights.append(INSIGHT_DIVERSITY)

    if len(articles) > 15:
        insights.append(INSIGHT_VOLUME)

    if sum(1 for count in sentiment.overall.distribution.values() if count > 0) > 2:
        insights.append(INSIGHT_MIXED)

    return insights


def calculate_time_period(articles: List[EnrichedArticle]) -> str:
    if not articles:
        return "Unknown period"

    timestamps = [item.article.published_ts for item in articles]
    diff_days = math.ceil(abs(max(timestamps) - min(timestamps)) / 86400)

    if diff_days == 0:
        return "Same day"
    if diff_days == 1:
        return "1 day"
    if diff_days < 7:
        return f"{diff_days} days"
    if diff_days < 30:
        return f"{math.ceil(diff_days / 7)} weeks"
    return f"{math.ceil(diff_days / 30)} months"


def extract_key_themes(articles: List[EnrichedArticle]) -> List[str]:
    themes: List[str] = []
    for item in articles:
        text = f"{item.article.title} {item.article.text_body}".lower()
        for keyword in THEME_KEYWORDS:
            if keyword in text and keyword not in themes:
                themes.append(keyword)
    return themes


def template_executive_summary(articles: List[EnrichedArticle], keyword: str) -> str:
    source_count = len({_source_name(item.article) for item in articles})
    themes = extract_key_themes(articles)[:MAX_SUMMARY_THEMES]
    return (
        f'Analysis of {len(articles)} articles about "{keyword}" from {source_count} sources '
        f"over {calculate_time_period(articles)}. "
        f"The coverage spans various perspectives and developments, providing a comprehensive "
        f"view of current discussions and trends. "
        f"Key themes include {', '.join(themes) if themes else 'general news coverage'}."
    )


# =============================================================================
# Service
# =============================================================================

class PresenterService(LoggerMixin):
    def __init__(self, llm: Optional[LLMCompletionClient] = None):
        super().__init__()
        self.llm = llm

    async def _llm_executive_summary(self, articles: List[EnrichedArticle], keyword: str) -> ExecutiveSummary:
        headlines = "\n".join(
            f"- {item.article.title} ({_source_name(item.article)})"
            for item in articles[:MAX_PROMPT_HEADLINES]
        )
        prompt = EXECUTIVE_SUMMARY_PROMPT.format(
            keyword=keyword,
            article_count=len(articles),
            time_period=calculate_time_period(articles),
            headlines=headlines,
        )
        text = (await self.llm.complete(prompt, temperature=0.3)).strip()
        if not text:
            raise ModelError("Empty executive summary")
        return ExecutiveSummary(text=text, method=SummarySource.LLM)

    async def generate_executive_summary(self, articles: List[EnrichedArticle], keyword: str) -> ExecutiveSummary:
        async def _template(items: List[EnrichedArticle]) -> ExecutiveSummary:
            return ExecutiveSummary(text=template_executive_summary(items, keyword), method=SummarySource.TEMPLATE)

        async def _llm(items: List[EnrichedArticle]) -> ExecutiveSummary:
            return await self._llm_executive_summary(items, keyword)

        resolver = TwoStrategyResolver(primary=_llm if self.llm else None, fallback=_template, name="Presenter")
        outcome = await resolver.resolve(articles)
        if outcome.error is not None:
            self.logger.warning(f"[Presenter] Executive summary fell back to template: {outcome.error}")
        return outcome.value

    async def format_results(self, articles: List[EnrichedArticle], keyword: str) -> Presentation:
        self.logger.info(f"[Presenter] Formatting results for '{keyword}' with {len(articles)} articles")

        summary = await self.generate_executive_summary(articles, keyword)
        statistics = calculate_statistics(articles)
        sentiment = analyze_sentiment_trends(articles)
        insights = generate_insights(articles, statistics, sentiment)

        return Presentation(summary=summary, statistics=statistics, sentiment=sentiment, insights=insights)

    def formatting_self_test(self) -> bool:
        try:
            sample = EnrichedArticle.from_article(Article(
                id="health-check",
                title="Test article about technology",
                content="This is a test sentence for the formatting self test.",
                source="Health Check",
                published_at=datetime(2024, 1, 1),
                provider=NewsProvider.NEWSAPI,
            ))
            statistics = calculate_statistics([sample])
            trends = analyze_sentiment_trends([sample])
            generate_insights([sample], statistics, trends)
            return bool(template_executive_summary([sample], "test"))
        except Exception as e:
            self.logger.warning(f"[Presenter] Formatting self-test failed: {e}")
            return False

    async def health_check(self) -> Dict[str, Any]:
        checks = {"formatting": self.formatting_self_test(), "llm": False}
        if self.llm:
            checks["llm"] = await self.llm.ping()
        return checks


__all__ = [
    "Presentation",
    "PresenterService",
    "calculate_statistics",
    "analyze_sentiment_trends",
    "generate_insights",
    "calculate_time_period",
    "extract_key_themes",
    "sentiment_label_for_score",
    "dominant_label",
    "trend_statements",
]
