# src/news_briefing/services/sentiment_analyzer.py
"""
Sentiment Analyzer
Scores every article on a 0-100 scale (0 = very negative, 100 = very positive)

Strategies (per article, independently):
1. LLM analysis returning JSON
2. Lexical scoring against fixed news vocabularies
3. Keyword containment scoring (only if 2 raised)
"""

import json
import re
from typing import Any, Dict, List, Optional

from src.helpers.llm_helper import LLMCompletionClient
from src.news_briefing.schemas.enrichment import (
    Confidence,
    EnrichedArticle,
    SentimentLabel,
    SentimentMethod,
    SentimentResult,
)
from src.news_briefing.services.strategy import TwoStrategyResolver, run_per_item
from src.utils.logger.custom_logging import LoggerMixin


POSITIVE_WORDS = frozenset([
    "breakthrough", "innovation", "success", "growth", "improvement", "recovery",
    "positive", "optimistic", "hopeful", "promising", "excellent", "outstanding",
    "achievement", "victory", "win", "gain", "profit", "surge", "rise", "boost",
])

NEGATIVE_WORDS = frozenset([
    "crisis", "disaster", "failure", "loss", "decline", "drop", "fall", "crash",
    "negative", "pessimistic", "worried", "concerned", "fear", "anxiety",
    "problem", "issue", "challenge", "threat", "risk", "danger", "conflict",
])

# Last-resort vocabularies, matched as substrings
KEYWORD_POSITIVE = ("good", "great", "excellent", "positive", "success", "growth")
KEYWORD_NEGATIVE = ("bad", "terrible", "negative", "failure", "loss", "crisis")
KEYWORD_STEP = 10

SENTIMENT_PROMPT = (
    "You are an expert sentiment analyst. Analyze the sentiment of the following news "
    "article and provide a detailed analysis in JSON format with keys: sentiment "
    "(positive/negative/neutral/mixed), score (0-100), confidence (high/medium/low), "
    "indicators (array), explanation (string).\n\n"
    "Title: {title}\n"
    "Summary: {summary}\n"
    "Content: {content}"
)

_TOKEN = re.compile(r"[^\W_]+")


def sentiment_label_for_score(score: float) -> SentimentLabel:
    if score >= 70:
        return SentimentLabel.POSITIVE
    if score >= 40:
        return SentimentLabel.NEUTRAL
    if score >= 20:
        return SentimentLabel.MIXED
    return SentimentLabel.NEGATIVE


def tokenize(text: str) -> List[str]:
    """Lower-cased word tokens (letters and digits)."""
    return _TOKEN.findall((text or "").lower())


def lexical_sentiment(text: str) -> SentimentResult:
    tokens = tokenize(text)
    positive = [t for t in tokens if t in POSITIVE_WORDS]
    negative = [t for t in tokens if t in NEGATIVE_WORDS]

    relevant = len(positive) + len(negative)
    if relevant:
        normalized = (len(positive) - len(negative)) / relevant * 50 + 50
    else:
        normalized = 50.0

    return SentimentResult(
        label=sentiment_label_for_score(normalized),
        score=int(normalized + 0.5),
        confidence=Confidence.MEDIUM,
        method=SentimentMethod.LEXICAL,
        indicators=sorted(set(positive) | set(negative)),
        explanation=f"Lexical analysis based on {len(tokens)} tokens ({len(positive)} positive, {len(negative)} negative)",
    )


def keyword_sentiment(text: str) -> SentimentResult:
    lowered = (text or "").lower()
    score = 50
    for word in KEYWORD_POSITIVE:
        if word in lowered:
            score += KEYWORD_STEP
    for word in KEYWORD_NEGATIVE:
        if word in lowered:
            score -= KEYWORD_STEP
    score = max(0, min(100, score))

    return SentimentResult(
        label=sentiment_label_for_score(score),
        score=score,
        confidence=Confidence.LOW,
        method=SentimentMethod.KEYWORD,
        explanation="Fallback keyword-based analysis",
    )


def parse_llm_sentiment(text: str) -> SentimentResult:
    """
    Parse a model reply into a SentimentResult.

    The JSON object is cut from the first '{' to the last '}'. Anything
    unparseable or out of range degrades to neutral/50/low with the raw
    reply kept as the explanation.
    """
    try:
        start, end = text.index("{"), text.rindex("}")
        data = json.loads(text[start:end + 1])
        if not isinstance(data, dict):
            raise ValueError("not an object")

        label = SentimentLabel(str(data.get("sentiment", "")).strip().lower())
        score = int(round(float(data.get("score"))))
        if not 0 <= score <= 100:
            raise ValueError(f"score out of range: {score}")

        try:
            confidence = Confidence(str(data.get("confidence", "")).strip().lower())
        except ValueError:
            confidence = Confidence.MEDIUM

        indicators = data.get("indicators") or []
        if not isinstance(indicators, list):
            indicators = [indicators]

        explanation = data.get("explanation")
        return SentimentResult(
            label=label,
            score=score,
            confidence=confidence,
            method=SentimentMethod.LLM,
            indicators=[str(i) for i in indicators],
            explanation=str(explanation) if explanation is not None else None,
        )
    except (ValueError, TypeError):
        return SentimentResult(
            label=SentimentLabel.NEUTRAL,
            score=50,
            confidence=Confidence.LOW,
            method=SentimentMethod.LLM,
            explanation=text,
        )


class SentimentAnalyzer(LoggerMixin):
    def __init__(self, llm: Optional[LLMCompletionClient] = None, concurrency: int = 5):
        super().__init__()
        self.llm = llm
        self.concurrency = concurrency
        self.resolver: TwoStrategyResolver[EnrichedArticle, SentimentResult] = TwoStrategyResolver(
            primary=self._llm_sentiment if llm else None,
            fallback=self._lexical_sentiment,
            name="Sentiment",
        )

    @staticmethod
    def analysis_text(item: EnrichedArticle) -> str:
        """Title plus the full article body; the summary is only given to the model."""
        return f"{item.article.title} {item.article.text_body}"

    async def _llm_sentiment(self, item: EnrichedArticle) -> SentimentResult:
        prompt = SENTIMENT_PROMPT.format(
            title=item.article.title,
            summary=item.summary or "",
            content=item.article.text_body,
        )
        reply = await self.llm.complete(prompt, temperature=0.1)
        return parse_llm_sentiment(reply.strip())

    async def _lexical_sentiment(self, item: EnrichedArticle) -> SentimentResult:
        return lexical_sentiment(self.analysis_text(item))

    async def analyze_article(self, item: EnrichedArticle) -> EnrichedArticle:
        try:
            outcome = await self.resolver.resolve(item)
        except Exception as e:
            self.logger.warning(f"[Sentiment] Lexical analysis failed for '{item.article.title[:60]}': {e}")
            return item.model_copy(update={
                "sentiment": keyword_sentiment(self.analysis_text(item)),
                "sentiment_error": str(e),
            })

        update: Dict[str, Any] = {"sentiment": outcome.value}
        if outcome.error is not None:
            update["sentiment_error"] = outcome.error_message
        return item.model_copy(update=update)

    async def analyze_articles(self, items: List[EnrichedArticle]) -> List[EnrichedArticle]:
        """Score every article; output order matches input order."""
        self.logger.info(f"[Sentiment] Analyzing {len(items)} articles (llm={'on' if self.llm else 'off'})")
        return await run_per_item(items, self.analyze_article, self.concurrency)

    def lexical_self_test(self) -> bool:
        try:
            return len(tokenize("This is a test sentence")) > 0
        except Exception:
            return False

    async def health_check(self) -> Dict[str, Any]:
        checks: Dict[str, Any] = {"lexical": self.lexical_self_test(), "llm": False}
        if self.llm:
            checks["llm"] = await self.llm.ping()
        checks["healthy"] = checks["lexical"] or checks["llm"]
        return checks
