"""
Unit tests for the summarize and sentiment stages

Covers the primary/fallback resolution per article, the extractive and
lexical fallbacks, and that one failing article never affects the others.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, patch

from src.news_briefing.exceptions import ModelError
from src.news_briefing.schemas.enrichment import (
    Confidence,
    SentimentLabel,
    SentimentMethod,
    SummaryMethod,
)
from src.news_briefing.services import sentiment_analyzer as sentiment_module
from src.news_briefing.services.sentiment_analyzer import (
    SentimentAnalyzer,
    keyword_sentiment,
    lexical_sentiment,
    parse_llm_sentiment,
    sentiment_label_for_score,
)
from src.news_briefing.services.strategy import TwoStrategyResolver, run_per_item
from src.news_briefing.services.summarizer import (
    SummarizerService,
    extractive_summary,
    template_summary,
)


# ============================================================================
# STRATEGY RESOLVER
# ============================================================================

class TestTwoStrategyResolver:

    @pytest.mark.asyncio
    async def test_primary_success(self):
        resolver = TwoStrategyResolver(primary=AsyncMock(return_value="p"), fallback=AsyncMock(return_value="f"))
        outcome = await resolver.resolve("item")
        assert outcome.value == "p"
        assert outcome.used_fallback is False
        assert outcome.error is None

    @pytest.mark.asyncio
    async def test_primary_failure_uses_fallback(self):
        error = ModelError("down")
        resolver = TwoStrategyResolver(primary=AsyncMock(side_effect=error), fallback=AsyncMock(return_value="f"))
        outcome = await resolver.resolve("item")
        assert outcome.value == "f"
        assert outcome.used_fallback is True
        assert outcome.error is error

    @pytest.mark.asyncio
    async def test_fallback_error_propagates(self):
        resolver = TwoStrategyResolver(
            primary=AsyncMock(side_effect=ModelError("down")),
            fallback=AsyncMock(side_effect=RuntimeError("also down")),
        )
        with pytest.raises(RuntimeError):
            await resolver.resolve("item")

    @pytest.mark.asyncio
    async def test_run_per_item_preserves_order(self):
        async def worker(n):
            await asyncio.sleep(0.01 * (5 - n))
            return n * 10

        assert await run_per_item([1, 2, 3, 4], worker, concurrency=2) == [10, 20, 30, 40]


# ============================================================================
# SUMMARIZER
# ============================================================================

class TestExtractiveSummary:

    def test_first_three_sentences(self):
        content = "First sentence is here. Second sentence is here! Third sentence is here? Fourth sentence is here."
        assert extractive_summary("T", content) == (
            "First sentence is here. Second sentence is here. Third sentence is here."
        )

    def test_short_fragments_skipped(self):
        content = "Hi. OK. This one is long enough. Yes."
        assert extractive_summary("T", content) == "This one is long enough."

    def test_no_usable_content(self):
        assert extractive_summary("Budget vote", "") == "Article about Budget vote. No detailed content available."

    def test_template_names_source_date_title(self, make_article):
        text = template_summary(make_article(title="Budget vote", source="AP"))
        assert text.startswith("Article from AP published on 2024-03-01 about Budget vote.")


class TestSummarizerService:

    @pytest.mark.asyncio
    async def test_llm_summary(self, make_article):
        llm = AsyncMock()
        llm.complete = AsyncMock(return_value="  A short summary.  ")
        service = SummarizerService(llm)

        [item] = await service.summarize_articles([make_article()])

        assert item.summary == "A short summary."
        assert item.summary_method == SummaryMethod.LLM
        assert item.summary_error is None

    @pytest.mark.asyncio
    async def test_no_llm_goes_extractive_without_error(self, make_article):
        [item] = await SummarizerService(None).summarize_articles([make_article()])
        assert item.summary_method == SummaryMethod.EXTRACTIVE
        assert item.summary_error is None

    @pytest.mark.asyncio
    async def test_single_failure_is_isolated(self, make_article):
        articles = [make_article(title=f"Story {i}") for i in range(5)]

        async def complete(prompt, **kwargs):
            if "Story 2" in prompt:
                raise ModelError("timeout")
            return "LLM summary."

        llm = AsyncMock()
        llm.complete = AsyncMock(side_effect=complete)
        results = await SummarizerService(llm).summarize_articles(articles)

        assert [r.article for r in results] == articles
        methods = [r.summary_method for r in results]
        assert methods == [SummaryMethod.LLM] * 2 + [SummaryMethod.EXTRACTIVE] + [SummaryMethod.LLM] * 2
        assert results[2].summary_error == "timeout"
        assert all(r.summary_error is None for i, r in enumerate(results) if i != 2)

    @pytest.mark.asyncio
    async def test_empty_llm_output_falls_back(self, make_article):
        llm = AsyncMock()
        llm.complete = AsyncMock(return_value="   ")
        [item] = await SummarizerService(llm).summarize_articles([make_article()])
        assert item.summary_method == SummaryMethod.EXTRACTIVE
        assert item.summary_error

    @pytest.mark.asyncio
    async def test_template_when_extractive_raises(self, make_article, failing_llm):
        service = SummarizerService(failing_llm)
        with patch(
            "src.news_briefing.services.summarizer.extractive_summary",
            side_effect=RuntimeError("broken"),
        ):
            [item] = await service.summarize_articles([make_article(source="AP")])

        assert item.summary_method == SummaryMethod.TEMPLATE
        assert item.summary.startswith("Article from AP")
        assert item.summary_error == "broken"


# ============================================================================
# SENTIMENT
# ============================================================================

class TestSentimentScoring:

    @pytest.mark.parametrize("score,label", [
        (70, SentimentLabel.POSITIVE),
        (69, SentimentLabel.NEUTRAL),
        (40, SentimentLabel.NEUTRAL),
        (39, SentimentLabel.MIXED),
        (20, SentimentLabel.MIXED),
        (19, SentimentLabel.NEGATIVE),
    ])
    def test_label_thresholds(self, score, label):
        assert sentiment_label_for_score(score) == label

    def test_lexical_all_positive(self):
        result = lexical_sentiment("Breakthrough brings growth and profit")
        assert result.score == 100
        assert result.label == SentimentLabel.POSITIVE
        assert result.method == SentimentMethod.LEXICAL
        assert result.confidence == Confidence.MEDIUM

    def test_lexical_balanced(self):
        # 1 positive, 1 negative -> 50
        assert lexical_sentiment("Recovery after the crash").score == 50

    def test_lexical_mostly_negative(self):
        # 1 positive, 3 negative -> (1-3)/4*50+50 = 25
        result = lexical_sentiment("Growth fears: crisis, decline and conflict")
        assert result.score == 25
        assert result.label == SentimentLabel.MIXED

    def test_lexical_matches_whole_words_only(self):
        # "rises" and "winning" are not vocabulary tokens
        assert lexical_sentiment("Prices rises, team winning").score == 50

    def test_keyword_fallback_clamped(self):
        result = keyword_sentiment("good great excellent positive success growth")
        assert result.score == 100
        assert result.method == SentimentMethod.KEYWORD
        assert result.confidence == Confidence.LOW

    def test_keyword_fallback_substring(self):
        assert keyword_sentiment("badly losses").score == 30


class TestParseLLMSentiment:

    def test_json_inside_prose(self):
        text = 'Here you go: {"sentiment": "positive", "score": 82, "confidence": "high", "indicators": ["gain"], "explanation": "ok"} done'
        result = parse_llm_sentiment(text)
        assert result.label == SentimentLabel.POSITIVE
        assert result.score == 82
        assert result.confidence == Confidence.HIGH
        assert result.indicators == ["gain"]
        assert result.method == SentimentMethod.LLM

    @pytest.mark.parametrize("text", [
        "no json here",
        '{"sentiment": "ecstatic", "score": 90}',
        '{"sentiment": "positive", "score": 140}',
        '{"sentiment": "positive", "score": "lots"}',
    ])
    def test_unusable_reply_degrades_to_neutral(self, text):
        result = parse_llm_sentiment(text)
        assert result.label == SentimentLabel.NEUTRAL
        assert result.score == 50
        assert result.confidence == Confidence.LOW
        assert result.method == SentimentMethod.LLM
        assert result.explanation == text


class TestSentimentAnalyzer:

    @pytest.mark.asyncio
    async def test_model_failure_uses_lexical(self, make_enriched, failing_llm):
        item = make_enriched(title="Breakthrough", content="Record growth")
        [result] = await SentimentAnalyzer(failing_llm).analyze_articles([item])

        assert result.sentiment.method == SentimentMethod.LEXICAL
        assert result.sentiment_error == "model unavailable"
        assert result.article == item.article

    @pytest.mark.asyncio
    async def test_lexical_scores_full_body_not_summary(self, make_enriched):
        body = (
            "Officials met on Monday. The agenda was published. Talks lasted hours. "
            "Analysts warned of a crisis and a decline. "
            "Fear of loss, failure and conflict grew."
        )
        item = make_enriched(title="Update", content=body)
        [summarized] = await SummarizerService(None).summarize_articles([item.article])
        assert "crisis" not in summarized.summary

        [result] = await SentimentAnalyzer(None).analyze_articles([summarized])

        assert result.sentiment.score == 0
        assert result.sentiment.label == SentimentLabel.NEGATIVE

    @pytest.mark.asyncio
    async def test_single_model_failure_is_isolated(self, make_enriched):
        items = [make_enriched(title=f"Story {i}") for i in range(5)]

        async def complete(prompt, **kwargs):
            if "Story 2" in prompt:
                raise ModelError("timeout")
            return '{"sentiment": "positive", "score": 80, "confidence": "high"}'

        llm = AsyncMock()
        llm.complete = AsyncMock(side_effect=complete)
        results = await SentimentAnalyzer(llm).analyze_articles(items)

        assert [r.article for r in results] == [i.article for i in items]
        methods = [r.sentiment.method for r in results]
        assert methods == [SentimentMethod.LLM] * 2 + [SentimentMethod.LEXICAL] + [SentimentMethod.LLM] * 2
        assert results[2].sentiment_error == "timeout"
        assert all(r.sentiment_error is None for i, r in enumerate(results) if i != 2)

    @pytest.mark.asyncio
    async def test_keyword_fallback_when_lexical_raises(self, make_enriched, failing_llm):
        item = make_enriched(title="Great success")
        with patch.object(sentiment_module, "lexical_sentiment", side_effect=RuntimeError("tokenizer")):
            [result] = await SentimentAnalyzer(failing_llm).analyze_articles([item])

        assert result.sentiment.method == SentimentMethod.KEYWORD
        assert result.sentiment.score == 70
        assert result.sentiment_error == "tokenizer"

    @pytest.mark.asyncio
    async def test_health_check(self, failing_llm):
        checks = await SentimentAnalyzer(failing_llm).health_check()
        assert checks == {"lexical": True, "llm": False, "healthy": True}
