"""Tests for the emoji vocabulary and sentiment classification rule."""

import pytest
from event_reactions.models.reaction import Sentiment
from event_reactions.services import sentiment
from event_reactions.services.sentiment import (
    EMOJI_VOCABULARY,
    NEGATIVE_EMOJIS,
    POSITIVE_EMOJIS,
    classify,
)


@pytest.mark.unit
class TestClassify:
    """classify() maps symbols to positive, negative or neutral."""

    @pytest.mark.parametrize("symbol", sorted(POSITIVE_EMOJIS))
    def test_positive_set(self, symbol):
        assert classify(symbol) == Sentiment.POSITIVE

    @pytest.mark.parametrize("symbol", sorted(NEGATIVE_EMOJIS))
    def test_negative_set(self, symbol):
        assert classify(symbol) == Sentiment.NEGATIVE

    @pytest.mark.parametrize(
        "symbol",
        [
            "",
            " ",
            "hello",
            "\U0001f929",  # 🤩 is in the vocabulary but carries no sentiment
            "\U0001f984",  # 🦄
            "\u2764",  # ❤ without variation selector
            "\U0001f44d\U0001f3fd",  # 👍🏽 skin tone variant
            "\U0001f44d\U0001f44d",  # two symbols
            "\u200b",  # zero-width space
        ],
    )
    def test_everything_else_is_neutral(self, symbol):
        assert classify(symbol) == Sentiment.NEUTRAL

    @pytest.mark.parametrize("value", [None, 1, 3.5, ["\U0001f44d"]])
    def test_non_string_is_neutral(self, value):
        assert classify(value) == Sentiment.NEUTRAL

    def test_deterministic(self):
        assert {classify("\U0001f621") for _ in range(5)} == {Sentiment.NEGATIVE}

    def test_positive_wins_when_symbol_in_both_sets(self, monkeypatch):
        monkeypatch.setattr(
            sentiment, "NEGATIVE_EMOJIS", NEGATIVE_EMOJIS | {"\U0001f44d"}
        )
        assert classify("\U0001f44d") == Sentiment.POSITIVE


@pytest.mark.unit
class TestVocabulary:
    """The fixed vocabulary reported by the aggregate endpoint."""

    def test_has_ten_distinct_symbols(self):
        assert len(EMOJI_VOCABULARY) == 10
        assert len(set(EMOJI_VOCABULARY)) == 10

    def test_declared_order(self):
        assert EMOJI_VOCABULARY[0] == "\U0001f44d"
        assert EMOJI_VOCABULARY[1] == "\U0001f44e"
        assert EMOJI_VOCABULARY[-1] == "\U0001f60d"

    def test_sentiment_sets_are_disjoint(self):
        assert POSITIVE_EMOJIS.isdisjoint(NEGATIVE_EMOJIS)

    def test_vocabulary_sentiments(self):
        by_sentiment = {s: 0 for s in Sentiment}
        for symbol in EMOJI_VOCABULARY:
            by_sentiment[classify(symbol)] += 1

        assert by_sentiment == {
            Sentiment.POSITIVE: 5,
            Sentiment.NEGATIVE: 4,
            Sentiment.NEUTRAL: 1,
        }
