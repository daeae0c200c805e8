"""Emoji vocabulary and sentiment classification for reactions."""

from typing import Any, Tuple

from event_reactions.models.reaction import Sentiment

# Symbols always reported by the aggregate endpoint, in response order
EMOJI_VOCABULARY: Tuple[str, ...] = (
    "\U0001f44d",  # 👍
    "\U0001f44e",  # 👎
    "\u2764\ufe0f",  # ❤️
    "\U0001f92e",  # 🤮
    "\U0001f929",  # 🤩
    "\U0001f621",  # 😡
    "\U0001f601",  # 😁
    "\U0001f62d",  # 😭
    "\U0001f44f",  # 👏
    "\U0001f60d",  # 😍
)

POSITIVE_EMOJIS: frozenset[str] = frozenset(
    {
        "\u2764\ufe0f",  # ❤️
        "\U0001f44d",  # 👍
        "\U0001f60a",  # 😊
        "\U0001f601",  # 😁
        "\U0001f60d",  # 😍
        "\U0001f44f",  # 👏
    }
)

NEGATIVE_EMOJIS: frozenset[str] = frozenset(
    {
        "\U0001f621",  # 😡
        "\U0001f44e",  # 👎
        "\U0001f62d",  # 😭
        "\U0001f92e",  # 🤮
    }
)


def classify(symbol: Any) -> Sentiment:
    """Map a reaction symbol to its sentiment bucket.

    Exact membership, positive set first. Anything unrecognized,
    including non-strings, is neutral.
    """
    if not isinstance(symbol, str):
        return Sentiment.NEUTRAL
    if symbol in POSITIVE_EMOJIS:
        return Sentiment.POSITIVE
    if symbol in NEGATIVE_EMOJIS:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL
