from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Sentiment(str, Enum):
    """Sentiment bucket derived from a reaction symbol."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ReactionRecord(BaseModel):
    """Persisted reaction. Immutable once written."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: Optional[int] = Field(default=None, description="Store-generated identifier")
    reaction: str = Field(description="Raw reaction symbol as submitted")
    sentiment: Sentiment = Field(description="Derived at write time")
    event_id: Optional[str] = Field(default=None, alias="eventId")
    user_id: Optional[str] = Field(default=None, alias="userId")
    timestamp: Optional[datetime] = Field(
        default=None, description="Creation time (UTC); assigned by the store if absent"
    )


class ReactionSubmission(BaseModel):
    """Request body for submitting a reaction.

    Every field is optional at the parsing stage so that missing and empty
    values are reported together by the service with a readable message.
    Unknown fields are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    reaction: Optional[str] = Field(default=None)
    event_id: Optional[str] = Field(default=None, alias="eventId")
    user_id: Optional[str] = Field(default=None, alias="userId")


class SentimentScores(BaseModel):
    """Three-way sentiment tally for one scope."""

    positive: int = 0
    negative: int = 0
    neutral: int = 0

    @classmethod
    def from_counts(cls, counts: Dict[Sentiment, int]) -> "SentimentScores":
        return cls(
            positive=counts.get(Sentiment.POSITIVE, 0),
            negative=counts.get(Sentiment.NEGATIVE, 0),
            neutral=counts.get(Sentiment.NEUTRAL, 0),
        )

    @property
    def total(self) -> int:
        return self.positive + self.negative + self.neutral


class SubmitReactionResponse(BaseModel):
    """Response for a successful reaction submission."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Reaction received"
    sentiment_scores: SentimentScores = Field(alias="sentimentScores")


class Aggregates(SentimentScores):
    """Sentiment totals plus zero-filled emoji counts for one scope."""

    model_config = ConfigDict(populate_by_name=True)

    emoji_counts: Dict[str, int] = Field(default_factory=dict, alias="emojiCounts")
