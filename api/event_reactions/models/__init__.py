from event_reactions.models.reaction import (
    Aggregates,
    ReactionRecord,
    ReactionSubmission,
    Sentiment,
    SentimentScores,
    SubmitReactionResponse,
)

__all__ = [
    "Aggregates",
    "ReactionRecord",
    "ReactionSubmission",
    "Sentiment",
    "SentimentScores",
    "SubmitReactionResponse",
]
