"""
Reaction service for the Event Reactions API.

This service handles all reaction-related business logic:
- Validating submissions and query identifiers
- Classifying and persisting reactions
- Computing sentiment totals and zero-filled emoji counts
- Listing reactions for a user or an event

It holds no cached state: every aggregate is recomputed from the store.
Two concurrent submissions may each return a tally that misses the other's
in-flight write; no lock spans "append + recount".
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from event_reactions.core.exceptions import ValidationError
from event_reactions.db.repository import ReactionStore
from event_reactions.metrics.reaction_metrics import (
    reaction_validation_failures_total,
    reactions_submitted_total,
)
from event_reactions.models.reaction import (
    Aggregates,
    ReactionRecord,
    ReactionSubmission,
    SentimentScores,
)
from event_reactions.services.sentiment import EMOJI_VOCABULARY, classify
from fastapi import Request

logger = logging.getLogger(__name__)


def _is_missing(value: Optional[str]) -> bool:
    return value is None or value == ""


def _is_encodable(value: str) -> bool:
    """False for text SQLite cannot store, such as lone surrogates from JSON escapes."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _join_fields(fields: Sequence[str]) -> str:
    if len(fields) == 1:
        return fields[0]
    return f"{', '.join(fields[:-1])} and {fields[-1]}"


class ReactionService:
    """Service responsible for reaction ingestion and aggregation."""

    def __init__(self, store: ReactionStore, scoping_enabled: bool = True):
        """Initialize the reaction service.

        Args:
            store: Reaction store handle (owned by the caller)
            scoping_enabled: When True, reactions must carry eventId and userId
                and counts are computed per event. When False, reactions are
                global and counts span every record.
        """
        self.store = store
        self.scoping_enabled = scoping_enabled

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _require_fields(
        self,
        operation: str,
        fields: Dict[str, Optional[str]],
        optional: Optional[Dict[str, Optional[str]]] = None,
    ) -> None:
        """Check every field in one pass.

        Missing required fields are reported first, all of them in one message.
        Any supplied value, required or optional, that is not encodable as
        UTF-8 is reported otherwise.
        """
        missing = [name for name, value in fields.items() if _is_missing(value)]
        if missing:
            verb = "is" if len(missing) == 1 else "are"
            self._reject(operation, missing, f"{verb} required")

        supplied = {**fields, **(optional or {})}
        unencodable = [
            name
            for name, value in supplied.items()
            if value is not None and not _is_encodable(value)
        ]
        if unencodable:
            self._reject(operation, unencodable, "must be valid UTF-8 text")

    def _reject(self, operation: str, fields: List[str], reason: str) -> None:
        reaction_validation_failures_total.labels(operation=operation).inc()
        raise ValidationError(
            f"{_join_fields(fields)} {reason}",
            field=fields[0] if len(fields) == 1 else None,
        )

    def _validate_submission(self, submission: ReactionSubmission) -> None:
        ids = {"eventId": submission.event_id, "userId": submission.user_id}
        if self.scoping_enabled:
            self._require_fields("submit", {"reaction": submission.reaction, **ids})
        else:
            self._require_fields("submit", {"reaction": submission.reaction}, optional=ids)

    def _scope(self, event_id: Optional[str]) -> Optional[str]:
        """Event to filter counts by; None means every record."""
        return event_id if self.scoping_enabled else None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def submit_reaction(self, submission: ReactionSubmission) -> SentimentScores:
        """Store a reaction and return the updated sentiment tally for its scope.

        The returned tally includes the reaction just written.

        Raises:
            ValidationError: If a required field is missing or empty, or a
                value is not valid UTF-8 text (nothing is written)
            StorageError: If the store fails (the write may or may not have
                been applied)
        """
        self._validate_submission(submission)

        sentiment = classify(submission.reaction)
        record = ReactionRecord(
            reaction=submission.reaction,
            sentiment=sentiment,
            event_id=submission.event_id or None,
            user_id=submission.user_id or None,
        )

        stored = await asyncio.to_thread(self.store.append, record)
        reactions_submitted_total.labels(sentiment=sentiment.value).inc()
        logger.info(
            f"Stored reaction {stored.id} (sentiment={sentiment.value}, "
            f"event={stored.event_id})"
        )

        counts = await asyncio.to_thread(
            self.store.count_by_sentiment, self._scope(stored.event_id)
        )
        return SentimentScores.from_counts(counts)

    async def get_aggregates(self, event_id: Optional[str] = None) -> Aggregates:
        """Compute sentiment totals and emoji counts for a scope.

        ``emojiCounts`` always holds exactly the fixed vocabulary, in order.
        Observed symbols outside the vocabulary are left out of it but still
        contribute to the sentiment totals. The two figures come from separate
        queries and are not a consistent snapshot under concurrent writes.

        Raises:
            ValidationError: If scoping is enabled and event_id is missing
        """
        if self.scoping_enabled:
            self._require_fields("aggregates", {"eventId": event_id})

        scope = self._scope(event_id)
        observed = await asyncio.to_thread(self.store.count_by_reaction_symbol, scope)
        emoji_counts = {emoji: observed.get(emoji, 0) for emoji in EMOJI_VOCABULARY}

        counts = await asyncio.to_thread(self.store.count_by_sentiment, scope)
        totals = SentimentScores.from_counts(counts)

        return Aggregates(
            positive=totals.positive,
            negative=totals.negative,
            neutral=totals.neutral,
            emoji_counts=emoji_counts,
        )

    async def list_for_user(self, user_id: Optional[str]) -> List[ReactionRecord]:
        """Get all reactions made by a user, newest first."""
        self._require_fields("list_user", {"userId": user_id})
        return await asyncio.to_thread(self.store.list_by_user, user_id)

    async def list_for_event(self, event_id: Optional[str]) -> List[ReactionRecord]:
        """Get all reactions for an event, newest first."""
        self._require_fields("list_event", {"eventId": event_id})
        return await asyncio.to_thread(self.store.list_by_event, event_id)


def get_reaction_service(request: Request) -> ReactionService:
    """Get the reaction service from the request state."""
    return request.app.state.reaction_service
