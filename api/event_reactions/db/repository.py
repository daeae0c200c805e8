"""
Reaction store for SQLite database operations.

This module provides a clean interface for all reaction-related database
operations, abstracting away SQL queries from the service layer. The store
is append-only: there is no update or delete.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Dict, List, Optional

from event_reactions.core.exceptions import StorageError
from event_reactions.db.database import ReactionDatabase
from event_reactions.metrics.reaction_metrics import instrument_store_operation
from event_reactions.models.reaction import ReactionRecord, Sentiment

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = "id, reaction, sentiment, event_id, user_id, timestamp"


def _to_storage_timestamp(value: Optional[datetime]) -> str:
    """Serialize to a fixed-width UTC ISO string so text order matches time order."""
    if value is None:
        value = datetime.now(timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="microseconds")


def _row_to_record(row: sqlite3.Row) -> ReactionRecord:
    return ReactionRecord(
        id=row["id"],
        reaction=row["reaction"],
        sentiment=Sentiment(row["sentiment"]),
        event_id=row["event_id"],
        user_id=row["user_id"],
        timestamp=datetime.fromisoformat(row["timestamp"]),
    )


class ReactionStore:
    """Repository for reaction database operations."""

    def __init__(self, database: ReactionDatabase):
        """
        Initialize the reaction store.

        Args:
            database: Initialized reaction database handle
        """
        self.db = database

    @instrument_store_operation("append")
    def append(self, record: ReactionRecord) -> ReactionRecord:
        """
        Persist a reaction record.

        Args:
            record: Record to store; ``id`` is ignored and ``timestamp``
                defaults to now (UTC)

        Returns:
            The stored record with its generated id and timestamp

        Raises:
            StorageError: If the database rejects or cannot perform the insert
        """
        timestamp = _to_storage_timestamp(record.timestamp)

        try:
            with self.db.writer() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO reactions (reaction, sentiment, event_id, user_id, timestamp)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        record.reaction,
                        record.sentiment.value,
                        record.event_id,
                        record.user_id,
                        timestamp,
                    ),
                )
                reaction_id = cursor.lastrowid
        except (sqlite3.Error, UnicodeEncodeError) as e:
            logger.error(f"Error storing reaction: {e}", exc_info=True)
            raise StorageError(str(e), operation="write") from e

        logger.debug(f"Stored reaction with ID: {reaction_id}")
        return record.model_copy(
            update={"id": reaction_id, "timestamp": datetime.fromisoformat(timestamp)}
        )

    @instrument_store_operation("count_by_sentiment")
    def count_by_sentiment(self, event_id: Optional[str] = None) -> Dict[Sentiment, int]:
        """
        Count committed reactions per sentiment.

        Args:
            event_id: Restrict to one event; None counts every record

        Returns:
            Mapping with all three sentiments present (zero when unseen)
        """
        query = "SELECT sentiment, COUNT(*) AS count FROM reactions"
        params: tuple = ()
        if event_id is not None:
            query += " WHERE event_id = ?"
            params = (event_id,)
        query += " GROUP BY sentiment"

        counts = {sentiment: 0 for sentiment in Sentiment}
        for row in self._fetch_all(query, params):
            counts[Sentiment(row["sentiment"])] = row["count"]
        return counts

    @instrument_store_operation("count_by_reaction_symbol")
    def count_by_reaction_symbol(self, event_id: Optional[str] = None) -> Dict[str, int]:
        """
        Count committed reactions per raw reaction symbol.

        Symbols with no records are absent from the result.

        Args:
            event_id: Restrict to one event; None counts every record

        Returns:
            Mapping of symbol to count
        """
        query = "SELECT reaction, COUNT(*) AS count FROM reactions"
        params: tuple = ()
        if event_id is not None:
            query += " WHERE event_id = ?"
            params = (event_id,)
        query += " GROUP BY reaction"

        return {row["reaction"]: row["count"] for row in self._fetch_all(query, params)}

    @instrument_store_operation("list_by_event")
    def list_by_event(self, event_id: str) -> List[ReactionRecord]:
        """Get all reactions for an event, newest first."""
        rows = self._fetch_all(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM reactions
            WHERE event_id = ?
            ORDER BY timestamp DESC, id DESC
            """,
            (event_id,),
        )
        return [_row_to_record(row) for row in rows]

    @instrument_store_operation("list_by_user")
    def list_by_user(self, user_id: str) -> List[ReactionRecord]:
        """Get all reactions made by a user, newest first."""
        rows = self._fetch_all(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM reactions
            WHERE user_id = ?
            ORDER BY timestamp DESC, id DESC
            """,
            (user_id,),
        )
        return [_row_to_record(row) for row in rows]

    def _fetch_all(self, query: str, params: tuple) -> List[sqlite3.Row]:
        try:
            with self.db.reader() as conn:
                return conn.execute(query, params).fetchall()
        except (sqlite3.Error, UnicodeEncodeError) as e:
            logger.error(f"Error reading reactions: {e}", exc_info=True)
            raise StorageError(str(e), operation="read") from e
