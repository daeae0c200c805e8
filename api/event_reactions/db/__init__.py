from event_reactions.db.database import ReactionDatabase
from event_reactions.db.repository import ReactionStore

__all__ = ["ReactionDatabase", "ReactionStore"]
