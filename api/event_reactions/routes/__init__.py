"""
Routes package for the Event Reactions API.

- reactions: reaction submission, aggregates and listings
- health: liveness, readiness and resource health checks
"""

from event_reactions.routes import health, reactions

__all__ = ["health", "reactions"]
