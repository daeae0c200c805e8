"""Centralized metrics module for Prometheus instrumentation.

Usage:
    from event_reactions.metrics.reaction_metrics import reactions_submitted_total
    from event_reactions.metrics.reaction_metrics import instrument_store_operation
"""

from event_reactions.metrics import reaction_metrics

__all__ = ["reaction_metrics"]
