"""Event Reactions API: emoji reactions per event with sentiment aggregates."""

__version__ = "1.0.0"
