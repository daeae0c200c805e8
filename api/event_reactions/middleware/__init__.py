"""Middleware package for the Event Reactions API."""

from event_reactions.middleware.cache_control import CacheControlMiddleware

__all__ = ["CacheControlMiddleware"]
