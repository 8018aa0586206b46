"""
Module: handlers
Description: Package initialization for API endpoint handlers.

This package contains FastAPI route handlers for FormRelay:
- submissions: Form intake and status lookup endpoints

Handlers use dependency injection for the queue, the status store
and the metrics client.
"""

__all__ = []
