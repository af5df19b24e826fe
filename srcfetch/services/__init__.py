"""
Service layer for srcfetch.

Contains business logic that orchestrates domain objects and infrastructure:
- FetchService: Batch fetch, removal and index maintenance

Services are the primary API for commands to use.
"""

from .fetch_service import FetchService, FetchOptions

__all__ = [
    'FetchService',
    'FetchOptions',
]
