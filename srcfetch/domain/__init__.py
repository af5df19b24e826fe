"""
Domain layer for srcfetch.

Contains pure domain objects with no I/O or side effects:
- PackageSpec: What the user asked for
- ResolvedPackage: What the registry says about it
- PackageMetadata: What was fetched, stored next to the sources
- FetchResult / FetchSummary: What happened during a fetch
- ProgressMessage: A progress line and its level
"""

from .package import (
    PackageSpec,
    ResolvedPackage,
    PackageMetadata,
    SourceEntry,
    FetchResult,
)
from .operation import CloneOutcome, CloneResult, FetchSummary, MessageLevel, ProgressMessage

__all__ = [
    'PackageSpec',
    'ResolvedPackage',
    'PackageMetadata',
    'SourceEntry',
    'FetchResult',
    'CloneOutcome',
    'CloneResult',
    'FetchSummary',
    'MessageLevel',
    'ProgressMessage',
]
