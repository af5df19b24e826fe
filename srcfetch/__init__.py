"""
srcfetch - Fetch the source code of npm packages for coding agents.

Quick Start:
    from srcfetch import FetchService, FetchOptions

    service = FetchService("/path/to/project")
    for message in service.fetch_packages(["zod", "react@18.2.0"], FetchOptions()):
        print(message)

    for result in service.last_result.results:
        print(result.package, result.success, result.path)
"""

__version__ = "0.1.0"

from .domain import FetchResult, PackageMetadata, PackageSpec, ResolvedPackage, SourceEntry
from .package_spec import parse_package_spec
from .registry import resolve_package
from .services import FetchOptions, FetchService
from .store import SourceStore

__all__ = [
    "__version__",
    "FetchOptions",
    "FetchResult",
    "FetchService",
    "PackageMetadata",
    "PackageSpec",
    "ResolvedPackage",
    "SourceEntry",
    "SourceStore",
    "parse_package_spec",
    "resolve_package",
]
