"""
Package domain objects for srcfetch.

These describe a package at each step of its trip from a user-typed
specifier to a source tree on disk. They carry no I/O; the on-disk
format is produced by ``to_dict`` and read back by ``from_dict``.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass(frozen=True)
class PackageSpec:
    """A package name with an optional explicit version."""
    name: str
    version: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name}@{self.version}" if self.version else self.name


@dataclass(frozen=True)
class ResolvedPackage:
    """
    Registry answer for a package.

    ``git_tag`` is a candidate reference derived from naming conventions;
    it may not exist in the repository.
    """
    name: str
    version: str
    repo_url: str
    git_tag: str
    repo_directory: Optional[str] = None

    @property
    def is_monorepo(self) -> bool:
        return bool(self.repo_directory)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'version': self.version,
            'repoUrl': self.repo_url,
            'repoDirectory': self.repo_directory,
            'gitTag': self.git_tag,
        }


@dataclass(frozen=True)
class PackageMetadata:
    """Record of the last successful fetch, stored beside the sources."""
    name: str
    version: str
    fetched_at: str
    repo_directory: Optional[str] = None
    repo_url: Optional[str] = None
    reference: Optional[str] = None  # None when the default branch was used
    commit: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'version': self.version,
            'repoDirectory': self.repo_directory,
            'repoUrl': self.repo_url,
            'reference': self.reference,
            'commit': self.commit,
            'fetchedAt': self.fetched_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackageMetadata':
        """Build from a stored dict. Raises KeyError/TypeError when malformed."""
        name = data['name']
        version = data['version']
        if not isinstance(name, str) or not isinstance(version, str):
            raise TypeError("name and version must be strings")
        return cls(
            name=name,
            version=version,
            fetched_at=data.get('fetchedAt', ''),
            repo_directory=data.get('repoDirectory'),
            repo_url=data.get('repoUrl'),
            reference=data.get('reference'),
            commit=data.get('commit'),
        )


@dataclass(frozen=True)
class SourceEntry:
    """One package as listed in the aggregate index."""
    name: str
    version: str
    path: str
    fetched_at: str = ""
    repo_directory: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'version': self.version,
            'path': self.path,
            'repoDirectory': self.repo_directory,
            'fetchedAt': self.fetched_at,
        }


@dataclass
class FetchResult:
    """
    Outcome of fetching one requested package.

    ``error`` can be set on a successful result; it then holds a
    non-fatal warning (e.g. the tag was missing and the default branch
    was cloned instead).
    """
    package: str
    version: str = ""
    path: str = ""
    success: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'package': self.package,
            'version': self.version,
            'path': self.path,
            'success': self.success,
        }
        if self.error:
            result['error'] = self.error
        return result
