#!/usr/bin/env python3
"""
Resolve npm packages to a repository URL and a candidate git tag.
"""

import re
from typing import Any, Dict, Optional, Tuple

from .config import logger
from .domain.package import ResolvedPackage
from .exit_codes import ResolutionError
from .infra.registry_client import RegistryClient

HOST_SHORTCUTS = {
    'github': 'github.com',
    'gitlab': 'gitlab.com',
    'bitbucket': 'bitbucket.org',
}

# owner/repo with no scheme or host
_BARE_SHORTHAND = re.compile(r'^[\w.-]+/[\w.-]+$')
# git@host:owner/repo
_SCP_LIKE = re.compile(r'^[\w.-]+@([\w.-]+):(.+)$')


def normalize_repo_url(url: str) -> Optional[str]:
    """
    Turn the many forms of a package.json repository URL into an https
    clone URL.

    Handles ``github:owner/repo`` style shortcuts, bare ``owner/repo``,
    ``git+https://``, ``git://``, ``git+ssh://git@host/...`` and
    ``git@host:owner/repo``. Returns None for empty input.
    """
    if not url or not isinstance(url, str):
        return None

    url = url.strip()
    # Fragments name a committish, never part of the clone URL
    url = url.split('#', 1)[0]
    if not url:
        return None

    for prefix, host in HOST_SHORTCUTS.items():
        if url.startswith(f"{prefix}:"):
            url = f"https://{host}/{url[len(prefix) + 1:]}"
            break
    else:
        if _BARE_SHORTHAND.match(url):
            url = f"https://github.com/{url}"

    if url.startswith('git+'):
        url = url[len('git+'):]

    scp = _SCP_LIKE.match(url)
    if scp and '://' not in url:
        url = f"https://{scp.group(1)}/{scp.group(2)}"
    elif url.startswith('ssh://'):
        url = 'https://' + url[len('ssh://'):].split('@', 1)[-1]
    elif url.startswith('git://'):
        url = 'https://' + url[len('git://'):]

    url = url.rstrip('/')
    if url.endswith('.git'):
        url = url[:-len('.git')]
    return url


def clean_repo_directory(directory: Any) -> Optional[str]:
    """
    Monorepo subdirectory as a relative POSIX path, or None.

    Absolute paths and paths with `.` or `..` segments are dropped so the
    reported package path never leaves the clone.
    """
    if not isinstance(directory, str):
        return None
    directory = directory.strip().replace('\\', '/')
    if directory.startswith('/') or re.match(r'^[A-Za-z]:', directory):
        logger.debug(f"Ignoring absolute repository directory: {directory}")
        return None
    parts = [part for part in directory.split('/') if part]
    if any(part in ('.', '..') for part in parts):
        logger.debug(f"Ignoring repository directory outside the repo: {directory}")
        return None
    return '/'.join(parts) or None


def extract_repository(manifest: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """
    Read the repository URL and monorepo directory from a manifest.

    Returns:
        (url, directory); url is None when the manifest has no usable
        repository field
    """
    repository = manifest.get('repository')

    if isinstance(repository, str):
        return normalize_repo_url(repository), None

    if isinstance(repository, dict):
        url = normalize_repo_url(repository.get('url', ''))
        return url, clean_repo_directory(repository.get('directory'))

    return None, None


def candidate_git_tag(name: str, version: str, repo_directory: Optional[str] = None) -> str:
    """
    Guess the git tag that marks a release.

    Single-package repos usually tag ``v1.2.3``; monorepos commonly tag
    per package as ``name@1.2.3``. This is a guess, the fetcher falls
    back to the default branch when it is wrong.
    """
    if repo_directory:
        return f"{name}@{version}"
    return f"v{version}"


def select_version(packument: Dict[str, Any], name: str, version: Optional[str]) -> str:
    """Pick the concrete version to fetch from a package document."""
    versions = packument.get('versions') or {}
    dist_tags = packument.get('dist-tags') or {}

    if version is None:
        latest = dist_tags.get('latest')
        if not latest:
            raise ResolutionError(f"No latest version published for {name}", package=name)
        return latest

    if version in versions:
        return version

    # Allow dist-tag names such as "next" or "beta"
    tagged = dist_tags.get(version)
    if tagged:
        return tagged

    # Tolerate a leading "v" typed by the user
    stripped = version[1:] if version.startswith('v') else None
    if stripped and stripped in versions:
        return stripped

    raise ResolutionError(f"Version {version} not found for {name}", package=name)


def resolve_package(
    name: str,
    version: Optional[str] = None,
    client: Optional[RegistryClient] = None
) -> ResolvedPackage:
    """
    Resolve a package to its repository and a candidate git tag.

    Args:
        name: Package name, scoped or not
        version: Version or dist-tag; latest when None
        client: Registry client (creates default if None)

    Raises:
        ResolutionError: package or version unknown, registry unreachable
            or no repository information in the metadata
    """
    client = client or RegistryClient()
    packument = client.get_packument(name)

    resolved_version = select_version(packument, name, version)
    manifest = (packument.get('versions') or {}).get(resolved_version) or {}

    repo_url, repo_directory = extract_repository(manifest)
    if not repo_url:
        # Some publishers only set the field on the top-level document
        repo_url, repo_directory = extract_repository(packument)

    if not repo_url:
        raise ResolutionError(f"No repository URL found for {name}@{resolved_version}", package=name)

    logger.debug(f"Resolved {name}@{resolved_version} -> {repo_url}"
                 + (f" ({repo_directory})" if repo_directory else ""))

    return ResolvedPackage(
        name=name,
        version=resolved_version,
        repo_url=repo_url,
        repo_directory=repo_directory,
        git_tag=candidate_git_tag(name, resolved_version, repo_directory),
    )
