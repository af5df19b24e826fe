"""Shared fakes for srcfetch tests."""

from pathlib import Path

import pytest

from srcfetch.config import get_default_config
from srcfetch.domain import ResolvedPackage
from srcfetch.exit_codes import ResolutionError
from srcfetch.fetcher import Fetcher
from srcfetch.infra.git_client import CloneAttempt, CloneStatus
from srcfetch.services.fetch_service import FetchService


class RecordingGitClient:
    """Git client that writes a marker file named after the cloned ref."""

    def __init__(self, failing_urls=()):
        self.failing_urls = set(failing_urls)
        self.calls = []

    def clone(self, url, dest, ref=None):
        self.calls.append((url, ref))
        if url in self.failing_urls:
            return CloneAttempt(CloneStatus.REPO_NOT_FOUND, "Repository not found")
        root = Path(dest)
        marker = (ref or "HEAD").replace('/', '_').replace('@', '_')
        (root / f"{marker}.txt").write_text(url)
        (root / "packages" / "core").mkdir(parents=True, exist_ok=True)
        return CloneAttempt(CloneStatus.OK)

    def head_commit(self, path):
        return "0123456789abcdef"


class FakeResolver:
    """
    Resolver over a table of {name: latest_version}.

    Monorepo packages are those whose name is scoped.
    """

    def __init__(self, latest, failing=()):
        self.latest = latest
        self.failing = set(failing)
        self.calls = []

    def __call__(self, name, version=None):
        self.calls.append((name, version))
        if name in self.failing or name not in self.latest:
            raise ResolutionError(f"Package not found on registry: {name}", package=name)
        version = version or self.latest[name]
        directory = "packages/core" if name.startswith('@') else None
        tag = f"{name}@{version}" if directory else f"v{version}"
        return ResolvedPackage(
            name=name,
            version=version,
            repo_url=f"https://github.com/example/{name.lstrip('@').replace('/', '-')}",
            git_tag=tag,
            repo_directory=directory,
        )


@pytest.fixture
def project(tmp_path):
    directory = tmp_path / "project"
    directory.mkdir()
    return directory


@pytest.fixture
def git():
    return RecordingGitClient()


@pytest.fixture
def resolver():
    return FakeResolver({'zod': '3.22.0', 'react': '18.2.0', '@babel/core': '7.24.0'})


@pytest.fixture
def make_service(project, git, resolver):
    """Build a FetchService on the test project with fake registry and git."""
    def factory(project_dir=None, config=None, version_detector=None):
        service = FetchService(
            project_dir=project_dir or project,
            config=config or get_default_config(),
            resolver=resolver,
            version_detector=version_detector or (lambda name, cwd: None),
        )
        service.fetcher = Fetcher(service.store, git)
        return service
    return factory
