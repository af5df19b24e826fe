"""
Fetch service for srcfetch.

Drives packages through parse, store check, registry resolution and
clone, one at a time and in request order. Used by the `srcfetch fetch`
and `srcfetch remove` commands.
"""

import functools
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List, Optional

from ..agents import update_agents_md
from ..config import load_config, get_store_root
from ..domain.operation import FetchSummary, ProgressMessage
from ..domain.package import FetchResult, PackageMetadata, ResolvedPackage, SourceEntry
from ..exit_codes import ResolutionError
from ..fetcher import Fetcher
from ..infra.git_client import GitClient
from ..infra.registry_client import RegistryClient
from ..installed import detect_installed_version
from ..package_spec import parse_package_spec
from ..project_files import ensure_gitignore, ensure_tsconfig_exclude
from ..registry import resolve_package
from ..settings import FileModificationPolicy, resolve_file_permission
from ..store import SourceStore

logger = logging.getLogger(__name__)

Resolver = Callable[[str, Optional[str]], ResolvedPackage]
VersionDetector = Callable[[str, Path], Optional[str]]


@dataclass
class FetchOptions:
    """Options for a fetch batch."""
    file_policy: FileModificationPolicy = FileModificationPolicy.PROMPT
    prompt: Optional[Callable[[], Optional[bool]]] = None
    detect_installed: bool = True
    cancel_event: Optional[threading.Event] = None


class FetchService:
    """
    Service that fetches package sources into a project's store.

    Example:
        service = FetchService(project_dir)
        options = FetchOptions(file_policy=FileModificationPolicy.DENY)

        for message in service.fetch_packages(["zod", "@babel/core@7.24.0"], options):
            print(message)

        summary = service.last_result
        print(f"{summary.successful} succeeded, {summary.failed} failed")
    """

    def __init__(
        self,
        project_dir: Optional[Path] = None,
        config: Optional[Dict[str, Any]] = None,
        store: Optional[SourceStore] = None,
        resolver: Optional[Resolver] = None,
        fetcher: Optional[Fetcher] = None,
        version_detector: Optional[VersionDetector] = None
    ):
        """
        Initialize FetchService.

        Args:
            project_dir: Project whose store is used (current directory if None)
            config: Configuration dict (loads default if None)
            store: SourceStore (derived from config if None)
            resolver: Callable resolving (name, version) via the registry
            fetcher: Fetcher (creates one on the store if None)
            version_detector: Callable returning the installed version
        """
        self.config = config or load_config()
        self.project_dir = Path(project_dir or Path.cwd()).resolve()
        self.store = store or SourceStore(get_store_root(self.config, self.project_dir))

        if resolver is None:
            resolver = functools.partial(
                resolve_package, client=RegistryClient.from_config(self.config)
            )
        self.resolver = resolver

        if fetcher is None:
            git = self.config.get('git', {})
            fetcher = Fetcher(
                self.store,
                GitClient(timeout=git.get('timeout_seconds', 300), depth=git.get('depth', 1)),
                keep_git_dir=self.config.get('store', {}).get('keep_git_dir', False),
            )
        self.fetcher = fetcher
        self.version_detector = version_detector or detect_installed_version

        self.last_result: Optional[FetchSummary] = None
        self.last_sources: List[SourceEntry] = []
        self.can_modify_files = False

    def _store_entry(self) -> Optional[str]:
        """Store directory relative to the project, None if it lives elsewhere."""
        rel = os.path.relpath(self.store.root, self.project_dir)
        if rel.startswith('..') or os.path.isabs(rel):
            return None
        return Path(rel).as_posix()

    def _stored_result(self, name: str, meta: PackageMetadata) -> FetchResult:
        return FetchResult(
            package=name,
            version=meta.version,
            path=str(self.store.package_path(name, meta.repo_directory)),
            success=True,
        )

    def _file_permission(self, options: FetchOptions) -> bool:
        try:
            allowed = resolve_file_permission(options.file_policy, self.store.settings_path, options.prompt)
        except OSError as e:
            logger.warning(f"Cannot save settings in {self.store.root}: {e}")
            allowed = options.file_policy is FileModificationPolicy.ALLOW
        self.can_modify_files = allowed
        return allowed

    def prepare_project(self, options: FetchOptions) -> Generator[ProgressMessage, None, bool]:
        """
        Settle the file modification permission and, when allowed, keep the
        store out of git and TypeScript.

        Returns:
            Whether project files may be modified
        """
        allowed = self._file_permission(options)

        entry = self._store_entry()
        if allowed and entry:
            try:
                if ensure_gitignore(self.project_dir, entry):
                    yield ProgressMessage(f"Added {entry}/ to .gitignore")
                if ensure_tsconfig_exclude(self.project_dir, entry):
                    yield ProgressMessage(f"Added {entry}/ to tsconfig.json exclude")
            except OSError as e:
                logger.warning(f"Cannot update project files: {e}")
        return allowed

    def fetch_packages(
        self,
        specs: List[str],
        options: Optional[FetchOptions] = None
    ) -> Generator[ProgressMessage, None, FetchSummary]:
        """
        Fetch sources for several packages, sequentially.

        A failing package never stops the batch; every specifier gets exactly
        one FetchResult, in input order.

        Args:
            specs: Package specifiers (name, name@version, @scope/name@version)
            options: Batch options

        Yields:
            Progress messages

        Returns:
            FetchSummary with one result per specifier
        """
        options = options or FetchOptions()
        summary = FetchSummary()
        self.last_result = summary

        can_modify = yield from self.prepare_project(options)

        for index, raw in enumerate(specs):
            if options.cancel_event is not None and options.cancel_event.is_set():
                remaining = specs[index:]
                for skipped in remaining:
                    summary.add(FetchResult(package=parse_package_spec(skipped).name, error="Cancelled"))
                summary.cancelled = True
                yield ProgressMessage.warning(f"Cancelled, {len(remaining)} package(s) not fetched")
                break

            result = yield from self._fetch_one(raw, options)
            summary.add(result)

        yield ProgressMessage(f"Done: {summary.successful} succeeded, {summary.failed} failed")

        if summary.successful > 0:
            yield from self.rebuild_index(can_modify)

        return summary

    def _fetch_one(self, raw: str, options: FetchOptions) -> Generator[ProgressMessage, None, FetchResult]:
        """Run one package through the workflow; never raises."""
        spec = parse_package_spec(raw)
        name = spec.name
        if not name:
            return FetchResult(package=raw, error="Empty package name")
        if self.store.package_dir(name) is None:
            return FetchResult(package=name, error=f"Invalid package name: {name}")

        yield ProgressMessage(f"Fetching {name}...")

        try:
            version = spec.version
            if version:
                yield ProgressMessage.detail(f"Using specified version: {version}")
            elif options.detect_installed:
                version = self.version_detector(name, self.project_dir)
                if version:
                    yield ProgressMessage.detail(f"Detected installed version: {version}")
                else:
                    yield ProgressMessage.detail("No installed version found, using latest")

            existing = self.store.read_metadata(name)
            if existing and version and existing.version == version:
                yield ProgressMessage.success(f"Already up to date ({version})")
                return self._stored_result(name, existing)
            if existing and version:
                yield ProgressMessage.detail(f"Updating {existing.version} -> {version}")

            yield ProgressMessage.detail("Resolving repository...")
            resolved = self.resolver(name, version)
            yield ProgressMessage.detail(f"Found: {resolved.repo_url}")
            if resolved.repo_directory:
                yield ProgressMessage.detail(f"Monorepo path: {resolved.repo_directory}")

            if (existing and existing.version == resolved.version
                    and existing.repo_directory == resolved.repo_directory):
                yield ProgressMessage.success(f"Already up to date ({resolved.version})")
                return self._stored_result(name, existing)

            yield ProgressMessage.detail(f"Cloning at {resolved.git_tag}...")
            result = self.fetcher.fetch(resolved)

        except ResolutionError as e:
            yield ProgressMessage.error(f"Failed: {e}")
            return FetchResult(package=name, version=spec.version or "", error=str(e))
        except Exception as e:
            logger.debug(f"Unexpected error fetching {name}", exc_info=True)
            yield ProgressMessage.error(f"Error: {e}")
            return FetchResult(package=name, version=spec.version or "", error=str(e))

        if result.success:
            yield ProgressMessage.success(f"Saved to {result.path}")
            if result.error:
                yield ProgressMessage.warning(result.error)
        else:
            yield ProgressMessage.error(f"Failed: {result.error}")
        return result

    def list_sources(self) -> List[SourceEntry]:
        return self.store.list_sources()

    def rebuild_index(self, can_modify: bool) -> Generator[ProgressMessage, None, List[SourceEntry]]:
        """
        Rewrite sources.json from the store and, when allowed, AGENTS.md.
        """
        sources = self.store.list_sources()
        self.last_sources = sources
        try:
            self.store.write_index(sources)
            logger.debug(f"Indexed {len(sources)} package(s)")

            if can_modify and update_agents_md(sources, self.project_dir):
                yield ProgressMessage("Updated AGENTS.md")
        except OSError as e:
            logger.warning(f"Cannot write source index: {e}")
        return sources

    def remove_packages(
        self,
        names: List[str],
        options: Optional[FetchOptions] = None
    ) -> Generator[ProgressMessage, None, List[str]]:
        """
        Delete stored packages and refresh the index.

        Returns:
            Names that were actually removed
        """
        options = options or FetchOptions()
        removed = []
        for raw in names:
            name = parse_package_spec(raw).name
            if self.store.remove_package(name):
                removed.append(name)
                yield ProgressMessage.success(f"Removed {name}")
            else:
                yield ProgressMessage.warning(f"{name} is not in the store")

        if removed:
            can_modify = self._file_permission(options)
            yield from self.rebuild_index(can_modify)
        return removed
