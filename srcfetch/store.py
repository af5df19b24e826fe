"""
On-disk store of fetched package sources.

Layout under the store root:

    settings.json              project preferences
    sources.json               aggregate index, rebuilt from metadata
    <name>/ or @scope/<name>/  one source tree per package
        .srcfetch-meta.json    metadata of the last successful fetch

Metadata files are the source of truth; ``sources.json`` is a copy of
the latest scan. Read operations never raise.
"""

import os
import shutil
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
import logging

from .domain.package import PackageMetadata, SourceEntry
from .infra.file_store import FileStore

logger = logging.getLogger(__name__)

META_FILENAME = ".srcfetch-meta.json"
INDEX_FILENAME = "sources.json"
SETTINGS_FILENAME = "settings.json"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='seconds')


class SourceStore:
    """
    Package source trees and their metadata under one root directory.

    Example:
        store = SourceStore(Path("srcfetch"))
        meta = store.read_metadata("zod")
        if meta is not None:
            print(meta.version)
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def package_dir(self, name: str) -> Optional[Path]:
        """Directory of a package, or None if the name is not a safe path."""
        parts = name.split('/') if name else []
        if not parts or len(parts) > 2:
            return None
        if len(parts) == 2 and not parts[0].startswith('@'):
            return None
        if any(part in ('', '.', '..') or part.startswith('.') or '\\' in part for part in parts):
            return None
        return self.root.joinpath(*parts)

    def package_path(self, name: str, repo_directory: Optional[str] = None) -> Path:
        """Path reported to callers: the monorepo subdirectory when there is one."""
        directory = self.package_dir(name)
        if directory is None:
            raise ValueError(f"Invalid package name: {name!r}")
        if repo_directory:
            return directory / repo_directory
        return directory

    def package_exists(self, name: str) -> bool:
        directory = self.package_dir(name)
        return directory is not None and directory.is_dir()

    def _read_metadata_at(self, directory: Path) -> Optional[PackageMetadata]:
        data = FileStore(directory / META_FILENAME).read()
        if not data:
            return None
        try:
            return PackageMetadata.from_dict(data)
        except (KeyError, TypeError) as e:
            logger.warning(f"Ignoring corrupt metadata in {directory}: {e}")
            return None

    def read_metadata(self, name: str) -> Optional[PackageMetadata]:
        """Metadata of a stored package; None when missing or unreadable."""
        directory = self.package_dir(name)
        if directory is None or not directory.is_dir():
            return None
        return self._read_metadata_at(directory)

    def write_metadata(self, directory: Path, metadata: PackageMetadata) -> None:
        FileStore(Path(directory) / META_FILENAME).write(metadata.to_dict())

    def _package_dirs(self):
        if not self.root.is_dir():
            return
        for child in sorted(self.root.iterdir()):
            if child.name.startswith('.') or not child.is_dir():
                continue
            if child.name.startswith('@'):
                for scoped in sorted(child.iterdir()):
                    if scoped.is_dir() and not scoped.name.startswith('.'):
                        yield scoped
            else:
                yield child

    def list_sources(self) -> List[SourceEntry]:
        """Scan the store for packages with valid metadata, sorted by name."""
        entries = []
        for directory in self._package_dirs():
            meta = self._read_metadata_at(directory)
            if meta is None:
                continue
            path = directory / meta.repo_directory if meta.repo_directory else directory
            entries.append(SourceEntry(
                name=meta.name,
                version=meta.version,
                path=str(path),
                fetched_at=meta.fetched_at,
                repo_directory=meta.repo_directory,
            ))
        return sorted(entries, key=lambda e: e.name)

    def staging_dir(self) -> Path:
        """Create an empty scratch directory inside the store root."""
        self.root.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix=".staging-", dir=self.root))

    def discard(self, path: Path) -> None:
        shutil.rmtree(path, ignore_errors=True)

    def commit_package(self, name: str, staged: Path) -> Path:
        """
        Move a fully prepared tree into place as the package directory.

        Any previous tree for the package is moved aside first and
        deleted only after the new one is in place; on failure it is
        restored.
        """
        target = self.package_dir(name)
        if target is None:
            raise ValueError(f"Invalid package name: {name!r}")
        target.parent.mkdir(parents=True, exist_ok=True)

        trash = None
        if target.exists():
            trash = self.root / f".trash-{uuid.uuid4().hex}"
            os.replace(target, trash)

        try:
            os.replace(staged, target)
        except OSError:
            if trash is not None:
                os.replace(trash, target)
            raise

        if trash is not None:
            shutil.rmtree(trash, ignore_errors=True)
        return target

    def remove_package(self, name: str) -> bool:
        """Delete a package's tree. Returns False if it was not stored."""
        directory = self.package_dir(name)
        if directory is None or not directory.is_dir():
            return False
        shutil.rmtree(directory)

        # Drop an emptied scope directory
        parent = directory.parent
        if parent != self.root and parent.name.startswith('@') and not any(parent.iterdir()):
            parent.rmdir()
        return True

    def write_index(self, sources: List[SourceEntry]) -> Path:
        """Write sources.json from a scan; paths are relative to the project."""
        project_dir = self.root.parent
        packages = []
        for entry in sources:
            item = entry.to_dict()
            item['path'] = Path(os.path.relpath(entry.path, project_dir)).as_posix()
            packages.append(item)

        index_path = self.root / INDEX_FILENAME
        FileStore(index_path).write({'updatedAt': utc_now(), 'packages': packages})
        return index_path

    @property
    def settings_path(self) -> Path:
        return self.root / SETTINGS_FILENAME
