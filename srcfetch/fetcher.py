"""
Fetch a resolved package's sources into the store.

The clone runs in a staging directory inside the store root; the
package directory is only replaced once the clone and its metadata are
complete, so a failed fetch never touches what is already stored.
"""

import shutil
from pathlib import Path
from typing import Optional
import logging

from .domain.operation import CloneOutcome, CloneResult
from .domain.package import FetchResult, PackageMetadata, ResolvedPackage
from .exit_codes import ReferenceNotFoundWarning, TransportError
from .infra.git_client import CloneAttempt, CloneStatus, GitClient
from .store import SourceStore, utc_now

logger = logging.getLogger(__name__)

_TRANSPORT_MESSAGES = {
    CloneStatus.REPO_NOT_FOUND: "Repository not found",
    CloneStatus.AUTH_FAILED: "Authentication failed (repository may be private or missing)",
    CloneStatus.NETWORK_ERROR: "Network error",
    CloneStatus.TIMEOUT: "Timed out",
}


def transport_error(url: str, attempt: CloneAttempt) -> TransportError:
    """Describe a failed clone attempt."""
    summary = _TRANSPORT_MESSAGES.get(attempt.status, "Clone failed")
    detail = f": {attempt.message}" if attempt.message else ""
    return TransportError(f"{summary} while cloning {url}{detail}", kind=attempt.status.value)


class Fetcher:
    """
    Clones package sources into a SourceStore.

    Example:
        fetcher = Fetcher(SourceStore(root))
        result = fetcher.fetch(resolved)
        if result.success and result.error:
            print("warning:", result.error)
    """

    def __init__(
        self,
        store: SourceStore,
        git_client: Optional[GitClient] = None,
        keep_git_dir: bool = False
    ):
        self.store = store
        self.git = git_client or GitClient()
        self.keep_git_dir = keep_git_dir

    def _reset(self, dest: Path) -> None:
        shutil.rmtree(dest, ignore_errors=True)
        dest.mkdir(parents=True, exist_ok=True)

    def clone_reference(self, resolved: ResolvedPackage, dest: Path) -> CloneResult:
        """
        Clone the candidate tag, falling back to the default branch.

        Returns:
            CloneResult with outcome EXACT, FALLBACK or FAILED
        """
        attempt = self.git.clone(resolved.repo_url, str(dest), ref=resolved.git_tag)
        if attempt.ok:
            return CloneResult(
                CloneOutcome.EXACT,
                reference=resolved.git_tag,
                commit=self.git.head_commit(str(dest)),
            )

        if attempt.status == CloneStatus.REF_NOT_FOUND:
            warning = ReferenceNotFoundWarning(resolved.git_tag)
            logger.info(f"{resolved.name}: {warning}")

            self._reset(dest)
            attempt = self.git.clone(resolved.repo_url, str(dest))
            if attempt.ok:
                return CloneResult(
                    CloneOutcome.FALLBACK,
                    commit=self.git.head_commit(str(dest)),
                    warning=str(warning),
                )

        return CloneResult(
            CloneOutcome.FAILED,
            error=str(transport_error(resolved.repo_url, attempt)),
        )

    def fetch(self, resolved: ResolvedPackage) -> FetchResult:
        """
        Fetch a package into the store and record its metadata.

        Failures are reported in the result, never raised.
        """
        result = FetchResult(package=resolved.name, version=resolved.version)

        try:
            staged: Optional[Path] = self.store.staging_dir()
        except OSError as e:
            result.error = f"Cannot create staging directory in {self.store.root}: {e}"
            return result

        try:
            clone = self.clone_reference(resolved, staged)
            if not clone.ok:
                result.error = clone.error
                return result

            if not self.keep_git_dir:
                shutil.rmtree(staged / ".git", ignore_errors=True)

            warnings = [clone.warning] if clone.warning else []
            if resolved.repo_directory and not (staged / resolved.repo_directory).is_dir():
                warnings.append(f"Directory {resolved.repo_directory} not found in repository")

            self.store.write_metadata(staged, PackageMetadata(
                name=resolved.name,
                version=resolved.version,
                fetched_at=utc_now(),
                repo_directory=resolved.repo_directory,
                repo_url=resolved.repo_url,
                reference=clone.reference,
                commit=clone.commit,
            ))
            self.store.commit_package(resolved.name, staged)
            staged = None

            result.path = str(self.store.package_path(resolved.name, resolved.repo_directory))
            result.success = True
            result.error = "; ".join(warnings) or None
            return result

        except (OSError, ValueError) as e:
            logger.debug(f"Storing {resolved.name} failed", exc_info=True)
            result.error = f"Failed to store {resolved.name}: {e}"
            return result

        finally:
            if staged is not None:
                self.store.discard(staged)
