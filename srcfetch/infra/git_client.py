"""
Git client infrastructure for srcfetch.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic
"""

import os
import re
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Optional, List
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


class CloneStatus(Enum):
    """Classified result of a ``git clone``."""
    OK = "ok"
    REF_NOT_FOUND = "ref_not_found"
    REPO_NOT_FOUND = "repo_not_found"
    AUTH_FAILED = "auth_failed"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    FAILED = "failed"


@dataclass
class GitCommandResult:
    """Result of running one git command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


@dataclass
class CloneAttempt:
    """Result of a clone with its failure classified."""
    status: CloneStatus
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == CloneStatus.OK


# Order matters: a missing branch must win over generic "not found"
_STDERR_PATTERNS = [
    (CloneStatus.REF_NOT_FOUND, re.compile(
        r"Remote branch .+ not found|Could not find remote branch|"
        r"couldn't find remote ref", re.IGNORECASE)),
    (CloneStatus.REPO_NOT_FOUND, re.compile(
        r"Repository not found|repository '.*' not found|does not appear to be a git repository|"
        r"does not exist", re.IGNORECASE)),
    (CloneStatus.AUTH_FAILED, re.compile(
        r"Authentication failed|could not read Username|could not read Password|"
        r"Permission denied|terminal prompts disabled", re.IGNORECASE)),
    (CloneStatus.NETWORK_ERROR, re.compile(
        r"Could not resolve host|Failed to connect|Connection (timed out|refused|reset)|"
        r"unable to access|Network is unreachable|early EOF", re.IGNORECASE)),
]


def classify_clone_error(stderr: str) -> CloneStatus:
    """Map git's stderr from a failed clone to a CloneStatus."""
    for status, pattern in _STDERR_PATTERNS:
        if pattern.search(stderr or ""):
            return status
    return CloneStatus.FAILED


def _last_fatal_line(stderr: str) -> str:
    """Pick the most useful line of git's stderr for a user message."""
    lines = [line.strip() for line in (stderr or "").splitlines() if line.strip()]
    for line in reversed(lines):
        if line.startswith("fatal:"):
            return line[len("fatal:"):].strip()
    return lines[-1] if lines else "git clone failed"


class GitClient:
    """
    Abstraction over git commands.

    Provides methods for the git operations srcfetch needs with
    consistent error handling and return types.

    Example:
        client = GitClient()
        attempt = client.clone(url, "/tmp/checkout", ref="v1.2.3")
        if attempt.status == CloneStatus.REF_NOT_FOUND:
            attempt = client.clone(url, "/tmp/checkout")
    """

    def __init__(self, timeout: int = 300, depth: int = 1):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 300)
            depth: History depth for clones (default: 1)
        """
        self.timeout = timeout
        self.depth = depth

    def _run(self, args: List[str], cwd: Optional[str] = None) -> GitCommandResult:
        """
        Run a git command.

        Args:
            args: Arguments after ``git``
            cwd: Working directory

        Returns:
            GitCommandResult with output and return code
        """
        cmd = ["git"] + args
        env = os.environ.copy()
        # Fail instead of asking for credentials
        env["GIT_TERMINAL_PROMPT"] = "0"

        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
                # Ctrl+C is handled by srcfetch; git must not receive it
                start_new_session=True,
            )
            return GitCommandResult(
                returncode=result.returncode,
                stdout=(result.stdout or "").strip(),
                stderr=(result.stderr or "").strip(),
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out after {self.timeout}s: {' '.join(cmd)}")
            return GitCommandResult(returncode=-1, timed_out=True,
                                    stderr=f"timed out after {self.timeout}s")
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return GitCommandResult(returncode=-1, stderr=str(e))

    def clone(self, url: str, dest: str, ref: Optional[str] = None) -> CloneAttempt:
        """
        Shallow clone a repository.

        Args:
            url: Repository URL
            dest: Target directory (must not exist or be empty)
            ref: Tag or branch to check out; default branch when None

        Returns:
            CloneAttempt with the classified status
        """
        args = ["clone", "--depth", str(self.depth), "--single-branch", "--quiet"]
        if ref:
            args += ["--branch", ref]
        args += [url, str(dest)]

        result = self._run(args)
        if result.ok:
            return CloneAttempt(CloneStatus.OK)
        if result.timed_out:
            return CloneAttempt(CloneStatus.TIMEOUT, f"Clone of {url} {result.stderr}")

        status = classify_clone_error(result.stderr)
        logger.debug(f"Clone of {url} failed ({status.value}): {result.stderr}")
        return CloneAttempt(status, _last_fatal_line(result.stderr))

    def head_commit(self, path: str) -> Optional[str]:
        """Get the commit sha checked out at path."""
        result = self._run(["rev-parse", "HEAD"], cwd=path)
        if result.ok and result.stdout:
            return result.stdout.strip()
        return None

    def is_git_repo(self, path: str) -> bool:
        """Check if path is a git repository."""
        return (Path(path) / ".git").exists()
