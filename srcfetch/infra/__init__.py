"""
Infrastructure layer for srcfetch.

Contains abstractions for external systems:
- GitClient: Git command execution
- RegistryClient: npm registry access
- FileStore: JSON file persistence

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, CloneStatus, CloneAttempt
from .registry_client import RegistryClient
from .file_store import FileStore

__all__ = [
    'GitClient',
    'CloneStatus',
    'CloneAttempt',
    'RegistryClient',
    'FileStore',
]
