"""
File store infrastructure for srcfetch.

Provides JSON file persistence with:
- Atomic writes (write to temp, then rename)
- Pretty formatting for human readability
- Tolerant reads (missing or corrupt files read as empty)
- Automatic parent directory creation
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class FileStore:
    """
    JSON file persistence with atomic writes.

    Example:
        store = FileStore(Path("srcfetch/settings.json"))
        store.set("allowFileModifications", True)
        allowed = store.get("allowFileModifications")
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()
        self._cache: Optional[Dict[str, Any]] = None

    def _write_atomic(self, data: Dict[str, Any]) -> None:
        """Write data atomically using temp file and rename."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write to temp file in same directory
        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp"
        )

        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write('\n')  # Trailing newline

            # Atomic rename
            os.replace(temp_path, self.path)

        except Exception:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def read(self) -> Dict[str, Any]:
        """
        Read entire store.

        Returns:
            Dictionary with all stored data, empty if the file is
            missing or unreadable
        """
        with self._lock:
            if self._cache is not None:
                return self._cache.copy()

            try:
                if self.path.exists():
                    with open(self.path, 'r') as f:
                        data = json.load(f)
                    if isinstance(data, dict):
                        self._cache = data
                        return data.copy()
                    logger.warning(f"Ignoring {self.path}: expected a JSON object")
            except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
                logger.warning(f"Error reading {self.path}: {e}")

            return {}

    def write(self, data: Dict[str, Any]) -> None:
        """
        Write entire store.

        Args:
            data: Dictionary to write
        """
        with self._lock:
            self._write_atomic(data)
            self._cache = data.copy()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get single value.

        Args:
            key: Key to retrieve
            default: Default value if not found

        Returns:
            Value or default
        """
        data = self.read()
        return data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Set single value.

        Args:
            key: Key to set
            value: Value to store
        """
        data = self.read()
        data[key] = value
        self.write(data)
