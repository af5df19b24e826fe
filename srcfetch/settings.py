"""
Per-project preference for editing files outside the store
(.gitignore, tsconfig.json, AGENTS.md).

The preference is three-valued: allowed, denied, or not yet decided.
An undecided preference is settled once by asking the user, and the
answer is saved in the store's settings.json.
"""

from enum import Enum
from pathlib import Path
from typing import Callable, Optional
import logging

from .infra.file_store import FileStore

logger = logging.getLogger(__name__)

PERMISSION_KEY = "allowFileModifications"


class FileModificationPolicy(Enum):
    """How the caller wants the permission decided."""
    ALLOW = "allow"
    DENY = "deny"
    PROMPT = "prompt"   # Use the stored answer, ask when there is none

    @classmethod
    def from_flag(cls, flag: Optional[bool]) -> 'FileModificationPolicy':
        if flag is None:
            return cls.PROMPT
        return cls.ALLOW if flag else cls.DENY


def get_file_modification_permission(settings_path: Path) -> Optional[bool]:
    """Stored preference, or None when it was never decided."""
    value = FileStore(settings_path).get(PERMISSION_KEY)
    return value if isinstance(value, bool) else None


def set_file_modification_permission(settings_path: Path, allowed: bool) -> None:
    FileStore(settings_path).set(PERMISSION_KEY, allowed)


def resolve_file_permission(
    policy: FileModificationPolicy,
    settings_path: Path,
    prompt: Optional[Callable[[], Optional[bool]]] = None
) -> bool:
    """
    Decide whether project files may be edited.

    Args:
        policy: ALLOW/DENY override the stored value and are saved;
            PROMPT uses the stored value or asks
        settings_path: settings.json of the store
        prompt: Asks the user; returns None when nobody can answer

    Returns:
        True if file modifications are allowed for this run
    """
    if policy is not FileModificationPolicy.PROMPT:
        allowed = policy is FileModificationPolicy.ALLOW
        set_file_modification_permission(settings_path, allowed)
        return allowed

    stored = get_file_modification_permission(settings_path)
    if stored is not None:
        return stored

    answer = prompt() if prompt else None
    if answer is None:
        # Not saved, so the question is asked again next time
        logger.debug("No answer to file modification prompt, denying for this run")
        return False

    set_file_modification_permission(settings_path, answer)
    return answer
