"""
Detect which version of a package a project has installed.
"""

import re
from pathlib import Path
from typing import Optional
import logging

from .infra.file_store import FileStore

logger = logging.getLogger(__name__)

DEPENDENCY_FIELDS = ('dependencies', 'devDependencies', 'peerDependencies', 'optionalDependencies')

_EXACT_VERSION = re.compile(r'^\d+\.\d+\.\d+(?:[-+][0-9A-Za-z.+-]+)?$')


def version_from_range(spec: str) -> Optional[str]:
    """
    Take the version out of a simple semver range.

    ``^1.2.3``, ``~1.2.3``, ``>=1.2.3`` and ``1.2.3`` give ``1.2.3``.
    Compound ranges, tags, URLs and workspace/alias protocols give None.
    """
    if not isinstance(spec, str):
        return None
    candidate = spec.strip().lstrip('^~=<>').strip()
    if candidate.startswith('v'):
        candidate = candidate[1:]
    if _EXACT_VERSION.match(candidate):
        return candidate
    return None


def detect_installed_version(name: str, cwd: Path) -> Optional[str]:
    """
    Find the installed version of a package in a project.

    Looks at, in order: node_modules/<name>/package.json,
    package-lock.json, and the dependency ranges of package.json.
    """
    project = Path(cwd)

    installed = FileStore(project / 'node_modules' / name / 'package.json').get('version')
    if isinstance(installed, str) and installed:
        return installed

    lock = FileStore(project / 'package-lock.json').read()
    entry = (lock.get('packages') or {}).get(f"node_modules/{name}")
    if not entry:
        # lockfileVersion 1
        entry = (lock.get('dependencies') or {}).get(name)
    if isinstance(entry, dict) and isinstance(entry.get('version'), str):
        return entry['version']

    manifest = FileStore(project / 'package.json').read()
    for field in DEPENDENCY_FIELDS:
        spec = (manifest.get(field) or {}).get(name)
        if spec:
            version = version_from_range(spec)
            if version:
                return version
            logger.debug(f"Cannot pin {name} from range {spec!r}")

    return None
