"""
Keep the store out of version control and out of TypeScript builds.
"""

import json
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


def ensure_gitignore(project_dir: Path, entry: str) -> bool:
    """
    Add the store directory to .gitignore.

    Returns:
        True if .gitignore was created or changed
    """
    gitignore = Path(project_dir) / '.gitignore'
    line = entry.rstrip('/') + '/'

    content = gitignore.read_text(encoding='utf-8') if gitignore.exists() else ""
    existing = {raw.strip().strip('/') for raw in content.splitlines()}
    if entry.strip('/') in existing:
        return False

    if content and not content.endswith('\n'):
        content += '\n'
    if content:
        content += '\n'
    content += f"# Package sources fetched by srcfetch\n{line}\n"
    gitignore.write_text(content, encoding='utf-8')
    return True


def ensure_tsconfig_exclude(project_dir: Path, entry: str) -> bool:
    """
    Add the store directory to the ``exclude`` list of tsconfig.json.

    Only plain JSON is edited; a tsconfig with comments is left alone.

    Returns:
        True if tsconfig.json was changed
    """
    tsconfig = Path(project_dir) / 'tsconfig.json'
    if not tsconfig.exists():
        return False

    try:
        data = json.loads(tsconfig.read_text(encoding='utf-8'))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.debug(f"Not editing {tsconfig}: {e}")
        return False
    if not isinstance(data, dict):
        return False

    exclude = data.get('exclude')
    if not isinstance(exclude, list):
        exclude = []
    name = entry.strip('/')
    if any(isinstance(item, str) and item.strip('/') == name for item in exclude):
        return False

    data['exclude'] = exclude + [name]
    tsconfig.write_text(json.dumps(data, indent=2) + '\n', encoding='utf-8')
    return True
