"""
Maintain the source reference section of a project's AGENTS.md.

The section sits between marker comments so it can be rewritten or
removed without touching the rest of the file.
"""

import os
import re
from pathlib import Path
from typing import List

from .domain.package import SourceEntry

AGENTS_FILE = "AGENTS.md"
SECTION_START = "## Source Code Reference"
SECTION_MARKER = "<!-- srcfetch:start -->"
SECTION_END_MARKER = "<!-- srcfetch:end -->"


def generate_section(sources: List[SourceEntry], project_dir: Path) -> str:
    """Render the section for the given packages."""
    if not sources:
        return ""

    lines = [
        "",
        SECTION_START,
        "",
        SECTION_MARKER,
        "",
        "Source code for the following packages is available locally for deeper "
        "understanding of implementation details:",
        "",
    ]
    for entry in sources:
        rel = Path(os.path.relpath(entry.path, project_dir)).as_posix()
        lines.append(f"- **{entry.name}@{entry.version}** - `{rel}/`")

    lines += [
        "",
        "Use this source code when you need to understand how a package works "
        "internally, not just its types/interface.",
        "",
        SECTION_END_MARKER,
        "",
    ]
    return "\n".join(lines)


def has_section(project_dir: Path) -> bool:
    agents_path = Path(project_dir) / AGENTS_FILE
    try:
        return SECTION_MARKER in agents_path.read_text(encoding='utf-8')
    except OSError:
        return False


def _split_around_section(content: str):
    marker = content.find(SECTION_MARKER)
    if marker == -1:
        return None
    end = content.find(SECTION_END_MARKER, marker)
    if end == -1:
        return None
    # Our heading is the last one before the marker; earlier ones are the user's
    start = content.rfind(SECTION_START, 0, marker)
    if start == -1 or content[start + len(SECTION_START):marker].strip():
        start = marker
    before = content[:start].rstrip()
    after = content[end + len(SECTION_END_MARKER):].lstrip()
    return before, after


def remove_section(project_dir: Path) -> bool:
    """Remove the section. Returns True if the file changed."""
    agents_path = Path(project_dir) / AGENTS_FILE
    if not has_section(project_dir):
        return False

    parts = _split_around_section(agents_path.read_text(encoding='utf-8'))
    if parts is None:
        return False
    before, after = parts

    content = before + ("\n\n" + after if after else "")
    content = re.sub(r"\n{3,}", "\n\n", content).strip() + "\n"
    agents_path.write_text(content, encoding='utf-8')
    return True


def update_agents_md(sources: List[SourceEntry], project_dir: Path) -> bool:
    """
    Write the current package list into AGENTS.md.

    Creates the file when missing, replaces an existing section, and
    removes the section when there are no packages left.

    Returns:
        True if the file was written
    """
    project_dir = Path(project_dir)
    agents_path = project_dir / AGENTS_FILE

    if not sources:
        return remove_section(project_dir)

    section = generate_section(sources, project_dir)

    if agents_path.exists():
        content = agents_path.read_text(encoding='utf-8')
        parts = _split_around_section(content) if SECTION_MARKER in content else None
        if parts is not None:
            before, after = parts
            head = before + "\n" + section if before else section.lstrip("\n")
            content = head + ("\n" + after if after else "")
        else:
            if content and not content.endswith("\n"):
                content += "\n"
            content += section
    else:
        content = (
            "# AGENTS.md\n\n"
            "Instructions for AI coding agents working with this codebase.\n"
            + section
        )

    agents_path.write_text(content, encoding='utf-8')
    return True
