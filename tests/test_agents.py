"""Tests for the AGENTS.md source reference section."""

from srcfetch.agents import (
    AGENTS_FILE,
    SECTION_START,
    SECTION_MARKER,
    SECTION_END_MARKER,
    generate_section,
    has_section,
    remove_section,
    update_agents_md,
)
from srcfetch.domain import SourceEntry


def entries(project):
    return [
        SourceEntry(name="@babel/core", version="7.24.0",
                    path=str(project / "srcfetch" / "@babel" / "core" / "packages" / "babel-core"),
                    repo_directory="packages/babel-core"),
        SourceEntry(name="zod", version="3.22.0", path=str(project / "srcfetch" / "zod")),
    ]


class TestGenerateSection:

    def test_lists_packages_with_relative_paths(self, tmp_path):
        section = generate_section(entries(tmp_path), tmp_path)

        assert SECTION_START in section
        assert SECTION_MARKER in section
        assert SECTION_END_MARKER in section
        assert "- **@babel/core@7.24.0** - `srcfetch/@babel/core/packages/babel-core/`" in section
        assert "- **zod@3.22.0** - `srcfetch/zod/`" in section

    def test_empty(self, tmp_path):
        assert generate_section([], tmp_path) == ""


class TestUpdateAgentsMd:
    """Tests for update_agents_md."""

    def test_creates_file(self, tmp_path):
        assert update_agents_md(entries(tmp_path), tmp_path)

        content = (tmp_path / AGENTS_FILE).read_text()
        assert content.startswith("# AGENTS.md")
        assert has_section(tmp_path)

    def test_appends_to_existing_file(self, tmp_path):
        (tmp_path / AGENTS_FILE).write_text("# Project rules\n\nUse tabs.")

        update_agents_md(entries(tmp_path), tmp_path)

        content = (tmp_path / AGENTS_FILE).read_text()
        assert content.startswith("# Project rules\n\nUse tabs.\n")
        assert "zod@3.22.0" in content

    def test_replaces_section_and_keeps_surroundings(self, tmp_path):
        (tmp_path / AGENTS_FILE).write_text("# Rules\n\nBefore.\n")
        update_agents_md(entries(tmp_path), tmp_path)
        path = tmp_path / AGENTS_FILE
        path.write_text(path.read_text() + "\n## Later section\n\nAfter.\n")

        update_agents_md(entries(tmp_path)[1:], tmp_path)

        content = path.read_text()
        assert content.count(SECTION_MARKER) == 1
        assert "@babel/core" not in content
        assert "zod@3.22.0" in content
        assert content.startswith("# Rules\n\nBefore.\n")
        assert content.rstrip().endswith("After.")

    def test_empty_list_removes_section(self, tmp_path):
        (tmp_path / AGENTS_FILE).write_text("# Rules\n\nKeep me.\n")
        update_agents_md(entries(tmp_path), tmp_path)

        assert update_agents_md([], tmp_path)

        assert (tmp_path / AGENTS_FILE).read_text() == "# Rules\n\nKeep me.\n"
        assert not has_section(tmp_path)

    def test_remove_without_section(self, tmp_path):
        assert not remove_section(tmp_path)
        (tmp_path / AGENTS_FILE).write_text("# Rules\n")
        assert not remove_section(tmp_path)

    def test_own_heading_above_section_is_kept(self, tmp_path):
        user_text = "# Rules\n\n## Source Code Reference\n\nVendored code lives in third_party/.\n"
        path = tmp_path / AGENTS_FILE
        path.write_text(user_text)
        update_agents_md(entries(tmp_path), tmp_path)

        update_agents_md(entries(tmp_path)[1:], tmp_path)

        content = path.read_text()
        assert content.startswith(user_text)
        assert content.count(SECTION_START) == 2
        assert content.count(SECTION_MARKER) == 1
        assert "@babel/core" not in content

        update_agents_md([], tmp_path)

        assert path.read_text() == user_text
