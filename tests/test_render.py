"""
Tests for srcfetch/render.py rendering functions.
"""
from io import StringIO
from unittest.mock import patch

from rich.console import Console

from srcfetch import render


def rendered(func, *args):
    buffer = StringIO()
    with patch.object(render, 'console', Console(file=buffer, width=140, color_system=None)):
        func(*args)
    return buffer.getvalue()


class TestRenderFetchTable:
    """Tests for render_fetch_table."""

    def test_empty(self):
        assert "No packages requested" in rendered(render.render_fetch_table, [])

    def test_rows_and_summary(self):
        output = rendered(render.render_fetch_table, [
            {'package': 'zod', 'version': '3.22.0', 'path': '/p/srcfetch/zod', 'success': True},
            {'package': 'left-pad', 'version': '', 'path': '', 'success': False,
             'error': 'Package not found on registry: left-pad'},
        ])

        assert "zod" in output
        assert "3.22.0" in output
        assert "Package not found on registry: left-pad" in output
        assert "Total packages: 2" in output
        assert "Succeeded: 1" in output
        assert "Failed: 1" in output

    def test_warning_is_listed(self):
        output = rendered(render.render_fetch_table, [
            {'package': 'zod', 'version': '3.22.0', 'path': '/p/srcfetch/zod', 'success': True,
             'error': 'Could not find tag v3.22.0, cloned default branch instead'},
        ])
        assert "cloned default branch" in output
        assert "Failed" not in output


class TestRenderSourcesTable:

    def test_empty(self):
        assert "No package sources fetched yet" in rendered(render.render_sources_table, [])

    def test_rows(self):
        output = rendered(render.render_sources_table, [
            {'name': '@babel/core', 'version': '7.24.0', 'path': '/p/srcfetch/@babel/core',
             'repoDirectory': 'packages/babel-core', 'fetchedAt': '2024-05-01T10:00:00+00:00'},
        ])
        assert "@babel/core" in output
        assert "packages/babel-core" in output
        assert "2024-05-01" in output
