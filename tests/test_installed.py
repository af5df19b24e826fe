"""Tests for installed version detection."""

import json

import pytest

from srcfetch.installed import detect_installed_version, version_from_range


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


class TestVersionFromRange:

    @pytest.mark.parametrize("spec,expected", [
        ("1.2.3", "1.2.3"),
        ("^1.2.3", "1.2.3"),
        ("~1.2.3", "1.2.3"),
        (">=1.2.3", "1.2.3"),
        ("v1.2.3", "1.2.3"),
        ("^3.0.0-beta.1", "3.0.0-beta.1"),
        ("1.x", None),
        ("^1.0.0 || ^2.0.0", None),
        ("latest", None),
        ("workspace:*", None),
        ("github:owner/repo", None),
        (None, None),
    ])
    def test_ranges(self, spec, expected):
        assert version_from_range(spec) == expected


class TestDetectInstalledVersion:
    """Tests for detect_installed_version."""

    def test_node_modules_wins(self, tmp_path):
        write_json(tmp_path / "node_modules" / "zod" / "package.json", {"version": "3.22.4"})
        write_json(tmp_path / "package-lock.json", {"packages": {"node_modules/zod": {"version": "3.22.0"}}})
        write_json(tmp_path / "package.json", {"dependencies": {"zod": "^3.20.0"}})

        assert detect_installed_version("zod", tmp_path) == "3.22.4"

    def test_scoped_node_modules(self, tmp_path):
        write_json(tmp_path / "node_modules" / "@babel" / "core" / "package.json", {"version": "7.24.0"})
        assert detect_installed_version("@babel/core", tmp_path) == "7.24.0"

    def test_lockfile(self, tmp_path):
        write_json(tmp_path / "package-lock.json", {"packages": {"node_modules/zod": {"version": "3.22.0"}}})
        assert detect_installed_version("zod", tmp_path) == "3.22.0"

    def test_lockfile_v1(self, tmp_path):
        write_json(tmp_path / "package-lock.json", {"dependencies": {"zod": {"version": "3.21.0"}}})
        assert detect_installed_version("zod", tmp_path) == "3.21.0"

    def test_package_json_range(self, tmp_path):
        write_json(tmp_path / "package.json", {"devDependencies": {"vitest": "^1.6.0"}})
        assert detect_installed_version("vitest", tmp_path) == "1.6.0"

    def test_unpinnable_range(self, tmp_path):
        write_json(tmp_path / "package.json", {"dependencies": {"zod": "latest"}})
        assert detect_installed_version("zod", tmp_path) is None

    def test_nothing_installed(self, tmp_path):
        assert detect_installed_version("zod", tmp_path) is None

    def test_corrupt_files_are_ignored(self, tmp_path):
        (tmp_path / "package.json").write_text("{oops")
        assert detect_installed_version("zod", tmp_path) is None
