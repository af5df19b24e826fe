"""Tests for the fetch service workflow."""

import json
import threading

import pytest

from srcfetch.agents import AGENTS_FILE
from srcfetch.domain import MessageLevel, ProgressMessage
from srcfetch.services.fetch_service import FetchOptions
from srcfetch.settings import FileModificationPolicy, get_file_modification_permission
from srcfetch.store import INDEX_FILENAME, META_FILENAME


def run(generator):
    """Drain a service generator, returning (return value, messages)."""
    messages = []
    while True:
        try:
            messages.append(next(generator))
        except StopIteration as stop:
            return stop.value, messages


DENY = FetchOptions(file_policy=FileModificationPolicy.DENY)


class TestFetchPackages:
    """Tests for FetchService.fetch_packages."""

    def test_fetches_in_order(self, make_service, project):
        service = make_service()

        summary, messages = run(service.fetch_packages(["zod", "@babel/core@7.24.0"], DENY))

        assert [r.package for r in summary.results] == ["zod", "@babel/core"]
        assert summary.successful == 2
        assert summary.failed == 0
        zod, babel = summary.results
        assert zod.version == "3.22.0"
        assert zod.path == str(project / "srcfetch" / "zod")
        assert babel.path == str(project / "srcfetch" / "@babel" / "core" / "packages" / "core")
        assert ProgressMessage("Done: 2 succeeded, 0 failed") in messages
        assert service.last_result is summary

    def test_writes_index(self, make_service, project):
        run(make_service().fetch_packages(["zod", "react"], DENY))

        index = json.loads((project / "srcfetch" / INDEX_FILENAME).read_text())
        assert [p['name'] for p in index['packages']] == ["react", "zod"]
        assert index['packages'][1]['path'] == "srcfetch/zod"

    def test_partial_failure_does_not_stop_batch(self, make_service, resolver, project):
        resolver.failing.add("react")

        summary, messages = run(make_service().fetch_packages(["zod", "react", "@babel/core"], DENY))

        assert [r.success for r in summary.results] == [True, False, True]
        assert summary.results[1].error == "Package not found on registry: react"
        assert summary.failed == 1
        assert ProgressMessage("Done: 2 succeeded, 1 failed") in messages
        assert ProgressMessage.error("Failed: Package not found on registry: react") in messages
        index = json.loads((project / "srcfetch" / INDEX_FILENAME).read_text())
        assert len(index['packages']) == 2

    def test_clone_failure_is_reported(self, make_service, git):
        git.failing_urls.add("https://github.com/example/zod")

        summary, _ = run(make_service().fetch_packages(["zod"], DENY))

        assert not summary.results[0].success
        assert "Repository not found" in summary.results[0].error

    def test_all_failed_writes_no_index(self, make_service, project):
        summary, _ = run(make_service().fetch_packages(["missing-one", "missing-two"], DENY))

        assert summary.successful == 0
        assert summary.failed == 2
        assert not (project / "srcfetch" / INDEX_FILENAME).exists()

    def test_invalid_names(self, make_service, resolver):
        summary, _ = run(make_service().fetch_packages(["", "../evil"], DENY))

        assert summary.results[0].error == "Empty package name"
        assert "Invalid package name" in summary.results[1].error
        assert resolver.calls == []

    def test_unexpected_error_is_contained(self, make_service):
        service = make_service()

        def broken(resolved):
            raise RuntimeError("disk on fire")
        service.fetcher.fetch = broken

        summary, messages = run(service.fetch_packages(["zod", "react"], DENY))

        assert summary.failed == 2
        assert summary.results[0].error == "disk on fire"
        errors = [m.text for m in messages if m.level is MessageLevel.ERROR]
        assert errors == ["Error: disk on fire", "Error: disk on fire"]


class TestUpToDate:
    """Tests for skipping packages already in the store."""

    def test_same_version_skips_registry_and_clone(self, make_service, resolver, git):
        service = make_service()
        run(service.fetch_packages(["zod@3.22.0"], DENY))

        summary, messages = run(service.fetch_packages(["zod@3.22.0"], DENY))

        assert summary.results[0].success
        assert summary.results[0].version == "3.22.0"
        assert len(resolver.calls) == 1
        assert len(git.calls) == 1
        assert ProgressMessage.success("Already up to date (3.22.0)") in messages

    def test_latest_already_stored_skips_clone(self, make_service, resolver, git):
        service = make_service()
        run(service.fetch_packages(["zod"], DENY))

        summary, _ = run(service.fetch_packages(["zod"], DENY))

        assert summary.results[0].success
        assert len(resolver.calls) == 2
        assert len(git.calls) == 1

    def test_version_change_replaces_tree(self, make_service, project):
        service = make_service()
        run(service.fetch_packages(["zod@3.21.0"], DENY))

        summary, _ = run(service.fetch_packages(["zod@3.22.0"], DENY))

        assert summary.results[0].success
        files = sorted(p.name for p in (project / "srcfetch" / "zod").iterdir() if p.is_file())
        assert files == [META_FILENAME, "v3.22.0.txt"]
        assert service.store.read_metadata("zod").version == "3.22.0"

    def test_installed_version_is_used(self, make_service, resolver):
        service = make_service(version_detector=lambda name, cwd: "3.21.0")

        summary, messages = run(service.fetch_packages(["zod"], DENY))

        assert resolver.calls == [("zod", "3.21.0")]
        assert summary.results[0].version == "3.21.0"
        assert ProgressMessage.detail("Detected installed version: 3.21.0") in messages

    def test_detection_disabled(self, make_service, resolver):
        service = make_service(version_detector=lambda name, cwd: "3.21.0")
        options = FetchOptions(file_policy=FileModificationPolicy.DENY, detect_installed=False)

        run(service.fetch_packages(["zod"], options))

        assert resolver.calls == [("zod", None)]


class TestCancellation:

    def test_cancel_between_packages(self, make_service, resolver):
        event = threading.Event()
        original = resolver.__call__

        def resolve_and_cancel(name, version=None):
            event.set()
            return original(name, version)

        service = make_service()
        service.resolver = resolve_and_cancel
        options = FetchOptions(file_policy=FileModificationPolicy.DENY, cancel_event=event)

        summary, _ = run(service.fetch_packages(["zod", "react", "@babel/core"], options))

        assert summary.cancelled
        assert [r.package for r in summary.results] == ["zod", "react", "@babel/core"]
        assert summary.results[0].success
        assert [r.error for r in summary.results[1:]] == ["Cancelled", "Cancelled"]


class TestProjectFiles:
    """Tests for edits outside the store."""

    def test_allowed(self, make_service, project):
        (project / "tsconfig.json").write_text('{"compilerOptions": {}}')
        options = FetchOptions(file_policy=FileModificationPolicy.ALLOW)

        summary, messages = run(make_service().fetch_packages(["zod"], options))

        assert "srcfetch/" in (project / ".gitignore").read_text()
        assert json.loads((project / "tsconfig.json").read_text())["exclude"] == ["srcfetch"]
        assert "zod@3.22.0" in (project / AGENTS_FILE).read_text()
        assert ProgressMessage("Updated AGENTS.md") in messages
        settings = project / "srcfetch" / "settings.json"
        assert get_file_modification_permission(settings) is True

    def test_denied(self, make_service, project):
        run(make_service().fetch_packages(["zod"], DENY))

        assert not (project / ".gitignore").exists()
        assert not (project / AGENTS_FILE).exists()
        assert (project / "srcfetch" / INDEX_FILENAME).exists()

    def test_prompt_is_asked_once(self, make_service, project):
        answers = []

        def prompt():
            answers.append(True)
            return True

        options = FetchOptions(prompt=prompt)
        service = make_service()
        run(service.fetch_packages(["zod"], options))
        run(service.fetch_packages(["react"], options))

        assert answers == [True]
        assert service.can_modify_files


class TestRemoveAndList:

    def test_remove(self, make_service, project):
        service = make_service()
        run(service.fetch_packages(["zod", "@babel/core"], FetchOptions(file_policy=FileModificationPolicy.ALLOW)))

        removed, messages = run(service.remove_packages(["@babel/core", "nope"], FetchOptions()))

        assert removed == ["@babel/core"]
        assert ProgressMessage.warning("nope is not in the store") in messages
        assert [s.name for s in service.list_sources()] == ["zod"]
        index = json.loads((project / "srcfetch" / INDEX_FILENAME).read_text())
        assert [p['name'] for p in index['packages']] == ["zod"]
        assert "@babel/core" not in (project / AGENTS_FILE).read_text()

    def test_remove_last_package_clears_agents_section(self, make_service, project):
        service = make_service()
        run(service.fetch_packages(["zod"], FetchOptions(file_policy=FileModificationPolicy.ALLOW)))

        run(service.remove_packages(["zod"], FetchOptions()))

        assert "srcfetch:start" not in (project / AGENTS_FILE).read_text()
        assert service.list_sources() == []
