"""Tests for WorkflowCatalog - discovery, overrides, domain filter and caching."""

import os
from pathlib import Path

import pytest

from phaseguide.domain.errors import DanglingTransitionError, UnknownWorkflowError
from phaseguide.domain.ports.config import WorkflowsConfig
from phaseguide.infrastructure.workflow.catalog import WorkflowCatalog, find_bundled_dir


def _workflow_yaml(name: str, domain: str = "code", first: str = "start") -> str:
    return f"""\
name: {name}
description: {name} workflow
initial_state: {first}
metadata:
  domain: {domain}
states:
  {first}:
    description: First phase of {name}
    default_instructions: Begin {name}.
    transitions:
      - trigger: done
        to: finish
        transition_reason: First phase done
  finish:
    description: Wrap up
    default_instructions: Finish {name}.
"""


@pytest.fixture
def bundled_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "bundled"
    directory.mkdir()
    (directory / "alpha.yaml").write_text(_workflow_yaml("alpha"), encoding="utf-8")
    (directory / "notes.yml").write_text(_workflow_yaml("notes", domain="office"), encoding="utf-8")
    return directory


@pytest.fixture
def catalog(bundled_dir: Path) -> WorkflowCatalog:
    return WorkflowCatalog(WorkflowsConfig(bundled_dir=str(bundled_dir)))


class TestBundledDiscovery:
    def test_configured_dir_wins(self, bundled_dir):
        assert find_bundled_dir(WorkflowsConfig(bundled_dir=str(bundled_dir))) == bundled_dir

    def test_env_overrides_config(self, bundled_dir, tmp_path, monkeypatch):
        monkeypatch.setenv("VIBE_WORKFLOWS_DIR", str(bundled_dir))

        assert find_bundled_dir(WorkflowsConfig(bundled_dir=str(tmp_path / "missing"))) == bundled_dir

    def test_falls_back_to_packaged_workflows(self, tmp_path):
        found = find_bundled_dir(WorkflowsConfig(bundled_dir=str(tmp_path / "missing")))

        assert found is not None
        assert (found / "waterfall.yaml").is_file()

    def test_packaged_catalog_lists_bundled_workflows(self):
        names = [s.name for s in WorkflowCatalog().list_available()]

        assert {"bugfix", "epcc", "minor", "posts", "waterfall"} <= set(names)


class TestListAvailable:
    def test_sorted_summaries(self, catalog):
        summaries = catalog.list_available()

        assert [s.name for s in summaries] == ["alpha", "notes"]
        alpha = summaries[0]
        assert alpha.phases == ["start", "finish"]
        assert alpha.initial_state == "start"
        assert alpha.source == "bundled"
        assert alpha.resource_uri == "workflow://alpha"

    def test_domain_filter_from_config(self, bundled_dir):
        catalog = WorkflowCatalog(WorkflowsConfig(bundled_dir=str(bundled_dir), domains=["office"]))

        assert [s.name for s in catalog.list_available()] == ["notes"]
        assert [s.name for s in catalog.list_available(include_filtered=True)] == ["alpha", "notes"]

    def test_domain_filter_from_env(self, catalog, monkeypatch):
        monkeypatch.setenv("VIBE_WORKFLOW_DOMAINS", "code, ")

        assert [s.name for s in catalog.list_available()] == ["alpha"]

    def test_project_workflows_listed_and_unfiltered(self, catalog, project_dir, monkeypatch):
        local = project_dir / ".vibe" / "workflows"
        local.mkdir(parents=True)
        (local / "team.yaml").write_text(_workflow_yaml("team-flow", domain="office"), encoding="utf-8")
        monkeypatch.setenv("VIBE_WORKFLOW_DOMAINS", "code")

        summaries = {s.name: s for s in catalog.list_available(str(project_dir))}

        assert set(summaries) == {"alpha", "team-flow"}
        assert summaries["team-flow"].source == "project"
        assert summaries["team-flow"].display_name == "Team Flow"

    def test_broken_bundled_file_skipped(self, catalog, bundled_dir):
        (bundled_dir / "broken.yaml").write_text(
            _workflow_yaml("broken").replace("to: finish", "to: nowhere"), encoding="utf-8"
        )

        assert [s.name for s in catalog.list_available()] == ["alpha", "notes"]


class TestResolve:
    def test_bundled_by_name(self, catalog):
        assert catalog.resolve("alpha").initial_state == "start"

    def test_unknown_name_lists_options(self, catalog):
        with pytest.raises(UnknownWorkflowError) as exc_info:
            catalog.resolve("scrum")

        assert exc_info.value.available == ["alpha", "notes"]
        assert "Retry with one of: alpha, notes" in str(exc_info.value)

    def test_project_workflow_overrides_bundled(self, catalog, project_dir):
        local = project_dir / ".vibe" / "workflows"
        local.mkdir(parents=True)
        (local / "my-alpha.yaml").write_text(_workflow_yaml("alpha", first="explore"), encoding="utf-8")

        assert catalog.resolve("alpha", str(project_dir)).initial_state == "explore"
        assert catalog.resolve("alpha").initial_state == "start"

    def test_legacy_project_file_is_custom(self, catalog, project_dir):
        (project_dir / ".vibe").mkdir()
        (project_dir / ".vibe" / "workflow.yaml").write_text(
            _workflow_yaml("whatever"), encoding="utf-8"
        )

        assert catalog.resolve("custom", str(project_dir)).name == "whatever"
        assert "custom" in [s.name for s in catalog.list_available(str(project_dir))]

    def test_filtered_workflow_needs_include_filtered(self, bundled_dir):
        catalog = WorkflowCatalog(WorkflowsConfig(bundled_dir=str(bundled_dir), domains=["code"]))

        with pytest.raises(UnknownWorkflowError):
            catalog.resolve("notes")
        assert catalog.resolve("notes", include_filtered=True).name == "notes"

    def test_broken_file_fails_when_requested(self, catalog, bundled_dir):
        (bundled_dir / "broken.yaml").write_text(
            _workflow_yaml("broken").replace("to: finish", "to: nowhere"), encoding="utf-8"
        )

        with pytest.raises(DanglingTransitionError):
            catalog.resolve("broken")

    def test_is_valid_name(self, catalog):
        assert catalog.is_valid_name("alpha") is True
        assert catalog.is_valid_name("scrum") is False


class TestCache:
    def test_unchanged_file_not_reparsed(self, catalog):
        assert catalog.resolve("alpha") is catalog.resolve("alpha")

    def test_changed_file_reloaded(self, catalog, bundled_dir):
        path = bundled_dir / "alpha.yaml"
        before = catalog.resolve("alpha")

        path.write_text(_workflow_yaml("alpha", first="kickoff"), encoding="utf-8")
        stat = path.stat()
        os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

        after = catalog.resolve("alpha")
        assert before.initial_state == "start"
        assert after.initial_state == "kickoff"


def test_bundled_path(catalog, bundled_dir):
    assert catalog.bundled_path("notes") == bundled_dir / "notes.yml"
    with pytest.raises(UnknownWorkflowError):
        catalog.bundled_path("scrum")
