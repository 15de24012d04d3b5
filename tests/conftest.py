"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from phaseguide.api.container import Container, reset_container, set_container
from phaseguide.domain.entities.workflow import WorkflowDefinition
from phaseguide.domain.ports.config import AppConfig
from phaseguide.infrastructure.workflow.loader import load

DESIGN_BUILD_YAML = """\
name: design-build
description: Two phase workflow used in tests
initial_state: design
states:
  design:
    description: Design the feature
    default_instructions: Write the design to $DESIGN_DOC.
    transitions:
      - trigger: design_done
        to: build
        transition_reason: Design complete
  build:
    description: Build the feature
    default_instructions: Build what the design describes.
"""


class FakeGit:
    """Git port stand-in with a fixed branch."""

    def __init__(self, branch: str = "main"):
        self.branch = branch
        self.calls: list[str] = []

    async def current_branch(self, project_path: str) -> str:
        self.calls.append(project_path)
        return self.branch


@pytest.fixture(autouse=True)
def clean_workflow_env(monkeypatch):
    """Workflow env overrides from the developer's shell must not leak into tests."""
    for name in ("VIBE_WORKFLOW_DOMAINS", "VIBE_WORKFLOWS_DIR", "VIBE_DEFAULT_WORKFLOW"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def design_build_workflow() -> WorkflowDefinition:
    return load(DESIGN_BUILD_YAML)


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    project = tmp_path / "my-project"
    project.mkdir()
    return project


@pytest.fixture
def design_build_project(project_dir: Path) -> Path:
    """Project with the design-build workflow installed locally."""
    workflows = project_dir / ".vibe" / "workflows"
    workflows.mkdir(parents=True)
    (workflows / "design-build.yaml").write_text(DESIGN_BUILD_YAML, encoding="utf-8")
    return project_dir


@pytest.fixture
def container(fake_git: FakeGit):
    """Global container with default config and the fake git port."""
    c = Container(config=AppConfig(), git=fake_git)
    set_container(c)
    yield c
    reset_container()
