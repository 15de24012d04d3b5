"""Tests for InstructionGenerator composition."""

from pathlib import Path

import pytest

from phaseguide.application.development.instruction_generator import (
    InstructionContext,
    InstructionGenerator,
)
from phaseguide.domain.entities.conversation import Conversation
from phaseguide.domain.errors import InvalidPhaseError
from phaseguide.infrastructure.persistence.plan_file import PlanFileManager
from phaseguide.infrastructure.services.project_docs import ProjectDocs


@pytest.fixture
def conversation(tmp_path: Path) -> Conversation:
    return Conversation(
        conversation_id="shop-main-abc123",
        project_path=str(tmp_path),
        git_branch="main",
        current_phase="design",
        workflow_name="design-build",
        plan_file_path=str(tmp_path / ".vibe" / "development-plan.md"),
        created_at="2026-01-01T00:00:00+00:00",
        updated_at="2026-01-01T00:00:00+00:00",
    )


@pytest.fixture
def generator() -> InstructionGenerator:
    return InstructionGenerator(docs=ProjectDocs(), plan_files=PlanFileManager())


def _context(conversation, workflow, **overrides) -> InstructionContext:
    values = dict(
        phase="design",
        conversation=conversation,
        workflow=workflow,
        transition_reason="Starting development - defining criteria and beginning first phase",
        is_modeled=True,
        plan_file_exists=True,
    )
    values.update(overrides)
    return InstructionContext(**values)


def test_substitutes_document_tokens(generator, conversation, design_build_workflow, tmp_path):
    text = generator.compose("Write the design to $DESIGN_DOC.", _context(conversation, design_build_workflow))

    expected = tmp_path / ".vibe" / "docs" / "design.md"
    assert text.startswith(f"Write the design to {expected}.")
    assert "$DESIGN_DOC" not in text


def test_plan_and_project_sections(generator, conversation, design_build_workflow):
    text = generator.compose("Go.", _context(conversation, design_build_workflow))

    assert "**Plan File Guidance:**" in text
    assert f"`{conversation.plan_file_path}`" in text
    assert '"Design" section' in text
    assert "- Update the Design section with progress on: Design the feature" in text
    assert "**Project Context:**" in text
    assert "- Branch: main" in text
    assert "- Current Phase: design" in text


def test_transition_context_only_when_modeled(generator, conversation, design_build_workflow):
    modeled = generator.compose("Go.", _context(conversation, design_build_workflow))
    unmodeled = generator.compose(
        "Go.", _context(conversation, design_build_workflow, is_modeled=False)
    )

    assert "**Transition Context:**" in modeled
    assert "**Transition Context:**" not in unmodeled


def test_missing_plan_file_note(generator, conversation, design_build_workflow):
    text = generator.compose(
        "Go.", _context(conversation, design_build_workflow, plan_file_exists=False)
    )

    assert "The plan file will be created when you first update it" in text


def test_unknown_phase_rejected(generator, conversation, design_build_workflow):
    with pytest.raises(InvalidPhaseError):
        generator.compose("Go.", _context(conversation, design_build_workflow, phase="qa"))
