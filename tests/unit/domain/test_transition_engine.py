"""Tests for TransitionEngine - implicit resolution and explicit jumps."""

import pytest

from phaseguide.domain.entities.workflow import (
    StateDefinition,
    TransitionDefinition,
    WorkflowDefinition,
)
from phaseguide.domain.errors import InvalidPhaseError
from phaseguide.domain.services.transition_engine import (
    BOOTSTRAP_REASON,
    CONTINUE_REASON,
    TransitionEngine,
    phase_title,
)

PLAN = "/work/my-project/.vibe/development-plan.md"


@pytest.fixture
def workflow() -> WorkflowDefinition:
    """design -> build, no other edges."""
    return WorkflowDefinition(
        name="design-build",
        description="Two phases",
        initial_state="design",
        states={
            "design": StateDefinition(
                description="Design the feature",
                default_instructions="Write the design.",
                transitions=(
                    TransitionDefinition(
                        trigger="design_done", to="build", transition_reason="Design complete"
                    ),
                ),
            ),
            "build": StateDefinition(
                description="Build the feature",
                default_instructions="Build it.",
            ),
        },
    )


@pytest.fixture
def engine() -> TransitionEngine:
    return TransitionEngine()


class TestResolve:
    def test_bootstrap_on_fresh_conversation(self, engine, workflow):
        result = engine.resolve(workflow, "design", has_prior_interactions=False, plan_file_path=PLAN)

        assert result.new_phase == "design"
        assert result.is_modeled is True
        assert result.transition_reason == BOOTSTRAP_REASON
        assert "defining criteria" in result.transition_reason
        assert PLAN in result.instructions
        assert "- Build: Build the feature" in result.instructions
        assert result.instructions.endswith("Write the design.")

    def test_continue_after_prior_interaction(self, engine, workflow):
        result = engine.resolve(workflow, "design", has_prior_interactions=True, plan_file_path=PLAN)

        assert result.new_phase == "design"
        assert result.is_modeled is False
        assert result.transition_reason == CONTINUE_REASON
        assert result.instructions == "Write the design."

    def test_no_bootstrap_outside_initial_phase(self, engine, workflow):
        result = engine.resolve(workflow, "build", has_prior_interactions=False, plan_file_path=PLAN)

        assert result.new_phase == "build"
        assert result.is_modeled is False
        assert result.transition_reason != BOOTSTRAP_REASON

    def test_undeclared_current_phase_raises(self, engine, workflow):
        with pytest.raises(InvalidPhaseError, match="design, build"):
            engine.resolve(workflow, "qa", has_prior_interactions=True, plan_file_path=PLAN)


class TestTransition:
    def test_jump_along_declared_edge(self, engine, workflow):
        result = engine.transition("design", "build", workflow)

        assert result.new_phase == "build"
        assert result.is_modeled is False
        assert result.instructions == "Build it."
        assert result.transition_reason == "Moving to build"

    def test_jump_without_edge_is_allowed(self, engine, workflow):
        result = engine.transition("build", "design", workflow, reason="Design needs rework")

        assert result.new_phase == "design"
        assert result.transition_reason == "Design needs rework"

    @pytest.mark.parametrize("current", ["design", "build"])
    def test_jump_to_undeclared_phase_fails(self, engine, workflow, current):
        with pytest.raises(InvalidPhaseError) as exc_info:
            engine.transition(current, "qa", workflow)

        assert exc_info.value.valid_phases == ["design", "build"]
        assert "Valid phases are: design, build" in str(exc_info.value)


class TestContinueInstructions:
    def test_self_edge_text_with_additional_context(self, engine):
        workflow = WorkflowDefinition(
            name="loop",
            description="Single phase",
            initial_state="work",
            states={
                "work": StateDefinition(
                    description="Do work",
                    default_instructions="Default text.",
                    transitions=(
                        TransitionDefinition(
                            trigger="keep_going",
                            to="work",
                            transition_reason="Still working",
                            instructions="Keep working.",
                            additional_instructions="Update the task list.",
                        ),
                    ),
                ),
            },
        )

        text = engine.continue_instructions(workflow, "work")

        assert text == "Keep working.\n\n**Additional Context:**\nUpdate the task list."

    def test_phase_without_default_text(self, engine):
        workflow = WorkflowDefinition(
            name="bare",
            description="No defaults",
            initial_state="draft",
            states={"draft": StateDefinition(description="Draft")},
        )

        assert engine.continue_instructions(workflow, "draft") == "Continue working in draft phase."


def test_phase_title():
    assert phase_title("acceptance_test") == "Acceptance Test"
    assert phase_title("code-review") == "Code Review"
    assert phase_title("qa") == "Qa"
