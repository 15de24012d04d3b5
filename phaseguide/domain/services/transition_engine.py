"""Transition engine - resolves the next phase and its raw instruction text.

Two modes:
- implicit (``resolve``): bootstrap on the very first call of a conversation,
  otherwise stay in the current phase and hand back its instructions. The
  calling agent judges entrance criteria from the plan file; the engine never
  walks the state machine on its own.
- explicit (``transition``): any declared phase is a legal target. The edge
  table only supplies text for implicit continuation.
"""

import logging

from pydantic import BaseModel

from phaseguide.domain.entities.workflow import StateDefinition, WorkflowDefinition
from phaseguide.domain.errors import InvalidPhaseError

logger = logging.getLogger(__name__)

BOOTSTRAP_REASON = "Starting development - defining criteria and beginning first phase"
CONTINUE_REASON = "Continue current phase - agent evaluates transition criteria from the plan file"


class TransitionResult(BaseModel):
    """Outcome of a phase resolution, before project-specific composition."""

    new_phase: str
    instructions: str
    transition_reason: str
    is_modeled: bool


def phase_title(phase: str) -> str:
    """Display title for a phase name: "acceptance_test" -> "Acceptance Test"."""
    return " ".join(part.capitalize() for part in phase.replace("-", "_").split("_") if part)


def _state_or_raise(workflow: WorkflowDefinition, phase: str) -> StateDefinition:
    state = workflow.state(phase)
    if state is None:
        raise InvalidPhaseError(phase, workflow.phases)
    return state


def _default_instructions(state: StateDefinition, phase: str) -> str:
    return state.default_instructions or f"Continue working in {phase} phase."


class TransitionEngine:
    """Stateless phase resolution over a loaded workflow definition."""

    def resolve(
        self,
        workflow: WorkflowDefinition,
        current_phase: str,
        *,
        has_prior_interactions: bool,
        plan_file_path: str,
    ) -> TransitionResult:
        """Implicit resolution for "what should happen next".

        The phase never changes here: bootstrap seeds the plan file's criteria
        and starts the initial phase, everything else continues the current one.
        """
        state = _state_or_raise(workflow, current_phase)

        if current_phase == workflow.initial_state and not has_prior_interactions:
            logger.debug("Bootstrapping workflow %s at %s", workflow.name, current_phase)
            instructions = (
                self._criteria_prompt(workflow, plan_file_path)
                + "\n\n"
                + _default_instructions(state, current_phase)
            )
            return TransitionResult(
                new_phase=current_phase,
                instructions=instructions,
                transition_reason=BOOTSTRAP_REASON,
                is_modeled=True,
            )

        return TransitionResult(
            new_phase=current_phase,
            instructions=self.continue_instructions(workflow, current_phase),
            transition_reason=CONTINUE_REASON,
            is_modeled=False,
        )

    def transition(
        self,
        current_phase: str,
        target_phase: str,
        workflow: WorkflowDefinition,
        reason: str | None = None,
    ) -> TransitionResult:
        """Explicit, caller-directed jump to any declared phase."""
        target = _state_or_raise(workflow, target_phase)
        current = workflow.state(current_phase)
        if current is not None and current.transition_to(target_phase) is None:
            logger.debug("Jump %s -> %s has no declared edge", current_phase, target_phase)
        return TransitionResult(
            new_phase=target_phase,
            instructions=_default_instructions(target, target_phase),
            transition_reason=reason or f"Moving to {target_phase}",
            is_modeled=False,
        )

    def continue_instructions(self, workflow: WorkflowDefinition, phase: str) -> str:
        """Self-transition text if declared, else the phase default."""
        state = _state_or_raise(workflow, phase)
        edge = state.transition_to(phase)
        if edge is None:
            return _default_instructions(state, phase)
        text = edge.instructions or _default_instructions(state, phase)
        if edge.additional_instructions:
            text = f"{text}\n\n**Additional Context:**\n{edge.additional_instructions}"
        return text

    @staticmethod
    def _criteria_prompt(workflow: WorkflowDefinition, plan_file_path: str) -> str:
        later = [p for p in workflow.phases if p != workflow.initial_state]
        lines = [
            f"Look at the plan file ({plan_file_path}). Define measurable entrance criteria "
            f"for each phase of the workflow except the initial phase "
            f"({workflow.initial_state}). Base the criteria of a phase on the outcome of "
            "the phase before it.",
            "",
        ]
        if later:
            lines.append("Phases that need entrance criteria:")
            lines.extend(f"- {phase_title(p)}: {workflow.states[p].description}" for p in later)
            example = phase_title(later[0])
        else:
            lines.append("This workflow has no phases besides the initial one.")
            example = "Next Phase"
        lines += [
            "",
            "Example:",
            "```",
            f"## {example}",
            "",
            "### Phase Entrance Criteria:",
            "- [ ] The work of the previous phase is complete and documented.",
            "- [ ] Open questions have been resolved with the user.",
            "```",
            "",
            "Once the criteria are in place, begin the first phase:",
        ]
        return "\n".join(lines)
