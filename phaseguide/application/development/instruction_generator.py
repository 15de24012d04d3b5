"""Instruction generator - raw transition text + project context -> final text."""

from pydantic import BaseModel, ConfigDict

from phaseguide.domain.entities.conversation import Conversation
from phaseguide.domain.entities.instruction_text import parse_instruction_text
from phaseguide.domain.entities.workflow import WorkflowDefinition
from phaseguide.domain.ports.docs import DocsPort
from phaseguide.domain.services.transition_engine import phase_title
from phaseguide.infrastructure.persistence.plan_file import PlanFileManager


class InstructionContext(BaseModel):
    """Everything composition needs besides the raw text."""

    model_config = ConfigDict(frozen=True)

    phase: str
    conversation: Conversation
    workflow: WorkflowDefinition
    transition_reason: str
    is_modeled: bool
    plan_file_exists: bool


class InstructionGenerator:
    """Composes final instructions. No persistence side effects."""

    def __init__(self, docs: DocsPort, plan_files: PlanFileManager) -> None:
        self._docs = docs
        self._plan_files = plan_files

    def compose(self, raw_instructions: str, context: InstructionContext) -> str:
        """Substitute $DOC tokens and append plan-file, project and transition sections."""
        conversation = context.conversation
        text = parse_instruction_text(raw_instructions).render(
            self._docs.document_paths(conversation.project_path).substitutions()
        )
        guidance = self._plan_files.guidance_for(context.phase, context.workflow)

        plan_lines = [
            "**Plan File Guidance:**",
            f"Check your plan file at `{conversation.plan_file_path}` and focus on the "
            f'"{phase_title(context.phase)}" section.',
            f"- {guidance}",
            "- Mark completed tasks with [x]",
            "- Add new tasks as they are identified",
            '- Record important decisions in the "Key Decisions" section',
        ]
        if not context.plan_file_exists:
            plan_lines.append("- The plan file will be created when you first update it")

        sections = [
            text,
            "\n".join(plan_lines),
            "**Project Context:**\n"
            f"- Project: {conversation.project_path}\n"
            f"- Branch: {conversation.git_branch}\n"
            f"- Current Phase: {context.phase}",
        ]
        if context.is_modeled and context.transition_reason:
            sections.append(f"**Transition Context:**\n- {context.transition_reason}")
        return "\n\n".join(sections)
