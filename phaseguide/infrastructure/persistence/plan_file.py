"""Plan file - markdown long-term memory mirroring the workflow's phases.

The file is generated once and then owned by the calling agent. Only the
initial structure is ours; later content is read back for resumption only.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel

from phaseguide.domain.entities.conversation import DEFAULT_BRANCH
from phaseguide.domain.entities.workflow import WorkflowDefinition
from phaseguide.domain.errors import InvalidPhaseError
from phaseguide.domain.services.transition_engine import phase_title

logger = logging.getLogger(__name__)

KEY_DECISIONS_HEADING = "## Key Decisions"


class PlanAnalysis(BaseModel):
    """Task and decision summary extracted from an agent-edited plan file."""

    active_tasks: list[str] = []
    completed_tasks: list[str] = []
    decisions: list[str] = []


class PlanFileManager:
    """Create, read and summarize plan files."""

    def ensure_exists(
        self,
        path: str,
        project_name: str,
        git_branch: str,
        workflow: WorkflowDefinition,
    ) -> bool:
        """Create the plan file if absent. Returns True if it was created."""
        plan = Path(path)
        if plan.exists():
            logger.debug("Plan file already exists: %s", plan)
            return False
        plan.parent.mkdir(parents=True, exist_ok=True)
        content = self.render_initial(project_name, git_branch, workflow)
        plan.write_text(content, encoding="utf-8")
        logger.info("Created plan file %s (%d chars)", plan, len(content))
        return True

    def read(self, path: str) -> str | None:
        """Plan content, or None if the file does not exist."""
        plan = Path(path)
        if not plan.is_file():
            return None
        return plan.read_text(encoding="utf-8")

    def write(self, path: str, content: str) -> None:
        plan = Path(path)
        plan.parent.mkdir(parents=True, exist_ok=True)
        plan.write_text(content, encoding="utf-8")

    def delete(self, path: str) -> bool:
        """Remove the plan file. Returns False if there was nothing to remove."""
        plan = Path(path)
        if not plan.exists():
            return False
        plan.unlink()
        logger.info("Deleted plan file %s", plan)
        return True

    def guidance_for(self, phase: str, workflow: WorkflowDefinition) -> str:
        """One-line reminder for the phase's plan section.

        Raises InvalidPhaseError when the phase is not declared: the stored
        conversation and its workflow disagree.
        """
        state = workflow.state(phase)
        if state is None:
            raise InvalidPhaseError(phase, workflow.phases)
        return f"Update the {phase_title(phase)} section with progress on: {state.description}"

    @staticmethod
    def render_initial(project_name: str, git_branch: str, workflow: WorkflowDefinition) -> str:
        """Initial markdown: initial phase first, other phases stubbed."""
        today = datetime.now(timezone.utc).date().isoformat()
        branch_info = f" ({git_branch} branch)" if git_branch != DEFAULT_BRANCH else ""
        initial = workflow.initial_state

        parts = [
            f"# Development Plan: {project_name}{branch_info}",
            "",
            f"*Generated on {today}*",
            f"*Workflow: {workflow.name}*",
            "",
            "## Goal",
            "*Define what you're building or fixing - this will be updated as requirements are gathered*",
            "",
            f"## {phase_title(initial)}",
            "### Tasks",
            "- [ ] *Tasks will be added as they are identified*",
            "",
            "### Completed",
            "- [x] Created development plan file",
            "",
        ]
        for phase in workflow.phases:
            if phase == initial:
                continue
            parts += [
                f"## {phase_title(phase)}",
                "### Tasks",
                "- [ ] *To be added when this phase becomes active*",
                "",
                "### Completed",
                "*None yet*",
                "",
            ]
        parts += [
            KEY_DECISIONS_HEADING,
            "*Important decisions will be documented here as they are made*",
            "",
            "## Notes",
            "*Additional context and observations*",
            "",
            "---",
            "*This plan is maintained by the LLM. Tool responses provide guidance on which "
            "section to focus on and what tasks to work on.*",
            "",
        ]
        return "\n".join(parts)

    @staticmethod
    def analyze(content: str) -> PlanAnalysis:
        """Collect checklist items and key decisions for resumption."""
        analysis = PlanAnalysis()
        section = ""
        for line in content.splitlines():
            stripped = line.strip()
            if stripped.startswith("## "):
                section = stripped.lower()
                continue
            if stripped.startswith("#"):
                continue
            lowered = stripped.lower()
            if lowered.startswith("- [x]"):
                analysis.completed_tasks.append(stripped[5:].strip())
            elif lowered.startswith("- [ ]"):
                task = stripped[5:].strip()
                # Template placeholders are italic; skip them.
                if not (task.startswith("*") and task.endswith("*")):
                    analysis.active_tasks.append(task)
            elif "decision" in section and stripped.startswith("- "):
                analysis.decisions.append(stripped[2:].strip())
        return analysis
