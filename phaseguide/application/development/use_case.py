"""Development use case - conversation lifecycle around a workflow.

Every operation takes the project path explicitly; nothing is read from the
process working directory. Branch detection goes through the git port unless
the request pins a branch.
"""

import shutil
from collections.abc import Callable
from pathlib import Path

import structlog

from phaseguide.application.development.dto import (
    AdvanceRequest,
    InstallWorkflowRequest,
    InstallWorkflowResponse,
    JumpRequest,
    PhaseResponse,
    PlanContentResponse,
    PlanSummary,
    ProjectRequest,
    ResetRequest,
    ResetResponse,
    ResumeResponse,
    StartRequest,
    TransitionOption,
    WorkflowListResponse,
)
from phaseguide.application.development.instruction_generator import (
    InstructionContext,
    InstructionGenerator,
)
from phaseguide.domain.entities.conversation import Conversation, ResetSummary
from phaseguide.domain.entities.workflow import WorkflowDefinition
from phaseguide.domain.errors import (
    ConfigurationError,
    ConversationNotFoundError,
    InvalidPhaseError,
    ResetNotConfirmedError,
)
from phaseguide.domain.ports.git import GitPort
from phaseguide.domain.services.transition_engine import TransitionEngine, TransitionResult, phase_title
from phaseguide.infrastructure.persistence.conversation_store import ConversationStore
from phaseguide.infrastructure.persistence.plan_file import PlanFileManager
from phaseguide.infrastructure.workflow.catalog import LOCAL_WORKFLOWS_DIR, WorkflowCatalog

log = structlog.get_logger()

START_TOOL = "start_development"
ADVANCE_TOOL = "whats_next"
JUMP_TOOL = "proceed_to_phase"


class DevelopmentUseCase:
    """Start, advance, jump, reset and resume development conversations."""

    def __init__(
        self,
        catalog: WorkflowCatalog,
        store_for: Callable[[str], ConversationStore],
        git: GitPort,
        engine: TransitionEngine,
        generator: InstructionGenerator,
        plan_files: PlanFileManager,
    ) -> None:
        self._catalog = catalog
        self._store_for = store_for
        self._git = git
        self._engine = engine
        self._generator = generator
        self._plan_files = plan_files

    async def _locate(self, request: ProjectRequest) -> tuple[ConversationStore, str]:
        """Store for the request's project and the effective branch."""
        path = Path(request.project_path).expanduser().resolve()
        if not path.is_dir():
            raise ConfigurationError(f"project path is not a directory: {request.project_path}")
        project_path = str(path)
        branch = request.git_branch or await self._git.current_branch(project_path)
        return self._store_for(project_path), branch

    async def _require_conversation(
        self, request: ProjectRequest
    ) -> tuple[ConversationStore, Conversation]:
        store, branch = await self._locate(request)
        conversation = store.get(branch)
        if conversation is None:
            raise ConversationNotFoundError(store.project_path, branch)
        return store, conversation

    def _workflow_of(self, conversation: Conversation) -> WorkflowDefinition:
        # Existing conversations keep working even if the domain filter now hides them.
        return self._catalog.resolve(
            conversation.workflow_name, conversation.project_path, include_filtered=True
        )

    def _respond(
        self,
        store: ConversationStore,
        conversation: Conversation,
        workflow: WorkflowDefinition,
        result: TransitionResult,
        tool_name: str,
        request: ProjectRequest,
    ) -> PhaseResponse:
        context = InstructionContext(
            phase=result.new_phase,
            conversation=conversation,
            workflow=workflow,
            transition_reason=result.transition_reason,
            is_modeled=result.is_modeled,
            plan_file_exists=Path(conversation.plan_file_path).exists(),
        )
        response = PhaseResponse(
            phase=result.new_phase,
            instructions=self._generator.compose(result.instructions, context),
            plan_file_path=conversation.plan_file_path,
            transition_reason=result.transition_reason,
            is_modeled_transition=result.is_modeled,
            conversation_id=conversation.conversation_id,
        )
        store.log_interaction(
            conversation.conversation_id,
            tool_name,
            request.model_dump(exclude_none=True),
            response.model_dump(),
            result.new_phase,
        )
        return response

    async def start(self, request: StartRequest) -> PhaseResponse:
        """Begin (or re-enter) development on the project's current branch.

        An existing conversation is returned unchanged. Naming a different
        workflow does not switch it; reset first to change workflows.
        """
        store, branch = await self._locate(request)
        name = request.workflow or self._catalog.default_name
        workflow = self._catalog.resolve(name, store.project_path)

        conversation, created = store.get_or_create(branch, name, workflow.initial_state)
        if created:
            log.info("conversation_created", conversation_id=conversation.conversation_id, workflow=name)
        elif conversation.workflow_name != name:
            log.warning(
                "workflow_selection_ignored",
                conversation_id=conversation.conversation_id,
                active=conversation.workflow_name,
                requested=name,
            )
            workflow = self._workflow_of(conversation)

        self._plan_files.ensure_exists(
            conversation.plan_file_path, conversation.project_name, branch, workflow
        )
        result = self._engine.resolve(
            workflow,
            conversation.current_phase,
            has_prior_interactions=store.has_prior_interactions(conversation.conversation_id),
            plan_file_path=conversation.plan_file_path,
        )
        return self._respond(store, conversation, workflow, result, START_TOOL, request)

    async def advance(self, request: AdvanceRequest) -> PhaseResponse:
        """Instructions for the current phase; the caller decides when to move on."""
        store, conversation = await self._require_conversation(request)
        workflow = self._workflow_of(conversation)
        result = self._engine.resolve(
            workflow,
            conversation.current_phase,
            has_prior_interactions=store.has_prior_interactions(conversation.conversation_id),
            plan_file_path=conversation.plan_file_path,
        )
        if result.new_phase != conversation.current_phase:
            conversation = store.update(conversation.conversation_id, current_phase=result.new_phase)
        return self._respond(store, conversation, workflow, result, ADVANCE_TOOL, request)

    async def jump(self, request: JumpRequest) -> PhaseResponse:
        """Explicit move to any declared phase."""
        store, conversation = await self._require_conversation(request)
        workflow = self._workflow_of(conversation)
        previous = conversation.current_phase
        result = self._engine.transition(previous, request.target_phase, workflow, request.reason)
        conversation = store.update(conversation.conversation_id, current_phase=result.new_phase)
        log.info(
            "phase_transition",
            conversation_id=conversation.conversation_id,
            from_phase=previous,
            to_phase=result.new_phase,
        )
        return self._respond(store, conversation, workflow, result, JUMP_TOOL, request)

    async def reset(self, request: ResetRequest) -> ResetResponse:
        """Drop conversation state and plan file; keep the audit trail soft-deleted."""
        if not request.confirm:
            raise ResetNotConfirmedError()
        store, conversation = await self._require_conversation(request)
        soft_deleted, _ = store.reset(
            conversation.conversation_id, request.reason, confirm=request.confirm
        )
        plan_deleted = self._plan_files.delete(conversation.plan_file_path)

        reset_items = ["conversation_state", "interaction_history"]
        if plan_deleted:
            reset_items.append("plan_file")
        summary = ResetSummary(
            conversation_id=conversation.conversation_id,
            reset_items=reset_items,
            soft_deleted_interactions=soft_deleted,
            plan_file_deleted=plan_deleted,
            reason=request.reason,
        )
        log.info(
            "conversation_reset",
            conversation_id=conversation.conversation_id,
            soft_deleted=soft_deleted,
            plan_file_deleted=plan_deleted,
        )
        return ResetResponse(
            success=True,
            reset_items=summary.reset_items,
            conversation_id=summary.conversation_id,
            soft_deleted_interactions=summary.soft_deleted_interactions,
            message=summary.message,
        )

    async def resume(self, request: ProjectRequest) -> ResumeResponse:
        """State, plan progress and next-step hints for a returning agent."""
        _, conversation = await self._require_conversation(request)
        workflow = self._workflow_of(conversation)
        phase = conversation.current_phase
        state = workflow.state(phase)
        if state is None:
            raise InvalidPhaseError(phase, workflow.phases)

        content = self._plan_files.read(conversation.plan_file_path)
        analysis = self._plan_files.analyze(content) if content is not None else None
        plan = PlanSummary(exists=content is not None, path=conversation.plan_file_path)
        if analysis is not None:
            plan = plan.model_copy(update=analysis.model_dump())

        options = [
            TransitionOption(to=t.to, transition_reason=t.transition_reason, trigger=t.trigger)
            for t in state.transitions
            if t.to != phase
        ]
        recommendations = [f"You are in the {phase_title(phase)} phase: {state.description}"]
        if not plan.exists:
            recommendations.append("The plan file is missing. Call start to recreate it.")
        elif plan.active_tasks:
            recommendations.append(f"Continue with the {len(plan.active_tasks)} open task(s) in the plan file.")
        else:
            recommendations.append("No open tasks in the plan file. Add tasks for this phase or move on.")
        if options:
            targets = ", ".join(option.to for option in options)
            recommendations.append(
                f"When the entrance criteria of the next phase are met, proceed to one of: {targets}."
            )

        return ResumeResponse(
            conversation=conversation,
            workflow_name=workflow.name,
            phase_description=state.description,
            plan=plan,
            possible_transitions=options,
            recommendations=recommendations,
        )

    def list_workflows(
        self, project_path: str | None = None, include_filtered: bool = False
    ) -> WorkflowListResponse:
        return WorkflowListResponse(
            workflows=self._catalog.list_available(project_path, include_filtered),
            default=self._catalog.default_name,
        )

    def install_workflow(self, request: InstallWorkflowRequest) -> InstallWorkflowResponse:
        """Copy a bundled workflow into the project so it can be customized."""
        project = Path(request.project_path).expanduser().resolve()
        if not project.is_dir():
            raise ConfigurationError(f"project path is not a directory: {request.project_path}")
        source = self._catalog.bundled_path(request.workflow)
        target = project / LOCAL_WORKFLOWS_DIR / f"{request.workflow}.yaml"
        if target.exists():
            raise ConfigurationError(
                f"workflow {request.workflow!r} is already installed at {target}. "
                "Edit that file or delete it before installing again."
            )
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
        log.info("workflow_installed", workflow=request.workflow, path=str(target))
        return InstallWorkflowResponse(
            workflow=request.workflow,
            path=str(target),
            message=f"Installed workflow {request.workflow!r} to {target}",
        )

    async def get_state(self, request: ProjectRequest) -> Conversation:
        _, conversation = await self._require_conversation(request)
        return conversation

    async def get_plan(self, request: ProjectRequest) -> PlanContentResponse:
        _, conversation = await self._require_conversation(request)
        content = self._plan_files.read(conversation.plan_file_path)
        return PlanContentResponse(
            path=conversation.plan_file_path,
            exists=content is not None,
            content=content,
        )

    def workflow_resource(self, name: str, project_path: str | None = None) -> WorkflowDefinition:
        """Full definition, review perspectives included, for any known workflow."""
        return self._catalog.resolve(name, project_path, include_filtered=True)
