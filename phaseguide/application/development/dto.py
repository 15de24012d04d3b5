"""Development DTOs."""

from pydantic import BaseModel, Field

from phaseguide.domain.entities.conversation import Conversation
from phaseguide.domain.entities.workflow import WorkflowSummary


class ProjectRequest(BaseModel):
    """Base for requests scoped to one project checkout."""

    project_path: str = Field(..., min_length=1, max_length=4096)
    git_branch: str | None = Field(None, max_length=255)  # Overrides git detection


class StartRequest(ProjectRequest):
    """Start development with a workflow."""

    workflow: str | None = Field(None, max_length=200)  # Configured default when omitted


class AdvanceRequest(ProjectRequest):
    """Ask what to do next. Free-form fields are logged, never interpreted."""

    context: str | None = Field(None, max_length=50_000)
    user_input: str | None = Field(None, max_length=50_000)
    conversation_summary: str | None = Field(None, max_length=50_000)
    recent_messages: list[dict] = Field(default_factory=list)


class JumpRequest(ProjectRequest):
    target_phase: str = Field(..., min_length=1, max_length=200)
    reason: str | None = Field(None, max_length=2_000)


class ResetRequest(ProjectRequest):
    confirm: bool = False
    reason: str | None = Field(None, max_length=2_000)


class InstallWorkflowRequest(BaseModel):
    project_path: str = Field(..., min_length=1, max_length=4096)
    workflow: str = Field(..., min_length=1, max_length=200)


class PhaseResponse(BaseModel):
    """Shared result shape of start, advance and jump."""

    phase: str
    instructions: str
    plan_file_path: str
    transition_reason: str
    is_modeled_transition: bool
    conversation_id: str


class ResetResponse(BaseModel):
    success: bool
    reset_items: list[str]
    conversation_id: str
    soft_deleted_interactions: int = 0
    message: str


class PlanSummary(BaseModel):
    exists: bool
    path: str
    active_tasks: list[str] = []
    completed_tasks: list[str] = []
    decisions: list[str] = []


class TransitionOption(BaseModel):
    to: str
    transition_reason: str
    trigger: str


class ResumeResponse(BaseModel):
    """Everything an agent needs to pick up where the last session stopped."""

    conversation: Conversation
    workflow_name: str
    phase_description: str
    plan: PlanSummary
    possible_transitions: list[TransitionOption]
    recommendations: list[str]


class WorkflowListResponse(BaseModel):
    workflows: list[WorkflowSummary]
    default: str


class InstallWorkflowResponse(BaseModel):
    workflow: str
    path: str
    message: str


class PlanContentResponse(BaseModel):
    path: str
    exists: bool
    content: str | None = None
