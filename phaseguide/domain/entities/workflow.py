"""Workflow definition - phases, default instructions and outgoing transitions."""

from pydantic import BaseModel, ConfigDict, Field, computed_field

DEFAULT_DOMAIN = "code"


class ReviewPerspective(BaseModel):
    """Reviewer role and prompt attached to a transition."""

    model_config = ConfigDict(frozen=True)

    perspective: str
    prompt: str = ""


class TransitionDefinition(BaseModel):
    """One (from-phase, to-phase) edge with static text."""

    model_config = ConfigDict(frozen=True)

    trigger: str
    to: str
    transition_reason: str
    instructions: str | None = None
    additional_instructions: str | None = None
    review_perspectives: tuple[ReviewPerspective, ...] = ()


class StateDefinition(BaseModel):
    """A phase: description, default instructions and ordered transitions."""

    model_config = ConfigDict(frozen=True)

    description: str
    default_instructions: str | None = None
    transitions: tuple[TransitionDefinition, ...] = ()

    def transition_to(self, target: str) -> TransitionDefinition | None:
        """First declared edge to target, or None."""
        for transition in self.transitions:
            if transition.to == target:
                return transition
        return None


class WorkflowMetadata(BaseModel):
    """Optional descriptive metadata. Unknown keys are kept."""

    model_config = ConfigDict(frozen=True, extra="allow")

    domain: str = DEFAULT_DOMAIN
    complexity: str | None = None
    best_for: tuple[str, ...] = ()


class WorkflowDefinition(BaseModel):
    """Immutable, validated workflow. Built only by the loader."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    initial_state: str
    states: dict[str, StateDefinition]
    metadata: WorkflowMetadata = Field(default_factory=WorkflowMetadata)

    @property
    def phases(self) -> list[str]:
        """Declared phase names in document order."""
        return list(self.states)

    def state(self, phase: str) -> StateDefinition | None:
        return self.states.get(phase)


class WorkflowSummary(BaseModel):
    """Catalog entry used for listing and selection."""

    name: str
    display_name: str
    description: str
    initial_state: str
    phases: list[str]
    domain: str = DEFAULT_DOMAIN
    source: str = "bundled"  # "bundled" | "project"

    @computed_field
    @property
    def resource_uri(self) -> str:
        return f"workflow://{self.name}"
