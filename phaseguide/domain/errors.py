"""Error taxonomy for workflow resolution and conversation state."""


class PhaseGuideError(Exception):
    """Base class for errors surfaced to the caller verbatim."""


class ConfigurationError(PhaseGuideError):
    """Workflow document, workflow name or phase name is wrong. Never retried."""


class WorkflowLoadError(ConfigurationError):
    """Workflow document could not be turned into a definition."""

    kind = "invalid workflow document"

    def __init__(self, message: str, field: str | None = None, source: str | None = None) -> None:
        self.field = field
        self.source = source
        prefix = f"{source}: " if source else ""
        super().__init__(f"{prefix}{self.kind}: {message}")


class MalformedDocumentError(WorkflowLoadError):
    """Document is not parseable or does not have the expected shape."""

    kind = "malformed document"


class MissingFieldError(WorkflowLoadError):
    """Required field absent or empty."""

    kind = "missing required field"


class DanglingTransitionError(WorkflowLoadError):
    """initial_state or a transition target does not name a declared state."""

    kind = "dangling transition target"


class UnknownWorkflowError(ConfigurationError):
    """Requested workflow name is not in the catalog."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        options = ", ".join(available) if available else "(none available)"
        super().__init__(f"unknown workflow: {name!r}. Retry with one of: {options}")


class InvalidPhaseError(ConfigurationError):
    """Phase name not declared in the workflow's states."""

    def __init__(self, phase: str, valid_phases: list[str]) -> None:
        self.phase = phase
        self.valid_phases = valid_phases
        super().__init__(
            f"invalid target phase: {phase!r}. Valid phases are: {', '.join(valid_phases)}"
        )


class ConversationNotFoundError(PhaseGuideError):
    """No conversation for this project/branch yet."""

    def __init__(self, project_path: str, git_branch: str) -> None:
        self.project_path = project_path
        self.git_branch = git_branch
        super().__init__(
            f"No development conversation exists for {project_path} (branch {git_branch}). "
            "Use the start operation first to initialize development with a workflow."
        )


class ResetNotConfirmedError(PhaseGuideError):
    """Reset called without confirm=True."""

    def __init__(self) -> None:
        super().__init__(
            "Reset operation requires explicit confirmation. Set confirm to true."
        )
