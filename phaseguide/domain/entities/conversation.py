"""Conversation state and interaction audit records."""

import hashlib
import re
from pathlib import Path

from pydantic import BaseModel

DEFAULT_BRANCH = "default"
_MAIN_BRANCHES = ("main", "master")
_BRANCH_CLEAN_RE = re.compile(r"[^a-zA-Z0-9-]+")


def derive_conversation_id(project_path: str, git_branch: str) -> str:
    """Deterministic id for a (project path, branch) pair.

    Same inputs give the same id across processes: project name, cleaned
    branch and a short sha256 of "path:branch".
    """
    project_name = Path(project_path).name or "unknown-project"
    clean_branch = _BRANCH_CLEAN_RE.sub("-", git_branch).strip("-") or DEFAULT_BRANCH
    digest = hashlib.sha256(f"{project_path}:{git_branch}".encode("utf-8")).hexdigest()[:6]
    return f"{project_name}-{clean_branch}-{digest}"


def plan_file_name(git_branch: str) -> str:
    """development-plan.md on main/master, development-plan-<branch>.md elsewhere."""
    if git_branch in _MAIN_BRANCHES:
        return "development-plan.md"
    safe = git_branch.replace("/", "-").replace("\\", "-")
    return f"development-plan-{safe}.md"


class Conversation(BaseModel):
    """Persisted session tying a project+branch to its active phase."""

    conversation_id: str
    project_path: str
    git_branch: str
    current_phase: str
    workflow_name: str
    plan_file_path: str
    created_at: str
    updated_at: str

    @property
    def project_name(self) -> str:
        return Path(self.project_path).name or "Unknown Project"


class InteractionLog(BaseModel):
    """Append-only audit row. reset_at marks soft deletion."""

    id: int | None = None
    conversation_id: str
    tool_name: str
    input_params: str
    response_data: str
    current_phase: str
    timestamp: str
    reset_at: str | None = None
    reset_reason: str | None = None

    @property
    def is_reset(self) -> bool:
        return self.reset_at is not None


class ResetSummary(BaseModel):
    """What a confirmed reset removed."""

    conversation_id: str
    reset_items: list[str]
    soft_deleted_interactions: int = 0
    plan_file_deleted: bool = False
    reason: str | None = None

    @property
    def message(self) -> str:
        text = (
            f"Successfully reset conversation {self.conversation_id}. "
            f"Reset items: {', '.join(self.reset_items)}"
        )
        if self.reason:
            text += f". Reason: {self.reason}"
        return text
