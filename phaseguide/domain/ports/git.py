"""Git Port - branch lookup used to key conversations."""

from typing import Protocol


class GitPort(Protocol):
    """Interface for the git collaborator. The core never runs git itself."""

    async def current_branch(self, project_path: str) -> str:
        """Current branch name, or "default" when not a repository."""
        ...
