"""Git Service - current branch lookup for conversation identity."""

import asyncio
import logging
from pathlib import Path

from phaseguide.domain.entities.conversation import DEFAULT_BRANCH

logger = logging.getLogger(__name__)


class GitService:
    """Reads the checked-out branch of a project with the git CLI."""

    def __init__(self, timeout: float = 5.0):
        self._timeout = timeout

    async def _run(self, project_path: str, args: list[str]) -> tuple[int, str, str]:
        """Run git command, return (returncode, stdout, stderr)."""
        proc = await asyncio.create_subprocess_exec(
            "git",
            *args,
            cwd=project_path,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            return 1, "", f"git {' '.join(args)} timed out"
        return (
            proc.returncode or 0,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    async def current_branch(self, project_path: str) -> str:
        """Branch name, or "default" outside a repository or on detached HEAD."""
        if not (Path(project_path) / ".git").exists():
            return DEFAULT_BRANCH
        try:
            code, out, err = await self._run(project_path, ["rev-parse", "--abbrev-ref", "HEAD"])
            if code != 0:
                # Fresh repository without commits: HEAD is unborn.
                code, out, err = await self._run(project_path, ["symbolic-ref", "--short", "HEAD"])
        except OSError as e:
            logger.warning("git unavailable for %s: %s", project_path, e)
            return DEFAULT_BRANCH
        branch = out.strip()
        if code != 0 or not branch or branch == "HEAD":
            logger.debug("No branch for %s: %s", project_path, err.strip())
            return DEFAULT_BRANCH
        return branch
