"""Workflow catalog - bundled and project-local workflow discovery.

Bundled workflows ship in ``phaseguide/resources/workflows``. Projects may add
their own under ``.vibe/workflows/*.yaml`` (keyed by the document's ``name``)
or a single legacy ``.vibe/workflow.yaml`` exposed as ``custom``. Project
workflows override bundled ones of the same name.
"""

import importlib.resources
import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path

from phaseguide.domain.entities.workflow import WorkflowDefinition, WorkflowSummary
from phaseguide.domain.errors import UnknownWorkflowError, WorkflowLoadError
from phaseguide.domain.ports.config import WorkflowsConfig
from phaseguide.infrastructure.workflow.loader import load_file

logger = logging.getLogger(__name__)

WORKFLOW_SUFFIXES = (".yaml", ".yml")
LEGACY_WORKFLOW_NAME = "custom"
LOCAL_WORKFLOWS_DIR = Path(".vibe") / "workflows"
LEGACY_WORKFLOW_FILES = (Path(".vibe") / "workflow.yaml", Path(".vibe") / "workflow.yml")


def _is_workflow_dir(path: Path) -> bool:
    return path.is_dir() and any(p.suffix in WORKFLOW_SUFFIXES for p in path.iterdir())


def _from_config(config: WorkflowsConfig) -> Path | None:
    raw = os.getenv("VIBE_WORKFLOWS_DIR") or config.bundled_dir
    return Path(raw).expanduser() if raw else None


def _from_package_tree(config: WorkflowsConfig) -> Path | None:
    return Path(__file__).resolve().parents[2] / "resources" / "workflows"


def _from_installed_package(config: WorkflowsConfig) -> Path | None:
    try:
        resource = importlib.resources.files("phaseguide") / "resources" / "workflows"
    except ModuleNotFoundError:
        return None
    return Path(str(resource))


def _from_cwd(config: WorkflowsConfig) -> Path | None:
    return Path.cwd() / "resources" / "workflows"


# Tried in order; first existing directory containing workflow files wins.
BUNDLED_DIR_STRATEGIES: tuple[Callable[[WorkflowsConfig], Path | None], ...] = (
    _from_config,
    _from_package_tree,
    _from_installed_package,
    _from_cwd,
)


def find_bundled_dir(config: WorkflowsConfig) -> Path | None:
    """Locate the bundled workflows directory across dev and installed layouts."""
    for strategy in BUNDLED_DIR_STRATEGIES:
        candidate = strategy(config)
        if candidate is not None and _is_workflow_dir(candidate):
            logger.debug("Bundled workflows found via %s: %s", strategy.__name__, candidate)
            return candidate
    logger.warning("No bundled workflows directory found")
    return None


def _workflow_files(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix in WORKFLOW_SUFFIXES)


def _display_name(name: str) -> str:
    return " ".join(part.capitalize() for part in name.replace("_", "-").split("-") if part)


class WorkflowCatalog:
    """Maps workflow names to validated definitions.

    Parsed documents are cached per file and re-read when the file's mtime or
    size changes. The cache is shared across requests and guarded by a lock.
    """

    def __init__(self, config: WorkflowsConfig | None = None) -> None:
        self._config = config or WorkflowsConfig()
        self._bundled_dir = find_bundled_dir(self._config)
        self._cache: dict[Path, tuple[tuple[int, int], WorkflowDefinition]] = {}
        self._lock = threading.Lock()

    @property
    def bundled_dir(self) -> Path | None:
        return self._bundled_dir

    @property
    def default_name(self) -> str:
        return self._config.default

    def _allowed_domains(self) -> set[str]:
        env = os.getenv("VIBE_WORKFLOW_DOMAINS")
        raw = env.split(",") if env is not None else self._config.domains
        return {d.strip().lower() for d in raw if d.strip()}

    def _load_cached(self, path: Path) -> WorkflowDefinition:
        stat = path.stat()
        fingerprint = (stat.st_mtime_ns, stat.st_size)
        with self._lock:
            cached = self._cache.get(path)
            if cached is not None and cached[0] == fingerprint:
                return cached[1]
        workflow = load_file(path)
        with self._lock:
            self._cache[path] = (fingerprint, workflow)
        return workflow

    def _bundled(self, strict: str | None = None) -> dict[str, tuple[WorkflowDefinition, Path]]:
        """Bundled workflows keyed by file stem.

        A broken document is logged and skipped, unless its stem is ``strict``,
        in which case the load error propagates.
        """
        found: dict[str, tuple[WorkflowDefinition, Path]] = {}
        if self._bundled_dir is None:
            return found
        for path in _workflow_files(self._bundled_dir):
            try:
                found[path.stem] = (self._load_cached(path), path)
            except WorkflowLoadError:
                if path.stem == strict:
                    raise
                logger.exception("Skipping invalid bundled workflow %s", path)
        return found

    def _local(
        self, project_path: str | None, strict: str | None = None
    ) -> dict[str, tuple[WorkflowDefinition, Path]]:
        """Project workflows keyed by document name; legacy file as ``custom``."""
        found: dict[str, tuple[WorkflowDefinition, Path]] = {}
        if not project_path:
            return found
        root = Path(project_path)
        for legacy in LEGACY_WORKFLOW_FILES:
            path = root / legacy
            if path.is_file():
                try:
                    found[LEGACY_WORKFLOW_NAME] = (self._load_cached(path), path)
                except WorkflowLoadError:
                    if strict == LEGACY_WORKFLOW_NAME:
                        raise
                    logger.exception("Skipping invalid project workflow %s", path)
                break
        for path in _workflow_files(root / LOCAL_WORKFLOWS_DIR):
            try:
                workflow = self._load_cached(path)
            except WorkflowLoadError:
                if strict is not None and path.stem == strict:
                    raise
                logger.exception("Skipping invalid project workflow %s", path)
                continue
            found[workflow.name] = (workflow, path)
        return found

    def _domain_allowed(self, workflow: WorkflowDefinition, allowed: set[str]) -> bool:
        return not allowed or workflow.metadata.domain.lower() in allowed

    def list_available(
        self,
        project_path: str | None = None,
        include_filtered: bool = False,
    ) -> list[WorkflowSummary]:
        """Summaries of every selectable workflow, sorted by name.

        The domain allow-list applies to bundled workflows only; project
        workflows are always listed.
        """
        allowed = set() if include_filtered else self._allowed_domains()
        entries: dict[str, WorkflowSummary] = {}
        for name, (workflow, _path) in self._bundled().items():
            if self._domain_allowed(workflow, allowed):
                entries[name] = self._summary(name, workflow, "bundled")
        for name, (workflow, _path) in self._local(project_path).items():
            entries[name] = self._summary(name, workflow, "project")
        return [entries[name] for name in sorted(entries)]

    def resolve(
        self,
        name: str,
        project_path: str | None = None,
        *,
        include_filtered: bool = False,
    ) -> WorkflowDefinition:
        """Definition for name; project-local first, then bundled.

        Raises UnknownWorkflowError listing the selectable names, or the
        WorkflowLoadError of a broken document requested by name.
        """
        local = self._local(project_path, strict=name)
        if name in local:
            return local[name][0]
        bundled = self._bundled(strict=name)
        if name in bundled:
            workflow = bundled[name][0]
            if include_filtered or self._domain_allowed(workflow, self._allowed_domains()):
                return workflow
            logger.info("Workflow %s excluded by domain filter", name)
        available = [s.name for s in self.list_available(project_path, include_filtered)]
        raise UnknownWorkflowError(name, available)

    def is_valid_name(self, name: str, project_path: str | None = None) -> bool:
        try:
            self.resolve(name, project_path)
        except (UnknownWorkflowError, WorkflowLoadError):
            return False
        return True

    def bundled_path(self, name: str) -> Path:
        """Source file of a bundled workflow, for copying into a project."""
        bundled = self._bundled(strict=name)
        if name not in bundled:
            raise UnknownWorkflowError(name, sorted(bundled))
        return bundled[name][1]

    @staticmethod
    def _summary(name: str, workflow: WorkflowDefinition, source: str) -> WorkflowSummary:
        return WorkflowSummary(
            name=name,
            display_name=_display_name(name),
            description=workflow.description,
            initial_state=workflow.initial_state,
            phases=workflow.phases,
            domain=workflow.metadata.domain,
            source=source,
        )
