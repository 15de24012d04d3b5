"""Dependency Injection Container - centralized service management."""

import threading
from functools import cached_property
from typing import TYPE_CHECKING

from phaseguide.domain.ports.config import AppConfig
from phaseguide.domain.ports.git import GitPort
from phaseguide.domain.services.transition_engine import TransitionEngine
from phaseguide.infrastructure.config.toml_loader import load_config
from phaseguide.infrastructure.persistence.conversation_store import ConversationStore
from phaseguide.infrastructure.persistence.plan_file import PlanFileManager
from phaseguide.infrastructure.workflow.catalog import WorkflowCatalog

if TYPE_CHECKING:
    from phaseguide.application.development.instruction_generator import InstructionGenerator
    from phaseguide.application.development.use_case import DevelopmentUseCase


class Container:
    """Dependency Injection Container with lazy initialization.

    Services are created on first access and cached. Conversation stores
    are cached per resolved project path, one SQLite file each.
    """

    def __init__(self, config: AppConfig | None = None, git: GitPort | None = None):
        """Initialize container with optional config and git overrides."""
        self._config_override = config
        self._git_override = git
        self._stores: dict[str, ConversationStore] = {}
        self._stores_lock = threading.Lock()

    @cached_property
    def config(self) -> AppConfig:
        """Application configuration."""
        if self._config_override:
            return self._config_override
        return load_config()

    @cached_property
    def workflow_catalog(self) -> WorkflowCatalog:
        return WorkflowCatalog(self.config.workflows)

    @cached_property
    def git(self) -> GitPort:
        if self._git_override is not None:
            return self._git_override
        from phaseguide.infrastructure.services.git_service import GitService

        return GitService()

    @cached_property
    def plan_files(self) -> PlanFileManager:
        return PlanFileManager()

    @cached_property
    def transition_engine(self) -> TransitionEngine:
        return TransitionEngine()

    @cached_property
    def instruction_generator(self) -> "InstructionGenerator":
        from phaseguide.application.development.instruction_generator import InstructionGenerator
        from phaseguide.infrastructure.services.project_docs import ProjectDocs

        return InstructionGenerator(docs=ProjectDocs(), plan_files=self.plan_files)

    def store_for(self, project_path: str) -> ConversationStore:
        """Conversation store of one project (created on first use)."""
        with self._stores_lock:
            store = self._stores.get(project_path)
            if store is None:
                store = ConversationStore(project_path, self.config.persistence)
                self._stores[project_path] = store
            return store

    @cached_property
    def development_use_case(self) -> "DevelopmentUseCase":
        """Development use case with all dependencies."""
        from phaseguide.application.development.use_case import DevelopmentUseCase

        return DevelopmentUseCase(
            catalog=self.workflow_catalog,
            store_for=self.store_for,
            git=self.git,
            engine=self.transition_engine,
            generator=self.instruction_generator,
            plan_files=self.plan_files,
        )

    def reset(self) -> None:
        """Reset all cached instances (useful for testing)."""
        for attr in list(self.__dict__.keys()):
            if not attr.startswith("_"):
                delattr(self, attr)
        with self._stores_lock:
            self._stores.clear()


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """Get or create global container instance."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def set_container(container: Container) -> None:
    """Install a preconfigured container (tests, embedding)."""
    global _container
    _container = container


def reset_container() -> None:
    """Reset global container (for testing)."""
    global _container
    if _container:
        _container.reset()
    _container = None
