"""Docs Port - project document layout used for instruction substitution."""

from typing import Protocol

from pydantic import BaseModel


class DocumentPaths(BaseModel):
    """Absolute paths of the project documents."""

    architecture: str
    requirements: str
    design: str

    def substitutions(self) -> dict[str, str]:
        """Token -> path mapping for workflow instruction text."""
        return {
            "$ARCHITECTURE_DOC": self.architecture,
            "$REQUIREMENTS_DOC": self.requirements,
            "$DESIGN_DOC": self.design,
        }


class DocsPort(Protocol):
    """Interface for the document/template collaborator."""

    def document_paths(self, project_path: str) -> DocumentPaths:
        """Resolve architecture/requirements/design paths for a project."""
        ...
