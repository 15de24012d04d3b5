"""Project documents under <project>/.vibe/docs."""

from pathlib import Path

from phaseguide.domain.ports.docs import DocumentPaths

DOCS_DIR = Path(".vibe") / "docs"


class ProjectDocs:
    def __init__(self, docs_dir: Path = DOCS_DIR):
        self._docs_dir = docs_dir

    def document_paths(self, project_path: str) -> DocumentPaths:
        base = Path(project_path) / self._docs_dir
        return DocumentPaths(
            architecture=str(base / "architecture.md"),
            requirements=str(base / "requirements.md"),
            design=str(base / "design.md"),
        )
