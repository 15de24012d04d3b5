"""Workflow documents - YAML loader and catalog."""

from phaseguide.infrastructure.workflow.catalog import WorkflowCatalog, find_bundled_dir
from phaseguide.infrastructure.workflow.loader import load, load_file

__all__ = ["WorkflowCatalog", "find_bundled_dir", "load", "load_file"]
