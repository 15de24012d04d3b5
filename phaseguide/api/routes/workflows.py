"""Workflows API - list, inspect and install workflow definitions."""

from fastapi import APIRouter, Depends, Request

from phaseguide.api.dependencies import configured_rate_limit, get_development_use_case, limiter
from phaseguide.api.routes.errors import to_http_error
from phaseguide.application.development.dto import (
    InstallWorkflowRequest,
    InstallWorkflowResponse,
    WorkflowListResponse,
)
from phaseguide.application.development.use_case import DevelopmentUseCase
from phaseguide.domain.entities.workflow import WorkflowDefinition

router = APIRouter(prefix="/workflows", tags=["workflows"])


@router.get("")
@limiter.limit(configured_rate_limit)
async def list_workflows(
    request: Request,
    project_path: str | None = None,
    include_filtered: bool = False,
    use_case: DevelopmentUseCase = Depends(get_development_use_case),
) -> WorkflowListResponse:
    """Bundled and project workflows; include_filtered shows domain-hidden ones too."""
    try:
        return use_case.list_workflows(project_path, include_filtered)
    except Exception as e:
        raise to_http_error(e, "list workflows") from e


@router.post("/install")
@limiter.limit("10/minute")
async def install_workflow(
    request: Request,
    body: InstallWorkflowRequest,
    use_case: DevelopmentUseCase = Depends(get_development_use_case),
) -> InstallWorkflowResponse:
    try:
        return use_case.install_workflow(body)
    except Exception as e:
        raise to_http_error(e, "install workflow") from e


@router.get("/{name}")
@limiter.limit(configured_rate_limit)
async def workflow_resource(
    name: str,
    request: Request,
    project_path: str | None = None,
    use_case: DevelopmentUseCase = Depends(get_development_use_case),
) -> WorkflowDefinition:
    """Full workflow definition, addressed as workflow://<name>."""
    try:
        return use_case.workflow_resource(name, project_path)
    except Exception as e:
        raise to_http_error(e, "load workflow") from e
