"""Development API - start, advance, jump, reset and resume conversations."""

from fastapi import APIRouter, Depends, Request

from phaseguide.api.dependencies import configured_rate_limit, get_development_use_case, limiter
from phaseguide.api.routes.errors import to_http_error
from phaseguide.application.development.dto import (
    AdvanceRequest,
    JumpRequest,
    PhaseResponse,
    PlanContentResponse,
    ProjectRequest,
    ResetRequest,
    ResetResponse,
    ResumeResponse,
    StartRequest,
)
from phaseguide.application.development.use_case import DevelopmentUseCase
from phaseguide.domain.entities.conversation import Conversation

router = APIRouter(prefix="/development", tags=["development"])


@router.post("/start")
@limiter.limit(configured_rate_limit)
async def start_development(
    request: Request,
    body: StartRequest,
    use_case: DevelopmentUseCase = Depends(get_development_use_case),
) -> PhaseResponse:
    """Start development with a workflow (configured default if omitted)."""
    try:
        return await use_case.start(body)
    except Exception as e:
        raise to_http_error(e, "start development") from e


@router.post("/next")
@limiter.limit(configured_rate_limit)
async def whats_next(
    request: Request,
    body: AdvanceRequest,
    use_case: DevelopmentUseCase = Depends(get_development_use_case),
) -> PhaseResponse:
    """Instructions for the current phase."""
    try:
        return await use_case.advance(body)
    except Exception as e:
        raise to_http_error(e, "resolve next step") from e


@router.post("/phase")
@limiter.limit(configured_rate_limit)
async def proceed_to_phase(
    request: Request,
    body: JumpRequest,
    use_case: DevelopmentUseCase = Depends(get_development_use_case),
) -> PhaseResponse:
    """Move to any declared phase of the conversation's workflow."""
    try:
        return await use_case.jump(body)
    except Exception as e:
        raise to_http_error(e, "change phase") from e


@router.post("/reset")
@limiter.limit("10/minute")
async def reset_development(
    request: Request,
    body: ResetRequest,
    use_case: DevelopmentUseCase = Depends(get_development_use_case),
) -> ResetResponse:
    """Delete conversation state and plan file. Requires confirm=true."""
    try:
        return await use_case.reset(body)
    except Exception as e:
        raise to_http_error(e, "reset development") from e


@router.post("/resume")
@limiter.limit(configured_rate_limit)
async def resume_workflow(
    request: Request,
    body: ProjectRequest,
    use_case: DevelopmentUseCase = Depends(get_development_use_case),
) -> ResumeResponse:
    """Current state, plan progress and recommendations."""
    try:
        return await use_case.resume(body)
    except Exception as e:
        raise to_http_error(e, "resume workflow") from e


@router.get("/state")
@limiter.limit(configured_rate_limit)
async def conversation_state(
    request: Request,
    project_path: str,
    git_branch: str | None = None,
    use_case: DevelopmentUseCase = Depends(get_development_use_case),
) -> Conversation:
    """Stored conversation for the project's branch."""
    try:
        return await use_case.get_state(ProjectRequest(project_path=project_path, git_branch=git_branch))
    except Exception as e:
        raise to_http_error(e, "load conversation state") from e


@router.get("/plan")
@limiter.limit(configured_rate_limit)
async def development_plan(
    request: Request,
    project_path: str,
    git_branch: str | None = None,
    use_case: DevelopmentUseCase = Depends(get_development_use_case),
) -> PlanContentResponse:
    """Raw plan file content."""
    try:
        return await use_case.get_plan(ProjectRequest(project_path=project_path, git_branch=git_branch))
    except Exception as e:
        raise to_http_error(e, "load development plan") from e
