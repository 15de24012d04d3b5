"""Application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from phaseguide import __version__
from phaseguide.api.container import get_container
from phaseguide.api.dependencies import limiter
from phaseguide.api.routes.development import router as development_router
from phaseguide.api.routes.workflows import router as workflows_router
from phaseguide.shared.logging import setup_logging

log = structlog.get_logger()


def _apply_logging_config(container):
    """Apply logging from container config (stdout + optional file)."""
    c = container.config
    setup_logging(
        level=c.log_level,
        file_path=c.log_file or "",
        rotation_max_mb=c.log_rotation_max_mb,
        rotation_backups=c.log_rotation_backups,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: load config, set up logging, discover bundled workflows."""
    container = get_container()
    _apply_logging_config(container)
    log.info("startup_begin", version=__version__)
    catalog = container.workflow_catalog
    workflows = catalog.list_available(include_filtered=True)
    log.info(
        "workflows_discovered",
        bundled_dir=str(catalog.bundled_dir) if catalog.bundled_dir else None,
        workflows=[w.name for w in workflows],
        default=catalog.default_name,
    )
    log.info("startup_complete")
    yield
    log.info("shutdown_complete")


app = FastAPI(
    title="phaseguide",
    version=__version__,
    description="Phase-aware development workflow guidance for coding agents",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS
container = get_container()
app.add_middleware(
    CORSMiddleware,
    allow_origins=container.config.security.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(development_router)
app.include_router(workflows_router)


@app.get("/health")
@limiter.limit("100/minute")
async def health(request: Request) -> dict:
    """Health check with workflow catalog status."""
    catalog = get_container().workflow_catalog
    return {
        "status": "ok",
        "service": "phaseguide",
        "version": __version__,
        "bundled_workflows_found": catalog.bundled_dir is not None,
        "default_workflow": catalog.default_name,
    }
