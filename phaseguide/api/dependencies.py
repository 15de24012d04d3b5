"""FastAPI dependencies - rate limiter and use case wiring."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from phaseguide.api.container import get_container
from phaseguide.application.development.use_case import DevelopmentUseCase
from phaseguide.domain.ports.config import AppConfig

limiter = Limiter(key_func=get_remote_address)


def get_config() -> AppConfig:
    return get_container().config


def get_development_use_case() -> DevelopmentUseCase:
    """Development use case from the shared container."""
    return get_container().development_use_case


def configured_rate_limit() -> str:
    """Per-client limit from security.rate_limit_requests_per_minute."""
    return f"{get_config().security.rate_limit_requests_per_minute}/minute"
