"""Development application layer."""

from phaseguide.application.development.dto import (
    AdvanceRequest,
    JumpRequest,
    PhaseResponse,
    ResetRequest,
    StartRequest,
)
from phaseguide.application.development.use_case import DevelopmentUseCase

__all__ = [
    "AdvanceRequest",
    "DevelopmentUseCase",
    "JumpRequest",
    "PhaseResponse",
    "ResetRequest",
    "StartRequest",
]
