"""Use cases do relay de eventos de verificação."""

from .process_verification_event import (
    PipelineResult,
    PipelineState,
    ProcessVerificationEventUseCase,
)
from .replay_dead_letters import ReplayDeadLettersUseCase

__all__ = [
    "PipelineResult",
    "PipelineState",
    "ProcessVerificationEventUseCase",
    "ReplayDeadLettersUseCase",
]
