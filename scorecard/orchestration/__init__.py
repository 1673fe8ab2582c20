"""Orchestration module - evaluation state machine and batch driver."""

from scorecard.orchestration.state_machine import (
    EvaluationState,
    StepAction,
    StepFailed,
    StepSucceeded,
    Transition,
    initial_transition,
    transition,
)
from scorecard.orchestration.orchestrator import (
    BatchResult,
    EvaluationOrchestrator,
    SubjectOutcome,
    build_clients,
    build_orchestrator,
)

__all__ = [
    "EvaluationState",
    "StepAction",
    "StepFailed",
    "StepSucceeded",
    "Transition",
    "initial_transition",
    "transition",
    "BatchResult",
    "EvaluationOrchestrator",
    "SubjectOutcome",
    "build_clients",
    "build_orchestrator",
]
