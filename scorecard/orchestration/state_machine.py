"""
Per-subject evaluation state machine.

    Collecting -> Scoring -> BiasChecking -> Assembling -> Done

Any step may end in Failed. `transition` is a pure function from
(state, event) to the next state and the step the orchestrator should run
next. Retries happen inside a step; the machine only sees the step's final
outcome.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Union

from scorecard.errors import NoDataAvailable


class EvaluationState(str, Enum):
    COLLECTING = "collecting"
    SCORING = "scoring"
    BIAS_CHECKING = "bias_checking"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"


class StepAction(str, Enum):
    COLLECT = "collect"
    SCORE = "score"
    CHECK_BIAS = "check_bias"
    ASSEMBLE = "assemble"
    FINISH = "finish"
    ABORT = "abort"


TERMINAL_STATES = frozenset({EvaluationState.DONE, EvaluationState.FAILED})


@dataclass(frozen=True)
class StepSucceeded:
    pass


@dataclass(frozen=True)
class StepFailed:
    error: BaseException


Event = Union[StepSucceeded, StepFailed]


@dataclass(frozen=True)
class Transition:
    state: EvaluationState
    action: StepAction


class InvalidTransition(ValueError):
    pass


def initial_transition() -> Transition:
    return Transition(EvaluationState.COLLECTING, StepAction.COLLECT)


def transition(state: EvaluationState, event: Event, bias_detection_enabled: bool = True) -> Transition:
    """
    Next state for `event` in `state`.

    Raises:
        InvalidTransition: If `state` is terminal
    """
    if state in TERMINAL_STATES:
        raise InvalidTransition(f"No transitions out of terminal state {state.value}")

    if isinstance(event, StepFailed):
        return Transition(EvaluationState.FAILED, StepAction.ABORT)

    if state == EvaluationState.COLLECTING:
        return Transition(EvaluationState.SCORING, StepAction.SCORE)
    if state == EvaluationState.SCORING:
        if bias_detection_enabled:
            return Transition(EvaluationState.BIAS_CHECKING, StepAction.CHECK_BIAS)
        return Transition(EvaluationState.ASSEMBLING, StepAction.ASSEMBLE)
    if state == EvaluationState.BIAS_CHECKING:
        return Transition(EvaluationState.ASSEMBLING, StepAction.ASSEMBLE)
    if state == EvaluationState.ASSEMBLING:
        return Transition(EvaluationState.DONE, StepAction.FINISH)

    raise InvalidTransition(f"Unhandled state {state!r}")


def is_retryable(error: BaseException) -> bool:
    """Whether a failed step may be retried. Only ordinary exceptions are."""
    return isinstance(error, Exception) and not isinstance(error, NoDataAvailable)
