"""Step executors."""

from .base import PlanOutcome, StepExecutor, run_plan
from .local import LocalStepExecutor
from .recording import RecordingStepExecutor

__all__ = [
    "LocalStepExecutor",
    "PlanOutcome",
    "RecordingStepExecutor",
    "StepExecutor",
    "run_plan",
]
