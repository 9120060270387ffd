"""Protocol for step executors and the in-order plan runner."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from nativebuild.errors import StepExecutionError
from nativebuild.observability import StructuredLogger
from nativebuild.steps import BuildStep, StepResult


class StepExecutor(Protocol):
    def run(self, step: BuildStep) -> StepResult:
        """Execute one step and report how it ended."""


@dataclass(frozen=True, slots=True)
class PlanOutcome:
    steps: tuple[BuildStep, ...]
    results: tuple[StepResult, ...]

    @property
    def ok(self) -> bool:
        return len(self.results) == len(self.steps) and all(r.ok for r in self.results)

    @property
    def failed(self) -> StepResult | None:
        for result in self.results:
            if not result.ok:
                return result
        return None

    @property
    def skipped(self) -> tuple[BuildStep, ...]:
        return self.steps[len(self.results):]

    def check(self, *, rule: str | None = None) -> PlanOutcome:
        failed = self.failed
        if failed is None:
            return self
        step = self.steps[len(self.results) - 1]
        raise StepExecutionError(
            f"Step {failed.short_name!r} failed with exit code {failed.exit_code}.",
            hint="Check the tool output for details.",
            context={
                "rule": rule or "",
                "step": failed.short_name,
                "command": step.describe(),
                "returncode": str(failed.exit_code),
                "output": failed.output,
                "skipped": ", ".join(s.short_name for s in self.skipped),
            },
        )


def run_plan(
    steps: Sequence[BuildStep],
    executor: StepExecutor,
    *,
    logger: StructuredLogger | None = None,
    rule: str | None = None,
) -> PlanOutcome:
    """Run *steps* strictly in order, stopping at the first failure."""
    planned = tuple(steps)
    results: list[StepResult] = []
    for step in planned:
        if logger is not None:
            logger.log(
                operation="run_step",
                rule=rule,
                step=step.short_name,
                message="start",
                extra={"command": step.describe()},
            )
        result = executor.run(step)
        results.append(result)
        if result.ok:
            if logger is not None:
                logger.log(operation="run_step", rule=rule, step=step.short_name, message="finish")
            continue

        if logger is not None:
            logger.log(
                operation="run_step",
                rule=rule,
                step=step.short_name,
                message="failed",
                level="error",
                extra={"returncode": result.exit_code},
            )
            remaining = [s.short_name for s in planned[len(results):]]
            if remaining:
                logger.log(
                    operation="run_plan",
                    rule=rule,
                    step=step.short_name,
                    message="halt",
                    level="warning",
                    extra={"skipped": remaining},
                )
        break
    return PlanOutcome(steps=planned, results=tuple(results))
