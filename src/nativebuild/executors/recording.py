"""Step executor that records steps instead of running them.

Useful for tests and dry runs: it never spawns a process or touches the
filesystem, and replays canned results keyed by step short name.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from nativebuild.steps import BuildStep, StepResult


@dataclass(slots=True)
class RecordingStepExecutor:
    canned: Mapping[str, StepResult] = field(default_factory=dict)
    executed: list[BuildStep] = field(default_factory=list)
    name: str = "recording"

    def run(self, step: BuildStep) -> StepResult:
        self.executed.append(step)
        result = self.canned.get(step.short_name)
        if result is None:
            return StepResult.success(step.short_name)
        return result

    @property
    def executed_names(self) -> list[str]:
        return [step.short_name for step in self.executed]
