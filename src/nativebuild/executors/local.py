"""Run steps on the local host.

Directory creation and scrubbing happen in-process. Shell steps are spawned
with exactly the environment the step carries.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field

from nativebuild.config import ExecutionConfig
from nativebuild.steps import BuildStep, MkdirStep, ScrubStep, ShellStep, StepResult

# Conventional shell exit status for "command not found".
SPAWN_FAILURE_EXIT_CODE = 127


@dataclass(slots=True)
class LocalStepExecutor:
    config: ExecutionConfig = field(default_factory=ExecutionConfig)
    name: str = "local"

    def run(self, step: BuildStep) -> StepResult:
        if isinstance(step, MkdirStep):
            return self._mkdir(step)
        if isinstance(step, ScrubStep):
            return self._scrub(step)
        return self._shell(step)

    def _mkdir(self, step: MkdirStep) -> StepResult:
        try:
            step.path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return StepResult.failure(step.short_name, 1, str(exc))
        return StepResult.success(step.short_name)

    def _scrub(self, step: ScrubStep) -> StepResult:
        for scrubber in step.scrubbers:
            try:
                scrubber.scrub_file(step.path)
            except OSError as exc:
                return StepResult.failure(
                    step.short_name,
                    1,
                    f"{scrubber.name}: {exc}",
                )
        return StepResult.success(step.short_name)

    def _shell(self, step: ShellStep) -> StepResult:
        env = dict(step.environment)
        if self.config.inherit_path and "PATH" not in env and "PATH" in os.environ:
            env["PATH"] = os.environ["PATH"]
        try:
            result = subprocess.run(
                list(step.argv),
                cwd=str(step.working_root),
                env=env,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            return StepResult.failure(
                step.short_name,
                SPAWN_FAILURE_EXIT_CODE,
                self.config.truncate(str(exc)),
            )

        output = (result.stdout or "") + (result.stderr or "")
        if result.returncode != 0:
            return StepResult.failure(
                step.short_name,
                result.returncode,
                self.config.truncate(output),
            )
        return StepResult.success(step.short_name, self.config.truncate(output))
