"""Step descriptors handed to a step executor."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeAlias

from nativebuild.scrub import Scrubber


@dataclass(frozen=True, slots=True)
class MkdirStep:
    """Ensure a directory exists. A no-op when it is already present."""

    path: Path
    short_name: str = "mkdir"

    def describe(self) -> str:
        return f"mkdir -p {self.path}"


@dataclass(frozen=True, slots=True)
class ShellStep:
    argv: tuple[str, ...]
    working_root: Path
    environment: Mapping[str, str] = field(default_factory=dict)
    short_name: str = "shell"

    def describe(self) -> str:
        return " ".join(self.argv)


@dataclass(frozen=True, slots=True)
class ScrubStep:
    """Apply scrubbers, in order, to a produced file in place."""

    path: Path
    scrubbers: tuple[Scrubber, ...]
    short_name: str = "scrub"

    def describe(self) -> str:
        names = ", ".join(scrubber.name for scrubber in self.scrubbers)
        return f"scrub {self.path} [{names}]"


BuildStep: TypeAlias = MkdirStep | ShellStep | ScrubStep


@dataclass(frozen=True, slots=True)
class StepResult:
    short_name: str
    exit_code: int = 0
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @classmethod
    def success(cls, short_name: str, output: str = "") -> StepResult:
        return cls(short_name=short_name, exit_code=0, output=output)

    @classmethod
    def failure(cls, short_name: str, exit_code: int, output: str = "") -> StepResult:
        if exit_code == 0:
            raise ValueError("a failed step cannot carry exit code 0")
        return cls(short_name=short_name, exit_code=exit_code, output=output)
