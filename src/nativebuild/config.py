"""Execution settings, with environment overrides."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from nativebuild.errors import ValidationError

DEFAULT_OUTPUT_LIMIT = 2000

ENV_OUTPUT_LIMIT = "NATIVEBUILD_OUTPUT_LIMIT"
ENV_LOG_PATH = "NATIVEBUILD_LOG_PATH"
ENV_INHERIT_PATH = "NATIVEBUILD_INHERIT_PATH"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True, slots=True)
class ExecutionConfig:
    # Characters of captured tool output kept in error context.
    output_limit: int = DEFAULT_OUTPUT_LIMIT
    log_path: Path | None = None
    # When set, PATH from the calling process is added to a step environment
    # that does not define one.
    inherit_path: bool = False

    def __post_init__(self) -> None:
        if self.output_limit < 0:
            raise ValidationError(
                "output_limit must be non-negative.",
                context={"output_limit": str(self.output_limit)},
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ExecutionConfig:
        env = os.environ if environ is None else environ

        output_limit = DEFAULT_OUTPUT_LIMIT
        raw_limit = env.get(ENV_OUTPUT_LIMIT)
        if raw_limit:
            try:
                output_limit = int(raw_limit)
            except ValueError as exc:
                raise ValidationError(
                    f"{ENV_OUTPUT_LIMIT} must be an integer.",
                    context={"value": raw_limit},
                ) from exc

        raw_log_path = env.get(ENV_LOG_PATH)
        log_path = Path(raw_log_path) if raw_log_path else None

        raw_inherit = env.get(ENV_INHERIT_PATH, "").strip().lower()
        if raw_inherit in _TRUE:
            inherit_path = True
        elif raw_inherit in _FALSE:
            inherit_path = False
        else:
            raise ValidationError(
                f"{ENV_INHERIT_PATH} must be a boolean.",
                hint="Use 1/0, true/false, yes/no or on/off.",
                context={"value": raw_inherit},
            )

        return cls(output_limit=output_limit, log_path=log_path, inherit_path=inherit_path)

    def truncate(self, output: str) -> str:
        if self.output_limit == 0:
            return ""
        return output[-self.output_limit:]
