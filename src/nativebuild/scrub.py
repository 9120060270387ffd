"""Post-processing passes that normalize produced files for reproducible builds."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from nativebuild.errors import ValidationError

DEFAULT_EPOCH = 0


class Scrubber(Protocol):
    name: str

    def scrub_file(self, path: Path) -> None:
        """Normalize non-deterministic content of *path* in place."""


@dataclass(frozen=True, slots=True)
class TimestampScrubber:
    """Pin access and modification times to a fixed epoch."""

    epoch: int = DEFAULT_EPOCH
    name: str = "timestamp"

    @classmethod
    def from_source_date_epoch(cls, environ: Mapping[str, str] | None = None) -> TimestampScrubber:
        env = os.environ if environ is None else environ
        raw = env.get("SOURCE_DATE_EPOCH")
        if not raw:
            return cls()
        try:
            epoch = int(raw)
        except ValueError as exc:
            raise ValidationError(
                "SOURCE_DATE_EPOCH must be an integer.",
                context={"value": raw},
            ) from exc
        return cls(epoch=epoch)

    def scrub_file(self, path: Path) -> None:
        os.utime(path, (self.epoch, self.epoch))
